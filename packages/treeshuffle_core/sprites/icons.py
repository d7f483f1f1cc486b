"""Per-class skill icon sheets.

Every placed skill contributes two frames (idle, pressed) pulled from its
origin class's icon folder at its original icon index, so icons follow the
skill rather than the grid cell it lands in.
"""

from __future__ import annotations

import os
import threading
from logging import getLogger
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ..classes import CLASS_BY_CODE, CLASS_DEFS, ICON_HEIGHT, ICON_WIDTH, ICONS_PER_CLASS
from ..data_loader import DataContext
from ..models import Placement, SkillDescriptor
from .codec import Frame, encode_sprite

logger = getLogger("treeshuffle_core.sprites.icons")

DEFAULT_ICON_WORKERS = 8


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("[ICONS] Ignoring non-integer %s=%r", name, raw)
        return default


def icon_workers() -> int:
    return max(1, _int_env("TREESHUFFLE_ICON_WORKERS", DEFAULT_ICON_WORKERS))


def icon_sprite_name(prefix: str) -> str:
    return f"{prefix}skillicon.sprite"


def load_icon(path: Optional[Path]) -> Optional[Frame]:
    """RGBA frame fitted to the icon cell; ``None`` when missing or unreadable."""
    if path is None:
        return None
    try:
        with Image.open(path) as src:
            image = src.convert("RGBA")
    except (OSError, UnidentifiedImageError) as exc:
        logger.debug("[ICONS] Unreadable icon %s: %s", path, exc)
        return None

    if image.size != (ICON_WIDTH, ICON_HEIGHT):
        canvas = Image.new("RGBA", (ICON_WIDTH, ICON_HEIGHT), (0, 0, 0, 0))
        canvas.paste(image.crop((0, 0, min(image.width, ICON_WIDTH), min(image.height, ICON_HEIGHT))), (0, 0))
        image = canvas
    return Frame(ICON_WIDTH, ICON_HEIGHT, image.tobytes())


def icon_sources(
    context: DataContext,
    placements: list[Placement],
    descriptors: dict[str, SkillDescriptor],
) -> list[Optional[Path]]:
    """Source file per output frame, padded to a full sheet."""
    sources: list[Optional[Path]] = []
    for p in sorted(placements, key=lambda item: item.rank):
        origin = CLASS_BY_CODE.get(p.skill.charclass)
        descriptor = descriptors.get(p.skill.skilldesc)
        base = descriptor.icon_index if descriptor is not None else 0
        for offset in (0, 1):
            sources.append(context.icon_path(origin, base + offset) if origin is not None else None)
    sources.extend([None] * (ICONS_PER_CLASS - len(sources)))
    return sources[:ICONS_PER_CLASS]


def decode_icons(paths: list[Optional[Path]], workers: int) -> list[Optional[Frame]]:
    """Decode ``paths`` on ``workers`` threads; frame ``i`` always comes from path ``i``."""
    frames: list[Optional[Frame]] = [None] * len(paths)
    errors: list[BaseException] = []
    lock = threading.Lock()
    cursor = iter(range(len(paths)))

    def _work() -> None:
        while True:
            with lock:
                idx = next(cursor, None)
                if idx is None or errors:
                    return
            try:
                frames[idx] = load_icon(paths[idx])
            except Exception as exc:
                with lock:
                    errors.append(exc)
                return

    threads = [
        threading.Thread(target=_work, name=f"treeshuffle-icons-{n}", daemon=True)
        for n in range(max(1, min(workers, len(paths))))
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    if errors:
        raise errors[0]
    return frames


def build_icon_sprites(
    context: DataContext,
    placements_by_class: dict[str, list[Placement]],
    descriptors: dict[str, SkillDescriptor],
    *,
    workers: Optional[int] = None,
) -> dict[str, bytes]:
    jobs: list[tuple[str, list[Optional[Path]]]] = []
    for class_def in CLASS_DEFS:
        placements = placements_by_class.get(class_def.code)
        if not placements:
            continue
        jobs.append((icon_sprite_name(class_def.sprite_prefix), icon_sources(context, placements, descriptors)))

    paths = [path for _, sources in jobs for path in sources]
    frames = decode_icons(paths, workers or icon_workers())

    blank = Frame.transparent(ICON_WIDTH, ICON_HEIGHT)
    results: dict[str, bytes] = {}
    for job_idx, (name, _) in enumerate(jobs):
        start = job_idx * ICONS_PER_CLASS
        sheet = [f if f is not None else blank for f in frames[start : start + ICONS_PER_CLASS]]
        results[name] = encode_sprite(sheet)

    missing = sum(1 for f in frames if f is None)
    if missing:
        logger.warning("[ICONS] %d icon frames had no readable source; left transparent", missing)
    logger.info("[ICONS] Built %d icon sheets", len(results))
    return results
