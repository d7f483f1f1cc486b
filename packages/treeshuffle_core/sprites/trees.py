"""Stitch each class's three skill-tree pages from the donor sheets."""

from __future__ import annotations

from logging import getLogger
from typing import Optional

from ..classes import CLASS_BY_CODE, CLASS_DEFS
from ..data_loader import DataContext
from ..models import LayoutPage
from .codec import Frame, SpriteFormatError, encode_padded, extract_frame, parse_header

logger = getLogger("treeshuffle_core.sprites.trees")


def tree_sprite_name(prefix: str, *, lowend: bool) -> str:
    return f"{prefix}skilltree{'.lowend' if lowend else ''}.sprite"


def extract_tree_page(context: DataContext, page: LayoutPage, *, lowend: bool) -> Optional[Frame]:
    """Frame for one donor page; donor sheets store page 3 as frame 0."""
    class_def = CLASS_BY_CODE.get(page.class_code)
    if class_def is None:
        logger.warning("[SPRITES] Unknown donor class %s", page.class_code)
        return None
    buf = context.tree_sprite(class_def, lowend=lowend)
    if buf is None:
        return None
    try:
        header = parse_header(buf)
        return extract_frame(buf, header, header.frame_count - page.page_index)
    except SpriteFormatError as exc:
        logger.warning(
            "[SPRITES] Bad donor sheet %s: %s",
            tree_sprite_name(class_def.sprite_prefix, lowend=lowend),
            exc,
        )
        return None


def stitch_tree_sprite(context: DataContext, pages: list[LayoutPage], *, lowend: bool) -> Optional[bytes]:
    """Encode the pages of one class, tab 2 first. ``None`` if no donor was readable."""
    frames = [extract_tree_page(context, page, lowend=lowend) for page in pages]
    readable = [f for f in frames if f is not None]
    if not readable:
        return None

    width = max(f.width for f in readable)
    height = max(f.height for f in readable)
    filled = [f if f is not None else Frame.transparent(width, height) for f in frames]
    filled.reverse()
    return encode_padded(filled)


def build_tree_sprites(context: DataContext, assignments: dict[str, list[LayoutPage]]) -> dict[str, bytes]:
    results: dict[str, bytes] = {}
    for class_def in CLASS_DEFS:
        pages = assignments.get(class_def.code)
        if not pages:
            continue
        for lowend in (False, True):
            name = tree_sprite_name(class_def.sprite_prefix, lowend=lowend)
            sprite = stitch_tree_sprite(context, pages, lowend=lowend)
            if sprite is None:
                logger.warning("[SPRITES] No readable donor pages for %s; skipping", name)
                continue
            results[name] = sprite
    logger.info("[SPRITES] Built %d tree sprites", len(results))
    return results
