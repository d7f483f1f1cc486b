"""Lay a finished run out as a mod archive."""

from __future__ import annotations

import io
import json
import zipfile
from logging import getLogger
from typing import Any

from .classes import CLASS_DEFS
from .models import RandomizerResult
from .sprites.icons import icon_sprite_name
from .tables import TabularTable, serialize_table

logger = getLogger("treeshuffle_core.packaging")

MOD_ROOT = "mod"
EXCEL_DIR = f"{MOD_ROOT}/data/global/excel"
STRINGS_DIR = f"{MOD_ROOT}/data/local/lng/strings"
TREE_SPRITE_DIR = f"{MOD_ROOT}/data/hd/global/ui/spells/skill_trees"
ICON_DIRS = (f"{MOD_ROOT}/data/global/ui/spells", f"{MOD_ROOT}/data/hd/global/ui/spells")

MOD_INFO = {
    "name": "d2r-skill-randomizer",
    "version": "1.0",
    "description": "Randomized skill trees across all classes",
    "author": "treeshuffle",
    "d2rmmVersion": "1.5.0",
}

# Fixed timestamp so identical runs produce identical archives.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def serialize_strings(entries: list[dict[str, Any]]) -> bytes:
    """BOM-prefixed, two-space indented JSON with CRLF line endings."""
    text = json.dumps(entries, indent=2, ensure_ascii=False).replace("\n", "\r\n")
    return ("\ufeff" + text).encode("utf-8")


def archive_entries(result: RandomizerResult) -> dict[str, bytes]:
    """Archive path -> payload, in a stable order."""
    entries: dict[str, bytes] = {
        f"{MOD_ROOT}/modinfo.json": json.dumps(MOD_INFO, indent=2).encode("utf-8"),
    }
    for name in sorted(result.tables):
        table: TabularTable = result.tables[name]
        entries[f"{EXCEL_DIR}/{name}"] = serialize_table(table).encode("utf-8")
    for name in sorted(result.strings):
        entries[f"{STRINGS_DIR}/{name}"] = serialize_strings(result.strings[name])

    icon_names = {icon_sprite_name(c.sprite_prefix): c.mod_folder for c in CLASS_DEFS}
    for name in sorted(result.sprites):
        payload = result.sprites[name]
        folder = icon_names.get(name)
        if folder is None:
            entries[f"{TREE_SPRITE_DIR}/{name}"] = payload
            continue
        for base in ICON_DIRS:
            entries[f"{base}/{folder}/{name}"] = payload
    return entries


def build_mod_zip(result: RandomizerResult) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=5) as archive:
        for path, payload in archive_entries(result).items():
            info = zipfile.ZipInfo(path, date_time=_ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            archive.writestr(info, payload)
    data = buffer.getvalue()
    logger.info("[PACKAGING] Built mod archive for seed %d (%d bytes)", result.seed, len(data))
    return data


def archive_filename(result: RandomizerResult) -> str:
    return f"d2r_skill_randomizer_seed{result.seed}.zip"
