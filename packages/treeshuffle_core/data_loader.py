"""Input loading for a randomizer run.

``DataContext`` owns every parsed input and raw sprite buffer for one data
directory. Callers always receive copies of tables and string lists so a run
can mutate them freely; the cached originals stay pristine until ``clear()``.
"""

from __future__ import annotations

import copy
import csv
import json
import os
import threading
from collections import OrderedDict
from logging import getLogger
from pathlib import Path
from typing import Any, Optional

from .classes import (
    CLASS_BY_CODE,
    DUAL_WIELD,
    OFFHAND_CLAW,
    SHAPESHIFT,
    ClassDefinition,
)
from .errors import MissingTableError, MissingTemplateError
from .models import GridSlot, LayoutPage, SkillDefinition, SkillDescriptor
from .tables import TabularTable, load_table, parse_int

logger = getLogger("treeshuffle_core.data_loader")

WORKSPACE_ROOT = Path(__file__).resolve().parents[2]
GRID_FILE = "skill_tree_grid.csv"
SKILLS_TABLE = "skills.txt"
SKILLDESC_TABLE = "skilldesc.txt"

SKILL_FORMULA_COLUMNS = ("EDmgSymPerCalc", "ELenSymPerCalc", "DmgSymPerCalc")
WEAPON_TYPE_COLUMNS = ("passiveitype", "itypea1", "itypea2", "itypea3", "itypeb1")
SYNERGY_SLOTS = 7
SPRITE_CACHE_SIZE = 32


def default_data_dir() -> Path:
    raw = os.environ.get("TREESHUFFLE_DATA_DIR")
    if raw and raw.strip():
        return Path(raw.strip()).expanduser().resolve()
    return WORKSPACE_ROOT / "data"


def _required_capabilities(weapsel: str, itypeb1: str, restrict: str) -> frozenset[str]:
    caps: set[str] = set()
    if parse_int(weapsel) == 3:
        caps.add(DUAL_WIELD)
    if itypeb1.strip() in {"h2h", "h2h2"}:
        caps.add(OFFHAND_CLAW)
    if parse_int(restrict) == 2:
        caps.add(SHAPESHIFT)
    return frozenset(caps)


def parse_layout_pages(lines: list[str]) -> dict[tuple[str, int], LayoutPage]:
    """Build pages from grid CSV lines (class,code,tree,row,col,status,skill)."""
    reader = csv.reader(lines)
    header = next(reader, None)
    if header is None:
        return {}

    slots_by_key: dict[tuple[str, int], list[GridSlot]] = {}
    names: dict[tuple[str, int], str] = {}
    for cols in reader:
        if len(cols) < 6 or not cols[1].strip():
            continue
        row = parse_int(cols[3])
        col = parse_int(cols[4])
        page_index = parse_int(cols[2])
        if row is None or col is None or page_index is None:
            logger.warning("[LOADER] Skipping malformed grid line: %s", cols)
            continue
        key = (cols[1].strip(), page_index)
        names.setdefault(key, cols[0].strip())
        skill = cols[6].strip() if len(cols) > 6 and cols[6].strip() else None
        slots_by_key.setdefault(key, []).append(
            GridSlot(row=row, col=col, filled=cols[5].strip().upper() == "FILLED", skill=skill)
        )

    return {
        key: LayoutPage(class_code=key[0], class_name=names[key], page_index=key[1], slots=tuple(slots))
        for key, slots in slots_by_key.items()
    }


def skills_from_table(table: TabularTable) -> list[SkillDefinition]:
    """Class skills (rows whose charclass names a known class)."""
    schema = table.schema(fallbacks={"skill": 0, "charclass": 2, "skilldesc": 3})
    id_column = "Id" if schema.has("Id") else "*Id"
    skills: list[SkillDefinition] = []
    for line_number, row in enumerate(table.rows):
        charclass = schema.get(row, "charclass").strip()
        if charclass not in CLASS_BY_CODE:
            continue
        skill_id = parse_int(schema.get(row, id_column))
        skills.append(
            SkillDefinition(
                name=schema.get(row, "skill"),
                skill_id=skill_id if skill_id is not None else line_number,
                charclass=charclass,
                skilldesc=schema.get(row, "skilldesc"),
                reqlevel=parse_int(schema.get(row, "reqlevel")) or 1,
                formulas=tuple(
                    (col, schema.get(row, col)) for col in SKILL_FORMULA_COLUMNS if schema.get(row, col)
                ),
                weapon_types=tuple(
                    (col, schema.get(row, col).strip())
                    for col in WEAPON_TYPE_COLUMNS
                    if schema.get(row, col).strip()
                ),
                required_capabilities=_required_capabilities(
                    schema.get(row, "weapsel"), schema.get(row, "itypeb1"), schema.get(row, "restrict")
                ),
            )
        )
    return skills


def descriptors_from_table(table: TabularTable) -> dict[str, SkillDescriptor]:
    schema = table.schema(fallbacks={"skilldesc": 0})
    out: dict[str, SkillDescriptor] = {}
    for row in table.rows:
        key = schema.get(row, "skilldesc")
        if not key:
            continue
        refs: list[str] = []
        for slot in range(1, SYNERGY_SLOTS + 1):
            value = schema.get(row, f"dsc3textb{slot}") if schema.has(f"dsc3textb{slot}") else ""
            if not value:
                break
            refs.append(value)
        out[key] = SkillDescriptor(
            key=key,
            page=parse_int(schema.get(row, "SkillPage")) or 0,
            row=parse_int(schema.get(row, "SkillRow")) or 0,
            col=parse_int(schema.get(row, "SkillColumn")) or 0,
            icon_index=parse_int(schema.get(row, "IconCel")) or 0,
            str_name=schema.get(row, "str name"),
            synergy_refs=tuple(refs),
        )
    return out


class DataContext:
    """Lazy, thread-safe cache of one data directory's inputs."""

    def __init__(self, data_dir: Optional[Path] = None, *, sprite_cache_size: int = SPRITE_CACHE_SIZE) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()
        self._lock = threading.Lock()
        self._pages: Optional[dict[tuple[str, int], LayoutPage]] = None
        self._tables: dict[str, Optional[TabularTable]] = {}
        self._strings: dict[str, Optional[list[dict[str, Any]]]] = {}
        self._sprites: OrderedDict[str, Optional[bytes]] = OrderedDict()
        self._sprite_cache_size = max(1, int(sprite_cache_size))

    @property
    def txt_dir(self) -> Path:
        return self.data_dir / "txt"

    @property
    def strings_dir(self) -> Path:
        return self.data_dir / "local" / "strings"

    @property
    def tree_sprite_dir(self) -> Path:
        return self.data_dir / "sprites" / "skill_trees"

    @property
    def icon_dir(self) -> Path:
        return self.data_dir / "sprites" / "icons"

    def layout_pages(self) -> dict[tuple[str, int], LayoutPage]:
        with self._lock:
            if self._pages is None:
                path = self.data_dir / GRID_FILE
                if not path.exists():
                    raise MissingTemplateError(f"Grid template table not found: {path}")
                pages = parse_layout_pages(path.read_text(encoding="utf-8").splitlines())
                if not pages:
                    raise MissingTemplateError(f"Grid template table is empty: {path}")
                logger.info("[LOADER] Loaded %d layout pages from %s", len(pages), path)
                self._pages = pages
            return self._pages

    def table(self, name: str, *, required: bool = False) -> Optional[TabularTable]:
        with self._lock:
            if name not in self._tables:
                path = self.txt_dir / name
                self._tables[name] = load_table(path) if path.exists() else None
            cached = self._tables[name]
        if cached is None:
            if required:
                raise MissingTableError(f"Required table not found: {name}")
            return None
        return cached.copy()

    def skills(self) -> list[SkillDefinition]:
        return skills_from_table(self.table(SKILLS_TABLE, required=True))

    def descriptors(self) -> dict[str, SkillDescriptor]:
        return descriptors_from_table(self.table(SKILLDESC_TABLE, required=True))

    def strings(self, name: str) -> Optional[list[dict[str, Any]]]:
        with self._lock:
            if name not in self._strings:
                path = self.strings_dir / name
                entries: Optional[list[dict[str, Any]]] = None
                if path.exists():
                    try:
                        entries = json.loads(path.read_text(encoding="utf-8-sig"))
                    except ValueError as exc:
                        logger.warning("[LOADER] Unreadable string table %s: %s", path, exc)
                self._strings[name] = entries
            cached = self._strings[name]
        return copy.deepcopy(cached) if cached is not None else None

    def tree_sprite(self, class_def: ClassDefinition, *, lowend: bool) -> Optional[bytes]:
        suffix = ".lowend.sprite" if lowend else ".sprite"
        filename = f"{class_def.sprite_prefix}skilltree{suffix}"
        with self._lock:
            if filename in self._sprites:
                self._sprites.move_to_end(filename)
                return self._sprites[filename]

        path = self.tree_sprite_dir / filename
        data: Optional[bytes] = None
        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.warning("[LOADER] Tree sprite unreadable %s: %s", path, exc)

        with self._lock:
            self._sprites[filename] = data
            while len(self._sprites) > self._sprite_cache_size:
                self._sprites.popitem(last=False)
        return data

    def icon_path(self, class_def: ClassDefinition, index: int) -> Optional[Path]:
        folder = self.icon_dir / class_def.icon_folder
        for ext in (".png", ".bmp"):
            candidate = folder / f"{class_def.icon_folder}_{index}{ext}"
            if candidate.exists():
                return candidate
        return None

    def clear(self) -> None:
        with self._lock:
            self._pages = None
            self._tables.clear()
            self._strings.clear()
            self._sprites.clear()
