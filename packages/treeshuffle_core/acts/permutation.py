"""Act order permutation and the act-indexed tables it must stay in sync with.

All tables are rewritten from one ``ActPermutation``. If any of them disagree
about where an act went, the game loads a broken act graph, so a table that
is present but has no recognizable act column stops the run instead of being
skipped.
"""

from __future__ import annotations

import re
from logging import getLogger
from typing import Optional

from ..classes import ACTS
from ..errors import TableShapeError
from ..models import ActPermutation
from ..seed import SeededRNG
from ..tables import TabularTable, parse_int

logger = getLogger("treeshuffle_core.acts.permutation")

ACTINFO_TABLE = "actinfo.txt"
LEVELS_TABLE = "levels.txt"
SUPERUNIQUES_TABLE = "superuniques.txt"

# Tables whose act column holds a plain one-based act number.
SIMPLE_ACT_TABLES: dict[str, str] = {
    "lvltypes.txt": "Act",
    "hireling.txt": "Act",
    "monpreset.txt": "Act",
    "objpreset.txt": "Act",
}

ACT_TABLES = (ACTINFO_TABLE, LEVELS_TABLE, *SIMPLE_ACT_TABLES, SUPERUNIQUES_TABLE)

NO_WAYPOINT = 255
_WAYPOINT_COLUMN_RE = re.compile(r"^(?:wp|waypoint)\d+$", re.IGNORECASE)
_ACT_REF_RE = re.compile(r"\bAct ([1-5])\b")


def draw_act_permutation(rng: SeededRNG) -> ActPermutation:
    return ActPermutation(tuple(rng.shuffle(list(ACTS))))


def _require(table: TabularTable, column: str) -> None:
    if column not in table.headers:
        raise TableShapeError(f"{table.name}: act column '{column}' not found")


def remap_simple_act_table(table: TabularTable, column: str, permutation: ActPermutation) -> int:
    _require(table, column)
    schema = table.schema()
    remapped = 0
    for row in table.rows:
        act = parse_int(schema.get(row, column))
        if act in ACTS:
            schema.set(row, column, str(permutation.slot_of(act)))
            remapped += 1
    return remapped


def _waypoint_columns(table: TabularTable) -> list[str]:
    return [name for name in table.headers if _WAYPOINT_COLUMN_RE.match(name)]


def reorder_actinfo(table: TabularTable, permutation: ActPermutation) -> int:
    """Slot ``i`` takes the row of the act now played there.

    When the incoming act has fewer waypoints than the act it displaces, the
    extra waypoint cells are filled with the incoming act's first waypoint.
    """
    _require(table, "act")
    schema = table.schema()
    wp_columns = _waypoint_columns(table)

    originals: dict[int, list[str]] = {}
    for row in table.rows:
        act = parse_int(schema.get(row, "act"))
        if act in ACTS and act not in originals:
            originals[act] = list(row)

    reordered = 0
    for idx, row in enumerate(table.rows):
        slot = parse_int(schema.get(row, "act"))
        if slot not in ACTS:
            continue
        source = originals.get(permutation.act_at(slot))
        if source is None:
            continue
        new_row = list(source)
        schema.set(new_row, "act", str(slot))

        filled = [schema.get(new_row, c) for c in wp_columns if schema.get(new_row, c).strip()]
        placeholder = filled[0] if filled else ""
        for column in wp_columns:
            if schema.get(row, column).strip() and not schema.get(new_row, column).strip() and placeholder:
                schema.set(new_row, column, placeholder)

        table.rows[idx] = new_row
        reordered += 1
    return reordered


def waypoint_counts(table: TabularTable) -> dict[int, int]:
    """Waypoints per (one-based) act in the zone table."""
    schema = table.schema()
    counts = {act: 0 for act in ACTS}
    for row in table.rows:
        act_index = parse_int(schema.get(row, "Act"))
        waypoint = parse_int(schema.get(row, "Waypoint"))
        if act_index is None or act_index + 1 not in counts:
            continue
        if waypoint is not None and 0 <= waypoint < NO_WAYPOINT:
            counts[act_index + 1] += 1
    return counts


def waypoint_bases(counts: dict[int, int], permutation: Optional[ActPermutation] = None) -> dict[int, int]:
    """First waypoint index of each slot; identity order when no permutation."""
    bases: dict[int, int] = {}
    running = 0
    for slot in ACTS:
        act = permutation.act_at(slot) if permutation is not None else slot
        bases[slot] = running
        running += counts.get(act, 0)
    return bases


def remap_levels(table: TabularTable, permutation: ActPermutation) -> int:
    """Zero-based ``Act`` and global ``Waypoint`` index follow the new order."""
    _require(table, "Act")
    schema = table.schema()
    has_waypoints = schema.has("Waypoint")
    counts = waypoint_counts(table) if has_waypoints else {}
    old_bases = waypoint_bases(counts)
    new_bases = waypoint_bases(counts, permutation)

    remapped = 0
    for row in table.rows:
        act_index = parse_int(schema.get(row, "Act"))
        if act_index is None or act_index + 1 not in ACTS:
            continue
        act = act_index + 1
        slot = permutation.slot_of(act)
        schema.set(row, "Act", str(slot - 1))

        if has_waypoints:
            waypoint = parse_int(schema.get(row, "Waypoint"))
            if waypoint is not None and 0 <= waypoint < NO_WAYPOINT:
                schema.set(row, "Waypoint", str(new_bases[slot] + waypoint - old_bases[act]))
        remapped += 1
    return remapped


def remap_superuniques(table: TabularTable, permutation: ActPermutation) -> int:
    tc_columns = [name for name in table.headers if name.startswith("TC")]
    if not tc_columns:
        raise TableShapeError(f"{table.name}: no treasure class columns found")
    schema = table.schema()

    def _swap(match: re.Match) -> str:
        return f"Act {permutation.slot_of(int(match.group(1)))}"

    remapped = 0
    for row in table.rows:
        changed = False
        for column in tc_columns:
            value = schema.get(row, column)
            updated = _ACT_REF_RE.sub(_swap, value)
            if updated != value:
                schema.set(row, column, updated)
                changed = True
        remapped += int(changed)
    return remapped


def apply_act_permutation(tables: dict[str, TabularTable], permutation: ActPermutation) -> dict[str, int]:
    """Rewrite every act-indexed table present in ``tables`` in place.

    Returns rows rewritten per table name.
    """
    touched: dict[str, int] = {}
    if ACTINFO_TABLE in tables:
        touched[ACTINFO_TABLE] = reorder_actinfo(tables[ACTINFO_TABLE], permutation)
    if LEVELS_TABLE in tables:
        touched[LEVELS_TABLE] = remap_levels(tables[LEVELS_TABLE], permutation)
    for name, column in SIMPLE_ACT_TABLES.items():
        if name in tables:
            touched[name] = remap_simple_act_table(tables[name], column, permutation)
    if SUPERUNIQUES_TABLE in tables:
        touched[SUPERUNIQUES_TABLE] = remap_superuniques(tables[SUPERUNIQUES_TABLE], permutation)

    for name, count in touched.items():
        logger.info("[ACTS] %s: remapped %d rows", name, count)
    return touched
