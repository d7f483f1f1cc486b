"""Monster stat scaling: simulated player count and act reordering.

A monster's act comes from the ``Act k`` prefix of its treasure class, or
from ``BOSS_ACTS`` for bosses whose treasure class carries no act. Numeric
fields that do not parse as positive integers are sentinels and stay as-is.
"""

from __future__ import annotations

import math
import re
from logging import getLogger
from typing import Iterable, Optional

from ..classes import ACTS
from ..models import ActPermutation
from ..tables import TableSchema, TabularTable, parse_int

logger = getLogger("treeshuffle_core.acts.monsters")

MONSTATS_TABLE = "monstats.txt"

ACT_HP_MULT = {1: 1.0, 2: 2.5, 3: 5.0, 4: 8.0, 5: 13.0}
ACT_DMG_MULT = {1: 1.0, 2: 2.0, 3: 3.5, 4: 5.5, 5: 8.0}
ACT_XP_MULT = {1: 1.0, 2: 3.0, 3: 7.0, 4: 12.0, 5: 20.0}
ACT_AC_MULT = {1: 1.0, 2: 1.8, 3: 3.0, 4: 4.5, 5: 7.0}
ACT_AVG_LEVEL = {1: 8, 2: 18, 3: 24, 4: 28, 5: 36}

MIN_LEVEL = 1
MAX_LEVEL = 110

_DIFFICULTIES = ("", "(N)", "(H)")

HP_COLUMNS = ("minHP", "maxHP", "MinHP(N)", "MaxHP(N)", "MinHP(H)", "MaxHP(H)")
XP_COLUMNS = tuple(f"Exp{d}" for d in _DIFFICULTIES)
DAMAGE_COLUMNS = tuple(
    f"{name}{d}" for d in _DIFFICULTIES for name in ("A1MinD", "A1MaxD", "A2MinD", "A2MaxD", "S1MinD", "S1MaxD")
)
TO_HIT_COLUMNS = tuple(f"{name}{d}" for d in _DIFFICULTIES for name in ("A1TH", "A2TH", "S1TH"))
ARMOR_COLUMNS = tuple(f"AC{d}" for d in _DIFFICULTIES)
LEVEL_COLUMNS = tuple(f"Level{d}" for d in _DIFFICULTIES)
TREASURE_CLASS_COLUMNS = tuple(
    f"{name}{d}"
    for d in _DIFFICULTIES
    for name in (
        "TreasureClass",
        "TreasureClassChamp",
        "TreasureClassUnique",
        "TreasureClassQuest",
        "TreasureClassDesecrated",
        "TreasureClassDesecratedChamp",
        "TreasureClassDesecratedUnique",
        "TreasureClassHerald",
    )
)

ACT_PREFIX_RE = re.compile(r"^(Act )(\d)")


def _numbered(prefix: str, act: int, count: int) -> dict[str, int]:
    return {f"{prefix}{n}": act for n in range(1, count + 1)}


BOSS_ACTS: dict[str, int] = {
    "andariel": 1, "bloodraven": 1, "griswold": 1, "smith": 1,
    **_numbered("quillrat", 1, 8),
    "radament": 2, "duriel": 2, "summoner": 2, "flyingscimitar": 2, "sarcophagus": 2,
    **_numbered("swarm", 2, 5),
    **_numbered("vulture", 2, 5),
    **_numbered("maggotegg", 2, 6),
    "mephisto": 3, "compellingorb": 3,
    **_numbered("councilmember", 3, 3),
    **_numbered("mosquito", 3, 4),
    **_numbered("tentacle", 3, 3),
    **_numbered("tentaclehead", 3, 3),
    "diablo": 4, "izual": 4, "hephasto": 4, "mephistospirit": 4,
    "lightningspire": 4, "firetower": 4, "wakeofdestruction": 4,
    **_numbered("trappedsoul", 4, 2),
    **_numbered("suicideminion", 4, 11),
    "baalcrab": 5, "nihlathakboss": 5, "baalthrone": 5, "baalclone": 5, "act5pow": 5,
    **_numbered("baaltentacle", 5, 5),
    **_numbered("ancientbarb", 5, 3),
    **_numbered("painworm", 5, 5),
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def scale_value(raw: str, factor: float) -> str:
    """Scale a positive integer cell; anything else is returned unchanged."""
    value = parse_int(raw)
    if value is None or value <= 0:
        return raw
    return str(max(0, round_half_up(value * factor)))


def _monster_id(schema: TableSchema, row: list[str]) -> str:
    if schema.has("Id"):
        return schema.get(row, "Id")
    return row[0] if row else ""


def monster_act(schema: TableSchema, row: list[str]) -> Optional[int]:
    """Act affiliation of one row, or ``None`` when it has none."""
    if schema.has("TreasureClass"):
        match = ACT_PREFIX_RE.match(schema.get(row, "TreasureClass"))
        if match:
            act = int(match.group(2))
            return act if act in ACTS else None
    return BOSS_ACTS.get(_monster_id(schema, row))


def is_boss(schema: TableSchema, row: list[str]) -> bool:
    return _monster_id(schema, row) in BOSS_ACTS


def _scale_columns(schema: TableSchema, row: list[str], columns: Iterable[str], factor: float) -> None:
    for column in columns:
        if schema.has(column):
            schema.set(row, column, scale_value(schema.get(row, column), factor))


def players_multipliers(players: int) -> tuple[float, float]:
    """(HP/experience multiplier, damage/to-hit multiplier)."""
    return (players + 1) / 2, 1 + (players - 1) / 16


def scale_players(table: TabularTable, players: int, acts: Iterable[int]) -> int:
    """Scale monsters of the enabled acts in place; returns rows scaled."""
    if players <= 1:
        return 0
    enabled = set(acts)
    hp_factor, dmg_factor = players_multipliers(players)
    schema = table.schema()
    scaled = 0
    for row in table.rows:
        if monster_act(schema, row) not in enabled:
            continue
        _scale_columns(schema, row, HP_COLUMNS + XP_COLUMNS, hp_factor)
        _scale_columns(schema, row, DAMAGE_COLUMNS + TO_HIT_COLUMNS, dmg_factor)
        scaled += 1
    logger.info("[ACTS] Players %d: scaled %d monsters (acts %s)", players, scaled, sorted(enabled))
    return scaled


def rescale_for_acts(table: TabularTable, permutation: ActPermutation) -> int:
    """Move every act-affiliated monster to its new difficulty slot in place."""
    schema = table.schema()
    moved = 0
    for row in table.rows:
        act = monster_act(schema, row)
        if act is None:
            continue
        slot = permutation.slot_of(act)

        _scale_columns(schema, row, HP_COLUMNS, ACT_HP_MULT[slot] / ACT_HP_MULT[act])
        _scale_columns(schema, row, XP_COLUMNS, ACT_XP_MULT[slot] / ACT_XP_MULT[act])
        _scale_columns(schema, row, DAMAGE_COLUMNS + TO_HIT_COLUMNS, ACT_DMG_MULT[slot] / ACT_DMG_MULT[act])
        _scale_columns(schema, row, ARMOR_COLUMNS, ACT_AC_MULT[slot] / ACT_AC_MULT[act])

        level_ratio = ACT_AVG_LEVEL[slot] / ACT_AVG_LEVEL[act]
        for column in LEVEL_COLUMNS:
            if not schema.has(column):
                continue
            level = parse_int(schema.get(row, column))
            if level is not None and level > 0:
                clamped = min(MAX_LEVEL, max(MIN_LEVEL, round_half_up(level * level_ratio)))
                schema.set(row, column, str(clamped))

        if not is_boss(schema, row):
            for column in TREASURE_CLASS_COLUMNS:
                if schema.has(column):
                    schema.set(row, column, rewrite_act_prefix(schema.get(row, column), permutation))
        moved += 1

    logger.info("[ACTS] Rescaled %d monsters for act order %s", moved, list(permutation.order))
    return moved


def rewrite_act_prefix(value: str, permutation: ActPermutation) -> str:
    match = ACT_PREFIX_RE.match(value)
    if not match or int(match.group(2)) not in ACTS:
        return value
    slot = permutation.slot_of(int(match.group(2)))
    return f"{match.group(1)}{slot}{value[match.end():]}"
