"""Fixed class roster and layout constants."""

from __future__ import annotations

from dataclasses import dataclass

DUAL_WIELD = "dual_wield"
SHAPESHIFT = "shapeshift"
OFFHAND_CLAW = "offhand_claw"


@dataclass(frozen=True)
class ClassDefinition:
    """One playable class and the capabilities that gate restricted skills."""

    code: str
    name: str
    charclass: str
    sprite_prefix: str
    icon_folder: str
    mod_folder: str
    natural_weapon: str
    dual_wield: bool = False
    shapeshift: bool = False
    offhand_claw: bool = False

    def has_capability(self, capability: str) -> bool:
        return bool(getattr(self, capability, False))


CLASS_DEFS: tuple[ClassDefinition, ...] = (
    ClassDefinition("ama", "Amazon", "ama", "am", "Amazon", "amazon", "miss"),
    ClassDefinition("sor", "Sorceress", "sor", "so", "Sorceress", "sorceress", "staf"),
    ClassDefinition("nec", "Necromancer", "nec", "ne", "Necro", "necromancer", "wand"),
    ClassDefinition("pal", "Paladin", "pal", "pa", "Paladin", "paladin", "mele"),
    ClassDefinition("bar", "Barbarian", "bar", "ba", "Barbarian", "barbarian", "mele", dual_wield=True),
    ClassDefinition("dru", "Druid", "dru", "dr", "Druid", "druid", "mele", shapeshift=True),
    ClassDefinition(
        "ass", "Assassin", "ass", "as", "Assassin", "assassin", "h2h", dual_wield=True, offhand_claw=True
    ),
    ClassDefinition("war", "Warlock", "war", "wa", "Warlock", "warlock", "weap"),
)

CLASS_BY_CODE: dict[str, ClassDefinition] = {c.code: c for c in CLASS_DEFS}
CLASS_BY_NAME: dict[str, ClassDefinition] = {c.name: c for c in CLASS_DEFS}
CLASS_ORDER: dict[str, int] = {c.code: idx for idx, c in enumerate(CLASS_DEFS)}

# Weapon types only one class can equip.
CLASS_RESTRICTED_TYPES = frozenset({"h2h", "h2h2"})

GRID_ROWS = 6
GRID_COLS = 3
TREES_PER_CLASS = 3
SKILLS_PER_CLASS = 30

# Required level written for a skill landing in grid row N.
ROW_TO_LEVEL: dict[int, int] = {1: 1, 2: 6, 3: 12, 4: 18, 5: 24, 6: 30}

ICON_WIDTH = 132
ICON_HEIGHT = 130
ICONS_PER_CLASS = SKILLS_PER_CLASS * 2

ACTS = (1, 2, 3, 4, 5)
MAX_PLAYERS = 8
