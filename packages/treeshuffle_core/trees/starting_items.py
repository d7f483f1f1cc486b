"""Class-stats post-steps: the start skill and the optional teleport staff."""

from __future__ import annotations

from logging import getLogger
from typing import Any, Optional

from ..classes import CLASS_BY_NAME
from ..seed import SeededRNG
from ..tables import TabularTable
from .writers import SKILLS_FALLBACK_COLUMNS

logger = getLogger("treeshuffle_core.trees.starting_items")

STAFF_CODE = "sst"
STAFF_UNIQUE_NAME = "Astral Wayfarer"
REPLACED_UNIQUE = "Bane Ash"
TELEPORT_SKILL_ID = "54"
ITEM_SLOTS = 10
ITEM_NAME_ID = 99999
ITEM_NAME_LOCALES = (
    "enUS", "zhTW", "deDE", "esES", "frFR", "itIT", "koKR",
    "plPL", "esMX", "jaJP", "ptBR", "ruRU", "zhCN",
)


def level_one_skills(skills_table: TabularTable) -> dict[str, list[str]]:
    """Skill names per class whose rewritten required level is 1, in table order."""
    schema = skills_table.schema(fallbacks=SKILLS_FALLBACK_COLUMNS)
    out: dict[str, list[str]] = {}
    for row in skills_table.rows:
        charclass = schema.get(row, "charclass").strip()
        if charclass and schema.get(row, "reqlevel").strip() == "1":
            out.setdefault(charclass, []).append(schema.get(row, "skill"))
    return out


def assign_start_skills(charstats: TabularTable, skills_table: TabularTable, rng: SeededRNG) -> dict[str, str]:
    schema = charstats.schema()
    if not schema.has("class") or not schema.has("StartSkill"):
        logger.warning("[START] charstats lacks class/StartSkill columns; start skills unchanged")
        return {}

    candidates = level_one_skills(skills_table)
    chosen: dict[str, str] = {}
    for row in charstats.rows:
        class_def = CLASS_BY_NAME.get(schema.get(row, "class"))
        if class_def is None:
            continue
        pool = candidates.get(class_def.charclass, [])
        skill = pool[rng.rand_int(0, len(pool) - 1)] if pool else ""
        schema.set(row, "StartSkill", skill)
        chosen[class_def.code] = skill
    return chosen


def _class_rows(charstats: TabularTable, schema) -> list[list[str]]:
    if not schema.has("class"):
        return []
    return [row for row in charstats.rows if schema.get(row, "class") in CLASS_BY_NAME]


def add_teleport_staff(charstats: TabularTable) -> Optional[int]:
    """Put the staff in the first item slot free for every class; returns the slot."""
    schema = charstats.schema()
    class_rows = _class_rows(charstats, schema)
    if not class_rows:
        return None

    slot = None
    for n in range(1, ITEM_SLOTS + 1):
        if not schema.has(f"item{n}"):
            continue
        if all(schema.get(row, f"item{n}").strip() in ("", "0") for row in class_rows):
            slot = n
            break
    if slot is None:
        logger.warning("[START] No free starting item slot; staff not added")
        return None

    for row in class_rows:
        schema.set(row, f"item{slot}", STAFF_CODE)
        if schema.has(f"item{slot}loc"):
            schema.set(row, f"item{slot}loc", "")
        if schema.has(f"item{slot}count"):
            schema.set(row, f"item{slot}count", "1")
        if schema.has(f"item{slot}quality"):
            schema.set(row, f"item{slot}quality", "7")
    return slot


def add_staff_unique(uniqueitems: TabularTable, required_level: int) -> None:
    schema = uniqueitems.schema()
    for row in uniqueitems.rows:
        if schema.has("index") and schema.get(row, "index") == REPLACED_UNIQUE and schema.has("disabled"):
            schema.set(row, "disabled", "1")

    row = uniqueitems.new_row()
    values = {
        "index": STAFF_UNIQUE_NAME,
        "version": "0",
        "disabled": "0",
        "spawnable": "1",
        "code": STAFF_CODE,
        "lvl": "1",
        "lvl req": str(required_level),
        "rarity": "1",
        "prop1": "charged",
        "par1": TELEPORT_SKILL_ID,
        "min1": "20",
        "max1": "1",
    }
    for column, value in values.items():
        if schema.has(column):
            schema.set(row, column, value)
    uniqueitems.rows.append(row)


def staff_name_entry() -> dict[str, Any]:
    entry: dict[str, Any] = {"id": ITEM_NAME_ID, "Key": STAFF_UNIQUE_NAME}
    for locale in ITEM_NAME_LOCALES:
        entry[locale] = STAFF_UNIQUE_NAME
    return entry


def apply_starting_staff(
    charstats: TabularTable,
    uniqueitems: Optional[TabularTable],
    item_names: Optional[list[dict[str, Any]]],
    required_level: int,
) -> list[dict[str, Any]]:
    """Inject the staff everywhere it must appear; returns the item-name entries."""
    slot = add_teleport_staff(charstats)
    if uniqueitems is not None:
        add_staff_unique(uniqueitems, required_level)
    names = list(item_names or [])
    if not any(e.get("Key") == STAFF_UNIQUE_NAME for e in names):
        names.append(staff_name_entry())
    logger.info("[START] Teleport staff in slot %s, required level %d", slot, required_level)
    return names
