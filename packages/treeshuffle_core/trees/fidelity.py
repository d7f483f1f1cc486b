"""Display-text post-steps layered over the placement.

Tab titles are always renamed. Under ``normal`` fidelity, skills that moved
off the claw class also have their claw-only weapon types and the matching
name/description phrases swapped for the new class's own weapon.
"""

from __future__ import annotations

import re
from logging import getLogger
from typing import Any

from ..classes import CLASS_BY_CODE, CLASS_DEFS, CLASS_RESTRICTED_TYPES
from ..models import Placement, SkillDescriptor
from ..tables import TabularTable
from .writers import SKILLS_FALLBACK_COLUMNS

logger = getLogger("treeshuffle_core.trees.fidelity")

REMAPPED_WEAPON_COLUMNS = ("passiveitype", "itypea1", "itypea2", "itypea3")

# weapon type -> (display word, description phrase)
WEAPON_TYPE_INFO: dict[str, tuple[str, str]] = {
    "h2h": ("Claw", "claw class weapons"),
    "mele": ("Melee", "melee weapons"),
    "miss": ("Missile", "missile weapons"),
    "staf": ("Staff", "staves"),
    "wand": ("Wand", "wands"),
    "weap": ("Weapon", "weapons"),
}

STRING_KEY_PREFIXES = ("skillname", "skillan", "skillsd", "skillld")
_NAME_PREFIXES = ("skillname", "skillan")
_TRAILING_DIGITS = re.compile(r"(\d+)$")


def _tab_title_overrides() -> dict[str, str]:
    titles: dict[str, str] = {}
    for class_def in CLASS_DEFS:
        abbrev = class_def.sprite_prefix.capitalize()
        for page in (1, 2, 3):
            # Warlock pages are numbered right to left.
            number = 4 - page if class_def.code == "war" else page
            titles[f"SkillCategory{abbrev}{page}"] = f"Random {number}"
    return titles


SKILL_CATEGORY_TITLES = _tab_title_overrides()


def rename_tab_titles(entries: list[dict[str, Any]]) -> int:
    renamed = 0
    for entry in entries:
        title = SKILL_CATEGORY_TITLES.get(entry.get("Key", ""))
        if title is not None:
            entry["enUS"] = title
            renamed += 1
    return renamed


def restricted_weapon_type(placement: Placement) -> str | None:
    """First claw-only type on a skill that must change for its new class."""
    natural = CLASS_BY_CODE[placement.target_class].natural_weapon
    for column, value in placement.skill.weapon_types:
        if column in REMAPPED_WEAPON_COLUMNS and value in CLASS_RESTRICTED_TYPES and value != natural:
            return value
    return None


def remap_weapon_types(table: TabularTable, placements: list[Placement]) -> dict[str, tuple[str, str]]:
    """Replace claw-only weapon types in place; returns skill -> (old, new)."""
    schema = table.schema(fallbacks=SKILLS_FALLBACK_COLUMNS)
    targets = {p.skill.name: p for p in placements if restricted_weapon_type(p) is not None}
    changed: dict[str, tuple[str, str]] = {}

    for row in table.rows:
        placement = targets.get(schema.get(row, "skill"))
        if placement is None:
            continue
        natural = CLASS_BY_CODE[placement.target_class].natural_weapon
        for column in REMAPPED_WEAPON_COLUMNS:
            if not schema.has(column):
                continue
            old = schema.get(row, column).strip()
            if old in CLASS_RESTRICTED_TYPES:
                schema.set(row, column, natural)
                changed.setdefault(placement.skill.name, (old, natural))

    logger.info("[FIDELITY] Remapped weapon types on %d skills", len(changed))
    return changed


def rewrite_weapon_strings(
    entries: list[dict[str, Any]],
    descriptors: dict[str, SkillDescriptor],
    placements: list[Placement],
) -> int:
    by_key = {str(e.get("Key", "")).lower(): e for e in entries}
    rewritten = 0
    seen: set[str] = set()

    for p in placements:
        if p.skill.name in seen:
            continue
        old_type = restricted_weapon_type(p)
        if old_type is None:
            continue
        natural = CLASS_BY_CODE[p.target_class].natural_weapon
        old_info = WEAPON_TYPE_INFO.get(old_type)
        new_info = WEAPON_TYPE_INFO.get(natural)
        descriptor = descriptors.get(p.skill.skilldesc)
        if old_info is None or new_info is None or descriptor is None:
            continue
        match = _TRAILING_DIGITS.search(descriptor.str_name)
        if match is None:
            continue

        for prefix in STRING_KEY_PREFIXES:
            entry = by_key.get(f"{prefix}{match.group(1)}")
            if entry is None or not entry.get("enUS"):
                continue
            text = str(entry["enUS"]).replace(old_info[1], new_info[1])
            if prefix in _NAME_PREFIXES:
                text = re.sub(rf"\b{re.escape(old_info[0])}\b", new_info[0], text)
            entry["enUS"] = text
            rewritten += 1
        seen.add(p.skill.name)

    return rewritten


def apply_fidelity(
    mode: str,
    skills_table: TabularTable,
    skill_strings: list[dict[str, Any]] | None,
    descriptors: dict[str, SkillDescriptor],
    placements: list[Placement],
) -> None:
    if mode == "normal":
        remap_weapon_types(skills_table, placements)
        if skill_strings is not None:
            count = rewrite_weapon_strings(skill_strings, descriptors, placements)
            logger.info("[FIDELITY] Rewrote %d weapon strings", count)

    if skill_strings is not None:
        rename_tab_titles(skill_strings)
