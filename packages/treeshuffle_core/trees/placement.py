"""Shuffle class skills into the assigned grid templates."""

from __future__ import annotations

from logging import getLogger
from typing import NamedTuple

from ..classes import CLASS_BY_CODE, CLASS_DEFS
from ..models import LayoutPage, Placement, SkillDefinition
from ..seed import SeededRNG

logger = getLogger("treeshuffle_core.trees.placement")


class _Cell(NamedTuple):
    row: int
    tab: int
    col: int
    page: LayoutPage


def filled_cells(pages: list[LayoutPage]) -> list[_Cell]:
    """Every FILLED slot across a class's tabs, ordered (row, tab, col)."""
    cells = [
        _Cell(slot.row, tab, slot.col, page)
        for tab, page in enumerate(pages)
        for slot in page.filled_slots
    ]
    cells.sort(key=lambda c: (c.row, c.tab, c.col))
    return cells


def split_pinned(skills: list[SkillDefinition]) -> tuple[dict[str, list[SkillDefinition]], list[SkillDefinition]]:
    """Pinned skills grouped by origin class, and the free pool."""
    pinned: dict[str, list[SkillDefinition]] = {}
    free: list[SkillDefinition] = []
    for skill in skills:
        if skill.pinned:
            origin = CLASS_BY_CODE.get(skill.charclass)
            missing = [cap for cap in skill.required_capabilities if origin and not origin.has_capability(cap)]
            if missing:
                logger.warning(
                    "[PLACEMENT] %s requires %s which its origin class %s lacks; keeping it there",
                    skill.name,
                    ", ".join(sorted(missing)),
                    skill.charclass,
                )
            pinned.setdefault(skill.charclass, []).append(skill)
        else:
            free.append(skill)
    return pinned, free


def place_skills(
    rng: SeededRNG,
    skills: list[SkillDefinition],
    assignments: dict[str, list[LayoutPage]],
) -> list[Placement]:
    pinned_by_class, free = split_pinned(skills)
    shuffled = rng.shuffle(free)
    cursor = 0
    placements: list[Placement] = []

    for class_def in CLASS_DEFS:
        cells = filled_cells(assignments.get(class_def.code, []))
        pinned = pinned_by_class.get(class_def.code, [])
        if len(pinned) > len(cells):
            logger.warning(
                "[PLACEMENT] %s has %d pinned skills but only %d slots",
                class_def.code,
                len(pinned),
                len(cells),
            )

        take = max(0, len(cells) - len(pinned))
        chosen = shuffled[cursor : cursor + take]
        cursor += len(chosen)

        class_skills = sorted(pinned + chosen, key=lambda s: s.reqlevel)
        for rank, (skill, cell) in enumerate(zip(class_skills, cells)):
            placements.append(
                Placement(
                    skill=skill,
                    target_class=class_def.code,
                    page=cell.page,
                    tab=cell.tab,
                    row=cell.row,
                    col=cell.col,
                    icon_index=rank * 2,
                    rank=rank,
                )
            )

        if len(class_skills) < len(cells):
            logger.warning(
                "[PLACEMENT] %s only got %d skills for %d slots; trailing slots left empty",
                class_def.code,
                len(class_skills),
                len(cells),
            )

    if cursor < len(shuffled):
        logger.warning("[PLACEMENT] %d free skills were not placed", len(shuffled) - cursor)

    logger.info("[PLACEMENT] Placed %d skills across %d classes", len(placements), len(CLASS_DEFS))
    return placements


def group_by_class(placements: list[Placement]) -> dict[str, list[Placement]]:
    grouped: dict[str, list[Placement]] = {}
    for placement in placements:
        grouped.setdefault(placement.target_class, []).append(placement)
    for items in grouped.values():
        items.sort(key=lambda p: p.rank)
    return grouped
