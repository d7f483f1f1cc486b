"""Rewrite the skill and skill-descriptor tables from the final placement."""

from __future__ import annotations

from logging import getLogger
from typing import Optional

from ..classes import CLASS_BY_CODE, ROW_TO_LEVEL
from ..data_loader import SYNERGY_SLOTS
from ..models import Placement, PrerequisiteEdge, SynergyRewrite
from ..tables import TabularTable

logger = getLogger("treeshuffle_core.trees.writers")

# Documented positions in the stock skills table, used when a header is absent.
SKILLS_FALLBACK_COLUMNS = {
    "skill": 0,
    "charclass": 2,
    "skilldesc": 3,
    "reqskill1": 161,
    "reqskill2": 162,
    "reqskill3": 163,
    "reqlevel": 174,
    "DmgSymPerCalc": 237,
    "EDmgSymPerCalc": 251,
    "ELenSymPerCalc": 256,
}

SKILLDESC_FALLBACK_COLUMNS = {"skilldesc": 0}

SYNERGY_HEADER = {"line": "40", "texta": "Sksyn", "calca": "2"}
SYNERGY_BODY = {"line": "76", "texta": "Magdplev", "calca": "par8"}
_DSC3_FIELDS = ("line", "texta", "textb", "calca", "calcb")


def write_skills_table(
    table: TabularTable,
    placements: list[Placement],
    rewrites: dict[str, SynergyRewrite],
    edges: Optional[dict[str, PrerequisiteEdge]],
) -> int:
    """Move placed skills to their new class in place; returns rows touched.

    ``edges`` of ``None`` means prerequisites are disabled and every placed
    skill's requirement columns are cleared.
    """
    schema = table.schema(fallbacks=SKILLS_FALLBACK_COLUMNS)
    by_name = {p.skill.name: p for p in placements}
    touched = 0

    for row in table.rows:
        placement = by_name.get(schema.get(row, "skill"))
        if placement is None:
            continue
        class_def = CLASS_BY_CODE.get(placement.target_class)
        if class_def is None:
            continue

        schema.set(row, "charclass", class_def.charclass)
        schema.set(row, "reqlevel", str(ROW_TO_LEVEL.get(placement.row, 1)))

        edge = edges.get(placement.skill.name) if edges is not None else None
        schema.set(row, "reqskill1", edge.req1 if edge else "")
        schema.set(row, "reqskill2", edge.req2 if edge else "")
        schema.set(row, "reqskill3", "")

        rewrite = rewrites.get(placement.skill.name)
        if rewrite is not None:
            for column, formula in rewrite.formulas.items():
                schema.set(row, column, formula)
        touched += 1

    logger.info("[WRITERS] skills: rewrote %d rows", touched)
    return touched


def _clear_synergy_slots(schema, row: list[str]) -> None:
    for slot in range(1, SYNERGY_SLOTS + 1):
        for field_name in _DSC3_FIELDS:
            column = f"dsc3{field_name}{slot}"
            if schema.has(column):
                schema.set(row, column, "")


def _write_synergy_slots(schema, row: list[str], refs: list[str]) -> None:
    _clear_synergy_slots(schema, row)
    for slot, ref in enumerate(refs[:SYNERGY_SLOTS], start=1):
        if not schema.has(f"dsc3line{slot}"):
            continue
        style = SYNERGY_HEADER if slot == 1 else SYNERGY_BODY
        schema.set(row, f"dsc3line{slot}", style["line"])
        schema.set(row, f"dsc3texta{slot}", style["texta"])
        schema.set(row, f"dsc3textb{slot}", ref)
        schema.set(row, f"dsc3calca{slot}", style["calca"])


def write_skilldesc_table(
    table: TabularTable,
    placements: list[Placement],
    rewrites: dict[str, SynergyRewrite],
) -> int:
    """Grid position, list row, icon cell and synergy display slots."""
    schema = table.schema(fallbacks=SKILLDESC_FALLBACK_COLUMNS)
    by_desc = {p.skill.skilldesc: p for p in placements if p.skill.skilldesc}
    touched = 0

    for row in table.rows:
        placement = by_desc.get(schema.get(row, "skilldesc"))
        if placement is None:
            continue

        if schema.has("SkillPage"):
            schema.set(row, "SkillPage", str(placement.tab + 1))
        if schema.has("SkillRow"):
            schema.set(row, "SkillRow", str(placement.row))
        if schema.has("SkillColumn"):
            schema.set(row, "SkillColumn", str(placement.col))
        if schema.has("ListRow"):
            schema.set(row, "ListRow", str(placement.rank % 10 + 1))
        if schema.has("IconCel"):
            schema.set(row, "IconCel", str(placement.icon_index))

        rewrite = rewrites.get(placement.skill.name)
        if rewrite is not None and rewrite.display_refs:
            _write_synergy_slots(schema, row, rewrite.display_refs)
        touched += 1

    logger.info("[WRITERS] skilldesc: rewrote %d rows", touched)
    return touched
