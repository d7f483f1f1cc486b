"""Prerequisite edges derived from the arrows painted on each donor page.

Prerequisites follow the template's shape: whichever skill now sits at an
arrow's source cell becomes the requirement of the skill at its target cell.
"""

from __future__ import annotations

from logging import getLogger

from ..models import Placement, PrerequisiteEdge

logger = getLogger("treeshuffle_core.trees.prereqs")

# (target_row, target_col, src_row, src_col[, src_row2, src_col2])
Arrow = tuple[int, ...]

TREE_ARROWS: dict[tuple[str, int], tuple[Arrow, ...]] = {
    ("ama", 1): ((2, 2, 1, 2), (3, 3, 1, 3, 2, 2), (4, 1, 2, 1), (4, 2, 2, 1, 2, 2), (5, 2, 4, 2), (5, 3, 3, 3), (6, 1, 4, 1)),
    ("ama", 2): ((3, 1, 1, 1), (3, 2, 2, 2), (4, 3, 1, 3), (5, 1, 3, 1), (5, 2, 3, 2), (6, 1, 5, 1, 5, 2), (6, 3, 4, 3)),
    ("ama", 3): ((2, 2, 1, 1), (3, 1, 1, 1), (3, 3, 2, 3), (4, 2, 2, 2, 3, 3), (4, 3, 3, 3), (5, 1, 3, 1), (6, 2, 4, 2), (6, 3, 4, 3)),
    ("sor", 1): ((3, 1, 2, 1), (3, 2, 1, 2), (4, 1, 3, 1), (4, 3, 1, 3, 3, 2), (5, 2, 3, 2, 4, 1), (6, 3, 4, 3)),
    ("sor", 2): ((3, 1, 2, 1), (3, 2, 1, 2), (4, 2, 3, 2), (4, 3, 2, 3), (5, 1, 3, 1, 4, 2), (5, 3, 4, 3, 4, 2)),
    ("sor", 3): ((2, 2, 1, 2), (3, 3, 2, 2, 1, 3), (4, 2, 2, 2), (5, 1, 2, 1, 4, 2), (5, 3, 3, 3), (6, 1, 5, 1)),
    ("nec", 1): ((2, 3, 1, 2), (3, 2, 1, 2), (3, 3, 2, 3), (4, 1, 2, 1), (4, 2, 3, 2), (5, 1, 4, 1), (5, 3, 3, 3), (6, 2, 4, 2, 5, 3)),
    ("nec", 2): ((2, 2, 1, 2), (3, 3, 1, 3), (4, 1, 2, 1, 2, 2), (4, 2, 2, 2), (5, 3, 3, 3, 4, 2), (6, 1, 4, 1), (6, 2, 4, 2)),
    ("nec", 3): ((1, 1, 1, 3), (3, 1, 2, 2), (3, 3, 1, 3), (4, 2, 2, 2), (5, 1, 3, 1), (5, 2, 4, 2), (6, 2, 5, 2), (6, 3, 3, 3, 5, 2)),
    ("pal", 1): ((3, 1, 1, 1), (3, 3, 1, 3), (4, 1, 3, 1), (4, 2, 2, 2), (5, 1, 4, 1), (5, 3, 3, 3, 4, 2), (6, 2, 4, 2, 5, 1)),
    ("pal", 2): ((2, 2, 1, 1), (3, 1, 1, 1), (4, 1, 3, 1), (4, 2, 2, 2), (5, 2, 4, 2), (5, 3, 2, 3, 4, 2), (6, 1, 4, 1), (6, 3, 5, 3)),
    ("pal", 3): ((3, 1, 1, 1), (4, 2, 3, 1, 2, 2), (5, 1, 3, 1), (6, 2, 4, 2)),
    ("bar", 1): ((2, 3, 1, 2), (3, 2, 1, 2), (3, 3, 2, 3), (4, 1, 2, 1), (4, 2, 3, 2), (5, 3, 3, 3), (6, 1, 4, 1, 4, 2), (6, 2, 4, 2)),
    ("bar", 2): ((5, 1, 3, 1), (6, 3, 4, 3)),
    ("bar", 3): ((2, 1, 1, 1), (2, 2, 1, 1), (3, 3, 1, 3), (4, 1, 2, 1), (5, 2, 2, 2), (5, 3, 3, 3), (6, 1, 4, 1, 5, 2), (6, 2, 5, 2)),
    ("dru", 1): ((2, 2, 1, 2), (3, 3, 1, 3), (4, 1, 2, 1), (4, 2, 2, 1, 2, 2), (5, 3, 3, 3), (6, 1, 4, 1), (6, 2, 4, 2)),
    ("dru", 2): ((1, 2, 1, 1), (3, 1, 1, 1), (3, 3, 2, 3), (4, 1, 3, 1), (4, 2, 3, 1, 3, 3), (5, 2, 4, 2), (5, 3, 3, 3), (6, 1, 4, 1)),
    ("dru", 3): ((2, 1, 1, 1), (3, 1, 2, 1), (3, 3, 2, 3), (4, 2, 3, 3), (5, 1, 3, 1), (5, 2, 4, 2), (6, 1, 5, 1), (6, 2, 5, 2)),
    ("ass", 1): ((2, 1, 1, 2), (3, 1, 2, 1), (3, 2, 1, 2), (4, 3, 2, 3, 3, 2), (5, 1, 3, 1), (5, 2, 3, 2), (6, 1, 5, 1), (6, 3, 4, 3)),
    ("ass", 2): ((2, 1, 1, 2), (3, 2, 1, 2), (3, 3, 1, 3), (4, 1, 2, 1), (4, 2, 3, 3, 3, 2), (5, 3, 3, 3), (6, 1, 4, 1), (6, 2, 4, 2)),
    ("ass", 3): ((2, 3, 1, 3), (3, 2, 1, 2), (4, 1, 2, 1), (4, 3, 2, 3), (5, 1, 4, 1), (5, 3, 4, 3), (6, 2, 3, 2, 5, 1)),
    ("war", 1): ((1, 1, 1, 3), (2, 1, 1, 1), (2, 2, 1, 3), (3, 3, 1, 3), (4, 2, 2, 2), (4, 3, 3, 3), (5, 2, 4, 2), (6, 1, 2, 1), (6, 3, 5, 2, 4, 3)),
    ("war", 2): ((2, 2, 1, 1), (3, 1, 1, 1), (3, 3, 1, 3), (4, 1, 3, 1), (4, 2, 2, 2), (5, 2, 4, 2), (5, 3, 3, 3), (6, 2, 4, 1, 5, 2)),
    ("war", 3): ((3, 2, 2, 2), (3, 3, 1, 3), (4, 1, 2, 1), (5, 2, 3, 2), (5, 3, 3, 3), (6, 1, 4, 1, 5, 2), (6, 3, 5, 3)),
}


def find_arrow(class_code: str, page_index: int, row: int, col: int) -> Arrow | None:
    for arrow in TREE_ARROWS.get((class_code, page_index), ()):
        if arrow[0] == row and arrow[1] == col:
            return arrow
    return None


def assign_prerequisites(placements_by_class: dict[str, list[Placement]]) -> dict[str, PrerequisiteEdge]:
    """One edge per placed skill; skills with no incoming arrow get empty requirements."""
    edges: dict[str, PrerequisiteEdge] = {}
    for class_placements in placements_by_class.values():
        occupant = {(p.tab, p.row, p.col): p.skill.name for p in class_placements}

        for p in class_placements:
            arrow = find_arrow(p.page.class_code, p.page.page_index, p.row, p.col)
            if arrow is None:
                edges[p.skill.name] = PrerequisiteEdge(p.skill.name)
                continue

            req1 = occupant.get((p.tab, arrow[2], arrow[3]), "")
            req2 = occupant.get((p.tab, arrow[4], arrow[5]), "") if len(arrow) >= 6 else ""
            edges[p.skill.name] = PrerequisiteEdge(p.skill.name, req1, req2)

    linked = sum(1 for e in edges.values() if e.req1 or e.req2)
    logger.info("[PREREQS] Assigned prerequisites: %d of %d skills have requirements", linked, len(edges))
    return edges
