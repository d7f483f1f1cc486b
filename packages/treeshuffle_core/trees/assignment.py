"""Pick the donor grid template behind every class tab."""

from __future__ import annotations

from logging import getLogger

from ..classes import CLASS_DEFS, CLASS_ORDER, TREES_PER_CLASS
from ..errors import MissingTemplateError
from ..models import LayoutPage
from ..seed import SeededRNG

logger = getLogger("treeshuffle_core.trees.assignment")


def page_pool(pages: dict[tuple[str, int], LayoutPage], page_index: int) -> list[LayoutPage]:
    """Pages with ``page_index``, in class roster order."""
    pool = [page for (code, idx), page in pages.items() if idx == page_index]
    pool.sort(key=lambda p: (CLASS_ORDER.get(p.class_code, len(CLASS_ORDER)), p.class_code))
    return pool


def assign_trees(
    rng: SeededRNG,
    pages: dict[tuple[str, int], LayoutPage],
) -> dict[str, list[LayoutPage]]:
    """Draw one page per (class, tab), with replacement across classes.

    Tab ``t`` only draws from pages whose index is ``t + 1``.
    """
    pools = {tab: page_pool(pages, tab + 1) for tab in range(TREES_PER_CLASS)}
    for tab, pool in pools.items():
        if not pool:
            raise MissingTemplateError(f"No layout pages available for page index {tab + 1}")

    assignments: dict[str, list[LayoutPage]] = {}
    for class_def in CLASS_DEFS:
        selected: list[LayoutPage] = []
        for tab in range(TREES_PER_CLASS):
            pool = pools[tab]
            selected.append(pool[rng.rand_int(0, len(pool) - 1)])
        assignments[class_def.code] = selected
        logger.debug(
            "[TREES] %s <- %s",
            class_def.code,
            ", ".join(f"{p.class_code}-{p.page_index}" for p in selected),
        )
    return assignments
