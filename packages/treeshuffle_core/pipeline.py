"""One-shot randomizer run: options in, rewritten tables and sprites out.

The primary stream is consumed in a fixed order (trees, free-skill shuffle,
formula synergies, display synergies, start skills). The act permutation has
its own stream, so toggling act shuffle never moves a skill.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from contextlib import contextmanager
from logging import getLogger
from typing import Any, Iterator, Optional

from .acts.monsters import MONSTATS_TABLE, rescale_for_acts, scale_players
from .acts.permutation import ACT_TABLES, apply_act_permutation, draw_act_permutation
from .classes import CLASS_DEFS, ROW_TO_LEVEL
from .data_loader import SKILLDESC_TABLE, SKILLS_TABLE, DataContext
from .models import ActPermutation, Placement, RandomizerOptions, RandomizerResult
from .seed import SeededRNG, act_shuffle_seed, create_rng, resolve_seed
from .sprites.icons import build_icon_sprites
from .sprites.trees import build_tree_sprites
from .trees.assignment import assign_trees
from .trees.fidelity import apply_fidelity
from .trees.placement import group_by_class, place_skills
from .trees.prereqs import assign_prerequisites
from .trees.starting_items import apply_starting_staff, assign_start_skills
from .trees.synergy import remap_synergies
from .trees.writers import write_skilldesc_table, write_skills_table

logger = getLogger("treeshuffle_core.pipeline")

CHARSTATS_TABLE = "charstats.txt"
UNIQUEITEMS_TABLE = "uniqueitems.txt"
SKILL_STRINGS = "skills.json"
ITEM_NAME_STRINGS = "item-names.json"
ITEM_MODIFIER_STRINGS = "item-modifiers.json"


class _WarningCollector(logging.Handler):
    """Keeps WARNING+ messages logged by one thread under ``treeshuffle_core``."""

    def __init__(self, thread_id: int) -> None:
        super().__init__(level=logging.WARNING)
        self.thread_id = thread_id
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        if record.thread == self.thread_id:
            self.messages.append(record.getMessage())


@contextmanager
def collect_warnings() -> Iterator[list[str]]:
    collector = _WarningCollector(threading.get_ident())
    root = logging.getLogger("treeshuffle_core")
    root.addHandler(collector)
    try:
        yield collector.messages
    finally:
        root.removeHandler(collector)


def normalize_options(options: RandomizerOptions) -> RandomizerOptions:
    return options.normalized(resolve_seed(options.seed))


def download_id(options: RandomizerOptions) -> str:
    """Stable identifier of a normalized option tuple."""
    digest = hashlib.sha256(repr(options.cache_key()).encode("utf-8"))
    return digest.hexdigest()[:24]


def act_permutation_for(options: RandomizerOptions) -> Optional[ActPermutation]:
    if not options.act_shuffle:
        return None
    return draw_act_permutation(create_rng(act_shuffle_seed(options.seed)))


def _place(context: DataContext, rng: SeededRNG) -> tuple[dict[str, list], list[Placement]]:
    assignments = assign_trees(rng, context.layout_pages())
    placements = place_skills(rng, context.skills(), assignments)
    return assignments, placements


def preview_payload(
    seed: int,
    assignments: dict[str, list],
    placements: list[Placement],
    permutation: Optional[ActPermutation],
) -> dict[str, Any]:
    """Per class and tab: donor template and the skills placed on it."""
    by_class = group_by_class(placements)
    classes = []
    for class_def in CLASS_DEFS:
        pages = assignments.get(class_def.code, [])
        tabs = []
        for tab, page in enumerate(pages):
            skills = [
                {
                    "name": p.skill.name,
                    "origin": p.skill.charclass,
                    "row": p.row,
                    "col": p.col,
                    "rank": p.rank,
                    "reqlevel": ROW_TO_LEVEL.get(p.row, 1),
                }
                for p in by_class.get(class_def.code, [])
                if p.tab == tab
            ]
            skills.sort(key=lambda s: (s["row"], s["col"]))
            tabs.append(
                {
                    "tab": tab,
                    "template": {"class": page.class_code, "name": page.class_name, "page": page.page_index},
                    "skills": skills,
                }
            )
        classes.append({"code": class_def.code, "name": class_def.name, "tabs": tabs})
    return {
        "seed": seed,
        "classes": classes,
        "act_order": list(permutation.order) if permutation is not None else None,
    }


def build_preview(options: RandomizerOptions, context: Optional[DataContext] = None) -> dict[str, Any]:
    """Placement-only projection; no table or sprite rewriting."""
    context = context or DataContext()
    opts = normalize_options(options)
    assignments, placements = _place(context, create_rng(opts.seed))
    return preview_payload(opts.seed, assignments, placements, act_permutation_for(opts))


def _rewrite_acts(
    context: DataContext,
    opts: RandomizerOptions,
    permutation: Optional[ActPermutation],
    tables: dict[str, Any],
) -> None:
    scaling = opts.players_count > 1
    if not scaling and permutation is None:
        return

    monstats = context.table(MONSTATS_TABLE)
    if monstats is not None:
        if scaling:
            scale_players(monstats, opts.players_count, opts.players_acts)
        if permutation is not None:
            rescale_for_acts(monstats, permutation)
        tables[MONSTATS_TABLE] = monstats
    else:
        logger.warning("[PIPELINE] %s not found; monster stats unchanged", MONSTATS_TABLE)

    if permutation is None:
        return
    act_tables = {}
    for name in ACT_TABLES:
        table = context.table(name)
        if table is not None:
            act_tables[name] = table
    apply_act_permutation(act_tables, permutation)
    tables.update(act_tables)


def run_randomizer(options: RandomizerOptions, context: Optional[DataContext] = None) -> RandomizerResult:
    context = context or DataContext()
    opts = normalize_options(options)

    with collect_warnings() as warnings:
        rng = create_rng(opts.seed)
        descriptors = context.descriptors()
        assignments, placements = _place(context, rng)
        by_class = group_by_class(placements)
        rewrites = remap_synergies(placements, by_class, descriptors, rng)
        edges = assign_prerequisites(by_class) if opts.enable_prereqs else None

        skills_table = context.table(SKILLS_TABLE, required=True)
        skilldesc_table = context.table(SKILLDESC_TABLE, required=True)
        write_skills_table(skills_table, placements, rewrites, edges)
        write_skilldesc_table(skilldesc_table, placements, rewrites)

        strings: dict[str, list[dict[str, Any]]] = {}
        skill_strings = context.strings(SKILL_STRINGS)
        apply_fidelity(opts.fidelity, skills_table, skill_strings, descriptors, placements)
        if skill_strings is not None:
            strings[SKILL_STRINGS] = skill_strings

        tables: dict[str, Any] = {SKILLS_TABLE: skills_table, SKILLDESC_TABLE: skilldesc_table}
        charstats = context.table(CHARSTATS_TABLE)
        if charstats is not None:
            assign_start_skills(charstats, skills_table, rng)
            if opts.starting_staff:
                uniqueitems = context.table(UNIQUEITEMS_TABLE)
                strings[ITEM_NAME_STRINGS] = apply_starting_staff(
                    charstats, uniqueitems, context.strings(ITEM_NAME_STRINGS), opts.staff_level
                )
                if uniqueitems is not None:
                    tables[UNIQUEITEMS_TABLE] = uniqueitems
            tables[CHARSTATS_TABLE] = charstats

        modifiers = context.strings(ITEM_MODIFIER_STRINGS)
        if modifiers is not None:
            strings[ITEM_MODIFIER_STRINGS] = modifiers

        sprites = build_tree_sprites(context, assignments)
        sprites.update(build_icon_sprites(context, by_class, descriptors))

        permutation = act_permutation_for(opts)
        _rewrite_acts(context, opts, permutation, tables)

        preview = preview_payload(opts.seed, assignments, placements, permutation)

    logger.info(
        "[PIPELINE] Seed %d: %d placements, %d tables, %d sprites, %d warnings",
        opts.seed,
        len(placements),
        len(tables),
        len(sprites),
        len(warnings),
    )
    return RandomizerResult(
        seed=opts.seed,
        options=opts,
        placements=placements,
        tables=tables,
        strings=strings,
        sprites=sprites,
        preview=preview,
        act_order=permutation.order if permutation is not None else None,
        warnings=list(warnings),
    )
