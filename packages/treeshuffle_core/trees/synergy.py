"""Point synergy references at skills that now share the same class.

Formulas are parsed into literal text and ``skill('<name>'.<attr>)``
references, the references are swapped, and the token list is rendered back,
so names that share a prefix never clobber each other.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import Union

from ..data_loader import SKILL_FORMULA_COLUMNS
from ..models import Placement, SkillDescriptor, SynergyRewrite
from ..seed import SeededRNG

logger = getLogger("treeshuffle_core.trees.synergy")

SKILL_REF_RE = re.compile(r"skill\('([^']*)'\.([A-Za-z0-9_]+)\)")


@dataclass(frozen=True)
class SkillRef:
    name: str
    attr: str

    def render(self) -> str:
        return f"skill('{self.name}'.{self.attr})"


Token = Union[str, SkillRef]


def parse_formula(formula: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    for match in SKILL_REF_RE.finditer(formula):
        if match.start() > pos:
            tokens.append(formula[pos : match.start()])
        tokens.append(SkillRef(match.group(1), match.group(2)))
        pos = match.end()
    if pos < len(formula):
        tokens.append(formula[pos:])
    return tokens


def render_formula(tokens: list[Token]) -> str:
    return "".join(tok.render() if isinstance(tok, SkillRef) else tok for tok in tokens)


def remap_formula(formula: str, classmates: list[str], rng: SeededRNG) -> str | None:
    """Swap each referenced skill for a distinct, unused classmate.

    Returns ``None`` when the formula references no skills. Repeated
    references to one name share a replacement; once classmates run out the
    remaining references are left alone.
    """
    tokens = parse_formula(formula)
    if not any(isinstance(tok, SkillRef) for tok in tokens):
        return None

    used: set[str] = set()
    mapping: dict[str, str] = {}
    out: list[Token] = []
    for tok in tokens:
        if not isinstance(tok, SkillRef):
            out.append(tok)
            continue
        if tok.name not in mapping:
            available = [name for name in classmates if name not in used]
            if not available:
                out.append(tok)
                continue
            choice = available[rng.rand_int(0, len(available) - 1)]
            used.add(choice)
            mapping[tok.name] = choice
        out.append(SkillRef(mapping[tok.name], tok.attr))
    return render_formula(out)


def remap_synergies(
    placements: list[Placement],
    placements_by_class: dict[str, list[Placement]],
    descriptors: dict[str, SkillDescriptor],
    rng: SeededRNG,
) -> dict[str, SynergyRewrite]:
    """Formula pass over every placement, then the display-reference pass."""
    rewrites: dict[str, SynergyRewrite] = {}

    def classmates_of(p: Placement) -> list[Placement]:
        return [o for o in placements_by_class.get(p.target_class, []) if o.skill.name != p.skill.name]

    for p in placements:
        names = [o.skill.name for o in classmates_of(p)]
        for column in SKILL_FORMULA_COLUMNS:
            formula = p.skill.formula(column)
            if not formula or "skill('" not in formula:
                continue
            updated = remap_formula(formula, names, rng)
            if updated is None:
                continue
            rewrites.setdefault(p.skill.name, SynergyRewrite(p.skill.name)).formulas[column] = updated

    for p in placements:
        descriptor = descriptors.get(p.skill.skilldesc) if p.skill.skilldesc else None
        if descriptor is None or not descriptor.synergy_refs:
            continue
        others = classmates_of(p)
        if not others:
            continue

        count = min(len(others), len(descriptor.synergy_refs))
        picked = rng.shuffle(others)[:count]
        refs = []
        for other in picked:
            other_desc = descriptors.get(other.skill.skilldesc)
            if other_desc and other_desc.str_name:
                refs.append(other_desc.str_name)
        if refs:
            rewrites.setdefault(p.skill.name, SynergyRewrite(p.skill.name)).display_refs = refs

    logger.info("[SYNERGY] Rewrote synergies for %d skills", len(rewrites))
    return rewrites
