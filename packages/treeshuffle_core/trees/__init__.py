"""Skill tree shuffling: templates, placement, prerequisites and synergies."""

from .assignment import assign_trees
from .placement import group_by_class, place_skills
from .prereqs import assign_prerequisites
from .synergy import remap_synergies

__all__ = [
    "assign_trees",
    "place_skills",
    "group_by_class",
    "assign_prerequisites",
    "remap_synergies",
]
