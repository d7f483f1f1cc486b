"""Monster scaling and act-order permutation."""

from .monsters import rescale_for_acts, scale_players
from .permutation import apply_act_permutation, draw_act_permutation

__all__ = [
    "scale_players",
    "rescale_for_acts",
    "draw_act_permutation",
    "apply_act_permutation",
]
