"""Option flags shared by the randomizer scripts."""

from __future__ import annotations

import argparse

from packages.treeshuffle_core.classes import ACTS, MAX_PLAYERS
from packages.treeshuffle_core.models import FIDELITY_MODES, RandomizerOptions


def add_option_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--seed", required=True, help="Integer seed or any text")
    parser.add_argument("--data-dir", default=None, help="Game data directory (default: $TREESHUFFLE_DATA_DIR or ./data)")
    parser.add_argument("--no-prereqs", action="store_true", help="Clear skill prerequisites instead of rebuilding them")
    parser.add_argument("--fidelity", choices=FIDELITY_MODES, default="minimal")
    parser.add_argument("--players", type=int, default=1, help=f"Simulated player count (1-{MAX_PLAYERS})")
    parser.add_argument(
        "--players-acts",
        default=",".join(str(a) for a in ACTS),
        help="Comma-separated acts that receive players scaling",
    )
    parser.add_argument("--act-shuffle", action="store_true", help="Permute act difficulty order")
    parser.add_argument("--teleport-staff", type=int, default=None, metavar="LEVEL",
                        help="Start every class with the teleport staff at this required level")


def options_from_args(args: argparse.Namespace) -> RandomizerOptions:
    acts = tuple(int(part) for part in str(args.players_acts).split(",") if part.strip().isdigit())
    return RandomizerOptions(
        seed=args.seed,
        enable_prereqs=not args.no_prereqs,
        fidelity=args.fidelity,
        players_count=args.players,
        players_acts=acts,
        act_shuffle=args.act_shuffle,
        starting_staff=args.teleport_staff is not None,
        staff_level=args.teleport_staff or 1,
    )
