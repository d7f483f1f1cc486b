#!/usr/bin/env python3
"""Generate a randomized skill tree mod archive."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from packages.treeshuffle_core.data_loader import DataContext
from packages.treeshuffle_core.errors import RandomizerError
from packages.treeshuffle_core.packaging import archive_filename, build_mod_zip
from packages.treeshuffle_core.pipeline import run_randomizer
from tools.randomizer._options import add_option_arguments, options_from_args


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a randomized skill tree mod")
    add_option_arguments(parser)
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output zip path (default: d2r_skill_randomizer_seed<seed>.zip in the current directory)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log progress to stderr")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    context = DataContext(Path(args.data_dir) if args.data_dir else None)
    try:
        result = run_randomizer(options_from_args(args), context)
    except RandomizerError as exc:
        print(f"ERROR [{exc.error_code}]: {exc}")
        return 1

    out_path = args.out or Path(archive_filename(result))
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(build_mod_zip(result))

    print(f"Seed: {result.seed}")
    if result.act_order:
        print(f"Act order: {', '.join(str(a) for a in result.act_order)}")
    for warning in result.warnings:
        print(f"WARN: {warning}")
    print(f"Wrote mod to {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
