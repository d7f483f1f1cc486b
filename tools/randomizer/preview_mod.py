#!/usr/bin/env python3
"""Print the skill tree layout a seed would produce, without building the mod."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from packages.treeshuffle_core.data_loader import DataContext
from packages.treeshuffle_core.errors import RandomizerError
from packages.treeshuffle_core.pipeline import build_preview
from tools.randomizer._options import add_option_arguments, options_from_args


def main() -> int:
    parser = argparse.ArgumentParser(description="Preview a randomized skill tree layout")
    add_option_arguments(parser)
    parser.add_argument("--text", action="store_true", help="Human-readable summary instead of JSON")
    args = parser.parse_args()

    context = DataContext(Path(args.data_dir) if args.data_dir else None)
    try:
        preview = build_preview(options_from_args(args), context)
    except RandomizerError as exc:
        print(f"ERROR [{exc.error_code}]: {exc}")
        return 1

    if not args.text:
        print(json.dumps(preview, indent=2))
        return 0

    print(f"Seed: {preview['seed']}")
    if preview["act_order"]:
        print(f"Act order: {', '.join(str(a) for a in preview['act_order'])}")
    for entry in preview["classes"]:
        print(f"{entry['name']}:")
        for tab in entry["tabs"]:
            template = tab["template"]
            names = ", ".join(skill["name"] for skill in tab["skills"])
            print(f"  tab {tab['tab'] + 1} <- {template['name']} page {template['page']}: {names}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
