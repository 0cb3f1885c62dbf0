"""Command line entry point: tile a board and print it as text."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import List, Optional

from config import CFG
from render import render_ascii
from solver.errors import ConfigurationError, StepLimitExceeded
from solver.generator import Done, create_generator, run_to_completion


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("domino-tiler", description="Randomly tile a board with dominoes")
    parser.add_argument("width", type=int, help="Board width in cells")
    parser.add_argument("height", type=int, help="Board height in cells")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    parser.add_argument("--show-steps", action="store_true", help="Print every intermediate tiling")
    parser.add_argument("--max-steps", type=int, default=CFG.MAX_STEPS, help="Give up after this many steps (0 = never)")
    parser.add_argument("--no-forced-moves", dest="forced_moves", action="store_false", help="Disable forced-move advancement")
    parser.add_argument("--allow-odd", action="store_true", help="Accept odd-area boards (the run will fail)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log search progress to stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    rng = random.Random(args.seed) if args.seed is not None else random.Random()
    try:
        state = create_generator(
            args.width,
            args.height,
            rng,
            forced_moves=args.forced_moves,
            require_even_area=not args.allow_odd,
        )
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    def _show(step):
        print(f"-- step {step.step} ({len(step.tiles)} tiles)")
        print(render_ascii(step.tiles, args.width, args.height))

    try:
        result = run_to_completion(state, args.max_steps, _show if args.show_steps else None)
    except StepLimitExceeded as e:
        print(f"error: gave up after {e.steps} steps", file=sys.stderr)
        return 1

    if isinstance(result, Done):
        print(render_ascii(result.tiles, args.width, args.height))
        print(f"Done: {len(result.tiles)} tiles in {result.step} steps ({state.backtracks} backtracks)")
        return 0
    print(f"Failed: {result.reason}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
