#!/usr/bin/env python3
import argparse
import sys

from npuzzle_pdb.config import add_solver_args, setup_logging
from npuzzle_pdb.domains.puzzle import PuzzleState
from npuzzle_pdb.errors import MalformedInputError
from npuzzle_pdb.solver import SOLVED, solver_from_args


def main(argv=None):
    p = argparse.ArgumentParser(description="Solve one sliding-tile board with pattern-database IDA*.")
    p.add_argument("--board", required=True, help='Rows split by ";", values by spaces, 0 = blank')
    p.add_argument("--moves-only", action="store_true", help="Print only the direction list")
    add_solver_args(p)
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    try:
        start = PuzzleState.from_string(args.board)
    except MalformedInputError as e:
        print(f"Malformed board: {e}")
        return 2

    solver = solver_from_args(args, start.size)
    res = solver.solve(start)
    if res.status != SOLVED:
        print(f"{res.status}: {res.message}" if res.message else res.status)
        return 1

    if args.moves_only:
        print(" ".join(str(d) for d in res.moves))
    else:
        print(res.steps_text())
        t = res.search.time if res.search else 0.0
        print(f"{len(res.moves)} moves, {t:.3f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
