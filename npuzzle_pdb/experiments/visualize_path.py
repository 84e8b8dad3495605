#!/usr/bin/env python3
import argparse, os
from pathlib import Path
from typing import List

import matplotlib
if "MPLBACKEND" not in os.environ:
    matplotlib.use("Agg")
import matplotlib.pyplot as plt

from npuzzle_pdb.config import add_solver_args, setup_logging
from npuzzle_pdb.domains.puzzle import PuzzleState, scramble
from npuzzle_pdb.errors import MalformedInputError
from npuzzle_pdb.solver import SOLVED, solver_from_args


def draw_board(state: PuzzleState, out_path: Path, title: str = ""):
    n = state.size
    plt.figure(figsize=(3, 3))
    ax = plt.gca()
    ax.set_xlim(0, n); ax.set_ylim(0, n)
    ax.set_xticks([]); ax.set_yticks([]); ax.invert_yaxis()
    for i in range(n + 1):
        ax.plot([0, n], [i, i], linewidth=1)
        ax.plot([i, i], [0, n], linewidth=1)
    for r, row in enumerate(state.cells):
        for c, t in enumerate(row):
            if t == 0:
                continue
            ax.text(c + 0.5, r + 0.6, str(t), ha="center", va="center", fontsize=16)
    if title:
        ax.set_title(title)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(out_path, dpi=200)
    plt.close()


def save_frames(states: List[PuzzleState], outdir: Path) -> List[Path]:
    paths = []
    for i, s in enumerate(states):
        p = outdir / f"step_{i:03d}.png"
        draw_board(s, p, title=f"Step {i}")
        paths.append(p)
    return paths


def main(argv=None):
    p = argparse.ArgumentParser(description="Solve one board and save an image per step of the solution.")
    p.add_argument("--board", default=None, help='Rows split by ";" (default: seeded scramble)')
    p.add_argument("--n", type=int, default=3)
    p.add_argument("--depth", type=int, default=10)
    p.add_argument("--seed", type=int, default=1)
    p.add_argument("--outdir", default="report/figs/example_path")
    add_solver_args(p)
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    try:
        start = PuzzleState.from_string(args.board) if args.board else scramble(args.n, args.depth, args.seed)
    except MalformedInputError as e:
        print(f"Malformed board: {e}")
        return 2
    res = solver_from_args(args, start.size).solve(start)
    if res.status != SOLVED:
        print(f"No path ({res.status}). {res.message}".strip())
        return 1

    frames = save_frames(res.path_states(), Path(args.outdir))
    print(f"Saved {len(frames)} frames to {args.outdir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
