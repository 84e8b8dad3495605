from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import argparse
import logging
import os

# Bound ceiling; a finite bound above it is reported as unsolvable.
DEFAULT_MAX_BOUND = 100000
PDB_DIR_ENV = "NPUZZLE_PDB_DIR"


@dataclass
class SolverConfig:
    timeout_sec: Optional[float] = None
    max_bound: int = DEFAULT_MAX_BOUND
    check_parity: bool = True
    iterative: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "SolverConfig":
        return cls(
            timeout_sec=args.timeout_sec,
            max_bound=args.max_bound,
            check_parity=not args.no_parity_check,
            iterative=args.iterative,
        )


def default_pdb_dir() -> Path:
    return Path(os.environ.get(PDB_DIR_ENV, "pdb"))


def add_solver_args(ap: argparse.ArgumentParser) -> None:
    """Flags shared by every command that runs a solve."""
    ap.add_argument("--pdb", type=Path, default=None, help="Pattern database JSON file")
    ap.add_argument("--pdb-dir", type=Path, default=None,
                    help=f"Directory holding patternDb_<N>.json (default: ${PDB_DIR_ENV} or ./pdb)")
    ap.add_argument("--manhattan-only", action="store_true",
                    help="Skip the pattern database; plain Manhattan distance")
    ap.add_argument("--timeout_sec", type=float, default=None, help="Per-solve wall time")
    ap.add_argument("--max_bound", type=int, default=DEFAULT_MAX_BOUND, help="Give up once the bound passes this")
    ap.add_argument("--no-parity-check", action="store_true",
                    help="Search unsolvable boards instead of rejecting them up front")
    ap.add_argument("--iterative", action="store_true", help="Explicit-stack search instead of recursion")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])


def setup_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
