"""
Pattern-database IDA* solver facade.

`PatternDBSolver` owns one loaded `PatternDatabase` and turns every failure
into a value: loading returns True/False and solving returns a `SolveResult`
whose `status` is one of

    solved | unsolvable | not_ready | malformed | timeout | cancelled

so a host application can report the outcome without handling exceptions.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union
import logging
import sys
import threading

from npuzzle_pdb.config import SolverConfig, default_pdb_dir
from npuzzle_pdb.domains.puzzle import Direction, PuzzleState, is_solvable
from npuzzle_pdb.errors import MalformedInputError, PatternDBError
from npuzzle_pdb.heuristics.evaluator import HeuristicEvaluator
from npuzzle_pdb.heuristics.pattern_db import PatternDatabase
from npuzzle_pdb.search.ida_star import SearchResult, ida_star, ida_star_iterative

logger = logging.getLogger(__name__)

SOLVED = "solved"
UNSOLVABLE = "unsolvable"
NOT_READY = "not_ready"
MALFORMED = "malformed"
TIMEOUT = "timeout"
CANCELLED = "cancelled"

_TERMINATION_STATUS = {
    "ok": SOLVED,
    "exhausted": UNSOLVABLE,
    "ceiling": UNSOLVABLE,
    "timeout": TIMEOUT,
    "cancelled": CANCELLED,
}


@dataclass
class SolveResult:
    status: str
    start: Optional[PuzzleState] = None
    moves: Optional[List[Direction]] = None
    message: str = ""
    search: Optional[SearchResult] = None
    h_hits: int = 0
    h_misses: int = 0

    @property
    def solved(self) -> bool:
        return self.status == SOLVED

    def path_states(self) -> List[PuzzleState]:
        """Boards from the start to the goal, one per applied move."""
        if self.start is None or self.moves is None:
            return []
        states = [self.start.clone()]
        cur = self.start.clone()
        for d in self.moves:
            cur.move(d)
            states.append(cur.clone())
        return states

    def steps_text(self) -> str:
        return "\n".join(f"Step {i}:\n{s}\n" for i, s in enumerate(self.path_states()))

    def as_row(self) -> dict:
        sr = self.search
        return {
            "algorithm": sr.algorithm if sr else "",
            "status": self.status,
            "g": len(self.moves) if self.moves is not None else "",
            "expanded": sr.expanded if sr else 0,
            "generated": sr.generated if sr else 0,
            "peak_recursion": sr.peak_recursion if sr else 0,
            "bound_final": sr.bound_final if sr and sr.bound_final is not None else "",
            "iterations": sr.iterations if sr else 0,
            "time_sec": f"{sr.time:.6f}" if sr else "0.000000",
            "h_hits": self.h_hits,
            "h_misses": self.h_misses,
            "termination": sr.termination if sr else self.status,
        }


class PatternDBSolver:
    def __init__(self, database: Optional[PatternDatabase] = None, config: Optional[SolverConfig] = None):
        self.database = database
        self.config = config or SolverConfig()

    # ---------- loading ----------
    @property
    def ready(self) -> bool:
        return self.database is not None and not self.database.is_empty

    def load(self, board_size: int, directory: Union[str, Path]) -> bool:
        try:
            self.database = PatternDatabase.load_for_size(board_size, directory)
        except PatternDBError as e:
            logger.error("error loading pattern database: %s", e)
            self.database = None
            return False
        return True

    def load_path(self, path: Union[str, Path], board_size: int) -> bool:
        try:
            self.database = PatternDatabase.load(path, board_size)
        except PatternDBError as e:
            logger.error("error loading pattern database: %s", e)
            self.database = None
            return False
        return True

    # ---------- solving ----------
    def solve(self, state: PuzzleState, cancel: Optional[threading.Event] = None) -> SolveResult:
        start = state.clone()
        if start.is_goal():
            return SolveResult(SOLVED, start, [])
        if not self.ready:
            logger.error("pattern database not loaded")
            return SolveResult(NOT_READY, start, message="pattern database not loaded")
        if self.database.board_size != start.size:
            return SolveResult(MALFORMED, start, message=(
                f"pattern database is for {self.database.board_size}x{self.database.board_size}, "
                f"board is {start.size}x{start.size}"))
        if self.config.check_parity and not is_solvable(start):
            return SolveResult(UNSOLVABLE, start, message="permutation parity makes the goal unreachable")

        evaluator = HeuristicEvaluator(self.database)
        search_fn = ida_star_iterative if self.config.iterative else ida_star
        sr = search_fn(start, evaluator, timeout_sec=self.config.timeout_sec,
                       max_bound=self.config.max_bound, cancel=cancel)
        status = _TERMINATION_STATUS[sr.termination]
        if status == SOLVED:
            logger.info("solution found in %.3f s with %d moves (expanded=%d)",
                        sr.time, len(sr.moves), sr.expanded)
        return SolveResult(status, start, sr.moves, search=sr,
                           h_hits=evaluator.hits, h_misses=evaluator.misses)

    def solve_text(self, text: str, cancel: Optional[threading.Event] = None) -> SolveResult:
        try:
            state = PuzzleState.from_string(text)
        except MalformedInputError as e:
            return SolveResult(MALFORMED, message=str(e))
        return self.solve(state, cancel=cancel)

    def solve_in_thread(self, state: PuzzleState, stack_size: int = 16 * 1024 * 1024,
                        cancel: Optional[threading.Event] = None,
                        recursion_limit: int = 10000) -> SolveResult:
        """Run one solve on a worker thread with an enlarged stack and wait for it.

        The interpreter recursion limit is raised to `recursion_limit` while the
        worker runs (it is process-wide) and restored afterwards. An exception
        raised by the worker is re-raised in the calling thread.
        """
        outcome: dict = {}

        def work():
            try:
                outcome["result"] = self.solve(state, cancel=cancel)
            except BaseException as e:
                outcome["error"] = e

        old_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(old_limit, recursion_limit))
        try:
            old_stack = threading.stack_size(stack_size)
            try:
                worker = threading.Thread(target=work, name="npuzzle-solve")
                worker.start()
            finally:
                threading.stack_size(old_stack)
            worker.join()
        finally:
            sys.setrecursionlimit(old_limit)

        if "error" in outcome:
            raise outcome["error"]
        return outcome["result"]


def solver_from_args(args, board_size: int) -> PatternDBSolver:
    """
    Database selection precedence:
    --manhattan-only  >  --pdb FILE  >  --pdb-dir DIR (or $NPUZZLE_PDB_DIR, ./pdb).
    A failed load leaves the solver not ready; solve() then reports not_ready.
    """
    solver = PatternDBSolver(config=SolverConfig.from_args(args))
    if args.manhattan_only:
        solver.database = PatternDatabase.manhattan_only(board_size)
    elif args.pdb is not None:
        solver.load_path(args.pdb, board_size)
    else:
        solver.load(board_size, args.pdb_dir or default_pdb_dir())
    return solver
