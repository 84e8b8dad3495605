import logging
import sys
import threading

import pytest

from npuzzle_pdb.config import SolverConfig
from npuzzle_pdb.domains.puzzle import Direction, PuzzleState, scramble
from npuzzle_pdb.heuristics.pattern_db import PatternDatabase
from npuzzle_pdb.solver import (
    CANCELLED, MALFORMED, NOT_READY, SOLVED, TIMEOUT, UNSOLVABLE, PatternDBSolver,
)


def test_solved_board_returns_empty_sequence(pdb_3x3):
    res = PatternDBSolver(pdb_3x3).solve(PuzzleState(3))
    assert res.status == SOLVED
    assert res.moves == []
    assert res.solved


def test_solved_board_needs_no_database():
    res = PatternDBSolver().solve(PuzzleState(3))
    assert res.status == SOLVED and res.moves == []


def test_one_move_from_goal(pdb_3x3):
    start = PuzzleState.from_string("1 2 3;4 5 6;7 8 0")
    start.move(Direction.UP)
    res = PatternDBSolver(pdb_3x3).solve(start)
    assert res.status == SOLVED
    assert res.moves == [Direction.DOWN]
    assert start.apply_moves(res.moves).is_goal()


def test_swapped_adjacent_tiles_are_unsolvable(pdb_3x3):
    res = PatternDBSolver(pdb_3x3).solve(PuzzleState.from_string("2 1 3;4 5 6;7 8 0"))
    assert res.status == UNSOLVABLE
    assert res.moves is None
    assert res.search is None


def test_unsolvable_without_parity_check_exhausts(pdb_2x2):
    solver = PatternDBSolver(pdb_2x2, SolverConfig(check_parity=False))
    res = solver.solve(PuzzleState.from_rows([[2, 1], [3, 0]]))
    assert res.status == UNSOLVABLE
    assert res.search.termination == "exhausted"


def test_not_ready_without_database(caplog):
    with caplog.at_level(logging.ERROR, logger="npuzzle_pdb.solver"):
        res = PatternDBSolver().solve(PuzzleState.from_string("1 2 3;4 5 6;7 0 8"))
    assert res.status == NOT_READY
    assert "not loaded" in caplog.text


def test_not_ready_with_empty_database():
    empty = PatternDatabase.from_document({"groups": [], "patternDbDict": []}, 3)
    solver = PatternDBSolver(empty)
    assert not solver.ready
    assert solver.solve(PuzzleState.from_string("1 2 3;4 5 6;7 0 8")).status == NOT_READY


def test_board_of_other_size_is_malformed(pdb_3x3):
    res = PatternDBSolver(pdb_3x3).solve(scramble(4, 10, seed=1))
    assert res.status == MALFORMED
    assert "4x4" in res.message


def test_solve_text_rejects_board_of_other_size():
    res = PatternDBSolver(PatternDatabase.manhattan_only(4)).solve_text("1 2 3;4 5 6;7 0 8")
    assert res.status == MALFORMED
    assert res.message == "pattern database is for 4x4, board is 3x3"
    assert res.moves is None


def test_malformed_text_is_reported(pdb_3x3):
    res = PatternDBSolver(pdb_3x3).solve_text("1 2 3;4 5 5;7 8 0")
    assert res.status == MALFORMED
    assert "permutation" in res.message


def test_solve_text(pdb_3x3):
    res = PatternDBSolver(pdb_3x3).solve_text("1 2 3;4 5 6;7 0 8")
    assert res.status == SOLVED
    assert res.moves == [Direction.RIGHT]


def test_load_failure_is_a_value(tmp_path, caplog):
    solver = PatternDBSolver()
    with caplog.at_level(logging.ERROR, logger="npuzzle_pdb.solver"):
        assert solver.load(4, tmp_path) is False
    assert not solver.ready
    assert "error loading pattern database" in caplog.text
    assert solver.solve(scramble(4, 8, seed=3)).status == NOT_READY


def test_load_then_solve(pdb_file_3x3):
    solver = PatternDBSolver()
    assert solver.load(3, pdb_file_3x3.parent)
    assert solver.ready
    res = solver.solve(scramble(3, 15, seed=8))
    assert res.status == SOLVED
    assert res.h_hits + res.h_misses > 0


def test_load_path(pdb_file_3x3, tmp_path):
    solver = PatternDBSolver()
    assert solver.load_path(pdb_file_3x3, 3)
    assert not solver.load_path(tmp_path / "missing.json", 3)
    assert solver.database is None


def test_path_states_walk_from_start_to_goal(pdb_3x3):
    start = scramble(3, 13, seed=6)
    res = PatternDBSolver(pdb_3x3).solve(start)
    states = res.path_states()
    assert states[0] == start
    assert states[-1].is_goal()
    assert len(states) == len(res.moves) + 1
    text = res.steps_text()
    assert text.startswith("Step 0:\n")
    assert f"Step {len(res.moves)}:" in text


def test_result_row(pdb_3x3):
    row = PatternDBSolver(pdb_3x3).solve(scramble(3, 8, seed=2)).as_row()
    assert row["status"] == SOLVED
    assert row["termination"] == "ok"
    assert row["algorithm"] == "IDA*"
    assert int(row["g"]) <= 8


def test_iterative_config_gives_same_moves(pdb_3x3):
    start = scramble(3, 17, seed=12)
    a = PatternDBSolver(pdb_3x3).solve(start)
    b = PatternDBSolver(pdb_3x3, SolverConfig(iterative=True)).solve(start)
    assert a.moves == b.moves
    assert b.search.algorithm == "IDA* (stack)"


def test_timeout_and_cancel_statuses():
    """Statuses coming out of an interrupted search, parity check off so the search runs."""
    hard = PuzzleState.from_string("14 13 15 7;11 12 9 5;6 0 2 1;4 8 10 3")
    config = SolverConfig(timeout_sec=0.05, check_parity=False)
    res = PatternDBSolver(PatternDatabase.manhattan_only(4), config).solve(hard)
    assert res.status == TIMEOUT
    assert res.search.termination == "timeout"
    stop = threading.Event()
    stop.set()
    solver = PatternDBSolver(PatternDatabase.manhattan_only(4), SolverConfig(check_parity=False))
    res = solver.solve(hard, cancel=stop)
    assert res.status == CANCELLED


def test_solve_in_thread_matches_direct_solve(pdb_3x3):
    solver = PatternDBSolver(pdb_3x3)
    start = scramble(3, 14, seed=5)
    assert solver.solve_in_thread(start).moves == solver.solve(start).moves


class _RecordingSolver(PatternDBSolver):
    def solve(self, state, cancel=None):
        self.seen_limit = sys.getrecursionlimit()
        return super().solve(state, cancel=cancel)


def test_solve_in_thread_raises_recursion_limit_for_the_worker(pdb_3x3):
    before = sys.getrecursionlimit()
    solver = _RecordingSolver(pdb_3x3)
    res = solver.solve_in_thread(scramble(3, 9, seed=1), recursion_limit=before + 5000)
    assert res.status == SOLVED
    assert solver.seen_limit == before + 5000
    assert sys.getrecursionlimit() == before


class _FailingSolver(PatternDBSolver):
    def solve(self, state, cancel=None):
        raise RuntimeError("search blew up")


def test_solve_in_thread_reraises_worker_error(pdb_3x3):
    before = sys.getrecursionlimit()
    with pytest.raises(RuntimeError, match="search blew up"):
        _FailingSolver(pdb_3x3).solve_in_thread(scramble(3, 9, seed=1))
    assert sys.getrecursionlimit() == before


def test_database_is_shared_between_threads(pdb_3x3):
    from concurrent.futures import ThreadPoolExecutor

    solver = PatternDBSolver(pdb_3x3)
    starts = [scramble(3, 16, seed) for seed in range(6)]
    with ThreadPoolExecutor(max_workers=3) as pool:
        results = list(pool.map(solver.solve, starts))
    assert [r.moves for r in results] == [solver.solve(s).moves for s in starts]
