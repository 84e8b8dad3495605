from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Set
from time import perf_counter
import logging
import math
import threading

from npuzzle_pdb.config import DEFAULT_MAX_BOUND
from npuzzle_pdb.domains.puzzle import DIRECTIONS, Direction, PuzzleState, State

logger = logging.getLogger(__name__)

FOUND = object()
TIMEOUT = object()
CANCELLED = object()


@dataclass
class SearchResult:
    """Outcome of one IDA* run.

    termination: "ok" | "exhausted" | "ceiling" | "timeout" | "cancelled"
    """
    termination: str
    moves: Optional[List[Direction]] = None
    expanded: int = 0
    generated: int = 0
    peak_recursion: int = 0
    bound_final: Optional[int] = None
    iterations: int = 0
    time: float = 0.0
    algorithm: str = "IDA*"

    @property
    def g(self) -> Optional[int]:
        return len(self.moves) if self.moves is not None else None


def _interrupted(t0: float, timeout_sec: Optional[float], cancel: Optional[threading.Event]):
    if cancel is not None and cancel.is_set():
        return CANCELLED
    if timeout_sec is not None and (perf_counter() - t0) > timeout_sec:
        return TIMEOUT
    return None


def _finish(start_time: float, termination: str, moves, **counters) -> SearchResult:
    return SearchResult(termination=termination, moves=moves, time=perf_counter() - start_time, **counters)


def ida_star(
    start: PuzzleState,
    hfun: Callable[[PuzzleState], int],
    timeout_sec: Optional[float] = None,
    max_bound: int = DEFAULT_MAX_BOUND,
    cancel: Optional[threading.Event] = None,
) -> SearchResult:
    """
    IDA* over PuzzleState with per-path cycle avoidance.

    - successors in fixed order DOWN, UP, RIGHT, LEFT; the reverse of the
      previous move is never tried
    - a successor already on the current path is skipped (hash set of keys,
      pushed and popped with the move stack)
    - cancel / timeout_sec are polled at every node
    """
    t0 = perf_counter()

    expanded = 0
    generated = 0
    max_depth = 0

    pathset: Set[State] = set()
    moves: List[Direction] = []

    def dfs(cur: PuzzleState, g: int, bound: int, depth: int):
        """
        returns:
            * TIMEOUT / CANCELLED   if interrupted
            * FOUND                 if goal found (moves holds the solution)
            * next_min_bound        minimal f exceeding 'bound' in this subtree (inf if none)
        """
        nonlocal expanded, generated, max_depth
        stop = _interrupted(t0, timeout_sec, cancel)
        if stop is not None:
            return stop

        max_depth = max(max_depth, depth)
        f = g + hfun(cur)
        if f > bound:
            return f
        if cur.is_goal():
            return FOUND

        expanded += 1
        min_next = math.inf
        last = moves[-1] if moves else None

        for d in DIRECTIONS:
            if last is not None and d is last.opposite:
                continue
            nxt = cur.clone()
            if not nxt.move(d):
                continue
            k = nxt.key()
            if k in pathset:
                continue

            generated += 1
            pathset.add(k)
            moves.append(d)

            t = dfs(nxt, g + 1, bound, depth + 1)

            if t is FOUND or t is TIMEOUT or t is CANCELLED:
                return t
            if t < min_next:
                min_next = t

            pathset.discard(k)
            moves.pop()

        return min_next

    if start.is_goal():
        return _finish(t0, "ok", [], bound_final=0)

    bound = hfun(start)
    iterations = 0
    while True:
        iterations += 1
        pathset.clear()
        pathset.add(start.key())
        moves.clear()

        t = dfs(start, 0, bound, 0)
        counters = dict(expanded=expanded, generated=generated, peak_recursion=max_depth,
                        bound_final=bound, iterations=iterations)
        if t is FOUND:
            return _finish(t0, "ok", list(moves), **counters)
        if t is TIMEOUT:
            return _finish(t0, "timeout", None, **counters)
        if t is CANCELLED:
            return _finish(t0, "cancelled", None, **counters)
        if t == math.inf:
            return _finish(t0, "exhausted", None, **counters)
        if t > max_bound:
            logger.info("bound %d exceeds ceiling %d, giving up", t, max_bound)
            return _finish(t0, "ceiling", None, **counters)
        logger.debug("iteration %d: bound %d -> %d (expanded=%d)", iterations, bound, t, expanded)
        bound = int(t)


class _Frame:
    __slots__ = ("state", "key", "g", "next_dir", "min_next")

    def __init__(self, state: PuzzleState, key: State, g: int):
        self.state = state
        self.key = key
        self.g = g
        self.next_dir = -1  # -1: not entered yet
        self.min_next = math.inf


def ida_star_iterative(
    start: PuzzleState,
    hfun: Callable[[PuzzleState], int],
    timeout_sec: Optional[float] = None,
    max_bound: int = DEFAULT_MAX_BOUND,
    cancel: Optional[threading.Event] = None,
) -> SearchResult:
    """Same search as `ida_star` driven by an explicit stack of frames.

    Visits nodes in the same order and returns the same moves and counters;
    depth is limited by memory, not by the interpreter's recursion limit.
    """
    t0 = perf_counter()
    expanded = 0
    generated = 0
    max_depth = 0
    moves: List[Direction] = []

    def bounded(bound: int):
        nonlocal expanded, generated, max_depth
        root_key = start.key()
        stack = [_Frame(start, root_key, 0)]
        pathset: Set[State] = {root_key}
        ret = None

        def pop_frame():
            fr = stack.pop()
            if stack:
                moves.pop()
                pathset.discard(fr.key)

        while stack:
            fr = stack[-1]
            if fr.next_dir == -1:
                stop = _interrupted(t0, timeout_sec, cancel)
                if stop is not None:
                    return stop
                max_depth = max(max_depth, len(stack) - 1)
                f = fr.g + hfun(fr.state)
                if f > bound:
                    ret = f
                    pop_frame()
                    continue
                if fr.state.is_goal():
                    return FOUND
                expanded += 1
                fr.next_dir = 0
            elif ret is not None:
                if ret < fr.min_next:
                    fr.min_next = ret
                ret = None

            last = moves[-1] if moves else None
            pushed = False
            while fr.next_dir < len(DIRECTIONS):
                d = DIRECTIONS[fr.next_dir]
                fr.next_dir += 1
                if last is not None and d is last.opposite:
                    continue
                nxt = fr.state.clone()
                if not nxt.move(d):
                    continue
                k = nxt.key()
                if k in pathset:
                    continue
                generated += 1
                stack.append(_Frame(nxt, k, fr.g + 1))
                pathset.add(k)
                moves.append(d)
                pushed = True
                break

            if not pushed:
                ret = fr.min_next
                pop_frame()

        return ret

    if start.is_goal():
        return _finish(t0, "ok", [], bound_final=0, algorithm="IDA* (stack)")

    bound = hfun(start)
    iterations = 0
    while True:
        iterations += 1
        moves.clear()
        t = bounded(bound)
        counters = dict(expanded=expanded, generated=generated, peak_recursion=max_depth,
                        bound_final=bound, iterations=iterations, algorithm="IDA* (stack)")
        if t is FOUND:
            return _finish(t0, "ok", list(moves), **counters)
        if t is TIMEOUT:
            return _finish(t0, "timeout", None, **counters)
        if t is CANCELLED:
            return _finish(t0, "cancelled", None, **counters)
        if t == math.inf:
            return _finish(t0, "exhausted", None, **counters)
        if t > max_bound:
            logger.info("bound %d exceeds ceiling %d, giving up", t, max_bound)
            return _finish(t0, "ceiling", None, **counters)
        logger.debug("iteration %d: bound %d -> %d (expanded=%d)", iterations, bound, t, expanded)
        bound = int(t)
