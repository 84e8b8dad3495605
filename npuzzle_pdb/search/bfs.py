from __future__ import annotations
from collections import deque
from time import perf_counter
from typing import Dict, List, Optional, Tuple

from npuzzle_pdb.domains.puzzle import DIRECTIONS, Direction, PuzzleState, State
from npuzzle_pdb.search.ida_star import SearchResult


def _blank_neighbors(n: int) -> Dict[int, Tuple[Tuple[int, Direction], ...]]:
    """blank index -> ((index after move, direction), ...) in search order."""
    nei = {}
    for i in range(n * n):
        r, c = divmod(i, n)
        out = []
        for d in DIRECTIONS:
            nr, nc = r + d.dr, c + d.dc
            if 0 <= nr < n and 0 <= nc < n:
                out.append((nr * n + nc, d))
        nei[i] = tuple(out)
    return nei


def _expand(s: State, nei) -> List[Tuple[State, Direction]]:
    z = s.index(0)
    out = []
    for j, d in nei[z]:
        lst = list(s)
        lst[z], lst[j] = lst[j], lst[z]
        out.append((tuple(lst), d))
    return out


def bfs(start: PuzzleState, timeout_sec: float | None = None) -> SearchResult:
    """Shortest move sequence by plain breadth-first search (small boards only)."""
    t0 = perf_counter()
    n = start.size
    nei = _blank_neighbors(n)
    goal = PuzzleState(n).key()
    s0 = start.key()
    parent: Dict[State, Optional[Tuple[State, Direction]]] = {s0: None}
    q = deque([s0])
    expanded = generated = 0
    while q:
        if timeout_sec is not None and (perf_counter() - t0) > timeout_sec:
            return SearchResult("timeout", None, expanded, generated, time=perf_counter() - t0, algorithm="BFS")
        s = q.popleft()
        if s == goal:
            moves: List[Direction] = []
            while parent[s] is not None:
                s, d = parent[s]
                moves.append(d)
            moves.reverse()
            return SearchResult("ok", moves, expanded, generated, time=perf_counter() - t0, algorithm="BFS")
        expanded += 1
        for s2, d in _expand(s, nei):
            generated += 1
            if s2 in parent:
                continue
            parent[s2] = (s, d)
            q.append(s2)
    return SearchResult("exhausted", None, expanded, generated, time=perf_counter() - t0, algorithm="BFS")


def distances_from_goal(size: int, max_depth: Optional[int] = None) -> Dict[State, int]:
    """Exact distance of every state reachable from the goal (moves are reversible)."""
    nei = _blank_neighbors(size)
    goal = PuzzleState(size).key()
    dist = {goal: 0}
    frontier = [goal]
    d = 0
    while frontier and (max_depth is None or d < max_depth):
        nxt = []
        for s in frontier:
            for s2, _ in _expand(s, nei):
                if s2 not in dist:
                    dist[s2] = d + 1
                    nxt.append(s2)
        frontier = nxt
        d += 1
    return dist
