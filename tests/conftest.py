import json
import os
from collections import deque

import pytest

os.environ.setdefault("MPLBACKEND", "Agg")

from npuzzle_pdb.heuristics.pattern_db import PatternDatabase
from npuzzle_pdb.search.bfs import distances_from_goal


def build_exact_tables(size, groups):
    """
    Exact per-group tables for small boards, keyed by the board signature.

    Relaxed model: a group tile may step onto any neighbouring cell not held by
    another tile of the same group; each step costs 1. A signature does not say
    which tile sits where, so the table keeps the smallest cost per signature.
    """
    tables = []
    for group in groups:
        goal = tuple(((t - 1) // size, (t - 1) % size) for t in group)
        best = {}
        seen = {goal}
        q = deque([(goal, 0)])
        while q:
            pos, d = q.popleft()
            sig = "".join(f"{r}{c}" for r, c in sorted(pos))
            if sig not in best:
                best[sig] = d
            occupied = set(pos)
            for i, (r, c) in enumerate(pos):
                for dr, dc in ((1, 0), (-1, 0), (0, 1), (0, -1)):
                    nr, nc = r + dr, c + dc
                    if 0 <= nr < size and 0 <= nc < size and (nr, nc) not in occupied:
                        nxt = pos[:i] + ((nr, nc),) + pos[i + 1:]
                        if nxt not in seen:
                            seen.add(nxt)
                            q.append((nxt, d + 1))
        tables.append(best)
    return tables


def make_document(size, groups):
    return {"groups": [list(g) for g in groups], "patternDbDict": build_exact_tables(size, groups)}


@pytest.fixture(scope="session")
def pdb_2x2():
    return PatternDatabase.from_document(make_document(2, [[1, 2], [3]]), 2)


@pytest.fixture(scope="session")
def pdb_3x3():
    return PatternDatabase.from_document(make_document(3, [[1, 2, 3, 4], [5, 6, 7, 8]]), 3)


@pytest.fixture(scope="session")
def dist_2x2():
    return distances_from_goal(2)


@pytest.fixture(scope="session")
def dist_3x3():
    return distances_from_goal(3, max_depth=16)


@pytest.fixture
def pdb_file_3x3(tmp_path):
    """patternDb_3.json written into a temporary asset directory."""
    path = tmp_path / "patternDb_3.json"
    path.write_text(json.dumps(make_document(3, [[1, 2, 3, 4], [5, 6, 7, 8]])), encoding="utf-8")
    return path
