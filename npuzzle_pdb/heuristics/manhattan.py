from __future__ import annotations
from typing import Collection, Optional

from npuzzle_pdb.domains.puzzle import PuzzleState


def manhattan(state: PuzzleState, group: Optional[Collection[int]] = None) -> int:
    """Sum of Manhattan distances to goal positions (blank ignored).

    With `group`, only tiles in the group are counted.
    """
    n = state.size
    dist = 0
    for r, row in enumerate(state.cells):
        for c, tile in enumerate(row):
            if tile == 0:
                continue
            if group is not None and tile not in group:
                continue
            idx = tile - 1
            dist += abs(r - idx // n) + abs(c - idx % n)
    return dist
