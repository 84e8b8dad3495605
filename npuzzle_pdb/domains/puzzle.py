from __future__ import annotations
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple
import random

from npuzzle_pdb.errors import IllegalMoveError, MalformedInputError

State = Tuple[int, ...]  # flat row-major key, 0 is the blank


class Direction(Enum):
    """Blank displacement (row, col). Declaration order is the search order."""
    DOWN = (1, 0)
    UP = (-1, 0)
    RIGHT = (0, 1)
    LEFT = (0, -1)

    @property
    def dr(self) -> int:
        return self.value[0]

    @property
    def dc(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> "Direction":
        return Direction((-self.dr, -self.dc))

    @classmethod
    def parse(cls, name: str) -> "Direction":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown direction {name!r}") from None

    def __str__(self) -> str:
        return self.name.lower()


DIRECTIONS: Tuple[Direction, ...] = tuple(Direction)


def goal_position(tile: int, size: int) -> Tuple[int, int]:
    return (tile - 1) // size, (tile - 1) % size


class PuzzleState:
    """N×N sliding-tile board (0 is the blank).

    `move` mutates in place; search code clones first and only ever stores
    states that will not be moved again.
    """
    __slots__ = ("size", "cells", "blank_row", "blank_col")

    def __init__(self, size: int):
        if size < 2:
            raise MalformedInputError(f"board size must be >= 2, got {size}")
        self.size = size
        self.cells: List[List[int]] = [[i * size + j + 1 for j in range(size)] for i in range(size)]
        self.blank_row = size - 1
        self.blank_col = size - 1
        self.cells[self.blank_row][self.blank_col] = 0

    # ---------- construction ----------
    @classmethod
    def solved(cls, size: int) -> "PuzzleState":
        return cls(size)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "PuzzleState":
        n = len(rows)
        if n < 2:
            raise MalformedInputError(f"board must have at least 2 rows, got {n}")
        for r, row in enumerate(rows):
            if len(row) != n:
                raise MalformedInputError(f"row {r} has {len(row)} values, expected {n} (board must be square)")
        flat = [v for row in rows for v in row]
        for v in flat:
            if isinstance(v, bool) or not isinstance(v, int):
                raise MalformedInputError(f"tile values must be integers, got {v!r}")
        if sorted(flat) != list(range(n * n)):
            raise MalformedInputError(f"values must be a permutation of 0..{n * n - 1}")
        state = cls(n)
        state.cells = [list(row) for row in rows]
        z = flat.index(0)
        state.blank_row, state.blank_col = divmod(z, n)
        return state

    @classmethod
    def from_tuple(cls, s: Sequence[int]) -> "PuzzleState":
        n = int(round(len(s) ** 0.5))
        if n * n != len(s):
            raise MalformedInputError(f"{len(s)} values do not form a square board")
        return cls.from_rows([list(s[r * n:(r + 1) * n]) for r in range(n)])

    @classmethod
    def from_string(cls, text: str) -> "PuzzleState":
        """Parse ``"1 2 3;4 5 6;7 8 0"`` (rows split by ';', values by whitespace)."""
        if not text or not text.strip():
            raise MalformedInputError("empty puzzle string")
        rows: List[List[int]] = []
        for r, chunk in enumerate(text.strip().strip(";").split(";")):
            try:
                rows.append([int(tok) for tok in chunk.split()])
            except ValueError:
                raise MalformedInputError(f"row {r} contains a non-integer value: {chunk!r}") from None
        return cls.from_rows(rows)

    # ---------- dynamics ----------
    def move(self, direction: Direction) -> bool:
        """Swap the blank with its neighbour at blank + direction. False if off-board."""
        nr = self.blank_row + direction.dr
        nc = self.blank_col + direction.dc
        if nr < 0 or nr >= self.size or nc < 0 or nc >= self.size:
            return False
        self.cells[self.blank_row][self.blank_col] = self.cells[nr][nc]
        self.cells[nr][nc] = 0
        self.blank_row, self.blank_col = nr, nc
        return True

    def successor(self, direction: Direction) -> Optional["PuzzleState"]:
        nxt = self.clone()
        return nxt if nxt.move(direction) else None

    def legal_moves(self) -> List[Direction]:
        out = []
        for d in DIRECTIONS:
            nr, nc = self.blank_row + d.dr, self.blank_col + d.dc
            if 0 <= nr < self.size and 0 <= nc < self.size:
                out.append(d)
        return out

    def apply_moves(self, moves: Iterable[Direction]) -> "PuzzleState":
        """Replay `moves` on a clone; the receiver is left untouched."""
        s = self.clone()
        for i, d in enumerate(moves):
            if not s.move(d):
                raise IllegalMoveError(f"move {i} ({d}) leaves the board")
        return s

    def is_goal(self) -> bool:
        n = self.size
        for i in range(n):
            row = self.cells[i]
            for j in range(n):
                if i == self.blank_row and j == self.blank_col:
                    continue
                if row[j] != i * n + j + 1:
                    return False
        return True

    check_goal = is_goal

    def clone(self) -> "PuzzleState":
        copy = PuzzleState.__new__(PuzzleState)
        copy.size = self.size
        copy.cells = [row[:] for row in self.cells]
        copy.blank_row = self.blank_row
        copy.blank_col = self.blank_col
        return copy

    # ---------- pattern-database key ----------
    def signature(self, group) -> str:
        """Row/col of every cell whose tile is in `group`, in row-major scan order.

        This string is the key into precomputed tables; its format must stay
        byte-for-byte identical to the one the tables were built with.
        """
        parts: List[str] = []
        for i, row in enumerate(self.cells):
            for j, tile in enumerate(row):
                if tile in group:
                    parts.append(f"{i}{j}")
        return "".join(parts)

    # ---------- identity ----------
    def key(self) -> State:
        return tuple(v for row in self.cells for v in row)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PuzzleState):
            return NotImplemented
        return self.size == other.size and self.cells == other.cells

    def __hash__(self) -> int:
        return hash((self.size, self.key()))

    # ---------- encodings ----------
    def to_string(self) -> str:
        return ";".join(" ".join(str(v) for v in row) for row in self.cells)

    def __str__(self) -> str:
        return "\n".join("\t".join(str(v) for v in row) for row in self.cells)

    def __repr__(self) -> str:
        return f"PuzzleState({self.to_string()!r})"


# ---------- solvability ----------
def inversions(s: Sequence[int]) -> int:
    arr = [x for x in s if x != 0]
    inv = 0
    for i in range(len(arr)):
        for j in range(i + 1, len(arr)):
            if arr[i] > arr[j]:
                inv += 1
    return inv


def is_solvable(state: PuzzleState) -> bool:
    """Parity rules:
       - N odd: inversions must be even
       - N even: (inversions + blank_row_from_bottom) must be ODD
         (row count is 1-based from the bottom)
    """
    inv = inversions(state.key())
    if state.size % 2 == 1:
        return (inv % 2) == 0
    blank_row_from_bottom = state.size - state.blank_row
    return ((inv + blank_row_from_bottom) % 2) == 1


# ---------- instance generation ----------
def scramble(size: int, depth: int, seed: int) -> PuzzleState:
    """Random walk of `depth` blank moves from the goal, never undoing the previous move."""
    rng = random.Random(seed)
    s = PuzzleState(size)
    last: Optional[Direction] = None
    for _ in range(depth):
        cand = s.legal_moves()
        if last is not None and last.opposite in cand and len(cand) > 1:
            cand.remove(last.opposite)
        d = rng.choice(cand)
        s.move(d)
        last = d
    return s


def make_unsolvable_variant(state: PuzzleState) -> PuzzleState:
    """Swap the first two non-blank tiles, flipping the permutation parity."""
    lst = list(state.key())
    i = next(k for k, v in enumerate(lst) if v != 0)
    j = next(k for k, v in enumerate(lst[i + 1:], start=i + 1) if v != 0)
    lst[i], lst[j] = lst[j], lst[i]
    return PuzzleState.from_tuple(lst)
