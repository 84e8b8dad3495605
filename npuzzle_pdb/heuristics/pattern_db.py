"""
Additive pattern database: disjoint tile groups plus, per group, a table from
position signature to the minimum number of moves of that group's tiles.

Tables are produced offline and shipped as JSON:

    {"groups": [[1, 2, 3], [4, 5, 6], ...],
     "patternDbDict": [{"000102": 0, ...}, {...}, ...]}

Group i is only ever looked up in dictionary i.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple, Union
import json
import logging

from npuzzle_pdb.errors import PatternDBError

logger = logging.getLogger(__name__)

ASSET_TEMPLATE = "patternDb_{n}.json"


@dataclass(frozen=True)
class PatternGroup:
    index: int
    tiles: Tuple[int, ...]

    @property
    def members(self) -> FrozenSet[int]:
        return frozenset(self.tiles)


class PatternDatabase:
    """Read-only after construction; safe to share between concurrent solves."""

    def __init__(self, board_size: int, groups: List[PatternGroup], tables: List[Mapping[str, int]]):
        if len(groups) != len(tables):
            raise PatternDBError(f"{len(groups)} groups but {len(tables)} tables")
        self.board_size = board_size
        self._groups: Tuple[PatternGroup, ...] = tuple(groups)
        self._members: Tuple[FrozenSet[int], ...] = tuple(g.members for g in groups)
        self._tables: Tuple[Mapping[str, int], ...] = tuple(MappingProxyType(dict(t)) for t in tables)

    # ---------- construction ----------
    @classmethod
    def from_document(cls, doc, board_size: int) -> "PatternDatabase":
        if not isinstance(doc, dict):
            raise PatternDBError("pattern database document must be a JSON object")
        if "groups" not in doc or "patternDbDict" not in doc:
            raise PatternDBError("pattern database needs both 'groups' and 'patternDbDict'")
        raw_groups, raw_tables = doc["groups"], doc["patternDbDict"]
        if not isinstance(raw_groups, list) or not isinstance(raw_tables, list):
            raise PatternDBError("'groups' and 'patternDbDict' must be lists")
        if len(raw_groups) != len(raw_tables):
            raise PatternDBError(
                f"'groups' has {len(raw_groups)} entries but 'patternDbDict' has {len(raw_tables)}")

        top = board_size * board_size - 1
        groups: List[PatternGroup] = []
        seen: Dict[int, int] = {}
        for gi, raw in enumerate(raw_groups):
            if not isinstance(raw, list):
                raise PatternDBError(f"group {gi} must be a list of tiles")
            for t in raw:
                if isinstance(t, bool) or not isinstance(t, int) or not 1 <= t <= top:
                    raise PatternDBError(f"group {gi}: tile {t!r} outside 1..{top}")
                if t in seen and seen[t] != gi:
                    logger.warning("tile %d appears in groups %d and %d; heuristic may be inadmissible",
                                   t, seen[t], gi)
                seen.setdefault(t, gi)
            groups.append(PatternGroup(index=gi, tiles=tuple(raw)))

        tables: List[Dict[str, int]] = []
        for gi, raw in enumerate(raw_tables):
            if not isinstance(raw, dict):
                raise PatternDBError(f"patternDbDict[{gi}] must be an object")
            for sig, cost in raw.items():
                if isinstance(cost, bool) or not isinstance(cost, int) or cost < 0:
                    raise PatternDBError(f"patternDbDict[{gi}][{sig!r}] = {cost!r} is not a non-negative integer")
            tables.append(raw)
        return cls(board_size, groups, tables)

    @classmethod
    def load(cls, path: Union[str, Path], board_size: int) -> "PatternDatabase":
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                doc = json.load(f)
        except FileNotFoundError:
            raise PatternDBError(f"pattern database not found: {path}") from None
        except (OSError, json.JSONDecodeError) as e:
            raise PatternDBError(f"cannot read pattern database {path}: {e}") from e
        db = cls.from_document(doc, board_size)
        logger.info("loaded %s: %d groups, %d entries", path, len(db), db.entry_count)
        return db

    @classmethod
    def load_for_size(cls, board_size: int, directory: Union[str, Path]) -> "PatternDatabase":
        return cls.load(Path(directory) / ASSET_TEMPLATE.format(n=board_size), board_size)

    @classmethod
    def manhattan_only(cls, board_size: int) -> "PatternDatabase":
        """One group of every tile with an empty table: h degrades to plain Manhattan."""
        tiles = tuple(range(1, board_size * board_size))
        return cls(board_size, [PatternGroup(0, tiles)], [{}])

    # ---------- queries ----------
    @property
    def groups(self) -> Tuple[PatternGroup, ...]:
        return self._groups

    @property
    def tables(self) -> Tuple[Mapping[str, int], ...]:
        return self._tables

    def members(self, group_index: int) -> FrozenSet[int]:
        return self._members[group_index]

    def lookup(self, group_index: int, signature: str) -> Optional[int]:
        return self._tables[group_index].get(signature)

    @property
    def is_empty(self) -> bool:
        return not self._groups

    @property
    def entry_count(self) -> int:
        return sum(len(t) for t in self._tables)

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        return f"PatternDatabase(board_size={self.board_size}, groups={len(self)}, entries={self.entry_count})"
