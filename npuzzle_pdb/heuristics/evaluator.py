from __future__ import annotations
import logging

from npuzzle_pdb.domains.puzzle import PuzzleState
from npuzzle_pdb.heuristics.manhattan import manhattan
from npuzzle_pdb.heuristics.pattern_db import PatternDatabase

logger = logging.getLogger(__name__)


class HeuristicEvaluator:
    """
    Additive pattern-database heuristic.

    For each group (in load order) the group's signature is looked up in its
    own table; a missing signature falls back to the Manhattan distance of that
    group's tiles only. Both terms are admissible, and because groups are
    disjoint and every move displaces exactly one tile, their sum is too.

    Counters are per instance: create one evaluator per solve.
    """

    def __init__(self, database: PatternDatabase):
        self.database = database
        self.hits = 0
        self.misses = 0

    def h_score(self, state: PuzzleState) -> int:
        db = self.database
        h = 0
        for g in db.groups:
            members = db.members(g.index)
            sig = state.signature(members)
            cost = db.lookup(g.index, sig)
            if cost is not None:
                self.hits += 1
                h += cost
            else:
                self.misses += 1
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("group %d: signature %r not in table, using Manhattan", g.index, sig)
                h += manhattan(state, members)
        return h

    __call__ = h_score

    def reset_counters(self) -> None:
        self.hits = 0
        self.misses = 0
