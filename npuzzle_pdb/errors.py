"""Exception types raised by the puzzle model and the pattern-database loader."""


class PuzzleError(Exception):
    """Base class for every error raised by npuzzle_pdb."""


class MalformedInputError(PuzzleError, ValueError):
    """Puzzle text or rows do not describe a valid N×N permutation."""


class IllegalMoveError(PuzzleError, ValueError):
    """A replayed move would push the blank off the board."""


class PatternDBError(PuzzleError):
    """Pattern-database asset is missing, unreadable or inconsistent."""
