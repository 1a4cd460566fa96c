"""Exception types raised by the minefield solver."""


class MinesweeperError(Exception):
    """Base class for all errors raised by this package."""


class InvalidConfiguration(MinesweeperError, ValueError):
    """Raised when board or solver parameters are out of range."""


class CorruptSaveData(MinesweeperError, ValueError):
    """Raised when a persisted minefield cannot be parsed or is inconsistent."""


class LogicInvariantViolation(MinesweeperError, RuntimeError):
    """
    Raised when a deduction opens a mine or the board loses track of its
    hidden cells.

    This can only happen if the propagation rules are wrong or the MineField
    was corrupted after the board was built. It is never a normal loss.
    """


class OpeningExhausted(MinesweeperError, RuntimeError):
    """Raised when every freshly generated board detonates on its opening move."""
