"""
Minefield Logic Solver

Generates random minefields and solves them the way a careful player would:
- Flood fill: every zero region is opened before play starts
- Single-constraint propagation: safe cells are opened, certain mines flagged
- Random guessing: a uniform pick among hidden cells when deduction stalls
- Validation: flags are checked against the true layout at the end
"""

from .board import CellState, GameBoard, RevealKind, RevealOutcome
from .errors import (
    CorruptSaveData,
    InvalidConfiguration,
    LogicInvariantViolation,
    MinesweeperError,
    OpeningExhausted,
)
from .field import (
    MineField,
    dumps_minefield,
    generate_minefield,
    load_minefield,
    loads_minefield,
    save_minefield,
)
from .solver import (
    GameStatus,
    LogicSolver,
    LossReason,
    SolveResult,
    SolverContext,
    SolverState,
    ValidationResult,
    validate,
)
from .analysis import (
    format_result,
    play_field,
    play_game,
    run_density_sweep,
    run_solver_many_tests,
    run_solver_single_test,
)

__version__ = "1.0.0"

__all__ = [
    # Ground truth
    "MineField",
    "generate_minefield",
    "dumps_minefield",
    "loads_minefield",
    "save_minefield",
    "load_minefield",
    # Board
    "GameBoard",
    "CellState",
    "RevealKind",
    "RevealOutcome",
    # Solver
    "LogicSolver",
    "SolverContext",
    "SolverState",
    "SolveResult",
    "GameStatus",
    "LossReason",
    "ValidationResult",
    "validate",
    # Errors
    "MinesweeperError",
    "InvalidConfiguration",
    "CorruptSaveData",
    "LogicInvariantViolation",
    "OpeningExhausted",
    # Analysis functions
    "play_field",
    "play_game",
    "format_result",
    "run_solver_single_test",
    "run_solver_many_tests",
    "run_density_sweep",
]
