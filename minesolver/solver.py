"""Constraint-propagation minefield solver with a random-guess fallback."""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .board import CellState, GameBoard, RevealKind, RevealOutcome
from .errors import InvalidConfiguration, LogicInvariantViolation
from .field import Coordinate, MineField

logger = logging.getLogger(__name__)


class SolverState(Enum):
    PROPAGATING = "propagating"
    STUCK = "stuck"
    GUESSING = "guessing"
    WON = "won"
    LOST = "lost"


class GameStatus(Enum):
    WON = "won"
    LOST = "lost"


class LossReason(Enum):
    DETONATED = "detonated"
    STALL_EXCEEDED = "stall_exceeded"
    MISFLAGGED_CELL = "misflagged_cell"
    UNRESOLVED_CELLS = "unresolved_cells"


@dataclass(frozen=True)
class ValidationResult:
    status: GameStatus
    reason: Optional[LossReason] = None

    @property
    def won(self) -> bool:
        return self.status is GameStatus.WON


@dataclass
class SolverContext:
    """Per-solve mutable state: the board, counters and random source."""

    board: GameBoard
    rng: random.Random
    max_cycles: int
    state: SolverState = SolverState.PROPAGATING
    rounds: int = 0
    guesses: int = 0
    cycles: int = 0
    flags: int = 0
    steps_history: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class SolveResult:
    """Terminal outcome of one solve, for display or aggregation."""

    status: GameStatus
    reason: Optional[LossReason]
    rounds: int
    guesses: int
    cycles: int
    flags: int
    revealed_cells: int
    state_grid: List[List[int]]
    steps_history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def won(self) -> bool:
        return self.status is GameStatus.WON

    @property
    def moves(self) -> int:
        return self.rounds + self.guesses

    def as_payload(self) -> Dict[str, Any]:
        """Flatten the result into a metrics dict."""
        return {
            "status": 1 if self.won else -1,
            "reason": self.reason.value if self.reason else None,
            "moves_count": self.moves,
            "rounds_count": self.rounds,
            "guesses_count": self.guesses,
            "cycles_count": self.cycles,
            "markings_count": self.flags,
            "revealed_cells_count": self.revealed_cells,
        }


def validate(board: GameBoard, mine_field: Optional[MineField] = None) -> ValidationResult:
    """
    Cross-check a finished board against the true minefield.

    Every flag must sit on a true mine; then every mine must be flagged and
    no cell may remain hidden.

    Args:
        board: The board after the solver halted.
        mine_field: Ground truth; defaults to the board's own field.

    Returns:
        WON, or LOST with MISFLAGGED_CELL / UNRESOLVED_CELLS.
    """
    truth = mine_field if mine_field is not None else board.field
    ledger = set(truth.mine_coordinates())

    for r in range(board.rows):
        for c in range(board.cols):
            if board.state((r, c)) is not CellState.FLAGGED:
                continue
            if (r, c) not in ledger:
                logger.error("Cell %s is flagged but holds no mine", (r, c))
                return ValidationResult(GameStatus.LOST, LossReason.MISFLAGGED_CELL)
            ledger.remove((r, c))

    if ledger or board.frontier_size:
        return ValidationResult(GameStatus.LOST, LossReason.UNRESOLVED_CELLS)
    return ValidationResult(GameStatus.WON)


class LogicSolver:
    """
    Solve a board using single-constraint deductions, guessing when stuck.

    For each revealed count n next to the frontier, with f flagged and h
    hidden neighbors:
    1. n - f == 0: every hidden neighbor is safe and is revealed.
    2. h == n - f: every hidden neighbor is a mine and is flagged.
    Rounds repeat until one makes no progress; then a hidden cell is picked
    uniformly at random and revealed.
    """

    def __init__(
        self,
        board: GameBoard,
        *,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        max_cycles: Optional[int] = None,
        record_steps: bool = False,
    ) -> None:
        """
        Bind a solver to a board.

        Args:
            board: Board to solve. The opening move should already have been
                made (see open_first_move()).
            rng: Random source for guesses; takes precedence over seed.
            seed: Seed used to build a random.Random when rng is not given.
            max_cycles: Maximum number of guesses before giving up with
                STALL_EXCEEDED. Defaults to the board's cell count.
            record_steps: If True, record every move with a state snapshot
                for replay.

        Raises:
            InvalidConfiguration: If max_cycles is negative.
        """
        if max_cycles is None:
            max_cycles = board.rows * board.cols
        if max_cycles < 0:
            raise InvalidConfiguration("max_cycles must be non-negative.")

        self.board = board
        self.record_steps = record_steps
        self.context = SolverContext(
            board=board,
            rng=rng if rng is not None else random.Random(seed),
            max_cycles=max_cycles,
        )

    @property
    def state(self) -> SolverState:
        return self.context.state

    def _record_step(self, action: str, cell: Coordinate, method: str) -> None:
        if not self.record_steps:
            return
        self.context.steps_history.append(
            {
                "action": action,
                "cell": cell,
                "method": method,
                "state_snapshot": self.board.to_state_grid(),
            }
        )

    # -------------------------------------------------------------------------
    # Opening move
    # -------------------------------------------------------------------------

    def open_first_move(self, cell: Optional[Coordinate] = None) -> Optional[RevealOutcome]:
        """
        Make the opening reveal that gives propagation something to work on.

        Args:
            cell: Cell to open; a random hidden cell when omitted.

        Returns:
            The reveal outcome, or None when nothing is hidden. A DETONATED
            outcome means the caller should start over on a fresh board.
        """
        if cell is None:
            hidden = self.board.hidden_cells()
            if not hidden:
                return None
            cell = self.context.rng.choice(hidden)

        outcome = self.board.reveal(cell)
        self._record_step("reveal", cell, "opening")
        logger.debug("Opening move %s -> %s", cell, outcome.kind.value)
        return outcome

    # -------------------------------------------------------------------------
    # Propagation
    # -------------------------------------------------------------------------

    def _apply_constraint(self, cell: Coordinate) -> None:
        """Apply deduction rules 1 and 2 around one revealed count."""
        board = self.board
        n = board.number(cell)
        flagged, hidden = board.neighbor_counts(cell)
        if n is None or hidden == 0:
            return

        remaining = n - flagged
        if remaining < 0:
            raise LogicInvariantViolation(
                f"Cell {cell} shows {n} but has {flagged} flagged neighbors."
            )

        if remaining == 0:
            for nb in board.neighbors(cell):
                if not board.is_hidden(nb):
                    continue
                outcome = board.reveal(nb)
                if outcome.kind is RevealKind.DETONATED:
                    raise LogicInvariantViolation(
                        f"Cell {nb} was deduced safe from {cell} but holds a mine."
                    )
                self._record_step("reveal", nb, "deduction")
        elif hidden == remaining:
            for nb in board.neighbors(cell):
                if board.flag(nb):
                    self.context.flags += 1
                    self._record_step("flag", nb, "deduction")

    def propagate_round(self) -> bool:
        """
        Run one deduction pass over the frontier.

        Returns:
            True if the frontier shrank during the round.
        """
        board = self.board
        before = board.frontier_size
        self.context.rounds += 1

        for cell in board.hidden_cells():
            for r in board.revealed_neighbors(cell):
                if not board.is_hidden(cell):
                    break
                self._apply_constraint(r)

        after = board.frontier_size
        logger.debug(
            "Round %d: frontier %d -> %d", self.context.rounds, before, after
        )
        return after < before

    def propagate(self) -> SolverState:
        """Run rounds until the frontier is empty or a round makes no progress."""
        self.context.state = SolverState.PROPAGATING
        while self.board.frontier_size and self.propagate_round():
            pass
        if not self.board.frontier_size:
            return SolverState.PROPAGATING
        self.context.state = SolverState.STUCK
        return self.context.state

    # -------------------------------------------------------------------------
    # Guessing
    # -------------------------------------------------------------------------

    def guess(self) -> RevealOutcome:
        """Reveal a hidden cell chosen uniformly at random."""
        self.context.state = SolverState.GUESSING
        candidates = self.board.hidden_cells()
        if not candidates:
            raise RuntimeError("No hidden cells left to guess.")

        cell = self.context.rng.choice(candidates)
        self.context.guesses += 1
        outcome = self.board.reveal(cell)
        self._record_step("reveal", cell, "guess")
        logger.debug(
            "Guess %d at %s among %d candidates -> %s",
            self.context.guesses,
            cell,
            len(candidates),
            outcome.kind.value,
        )
        return outcome

    # -------------------------------------------------------------------------
    # Main solving loop
    # -------------------------------------------------------------------------

    def conclude(self, status: GameStatus, reason: Optional[LossReason]) -> SolveResult:
        """Enter a terminal state and snapshot the board into a SolveResult."""
        ctx = self.context
        ctx.state = SolverState.WON if status is GameStatus.WON else SolverState.LOST
        result = SolveResult(
            status=status,
            reason=reason,
            rounds=ctx.rounds,
            guesses=ctx.guesses,
            cycles=ctx.cycles,
            flags=ctx.flags,
            revealed_cells=len(self.board.cells_in_state(CellState.REVEALED)),
            state_grid=self.board.to_state_grid(),
            steps_history=list(ctx.steps_history),
        )
        logger.info(
            "Solve finished: %s%s after %d rounds and %d guesses",
            status.value,
            f" ({reason.value})" if reason else "",
            ctx.rounds,
            ctx.guesses,
        )
        return result

    def solve(self) -> SolveResult:
        """
        Drive the board to a terminal state.

        Returns:
            WON after validation, or LOST with DETONATED (a guess hit a mine),
            STALL_EXCEEDED (guess cap reached) or a validation reason.

        Raises:
            LogicInvariantViolation: If a deduction opened a mine.
        """
        ctx = self.context
        while True:
            if self.propagate() is not SolverState.STUCK:
                verdict = validate(self.board)
                return self.conclude(verdict.status, verdict.reason)

            if ctx.cycles >= ctx.max_cycles:
                return self.conclude(GameStatus.LOST, LossReason.STALL_EXCEEDED)

            outcome = self.guess()
            ctx.cycles += 1
            if outcome.kind is RevealKind.DETONATED:
                return self.conclude(GameStatus.LOST, LossReason.DETONATED)
