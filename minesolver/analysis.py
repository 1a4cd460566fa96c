"""End-to-end games and benchmarking tools for the minefield solver."""

import logging
import random
from collections import defaultdict
from typing import Dict, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .board import GameBoard, RevealKind
from .config import DEFAULT_MAX_REROLLS, DEFAULT_SWEEP_PROBABILITIES
from .errors import InvalidConfiguration, OpeningExhausted
from .field import Coordinate, MineField, generate_minefield
from .solver import GameStatus, LogicSolver, LossReason, SolveResult

logger = logging.getLogger(__name__)


def play_field(
    mine_field: MineField,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    opening: Optional[Coordinate] = None,
    max_cycles: Optional[int] = None,
    record_steps: bool = False,
) -> Tuple[GameBoard, SolveResult]:
    """
    Play one game on a fixed minefield.

    The board starts with every zero region open, then one opening move is
    made before the solver takes over. Because the field is fixed there is
    nothing to re-roll: an opening move on a mine is reported as a LOST
    (DETONATED) result with no guesses.

    Returns:
        The final board and the solver's result.
    """
    board = GameBoard.from_minefield(mine_field)
    solver = LogicSolver(
        board, rng=rng, seed=seed, max_cycles=max_cycles, record_steps=record_steps
    )

    first = solver.open_first_move(opening)
    if first is not None and first.kind is RevealKind.DETONATED:
        return board, solver.conclude(GameStatus.LOST, LossReason.DETONATED)

    return board, solver.solve()


def play_game(
    rows: int,
    cols: int,
    probability: float,
    *,
    seed: Optional[int] = None,
    max_rerolls: int = DEFAULT_MAX_REROLLS,
    max_cycles: Optional[int] = None,
    record_steps: bool = False,
) -> Tuple[MineField, GameBoard, SolveResult]:
    """
    Generate a board and solve it, drawing a fresh board whenever the opening
    move lands on a mine.

    Args:
        rows: Board rows.
        cols: Board columns.
        probability: Per-cell mine probability.
        seed: Seed for both board generation and solver guesses.
        max_rerolls: How many replacement boards may be drawn.
        max_cycles: Guess cap passed to the solver.
        record_steps: Record moves for replay.

    Returns:
        The field that was played, the final board and the solver's result.

    Raises:
        OpeningExhausted: If every drawn board detonated on its opening move.
    """
    np_rng = np.random.default_rng(seed)
    py_rng = random.Random(seed)

    for attempt in range(max_rerolls + 1):
        mine_field = generate_minefield(rows, cols, probability, rng=np_rng)
        board = GameBoard.from_minefield(mine_field)
        solver = LogicSolver(
            board, rng=py_rng, max_cycles=max_cycles, record_steps=record_steps
        )
        first = solver.open_first_move()
        if first is not None and first.kind is RevealKind.DETONATED:
            logger.debug("Opening move hit a mine on attempt %d, re-rolling", attempt + 1)
            continue
        return mine_field, board, solver.solve()

    raise OpeningExhausted(
        f"Opening move hit a mine on {max_rerolls + 1} consecutive boards."
    )


def run_solver_single_test(
    rows: int,
    cols: int,
    probability: float,
    *,
    seed: Optional[int] = None,
    show_boards: bool = False,
    max_cycles: Optional[int] = None,
) -> Dict[str, object]:
    """
    Run one end-to-end game on a freshly generated board.

    Args:
        rows: Board rows.
        cols: Board columns.
        probability: Per-cell mine probability.
        seed: Optional seed for reproducible runs.
        show_boards: If True, print the true layout and the final board.
        max_cycles: Guess cap passed to the solver.

    Returns:
        The solver's payload dict.
    """
    mine_field, board, result = play_game(
        rows, cols, probability, seed=seed, max_cycles=max_cycles
    )

    if show_boards:
        print("Underlying board (mines visible):")
        print(mine_field.format_field())
        print()
        print("Final board:")
        print(board.format_board())
        print()
        print(f"Finished: {format_result(result)}")

    return result.as_payload()


def run_solver_many_tests(
    rows: int,
    cols: int,
    probability: float,
    runs: int,
    *,
    seed: Optional[int] = None,
    max_cycles: Optional[int] = None,
) -> Dict[str, float]:
    """
    Run many independent games and return averaged metrics plus win rate.

    Each run gets its own seed derived from the given one, so runs share no
    state.

    Returns:
        Averages of the numeric payload entries (prefixed with "avg_"), plus:
        - win_rate
        - detonation_rate
        - stall_rate
        - guess_failure_rate

    Raises:
        InvalidConfiguration: If runs is not positive.
    """
    if runs <= 0:
        raise InvalidConfiguration(f"runs must be positive, got {runs}.")

    seeds = np.random.SeedSequence(seed).generate_state(runs)
    sums: Dict[str, float] = defaultdict(float)
    reasons: Dict[Optional[LossReason], int] = defaultdict(int)
    total_guesses = 0

    for run_seed in seeds:
        _, _, result = play_game(
            rows, cols, probability, seed=int(run_seed), max_cycles=max_cycles
        )
        reasons[result.reason] += 1
        total_guesses += result.guesses

        for k, v in result.as_payload().items():
            if k == "status":
                continue
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                sums[f"avg_{k}"] += float(v)

    out: Dict[str, float] = {k: total / runs for k, total in sums.items()}
    out["win_rate"] = reasons[None] / runs
    out["detonation_rate"] = reasons[LossReason.DETONATED] / runs
    out["stall_rate"] = reasons[LossReason.STALL_EXCEEDED] / runs
    out["guess_failure_rate"] = (
        reasons[LossReason.DETONATED] / total_guesses if total_guesses else 0.0
    )
    return out


def run_density_sweep(
    rows: int,
    cols: int,
    runs: int,
    probabilities: Sequence[float] = DEFAULT_SWEEP_PROBABILITIES,
    *,
    seed: Optional[int] = None,
    plot: bool = True,
) -> Dict[float, Dict[str, float]]:
    """
    Measure win rate and guess count across mine densities and plot them.

    Args:
        rows: Board rows.
        cols: Board columns.
        runs: Games per density.
        probabilities: Mine densities to test.
        seed: Optional base seed.
        plot: If True, show win-rate and guess-count charts.

    Returns:
        Mapping from probability to the statistics of run_solver_many_tests().
    """
    results: Dict[float, Dict[str, float]] = {}
    for i, p in enumerate(probabilities):
        sweep_seed = None if seed is None else seed + i
        results[p] = run_solver_many_tests(rows, cols, p, runs, seed=sweep_seed)
        logger.info("p=%.2f win_rate=%.3f", p, results[p]["win_rate"])

    if plot:
        x = np.asarray(probabilities, dtype=float)

        # 1) Win rate by density
        win_rates = [results[p]["win_rate"] for p in probabilities]
        plt.figure()  # type: ignore[misc]
        plt.plot(x, win_rates, marker="o")  # type: ignore[misc]
        plt.xlabel("Mine probability")  # type: ignore[misc]
        plt.ylabel("Win rate")  # type: ignore[misc]
        plt.ylim(0.0, 1.0)  # type: ignore[misc]
        plt.title(f"Win rate by mine density ({rows}x{cols})")  # type: ignore[misc]
        plt.tight_layout()
        plt.show()  # type: ignore[misc]

        # 2) Average guesses and rounds
        guesses = [results[p]["avg_guesses_count"] for p in probabilities]
        rounds = [results[p]["avg_rounds_count"] for p in probabilities]
        bar_w = 0.4 * (float(np.min(np.diff(x))) if len(x) > 1 else 0.1)
        plt.figure()  # type: ignore[misc]
        plt.bar(x - bar_w / 2, rounds, width=bar_w, label="rounds")  # type: ignore[misc]
        plt.bar(x + bar_w / 2, guesses, width=bar_w, label="guesses")  # type: ignore[misc]
        plt.xlabel("Mine probability")  # type: ignore[misc]
        plt.ylabel("Average count per game")  # type: ignore[misc]
        plt.title("Deduction rounds and guesses by mine density")  # type: ignore[misc]
        plt.legend()  # type: ignore[misc]
        plt.tight_layout()
        plt.show()  # type: ignore[misc]

    return results


def format_result(result: SolveResult) -> str:
    """One-line summary of a solve result."""
    outcome = "WON" if result.won else f"LOST ({result.reason.value})"  # type: ignore[union-attr]
    return (
        f"{outcome} in {result.moves} moves "
        f"({result.rounds} rounds, {result.guesses} guesses, {result.flags} flags)"
    )


def summarize_steps(result: SolveResult) -> Dict[str, int]:
    """Count recorded steps by method ("opening", "deduction", "guess")."""
    counts: Dict[str, int] = defaultdict(int)
    for step in result.steps_history:
        counts[step["method"]] += 1
    return dict(counts)
