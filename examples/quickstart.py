"""
Quickstart example for the Minefield Logic Solver.

This script demonstrates basic usage of the solver.
"""

from minesolver import (
    GameBoard,
    RevealKind,
    LogicSolver,
    format_result,
    generate_minefield,
    run_solver_many_tests,
)
from minesolver.config import PRESETS


def main():
    print("=" * 60)
    print("Minefield Logic Solver - Quickstart Example")
    print("=" * 60)

    # Example 1: Solve a single game
    print("\n1. Solving a single 16x16 board (p=0.15)...")
    print("-" * 60)

    field = generate_minefield(16, 16, 0.15, seed=7)
    board = GameBoard.from_minefield(field)
    solver = LogicSolver(board, seed=7)

    opening = solver.open_first_move()
    if opening is not None and opening.kind is RevealKind.DETONATED:
        print("Opening move hit a mine; pick another seed.")
        return

    result = solver.solve()
    print(f"Result: {format_result(result)}")
    print(f"Cells revealed: {result.revealed_cells}")
    print(f"Mines flagged: {result.flags} of {field.mines_count}")

    # Example 2: Show final board state
    print("\n2. Final board state:")
    print("-" * 60)
    print(board.format_board(reveal_all=True))

    # Example 3: Run multiple games for statistics
    print("\n3. Running 50 games for win rate statistics...")
    print("-" * 60)

    results = run_solver_many_tests(16, 16, 0.15, runs=50, seed=1)
    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Average moves per game: {results['avg_moves_count']:.1f}")
    print(f"Average guesses per game: {results['avg_guesses_count']:.1f}")
    print(f"Guess failure rate: {results['guess_failure_rate']*100:.1f}%")

    # Example 4: Compare difficulty levels
    print("\n4. Win rates by difficulty level (20 games each)...")
    print("-" * 60)

    for name, (rows, cols, p) in PRESETS.items():
        results = run_solver_many_tests(rows, cols, p, runs=20, seed=2)
        print(f"{name:15s} ({rows}x{cols}, p={p:.3f}): {results['win_rate']*100:5.1f}% win rate")

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
