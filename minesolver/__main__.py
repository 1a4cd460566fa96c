"""
Command-line front end.

Run with: python -m minesolver <command> ...
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from .analysis import (
    format_result,
    play_field,
    play_game,
    run_density_sweep,
    run_solver_many_tests,
    summarize_steps,
)
from .board import GameBoard
from .config import DEFAULT_PRESET, PRESETS
from .errors import LogicInvariantViolation, MinesweeperError
from .field import generate_minefield, load_minefield, save_minefield

logger = logging.getLogger("minesolver")


def _board_spec(args: argparse.Namespace) -> Tuple[int, int, float]:
    rows, cols, p = PRESETS[args.preset]
    if args.rows is not None:
        rows = args.rows
    if args.cols is not None:
        cols = args.cols
    if args.probability is not None:
        p = args.probability
    return rows, cols, p


def _add_board_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--preset", choices=sorted(PRESETS), default=DEFAULT_PRESET)
    parser.add_argument("--rows", type=int, help="Override the preset's row count.")
    parser.add_argument("--cols", type=int, help="Override the preset's column count.")
    parser.add_argument(
        "-p", "--probability", type=float, help="Override the preset's mine probability."
    )
    parser.add_argument("--seed", type=int, help="Seed for reproducible runs.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minesolver",
        description="Generate minefields and solve them by logical deduction.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a minefield and save it to a file.")
    _add_board_options(gen)
    gen.add_argument("output", help="Destination file.")

    show = sub.add_parser("show", help="Print a saved minefield and its starting board.")
    show.add_argument("path")

    solve = sub.add_parser("solve", help="Solve a saved or freshly generated minefield.")
    _add_board_options(solve)
    solve.add_argument("--load", metavar="PATH", help="Solve a saved minefield.")
    solve.add_argument("--max-cycles", type=int, help="Maximum number of guesses.")
    solve.add_argument(
        "--reveal", action="store_true", help="Show the true layout under the final board."
    )
    solve.add_argument(
        "--steps",
        action="store_true",
        help="Count the moves made by opening, deduction and guess.",
    )

    bench = sub.add_parser("benchmark", help="Measure the solver's win rate.")
    _add_board_options(bench)
    bench.add_argument("--runs", type=int, default=100)
    bench.add_argument(
        "--sweep", action="store_true", help="Sweep mine densities and plot the results."
    )

    return parser


def _cmd_generate(args: argparse.Namespace) -> int:
    rows, cols, p = _board_spec(args)
    field = generate_minefield(rows, cols, p, seed=args.seed)
    save_minefield(field, args.output)
    print(field.format_field())
    print(f"\nTotal number of mines: {field.mines_count}")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    field = load_minefield(args.path)
    print("MINE MAP")
    print(field.format_field())
    print("\nGAME MAP")
    print(GameBoard.from_minefield(field).format_board())
    print(f"\nTotal mines: {field.mines_count}")
    return 0


def _cmd_solve(args: argparse.Namespace) -> int:
    if args.load:
        field = load_minefield(args.load)
        board, result = play_field(
            field, seed=args.seed, max_cycles=args.max_cycles, record_steps=args.steps
        )
    else:
        rows, cols, p = _board_spec(args)
        _, board, result = play_game(
            rows, cols, p, seed=args.seed, max_cycles=args.max_cycles, record_steps=args.steps
        )

    print(board.format_board(reveal_all=args.reveal))
    print(f"\n{format_result(result)}")
    if args.steps:
        for method, count in sorted(summarize_steps(result).items()):
            print(f"{method}: {count}")
    return 0 if result.won else 1


def _cmd_benchmark(args: argparse.Namespace) -> int:
    rows, cols, p = _board_spec(args)
    if args.sweep:
        results = run_density_sweep(rows, cols, args.runs, seed=args.seed)
        for prob, stats in results.items():
            print(f"p={prob:.2f}: win rate {stats['win_rate'] * 100:5.1f}%")
        return 0

    stats = run_solver_many_tests(rows, cols, p, args.runs, seed=args.seed)
    print(f"Board: {rows}x{cols}, p={p:.3f}, {args.runs} games")
    print(f"Win rate: {stats['win_rate'] * 100:.1f}%")
    print(f"Average moves per game: {stats['avg_moves_count']:.1f}")
    print(f"Average guesses per game: {stats['avg_guesses_count']:.1f}")
    print(f"Guess failure rate: {stats['guess_failure_rate'] * 100:.1f}%")
    return 0


_COMMANDS = {
    "generate": _cmd_generate,
    "show": _cmd_show,
    "solve": _cmd_solve,
    "benchmark": _cmd_benchmark,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return _COMMANDS[args.command](args)
    except LogicInvariantViolation:
        raise
    except (MinesweeperError, OSError) as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
