import random

import pytest

from minesolver import (
    CellState,
    GameBoard,
    LogicInvariantViolation,
    MineField,
    RevealKind,
    generate_minefield,
)


def test_single_blank_cell_opens_on_creation():
    field = generate_minefield(1, 1, 0.0, seed=0)
    board = GameBoard.from_minefield(field)
    assert field.value((0, 0)) == 0
    assert board.frontier_size == 0
    assert board.state((0, 0)) is CellState.REVEALED
    board.check_invariants()


def test_flood_fill_opens_zero_region_and_its_border():
    field = MineField.from_mines(3, 3, [(0, 0)])
    board = GameBoard(field)

    outcome = board.reveal((2, 2))

    assert outcome.kind is RevealKind.SAFE
    assert outcome.value == 0
    assert len(outcome.revealed_cells) == 8
    assert board.frontier == frozenset({(0, 0)})
    assert board.number((1, 1)) == 1
    board.check_invariants()


def test_flood_fill_stops_at_numbered_cells():
    field = MineField.from_mines(1, 5, [(0, 2)])
    board = GameBoard(field)

    outcome = board.reveal((0, 0))

    assert outcome.revealed_cells == ((0, 0), (0, 1))
    assert board.frontier == frozenset({(0, 2), (0, 3), (0, 4)})


def test_from_minefield_opens_every_blank_region():
    field = MineField.from_mines(1, 5, [(0, 2)])
    board = GameBoard.from_minefield(field)
    assert board.frontier == frozenset({(0, 2)})


def test_reveal_is_idempotent():
    field = MineField.from_mines(3, 3, [(0, 0)])
    board = GameBoard(field)
    board.reveal((1, 1))
    before = board.to_state_grid()

    again = board.reveal((1, 1))

    assert again.kind is RevealKind.ALREADY_OPEN
    assert again.revealed_cells == ()
    assert board.to_state_grid() == before


def test_reveal_numbered_cell():
    field = MineField.from_mines(2, 2, [(0, 0)])
    board = GameBoard(field)
    outcome = board.reveal((1, 1))
    assert outcome.kind is RevealKind.SAFE
    assert outcome.value == 1
    assert outcome.revealed_cells == ((1, 1),)


def test_reveal_mine_detonates():
    field = MineField.from_mines(2, 2, [(0, 0)])
    board = GameBoard(field)

    outcome = board.reveal((0, 0))

    assert outcome.kind is RevealKind.DETONATED
    assert board.state((0, 0)) is CellState.EXPLODED
    assert (0, 0) not in board.frontier
    assert board.reveal((0, 0)).kind is RevealKind.ALREADY_OPEN
    board.check_invariants()


def test_flag_only_hidden_cells():
    field = MineField.from_mines(2, 2, [(0, 0)])
    board = GameBoard(field)

    assert board.flag((0, 0)) is True
    assert board.flag((0, 0)) is False
    assert board.state((0, 0)) is CellState.FLAGGED
    assert board.reveal((0, 0)).kind is RevealKind.ALREADY_OPEN

    board.reveal((1, 1))
    assert board.flag((1, 1)) is False
    assert board.neighbor_counts((1, 1)) == (1, 2)
    board.check_invariants()


@pytest.mark.parametrize("cell", [(-1, 0), (0, 3), (3, 0)])
def test_out_of_bounds(cell):
    board = GameBoard(MineField.from_mines(3, 3, []))
    with pytest.raises(ValueError):
        board.reveal(cell)
    with pytest.raises(ValueError):
        board.flag(cell)


@pytest.mark.parametrize("seed", range(10))
def test_frontier_accounting_holds_after_every_mutation(seed):
    field = generate_minefield(9, 12, 0.2, seed=seed)
    board = GameBoard.from_minefield(field)
    board.check_invariants()
    rng = random.Random(seed)

    while board.frontier_size:
        cell = rng.choice(board.hidden_cells())
        if field.is_mine(cell) and rng.random() < 0.7:
            board.flag(cell)
        else:
            board.reveal(cell)
        board.check_invariants()
        non_hidden = 9 * 12 - len(board.cells_in_state(CellState.HIDDEN))
        assert board.frontier_size + non_hidden == 9 * 12


def test_large_blank_board_does_not_recurse():
    field = generate_minefield(300, 300, 0.0, seed=0)
    board = GameBoard.from_minefield(field)
    assert board.frontier_size == 0


def test_state_grid_encoding():
    field = MineField.from_mines(1, 4, [(0, 0), (0, 3)])
    board = GameBoard(field)
    board.flag((0, 0))
    board.reveal((0, 1))
    board.reveal((0, 3))
    assert board.to_state_grid() == [[10, 1, -1, 9]]


def test_format_board():
    field = MineField.from_mines(1, 3, [(0, 2)])
    board = GameBoard.from_minefield(field)

    hidden = board.format_board()
    shown = board.format_board(reveal_all=True)

    assert hidden.splitlines()[-1].endswith(" 0  1  .")
    assert shown.splitlines()[-1].endswith(" 0  1  M")
    assert "\033[" not in hidden
    assert "\033[" in board.format_board(color=True)


def test_check_invariants_reports_a_stale_frontier():
    board = GameBoard(MineField.from_mines(2, 2, [(0, 0)]))
    board.reveal((1, 1))
    board._frontier.add((1, 1))

    with pytest.raises(LogicInvariantViolation):
        board.check_invariants()


def test_check_invariants_reports_a_missing_hidden_cell():
    board = GameBoard(MineField.from_mines(2, 2, [(0, 0)]))
    board._frontier.discard((0, 0))

    with pytest.raises(LogicInvariantViolation):
        board.check_invariants()
