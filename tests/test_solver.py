import pytest

from minesolver import (
    CellState,
    GameBoard,
    GameStatus,
    InvalidConfiguration,
    LogicInvariantViolation,
    LogicSolver,
    LossReason,
    MineField,
    SolverState,
    generate_minefield,
    play_field,
    validate,
)


def center_mine_board():
    return GameBoard(MineField.from_mines(3, 3, [(1, 1)]))


def diagonal_board():
    board = GameBoard(MineField.from_mines(2, 2, [(0, 1), (1, 0)]))
    board.reveal((0, 0))
    return board


def test_one_by_one_blank_board_is_won_without_guessing():
    board = GameBoard.from_minefield(generate_minefield(1, 1, 0.0, seed=0))
    solver = LogicSolver(board, seed=0)

    assert solver.open_first_move() is None
    result = solver.solve()

    assert result.won
    assert result.guesses == 0
    assert result.moves == 0
    assert solver.state is SolverState.WON


def test_center_mine_flagged_then_rest_opened():
    board = center_mine_board()
    for cell in [(0, 0), (0, 1), (1, 0)]:
        board.reveal(cell)
    solver = LogicSolver(board, seed=0)

    assert solver.propagate_round() is True
    assert board.state((1, 1)) is CellState.FLAGGED

    result = solver.solve()
    assert result.won
    assert result.guesses == 0
    assert result.flags == 1
    assert board.cells_in_state(CellState.FLAGGED) == [(1, 1)]
    assert len(board.cells_in_state(CellState.REVEALED)) == 8


@pytest.mark.parametrize("seed", range(10))
def test_center_mine_from_a_single_corner_terminates(seed):
    board = center_mine_board()
    board.reveal((0, 0))
    result = LogicSolver(board, seed=seed).solve()

    assert result.status is GameStatus.WON or result.reason is LossReason.DETONATED
    assert result.cycles <= 9


def test_diagonal_board_gets_stuck():
    board = diagonal_board()
    solver = LogicSolver(board, seed=0)

    assert solver.propagate_round() is False
    assert solver.propagate() is SolverState.STUCK
    assert board.frontier_size == 3


@pytest.mark.parametrize("seed", range(20))
def test_diagonal_board_guesses_and_terminates(seed):
    board = diagonal_board()
    solver = LogicSolver(board, seed=seed)

    result = solver.solve()

    assert result.guesses >= 1
    assert result.cycles <= solver.context.max_cycles
    if result.won:
        assert set(board.cells_in_state(CellState.FLAGGED)) == {(0, 1), (1, 0)}
        assert board.state((1, 1)) is CellState.REVEALED
    else:
        assert result.reason is LossReason.DETONATED
        assert len(board.cells_in_state(CellState.EXPLODED)) == 1


def test_zero_cycle_cap_stalls_without_guessing():
    board = diagonal_board()
    solver = LogicSolver(board, seed=0, max_cycles=0)

    result = solver.solve()

    assert result.status is GameStatus.LOST
    assert result.reason is LossReason.STALL_EXCEEDED
    assert result.guesses == 0
    assert solver.state is SolverState.LOST


def test_negative_cycle_cap_is_rejected():
    with pytest.raises(InvalidConfiguration):
        LogicSolver(diagonal_board(), max_cycles=-1)


def test_rule_one_reveals_only_safe_cells():
    field = MineField.from_mines(3, 3, [(0, 0), (0, 2)])
    board = GameBoard(field)
    board.reveal((1, 1))
    board.flag((0, 0))
    board.flag((0, 2))

    LogicSolver(board, seed=0).propagate_round()

    assert board.frontier_size == 0
    assert board.cells_in_state(CellState.EXPLODED) == []
    assert validate(board).won


def test_rule_one_on_a_corrupted_board_raises():
    board = GameBoard(MineField.from_mines(1, 3, [(0, 2)]))
    board.reveal((0, 1))
    board.flag((0, 0))  # wrong flag: (0, 0) is safe

    with pytest.raises(LogicInvariantViolation):
        LogicSolver(board, seed=0).solve()


def test_too_many_flags_raises():
    board = GameBoard(MineField.from_mines(2, 2, [(0, 0)]))
    board.reveal((1, 1))
    board.flag((0, 0))
    board.flag((0, 1))

    with pytest.raises(LogicInvariantViolation):
        LogicSolver(board, seed=0).propagate_round()


@pytest.mark.parametrize("seed", range(30))
def test_deductions_never_detonate_on_random_boards(seed):
    field = generate_minefield(10, 10, 0.15, seed=seed)
    board, result = play_field(field, seed=seed)

    flagged = set(board.cells_in_state(CellState.FLAGGED))
    assert flagged <= field.mine_coordinates()
    if result.won:
        assert flagged == field.mine_coordinates()
        assert board.frontier_size == 0
    else:
        assert result.reason in (LossReason.DETONATED, LossReason.STALL_EXCEEDED)


def test_frontier_accounting_holds_during_solve(monkeypatch):
    original_reveal = GameBoard.reveal
    original_flag = GameBoard.flag
    checks = []

    def checked_reveal(self, cell):
        outcome = original_reveal(self, cell)
        self.check_invariants()
        checks.append(cell)
        return outcome

    def checked_flag(self, cell):
        flagged = original_flag(self, cell)
        self.check_invariants()
        checks.append(cell)
        return flagged

    monkeypatch.setattr(GameBoard, "reveal", checked_reveal)
    monkeypatch.setattr(GameBoard, "flag", checked_flag)

    play_field(generate_minefield(12, 12, 0.12, seed=4), seed=4)
    assert checks


def test_validate_reports_misflagged_cell():
    board = GameBoard(MineField.from_mines(1, 2, [(0, 1)]))
    board.flag((0, 0))
    board.flag((0, 1))

    verdict = validate(board)

    assert verdict.status is GameStatus.LOST
    assert verdict.reason is LossReason.MISFLAGGED_CELL


def test_validate_reports_unresolved_cells():
    board = GameBoard(MineField.from_mines(1, 2, [(0, 1)]))
    board.reveal((0, 0))
    assert validate(board).reason is LossReason.UNRESOLVED_CELLS


def test_validate_against_explicit_field():
    field = MineField.from_mines(1, 2, [(0, 1)])
    board = GameBoard(field)
    board.reveal((0, 0))
    board.flag((0, 1))

    assert validate(board, field).won
    assert validate(board, MineField.from_mines(1, 2, [(0, 0)])).reason is (
        LossReason.MISFLAGGED_CELL
    )


def test_same_seed_same_game():
    field = generate_minefield(10, 10, 0.2, seed=11)
    board_a, result_a = play_field(field, seed=3)
    board_b, result_b = play_field(field, seed=3)

    assert result_a.as_payload() == result_b.as_payload()
    assert board_a.to_state_grid() == board_b.to_state_grid()


def test_steps_are_recorded_for_replay():
    board = center_mine_board()
    solver = LogicSolver(board, seed=0, record_steps=True)
    solver.open_first_move((0, 0))
    board.reveal((0, 1))
    board.reveal((1, 0))

    result = solver.solve()

    methods = [step["method"] for step in result.steps_history]
    assert methods[0] == "opening"
    assert "deduction" in methods
    flag_steps = [s for s in result.steps_history if s["action"] == "flag"]
    assert [s["cell"] for s in flag_steps] == [(1, 1)]
    assert flag_steps[0]["state_snapshot"][1][1] == 10
