from minesolver import MineField, load_minefield, save_minefield
from minesolver.__main__ import main


def test_generate_then_show(tmp_path, capsys):
    path = tmp_path / "minemap.txt"

    code = main(["generate", "--rows", "4", "--cols", "5", "-p", "0.2", "--seed", "3", str(path)])

    assert code == 0
    assert load_minefield(path).shape == (4, 5)

    assert main(["show", str(path)]) == 0
    out = capsys.readouterr().out
    assert "MINE MAP" in out
    assert "GAME MAP" in out


def test_solve_saved_field(tmp_path, capsys):
    path = tmp_path / "blank.txt"
    save_minefield(MineField.from_mines(3, 3, []), path)

    assert main(["solve", "--load", str(path), "--seed", "0"]) == 0
    assert "WON" in capsys.readouterr().out


def test_solve_generated_field(capsys):
    code = main(["solve", "--rows", "6", "--cols", "6", "-p", "0.1", "--seed", "4", "--reveal"])
    assert code in (0, 1)
    assert "moves" in capsys.readouterr().out


def test_benchmark(capsys):
    assert main(["benchmark", "--rows", "4", "--cols", "4", "-p", "0.0", "--runs", "3"]) == 0
    assert "Win rate: 100.0%" in capsys.readouterr().out


def test_corrupt_file_exits_with_error(tmp_path, capsys):
    path = tmp_path / "bad.txt"
    path.write_text("two three\n")

    assert main(["show", str(path)]) == 2
    assert "error:" in capsys.readouterr().err


def test_missing_file_exits_with_error(tmp_path, capsys):
    assert main(["solve", "--load", str(tmp_path / "absent.txt")]) == 2
    assert "error:" in capsys.readouterr().err


def test_solve_reports_when_every_opening_detonates(capsys):
    code = main(["solve", "--rows", "3", "--cols", "3", "-p", "1.0", "--seed", "0"])

    assert code == 2
    assert "error:" in capsys.readouterr().err


def test_benchmark_rejects_zero_runs(capsys):
    assert main(["benchmark", "--runs", "0"]) == 2
    assert "error:" in capsys.readouterr().err


def test_solve_prints_step_counts(tmp_path, capsys):
    path = tmp_path / "centre.txt"
    save_minefield(MineField.from_mines(3, 3, [(1, 1)]), path)

    assert main(["solve", "--load", str(path), "--seed", "2", "--steps"]) in (0, 1)
    out = capsys.readouterr().out
    assert "opening: 1" in out
