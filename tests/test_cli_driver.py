"""Tests for the terminal driver."""

import cli_driver
from board_engine import BoardEngine


def test_format_board_shows_values():
    engine = BoardEngine(layout=[[1, None], [None, 11]])
    assert cli_driver.format_board(engine) == "2\t.\n.\t2048"


def test_parse_args_defaults():
    args = cli_driver.parse_args([])
    assert (args.rows, args.columns) == (4, 4)
    assert args.spawn_probability == 0.1
    assert not args.debug


def test_session_handles_moves_restart_and_quit(monkeypatch, capsys):
    keys = iter(["x", "a", "w", "r", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(keys))

    cli_driver.main(["--rows", "3", "--columns", "3", "--seed", "5"])

    out = capsys.readouterr().out
    assert "Invalid input. Use W, A, S, D." in out
    assert "Quitting game." in out
    assert "--- Final Board State ---" in out


def test_session_ends_when_winning_board_is_stuck(monkeypatch, capsys):
    def no_prompt(prompt=""):
        raise AssertionError("driver prompted on a finished game")
    monkeypatch.setattr("builtins.input", no_prompt)

    cli_driver.main(["--rows", "1", "--columns", "1", "--win-power", "1", "--seed", "2"])

    out = capsys.readouterr().out
    assert "YOU WON!" in out
    assert "GAME OVER!" in out
    assert "No more moves possible. Better luck next time!" in out
    assert "--- Final Board State ---" in out
