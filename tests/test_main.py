"""Tests for the command-line demo."""

import pytest

from main import main


def test_unknown_circuit_is_a_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    """An unknown --circuit exits with a usage message instead of a traceback."""
    with pytest.raises(SystemExit) as excinfo:
        main(["--circuit", "Atlantis"])
    assert excinfo.value.code == 2
    err = capsys.readouterr().err
    assert "unknown circuit 'Atlantis'" in err
    assert "Monaco" in err


def test_demo_race_runs_to_completion(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--circuit", "monaco"]) == 0
    out = capsys.readouterr().out
    assert "Qualifying" in out
    assert "Standings" in out
