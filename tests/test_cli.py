"""Tests for the command-line interface."""

import pytest

from tiny_qstep import __version__
from tiny_qstep.cli import DEMOS, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("TINY_QSTEP_SEED", "TINY_QSTEP_LOG_LEVEL", "TINY_QSTEP_DEFAULT_QUBITS"):
        monkeypatch.delenv(key, raising=False)


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: tiny-qstep" in capsys.readouterr().out


def test_gates(capsys):
    assert main(["gates"]) == 0
    out = capsys.readouterr().out
    for name in ("X", "Z", "H", "S", "T", "CNOT", "SWAP", "CCX"):
        assert name in out


@pytest.mark.parametrize("demo", sorted(DEMOS))
def test_run_demo(demo, capsys):
    assert main(["run", demo]) == 0
    out = capsys.readouterr().out
    assert "step 0: initial state" in out
    assert "State at step" in out


def test_run_at_step(capsys):
    assert main(["run", "ghz", "--step", "1"]) == 0
    assert "State at step 1:" in capsys.readouterr().out


def test_measure(capsys):
    assert main(["measure", "bell", "--qubits", "0", "1", "--seed", "3"]) == 0
    out = capsys.readouterr().out
    assert "Outcome: q0=0 q1=0" in out or "Outcome: q0=1 q1=1" in out


def test_measure_is_reproducible_with_seed(capsys):
    main(["measure", "ghz", "--qubits", "2", "--seed", "8"])
    first = capsys.readouterr().out
    main(["measure", "ghz", "--qubits", "2", "--seed", "8"])
    assert capsys.readouterr().out == first


def test_engine_error_exits_with_status_one(capsys):
    assert main(["measure", "bell", "--qubits", "5"]) == 1
    captured = capsys.readouterr()
    assert "error:" in captured.err
    assert captured.out == ""


def test_bad_environment(monkeypatch, capsys):
    monkeypatch.setenv("TINY_QSTEP_SEED", "abc")
    assert main(["gates"]) == 1
    assert "TINY_QSTEP_SEED" in capsys.readouterr().err


def test_negative_seed_in_environment(monkeypatch, capsys):
    monkeypatch.setenv("TINY_QSTEP_SEED", "-1")
    assert main(["run", "bell"]) == 1
    assert "seed must be a non-negative integer" in capsys.readouterr().err


def test_negative_seed_flag_is_argparse_error():
    with pytest.raises(SystemExit) as info:
        main(["measure", "bell", "--qubits", "0", "--seed", "-3"])
    assert info.value.code == 2


def test_unknown_demo_is_argparse_error():
    with pytest.raises(SystemExit) as info:
        main(["run", "teleport"])
    assert info.value.code == 2


def test_info(capsys):
    assert main(["info"]) == 0
    assert f"tiny-qstep v{__version__}" in capsys.readouterr().out
