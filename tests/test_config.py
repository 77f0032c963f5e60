"""Tests for engine configuration and logging helpers."""

import logging

import numpy as np
import pytest

from tiny_qstep import logging as qlog
from tiny_qstep.config import MAX_QUBITS, EngineConfig, enforce_qubit_limit
from tiny_qstep.exceptions import OutOfRangeError


# ---------------------------------------------------------------------------
# Qubit limit
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("n", range(1, MAX_QUBITS + 1))
def test_supported_qubit_counts(n):
    enforce_qubit_limit(n)


def test_numpy_integers_accepted():
    enforce_qubit_limit(np.int64(3))


@pytest.mark.parametrize("n", [0, 7, -2, 2.0, True, "3"])
def test_rejected_qubit_counts(n):
    with pytest.raises(OutOfRangeError):
        enforce_qubit_limit(n)


# ---------------------------------------------------------------------------
# EngineConfig
# ---------------------------------------------------------------------------

def test_defaults():
    cfg = EngineConfig()
    assert cfg.default_qubits == 3
    assert cfg.epsilon == 1e-9
    assert cfg.seed is None
    assert cfg.log_level == "WARNING"


def test_invalid_values():
    with pytest.raises(OutOfRangeError):
        EngineConfig(default_qubits=9)
    with pytest.raises(ValueError):
        EngineConfig(epsilon=0.0)
    with pytest.raises(ValueError):
        EngineConfig(log_level="LOUD")


@pytest.mark.parametrize("seed", [-1, 1.5, True, "7"])
def test_invalid_seed(seed):
    with pytest.raises(ValueError, match="seed"):
        EngineConfig(seed=seed)


def test_negative_seed_from_env():
    with pytest.raises(ValueError, match="seed"):
        EngineConfig.from_env({"TINY_QSTEP_SEED": "-1"})


def test_from_env():
    cfg = EngineConfig.from_env({
        "TINY_QSTEP_SEED": "7",
        "TINY_QSTEP_DEFAULT_QUBITS": "5",
        "TINY_QSTEP_LOG_LEVEL": "debug",
    })
    assert cfg == EngineConfig(default_qubits=5, seed=7, log_level="DEBUG")


def test_from_env_ignores_unrelated_keys():
    assert EngineConfig.from_env({"HOME": "/tmp"}) == EngineConfig()


def test_from_env_bad_integer():
    with pytest.raises(ValueError, match="TINY_QSTEP_SEED"):
        EngineConfig.from_env({"TINY_QSTEP_SEED": "abc"})


def test_config_is_frozen():
    with pytest.raises(AttributeError):
        EngineConfig().seed = 1


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@pytest.fixture
def restore_level():
    yield
    qlog.set_log_level(logging.WARNING)


def test_logger_namespace():
    assert qlog.get_logger("timeline").name == "tiny_qstep.timeline"
    assert qlog.get_logger("tiny_qstep.session").name == "tiny_qstep.session"
    assert qlog.get_logger().name == "tiny_qstep"


def test_logger_is_cached():
    assert qlog.get_logger("cached") is qlog.get_logger("cached")


def test_set_log_level_updates_existing_loggers(restore_level):
    logger = qlog.get_logger("levels")
    qlog.set_log_level("debug")
    assert logger.level == logging.DEBUG
    assert qlog.get_logger("levels.new").level == logging.DEBUG


def test_set_log_level_unknown_name():
    with pytest.raises(ValueError):
        qlog.set_log_level("CHATTY")
