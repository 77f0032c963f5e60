"""
Engine configuration.

The register size is capped so that the dense state vector stays small:
6 qubits is 2^6 = 64 complex amplitudes.

Example
-------
>>> from tiny_qstep.config import EngineConfig
>>> cfg = EngineConfig(seed=7)
>>> cfg = EngineConfig.from_env()  # TINY_QSTEP_SEED=7 TINY_QSTEP_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from numbers import Integral
from typing import Mapping, Optional

from tiny_qstep.exceptions import OutOfRangeError

MIN_QUBITS = 1
MAX_QUBITS = 6

EPSILON = 1e-9
"""Tolerance used for unitarity and normalization checks."""

_ENV_PREFIX = "TINY_QSTEP_"


def enforce_qubit_limit(num_qubits: int) -> None:
    """Raise ``OutOfRangeError`` unless ``num_qubits`` is in 1-6."""
    if isinstance(num_qubits, bool) or not isinstance(num_qubits, Integral):
        raise OutOfRangeError(f"Qubit count must be an integer, got {num_qubits!r}")
    if not MIN_QUBITS <= num_qubits <= MAX_QUBITS:
        raise OutOfRangeError(
            f"Supported qubit range is {MIN_QUBITS}-{MAX_QUBITS}, got {num_qubits}"
        )


@dataclass(frozen=True)
class EngineConfig:
    """
    Runtime settings shared by sessions and the command line.

    Parameters
    ----------
    default_qubits : int
        Register size of a new session.
    epsilon : float
        Numeric tolerance for unitarity checks.
    seed : int | None
        Seed for measurement sampling. ``None`` draws fresh entropy.
    log_level : str
        Level name applied to the ``tiny_qstep`` loggers.
    """

    default_qubits: int = 3
    epsilon: float = EPSILON
    seed: Optional[int] = None
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        enforce_qubit_limit(self.default_qubits)
        if not self.epsilon > 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: '{self.log_level}'")
        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, Integral) or self.seed < 0
        ):
            raise ValueError(f"seed must be a non-negative integer, got {self.seed!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a config from ``TINY_QSTEP_*`` environment variables."""
        env = os.environ if environ is None else environ
        kwargs: dict = {}

        seed = env.get(_ENV_PREFIX + "SEED")
        if seed:
            kwargs["seed"] = _parse_int("SEED", seed)
        qubits = env.get(_ENV_PREFIX + "DEFAULT_QUBITS")
        if qubits:
            kwargs["default_qubits"] = _parse_int("DEFAULT_QUBITS", qubits)
        level = env.get(_ENV_PREFIX + "LOG_LEVEL")
        if level:
            kwargs["log_level"] = level.upper()

        return cls(**kwargs)


def _parse_int(key: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{_ENV_PREFIX}{key} must be an integer, got '{raw}'") from None
