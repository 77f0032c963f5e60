"""
Projective measurement of a qubit subset.

Measuring k qubits reads a k-bit pattern: the lowest measured qubit is the
least-significant bit of the pattern. The outcome is drawn with the Born
rule and the state collapses onto the amplitudes consistent with it.

Example
-------
>>> import numpy as np
>>> from tiny_qstep.core import create_zero_state
>>> from tiny_qstep.backends import apply_gate, measure
>>> state = create_zero_state(2)
>>> apply_gate(state, "H", [0], 2)
>>> collapsed, result = measure(state, [0], 2, rng=np.random.default_rng(1))
>>> sorted(result.probabilities)
['q0=0', 'q0=1']
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np
from numpy import ndarray

from tiny_qstep.core.statevector import StateVector, clone_state, normalize_state
from tiny_qstep.exceptions import EmptySelectionError, OutOfRangeError


@dataclass(frozen=True)
class MeasurementResult:
    """
    Outcome of one measurement call.

    Attributes
    ----------
    outcome : str
        Label of the sampled pattern, e.g. ``"q0=1 q2=0"``.
    measured_qubits : tuple of int
        Sorted, de-duplicated qubits that were measured.
    probabilities : dict[str, float]
        Probability of every possible pattern, keyed by label.
    pattern : int
        Sampled pattern as an integer (first measured qubit = bit 0).
    """
    outcome: str
    measured_qubits: Tuple[int, ...]
    probabilities: Dict[str, float]
    pattern: int

    def probability(self, label: Optional[str] = None) -> float:
        """Probability of ``label``; defaults to the sampled outcome."""
        return self.probabilities[self.outcome if label is None else label]


def measured_qubit_set(qubits: Iterable[int], num_qubits: int) -> Tuple[int, ...]:
    """
    Sorted unique qubits, checked against the register.

    Raises
    ------
    EmptySelectionError
        No qubit selected.
    OutOfRangeError
        A qubit is outside ``[0, num_qubits)``.
    """
    qubits = tuple(qubits)
    if not qubits:
        raise EmptySelectionError("Select at least one qubit to measure")
    for q in qubits:
        if isinstance(q, bool) or not isinstance(q, Integral) or not 0 <= q < num_qubits:
            raise OutOfRangeError(
                f"Measurement target {q} outside register range 0-{num_qubits - 1}"
            )
    return tuple(sorted(set(qubits)))


def _patterns(dim: int, qubits: Sequence[int]) -> ndarray:
    """Sub-pattern of every basis index read at ``qubits``."""
    basis = np.arange(dim)
    pattern = np.zeros(dim, dtype=np.intp)
    for bit, qubit in enumerate(qubits):
        pattern |= ((basis >> qubit) & 1) << bit
    return pattern


def subset_probabilities(state: StateVector, qubits: Sequence[int]) -> ndarray:
    """
    Probability of each 2^k pattern over sorted ``qubits``.

    Amplitudes are accumulated as-is, so the table sums to the state's norm.
    """
    return np.bincount(
        _patterns(state.dim, qubits),
        weights=state.probabilities(),
        minlength=1 << len(qubits),
    )


def describe_pattern(pattern: int, qubits: Sequence[int]) -> str:
    """``"q0=1 q2=0"`` for pattern 0b01 over qubits (0, 2)."""
    return " ".join(f"q{q}={(pattern >> idx) & 1}" for idx, q in enumerate(qubits))


def sample_pattern(
    probabilities: ndarray, rng: Optional[np.random.Generator] = None
) -> int:
    """
    Draw a pattern by inverting the cumulative distribution.

    The draw is uniform in ``[0, total)`` where ``total`` is the table's
    sum, so float drift away from 1 is tolerated. The first pattern whose
    running sum reaches the draw is chosen, skipping patterns with zero
    probability. An all-zero table yields pattern 0.
    """
    total = float(np.sum(probabilities))
    if total <= 0.0:
        return 0
    rng = rng if rng is not None else np.random.default_rng()
    threshold = rng.random() * total

    accumulator = 0.0
    for pattern, probability in enumerate(probabilities):
        accumulator += probability
        if probability > 0.0 and threshold <= accumulator:
            return pattern
    # Rounding can leave the running sum just short of the draw.
    return int(np.flatnonzero(probabilities > 0.0)[-1])


def collapse(state: StateVector, qubits: Sequence[int], pattern: int) -> None:
    """
    Zero every amplitude whose pattern over ``qubits`` differs from
    ``pattern``, then renormalize the survivors. Mutates ``state``.

    Raises
    ------
    NormalizationError
        No amplitude survives.
    """
    mismatch = _patterns(state.dim, qubits) != pattern
    state.real[mismatch] = 0.0
    state.imag[mismatch] = 0.0
    normalize_state(state)


def measure(
    state: StateVector,
    qubits: Iterable[int],
    num_qubits: int,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[StateVector, MeasurementResult]:
    """
    Measure ``qubits`` and collapse.

    Parameters
    ----------
    state : StateVector
        State to measure; left untouched.
    qubits : iterable of int
        Qubits to read. Duplicates are ignored and order does not matter.
    num_qubits : int
        Register size.
    rng : numpy.random.Generator, optional
        Source of the uniform draw.

    Returns
    -------
    (StateVector, MeasurementResult)
        The collapsed, renormalized copy and the outcome.

    Raises
    ------
    EmptySelectionError, OutOfRangeError
        Bad qubit selection.
    NormalizationError
        The state has zero norm, which valid unitary evolution cannot
        produce.
    """
    if state.dim != 1 << num_qubits:
        raise OutOfRangeError(
            f"State has {state.dim} amplitudes, expected {1 << num_qubits} "
            f"for {num_qubits} qubits"
        )
    measured = measured_qubit_set(qubits, num_qubits)

    table = subset_probabilities(state, measured)
    probabilities = {
        describe_pattern(pattern, measured): float(p) for pattern, p in enumerate(table)
    }

    selected = sample_pattern(table, rng)
    collapsed = clone_state(state)
    collapse(collapsed, measured, selected)

    result = MeasurementResult(
        outcome=describe_pattern(selected, measured),
        measured_qubits=measured,
        probabilities=probabilities,
        pattern=selected,
    )
    return collapsed, result
