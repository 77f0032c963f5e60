"""
State vector storage.

Amplitudes are held as two parallel float64 buffers, ``real`` and ``imag``,
of length 2^n. Qubit ``q`` is bit ``q`` of the basis index (little-endian),
so the basis index of a classical pattern is sum(bit[q] * 2^q).

Memory: 2 * 8 bytes * 2^n, at most 1 KB for the 6-qubit ceiling.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional, Sequence

import numpy as np
from numpy import ndarray

from tiny_qstep.config import enforce_qubit_limit
from tiny_qstep.core.complex import magnitude_squared
from tiny_qstep.exceptions import NormalizationError, OutOfRangeError


class AmplitudeEntry(NamedTuple):
    """One basis state of a state vector, ready for display."""
    basis_label: str
    real: float
    imag: float
    probability: float


class StateVector:
    """
    Dense state vector over the full 2^n computational basis.

    Parameters
    ----------
    real, imag : ndarray
        Real and imaginary parts, equal length 2^n. float64 arrays are
        adopted as-is; anything else is converted to a new float64 array.
        Use :func:`clone_state` to get an independent copy.
    """

    __slots__ = ("real", "imag")

    def __init__(self, real: ndarray, imag: ndarray) -> None:
        real = np.asarray(real, dtype=np.float64)
        imag = np.asarray(imag, dtype=np.float64)
        if real.shape != imag.shape or real.ndim != 1:
            raise ValueError(
                f"real/imag buffers must be 1-D and equal length, got "
                f"{real.shape} and {imag.shape}"
            )
        dim = real.shape[0]
        if dim < 2 or dim & (dim - 1):
            raise ValueError(f"State length {dim} is not a power of 2")
        self.real = real
        self.imag = imag

    @property
    def dim(self) -> int:
        return self.real.shape[0]

    @property
    def num_qubits(self) -> int:
        return self.dim.bit_length() - 1

    @property
    def amplitudes(self) -> ndarray:
        """Complex128 copy of the amplitudes."""
        return self.real + 1j * self.imag

    def probabilities(self) -> ndarray:
        """Born-rule probability of every basis state."""
        return magnitude_squared(self.real, self.imag)

    def norm(self) -> float:
        """Sum of |amplitude|^2, which is 1 for a valid state."""
        return float(np.sum(self.probabilities()))

    def freeze(self) -> StateVector:
        """Make both buffers read-only and return self."""
        self.real.flags.writeable = False
        self.imag.flags.writeable = False
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateVector):
            return NotImplemented
        return np.array_equal(self.real, other.real) and np.array_equal(
            self.imag, other.imag
        )

    def __repr__(self) -> str:
        return f"StateVector(qubits={self.num_qubits}, dim={self.dim})"


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def create_basis_state(
    num_qubits: int, initial_bits: Optional[Sequence[int]] = None
) -> StateVector:
    """
    Build the computational basis state encoded by ``initial_bits``.

    Parameters
    ----------
    num_qubits : int
        Register size, 1-6.
    initial_bits : sequence of int, optional
        Classical value of each qubit, indexed by qubit. Missing trailing
        bits are 0. Defaults to all zero.

    Returns
    -------
    StateVector
        Amplitude 1 at index sum(bit[q] * 2^q), 0 elsewhere.

    Raises
    ------
    OutOfRangeError
        If ``num_qubits`` is outside 1-6, more bits than qubits are given,
        or a bit is not 0 or 1.
    """
    enforce_qubit_limit(num_qubits)
    bits = list(initial_bits) if initial_bits is not None else []
    if len(bits) > num_qubits:
        raise OutOfRangeError(
            f"Got {len(bits)} initial bits for a {num_qubits}-qubit register"
        )

    index = 0
    for qubit, bit in enumerate(bits):
        if bit not in (0, 1):
            raise OutOfRangeError(f"Initial bit for qubit {qubit} must be 0 or 1, got {bit!r}")
        if bit == 1:
            index |= 1 << qubit

    dim = 1 << num_qubits
    real = np.zeros(dim, dtype=np.float64)
    imag = np.zeros(dim, dtype=np.float64)
    real[index] = 1.0
    return StateVector(real, imag)


def create_zero_state(num_qubits: int) -> StateVector:
    """|00...0⟩"""
    return create_basis_state(num_qubits)


def clone_state(source: StateVector) -> StateVector:
    """Deep copy sharing no storage with ``source``; the copy is writable."""
    return StateVector(source.real.copy(), source.imag.copy())


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------

def basis_label(index: int, num_qubits: int) -> str:
    """Label such as ``|011⟩``; the highest qubit index is printed first."""
    return f"|{index:0{num_qubits}b}⟩"


def enumerate_amplitudes(state: StateVector) -> List[AmplitudeEntry]:
    """(basis_label, real, imag, probability) for every basis state, in index order."""
    n = state.num_qubits
    probs = state.probabilities()
    return [
        AmplitudeEntry(
            basis_label(i, n), float(state.real[i]), float(state.imag[i]), float(probs[i])
        )
        for i in range(state.dim)
    ]


def normalize_state(state: StateVector) -> None:
    """
    Rescale ``state`` in place to unit norm.

    Raises
    ------
    NormalizationError
        If every amplitude is zero.
    """
    total = state.norm()
    if total == 0.0:
        raise NormalizationError("Cannot normalize a state with zero norm")
    factor = 1.0 / np.sqrt(total)
    state.real *= factor
    state.imag *= factor
