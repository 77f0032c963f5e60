"""
Quantum gate definitions.

The gate set is closed: X, Z, H, S, T, CNOT, SWAP and TOFFOLI. Every
matrix is checked for unitarity once, when it is registered in a
:class:`GateLibrary`, and never again per use.

Multi-qubit matrices index their rows and columns by target position: the
first target in a placement's target list is the most-significant bit of
the matrix index. For CNOT with targets ``(control, target)`` the matrix
index is ``control * 2 + target``.

Example
-------
>>> from tiny_qstep.gates import default_library
>>> library = default_library()
>>> library.lookup("cnot").arity
2
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Sequence

import numpy as np
from numpy import ndarray

from tiny_qstep.config import EPSILON
from tiny_qstep.core.complex import multiply
from tiny_qstep.exceptions import InvalidGateError, UnknownGateError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_SQRT2_INV = 1.0 / np.sqrt(2.0)
_EIGHTH_TURN = np.pi / 4


# ---------------------------------------------------------------------------
# PackedMatrix
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class PackedMatrix:
    """
    Square complex matrix, row-major, flattened to interleaved real/imag.

    Parameters
    ----------
    size : int
        Matrix dimension, a power of two.
    data : ndarray
        float64 buffer of length ``2 * size * size`` laid out as
        ``[re(0,0), im(0,0), re(0,1), im(0,1), ...]``. Stored read-only.
    """

    size: int
    data: ndarray

    def __post_init__(self) -> None:
        if self.size < 2 or self.size & (self.size - 1):
            raise InvalidGateError(f"Matrix size {self.size} is not a power of 2")
        data = np.array(self.data, dtype=np.float64)
        if data.shape != (2 * self.size * self.size,):
            raise InvalidGateError(
                f"Matrix entries mismatch for size {self.size}: "
                f"expected {2 * self.size * self.size} values, got {data.size}"
            )
        data.flags.writeable = False
        object.__setattr__(self, "data", data)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[complex]]) -> PackedMatrix:
        """Pack a nested list of complex entries."""
        m = np.asarray(rows, dtype=np.complex128)
        if m.ndim != 2 or m.shape[0] != m.shape[1]:
            raise InvalidGateError(f"Matrix must be square, got shape {m.shape}")
        packed = np.empty(2 * m.size, dtype=np.float64)
        packed[0::2] = m.real.ravel()
        packed[1::2] = m.imag.ravel()
        return cls(m.shape[0], packed)

    @property
    def real(self) -> ndarray:
        """(size, size) view of the real parts."""
        return self.data[0::2].reshape(self.size, self.size)

    @property
    def imag(self) -> ndarray:
        """(size, size) view of the imaginary parts."""
        return self.data[1::2].reshape(self.size, self.size)

    @property
    def arity(self) -> int:
        return self.size.bit_length() - 1

    def entry(self, row: int, column: int) -> tuple[float, float]:
        offset = (row * self.size + column) * 2
        return float(self.data[offset]), float(self.data[offset + 1])

    def to_array(self) -> ndarray:
        """Complex128 copy as a (size, size) matrix."""
        return self.real + 1j * self.imag


def is_unitary(matrix: PackedMatrix, tol: float = EPSILON) -> bool:
    """Check U·U† = I entry by entry within ``tol``."""
    re, im = matrix.real, matrix.imag
    # (U U†)[r, c] = sum_k U[r, k] * conj(U[c, k])
    prod_re, prod_im = multiply(
        re[:, None, :], im[:, None, :], re[None, :, :], -im[None, :, :]
    )
    gram_re = prod_re.sum(axis=-1)
    gram_im = prod_im.sum(axis=-1)
    identity = np.eye(matrix.size)
    return bool(
        np.all(np.abs(gram_re - identity) <= tol) and np.all(np.abs(gram_im) <= tol)
    )


# ---------------------------------------------------------------------------
# GateDefinition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GateDefinition:
    """
    A named unitary with the number of qubits it acts on.

    ``color`` and ``tooltip`` are presentation metadata for front ends; the
    engine never reads them.
    """
    name: str
    label: str
    description: str
    arity: int
    matrix: PackedMatrix = field(repr=False)
    color: str = "#888888"
    tooltip: str = ""


# ---------------------------------------------------------------------------
# GateLibrary
# ---------------------------------------------------------------------------

class GateLibrary:
    """
    Registry of validated gate definitions keyed by upper-case name.

    Build one at startup and pass it to whatever needs gate lookup; the
    shared default is :func:`default_library`.

    Parameters
    ----------
    definitions : iterable of GateDefinition
        Registered in order via :meth:`register`.
    epsilon : float
        Unitarity tolerance.
    """

    def __init__(
        self, definitions: Iterable[GateDefinition] = (), epsilon: float = EPSILON
    ) -> None:
        self._epsilon = epsilon
        self._gates: dict[str, GateDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: GateDefinition) -> None:
        """
        Validate and add a gate.

        Raises
        ------
        InvalidGateError
            If the name is taken, the arity does not match the matrix size,
            or the matrix is not unitary within epsilon.
        """
        key = definition.name.upper()
        if key in self._gates:
            raise InvalidGateError(f"Gate '{definition.name}' is already registered")
        if definition.arity not in (1, 2, 3):
            raise InvalidGateError(
                f"Gate '{definition.name}' has unsupported arity {definition.arity}"
            )
        if definition.matrix.size != 1 << definition.arity:
            raise InvalidGateError(
                f"Gate '{definition.name}' has arity {definition.arity} but a "
                f"{definition.matrix.size}x{definition.matrix.size} matrix"
            )
        if not is_unitary(definition.matrix, self._epsilon):
            raise InvalidGateError(
                f"Non-unitary matrix for gate '{definition.name}'"
            )
        self._gates[key] = definition

    def lookup(self, name: str) -> GateDefinition:
        """
        Get a gate by name (case-insensitive).

        Raises
        ------
        UnknownGateError
            If the name is not registered.
        """
        try:
            return self._gates[name.upper()]
        except (KeyError, AttributeError):
            raise UnknownGateError(name, self._gates) from None

    @property
    def gates(self) -> Mapping[str, GateDefinition]:
        """Read-only view of the registered gates."""
        return MappingProxyType(self._gates)

    @property
    def names(self) -> list[str]:
        return list(self._gates)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.upper() in self._gates

    def __iter__(self) -> Iterator[GateDefinition]:
        return iter(self._gates.values())

    def __len__(self) -> int:
        return len(self._gates)

    def __repr__(self) -> str:
        return f"GateLibrary({self.names})"


# ---------------------------------------------------------------------------
# The fixed gate set
# ---------------------------------------------------------------------------

X = PackedMatrix.from_rows([[0, 1], [1, 0]])
"""Pauli-X: swaps the |0⟩ and |1⟩ amplitudes."""

Z = PackedMatrix.from_rows([[1, 0], [0, -1]])
"""Pauli-Z: negates the |1⟩ amplitude."""

H = PackedMatrix.from_rows([[_SQRT2_INV, _SQRT2_INV], [_SQRT2_INV, -_SQRT2_INV]])
"""Hadamard."""

S = PackedMatrix.from_rows([[1, 0], [0, 1j]])
"""S: +i phase on |1⟩."""

T = PackedMatrix.from_rows([[1, 0], [0, np.exp(1j * _EIGHTH_TURN)]])
"""T: e^(iπ/4) phase on |1⟩."""

CNOT = PackedMatrix.from_rows(
    [[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0]]
)
"""Controlled-NOT over (control, target)."""

SWAP = PackedMatrix.from_rows(
    [[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]]
)
"""Exchange two qubits."""

_toffoli = np.eye(8, dtype=np.complex128)
_toffoli[[6, 7]] = _toffoli[[7, 6]]
TOFFOLI = PackedMatrix.from_rows(_toffoli)
"""Controlled-controlled-NOT over (control, control, target)."""
del _toffoli


GATE_DEFINITIONS: tuple[GateDefinition, ...] = (
    GateDefinition(
        "X", "X", "Pauli-X flips the qubit", 1, X,
        color="#ec5f67", tooltip="X = [[0, 1], [1, 0]]",
    ),
    GateDefinition(
        "Z", "Z", "Pauli-Z applies a phase flip", 1, Z,
        color="#c594c5", tooltip="Z = [[1, 0], [0, -1]]",
    ),
    GateDefinition(
        "H", "H", "Hadamard maps between X and Z bases", 1, H,
        color="#c3e88d", tooltip="H = 1/sqrt(2) [[1, 1], [1, -1]]",
    ),
    GateDefinition(
        "S", "S", "Quarter turn phase gate", 1, S,
        color="#6699cc", tooltip="S = [[1, 0], [0, i]]",
    ),
    GateDefinition(
        "T", "T", "Pi/8 phase gate", 1, T,
        color="#f99157", tooltip="T = [[1, 0], [0, e^(i pi/4)]]",
    ),
    GateDefinition(
        "CNOT", "CNOT", "Controlled-NOT entangles two qubits", 2, CNOT,
        color="#82aaff", tooltip="CNOT = |0><0| (x) I + |1><1| (x) X",
    ),
    GateDefinition(
        "SWAP", "SWAP", "Exchange two qubits", 2, SWAP,
        color="#f7768e", tooltip="SWAP |ab> = |ba>",
    ),
    GateDefinition(
        "TOFFOLI", "CCX", "Flips the target when both controls are 1", 3, TOFFOLI,
        color="#ffcb6b", tooltip="CCX = I - |11><11| (x) (I - X)",
    ),
)


@lru_cache(maxsize=None)
def default_library(epsilon: float = EPSILON) -> GateLibrary:
    """The shared library holding the fixed gate set, built once per tolerance."""
    return GateLibrary(GATE_DEFINITIONS, epsilon)
