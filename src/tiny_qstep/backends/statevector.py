"""
In-place gate application on a state vector.

A gate never touches more amplitudes than it has to:

* one target qubit only mixes pairs of basis states that differ in that
  bit, so the vector is walked block by block and each pair is replaced by
  the 2x2 product, O(2^n);
* k >= 2 targets mix groups of 2^k basis states that agree on every
  spectator qubit, so each group is gathered, multiplied by the full
  2^k x 2^k matrix and scattered back, O(2^n * 2^k).

Nothing here clones. Callers that need the old state keep a copy first.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from numpy import ndarray

from tiny_qstep.circuit import validate_targets
from tiny_qstep.core.complex import add, multiply
from tiny_qstep.core.statevector import StateVector
from tiny_qstep.exceptions import ArityMismatchError, OutOfRangeError
from tiny_qstep.gates import GateLibrary, PackedMatrix, default_library


def apply_gate(
    state: StateVector,
    gate_name: str,
    targets: Sequence[int],
    num_qubits: int,
    library: Optional[GateLibrary] = None,
) -> None:
    """
    Apply a gate from the library to ``state`` in place.

    Parameters
    ----------
    state : StateVector
        Writable state of length 2^num_qubits; mutated.
    gate_name : str
        Gate name, case-insensitive.
    targets : sequence of int
        Qubits the gate acts on. For multi-qubit gates the first target is
        the most-significant bit of the matrix index (the control of CNOT,
        the first control of TOFFOLI).
    num_qubits : int
        Register size.
    library : GateLibrary, optional
        Defaults to :func:`~tiny_qstep.gates.default_library`.

    Raises
    ------
    UnknownGateError
        Gate name not in the library.
    ArityMismatchError
        ``len(targets)`` differs from the gate's arity.
    OutOfRangeError
        A target is outside the register, or ``num_qubits`` does not match
        the state length.
    DuplicateTargetError
        A qubit is repeated in ``targets``.
    """
    gate = (library or default_library()).lookup(gate_name)
    targets = tuple(targets)
    if len(targets) != gate.arity:
        raise ArityMismatchError(gate.name, gate.arity, len(targets))
    if state.dim != 1 << num_qubits:
        raise OutOfRangeError(
            f"State has {state.dim} amplitudes, expected {1 << num_qubits} "
            f"for {num_qubits} qubits"
        )
    validate_targets(targets, num_qubits)

    if gate.arity == 1:
        apply_single_qubit_matrix(state, gate.matrix, targets[0])
    else:
        apply_multi_qubit_matrix(state, gate.matrix, targets, num_qubits)


def apply_single_qubit_matrix(
    state: StateVector, matrix: PackedMatrix, target: int
) -> None:
    """
    Apply a 2x2 matrix to qubit ``target``.

    The vector is viewed as blocks of 2 * 2^t amplitudes. Inside a block,
    the amplitude at offset o (bit t = 0) pairs with offset o + 2^t
    (bit t = 1), and the pair becomes [[m00, m01], [m10, m11]] @ [a0, a1].
    """
    stride = 1 << target
    # Views, so assignments below write through to the state buffers.
    re = state.real.reshape(-1, 2, stride)
    im = state.imag.reshape(-1, 2, stride)

    a0r, a0i = re[:, 0, :].copy(), im[:, 0, :].copy()
    a1r, a1i = re[:, 1, :].copy(), im[:, 1, :].copy()

    m00, m01 = matrix.entry(0, 0), matrix.entry(0, 1)
    m10, m11 = matrix.entry(1, 0), matrix.entry(1, 1)

    re[:, 0, :], im[:, 0, :] = add(*multiply(*m00, a0r, a0i), *multiply(*m01, a1r, a1i))
    re[:, 1, :], im[:, 1, :] = add(*multiply(*m10, a0r, a0i), *multiply(*m11, a1r, a1i))


def apply_multi_qubit_matrix(
    state: StateVector,
    matrix: PackedMatrix,
    targets: Sequence[int],
    num_qubits: int,
) -> None:
    """
    Apply a 2^k x 2^k matrix to ``targets`` by gather, multiply, scatter.

    Row ``r`` of the index table below addresses the 2^k amplitudes that
    share the r-th assignment of the spectator qubits; column ``p`` is the
    target pattern p read with the first target as its most-significant
    bit. Targets may be in any order and need not be adjacent. The rows
    address disjoint index sets.
    """
    index = _gather_indices(targets, num_qubits)

    vec_re = state.real[index]
    vec_im = state.imag[index]

    # out[row_group, r] = sum_c M[r, c] * vec[row_group, c]
    prod_re, prod_im = multiply(
        matrix.real[None, :, :],
        matrix.imag[None, :, :],
        vec_re[:, None, :],
        vec_im[:, None, :],
    )
    state.real[index] = prod_re.sum(axis=-1)
    state.imag[index] = prod_im.sum(axis=-1)


def _gather_indices(targets: Sequence[int], num_qubits: int) -> ndarray:
    """(2^(n-k), 2^k) table of basis indices; see apply_multi_qubit_matrix."""
    k = len(targets)
    spectators = [q for q in range(num_qubits) if q not in targets]

    bases = np.zeros(1 << len(spectators), dtype=np.intp)
    for combo in range(bases.size):
        for bit, qubit in enumerate(spectators):
            if (combo >> bit) & 1:
                bases[combo] |= 1 << qubit

    offsets = np.zeros(1 << k, dtype=np.intp)
    for pattern in range(offsets.size):
        for position, qubit in enumerate(targets):
            if (pattern >> (k - 1 - position)) & 1:
                offsets[pattern] |= 1 << qubit

    return bases[:, None] | offsets[None, :]
