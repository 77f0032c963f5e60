"""
Circuit representation.

A circuit is a qubit count, a classical starting pattern and a set of gate
placements. Each placement carries a column; placements that share a
column run in the same step.

Example
-------
>>> from tiny_qstep.circuit import CircuitDefinition
>>> qc = CircuitDefinition(2).h(0).cnot(0, 1)
>>> [g.column for g in qc.gates]
[0, 1]
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from numbers import Integral
from typing import Any, Mapping, Optional, Sequence

from tiny_qstep.config import enforce_qubit_limit
from tiny_qstep.exceptions import (
    ArityMismatchError,
    DuplicateTargetError,
    EngineError,
    InvalidCircuitError,
    OutOfRangeError,
)
from tiny_qstep.gates import GateLibrary, default_library


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def validate_targets(targets: Sequence[int], num_qubits: int) -> None:
    """
    Raise if any target is outside ``[0, num_qubits)`` or repeated.

    Raises
    ------
    OutOfRangeError
        Target is not an integer in range.
    DuplicateTargetError
        A qubit appears twice.
    """
    for q in targets:
        if isinstance(q, bool) or not isinstance(q, Integral) or not 0 <= q < num_qubits:
            raise OutOfRangeError(
                f"Qubit {q!r} out of range for {num_qubits}-qubit register"
            )
    if len(set(targets)) != len(targets):
        raise DuplicateTargetError(targets)


def validate_column(column: int) -> None:
    if isinstance(column, bool) or not isinstance(column, Integral) or column < 0:
        raise OutOfRangeError(f"Column must be a non-negative integer, got {column!r}")


def normalize_initial_bits(
    num_qubits: int, bits: Optional[Sequence[Any]] = None
) -> tuple[int, ...]:
    """
    Coerce a user-supplied bit pattern to exactly ``num_qubits`` bits.

    Extra bits are dropped, missing ones are 0, and anything other than 1
    counts as 0.
    """
    result = [0] * num_qubits
    if bits is None:
        return tuple(result)
    for idx, bit in enumerate(list(bits)[:num_qubits]):
        result[idx] = 1 if bit == 1 else 0
    return tuple(result)


# ---------------------------------------------------------------------------
# GateInstance
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GateInstance:
    """A gate placed on specific qubits at a column of the circuit."""
    id: str
    name: str
    targets: tuple[int, ...]
    column: int

    def moved_to(self, column: int) -> GateInstance:
        return replace(self, column=column)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "targets": list(self.targets),
            "column": self.column,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GateInstance:
        return cls(
            id=str(data["id"]),
            name=data["name"],
            targets=tuple(data["targets"]),
            column=data["column"],
        )


def _new_gate_id() -> str:
    return uuid.uuid4().hex[:8]


def create_gate_instance(
    name: str,
    targets: Sequence[int],
    column: int,
    num_qubits: int,
    library: Optional[GateLibrary] = None,
) -> GateInstance:
    """
    Place a gate, checking it against the gate library and register size.

    Raises
    ------
    UnknownGateError, ArityMismatchError, OutOfRangeError, DuplicateTargetError
    """
    library = library or default_library()
    gate = library.lookup(name)
    targets = tuple(targets)
    if len(targets) != gate.arity:
        raise ArityMismatchError(gate.name, gate.arity, len(targets))
    validate_targets(targets, num_qubits)
    validate_column(column)
    return GateInstance(id=_new_gate_id(), name=gate.name, targets=targets, column=column)


# ---------------------------------------------------------------------------
# CircuitDefinition
# ---------------------------------------------------------------------------

@dataclass
class CircuitDefinition:
    """
    Qubit count, starting bit pattern and gate placements.

    This is the unit handed to and from persistence collaborators. Gates
    can be added with the builder methods, which return ``self`` for
    chaining; without an explicit column a gate goes one column past the
    current last one.

    Parameters
    ----------
    num_qubits : int
        Register size, 1-6.
    gates : list of GateInstance
        Placements, in any order.
    initial_state : tuple of int, optional
        Classical bit per qubit. Defaults to all zero.
    """
    num_qubits: int
    gates: list[GateInstance] = field(default_factory=list)
    initial_state: Optional[tuple[int, ...]] = None

    def __post_init__(self) -> None:
        enforce_qubit_limit(self.num_qubits)
        self.gates = list(self.gates)
        if self.initial_state is not None:
            self.initial_state = tuple(self.initial_state)

    # -- Properties ---------------------------------------------------------

    @property
    def columns(self) -> list[int]:
        """Distinct occupied columns, ascending."""
        return sorted({g.column for g in self.gates})

    @property
    def depth(self) -> int:
        """Number of execution steps after the initial state."""
        return len(self.columns)

    @property
    def next_column(self) -> int:
        return max((g.column for g in self.gates), default=-1) + 1

    def find(self, gate_id: str) -> Optional[GateInstance]:
        for gate in self.gates:
            if gate.id == gate_id:
                return gate
        return None

    # -- Editing ------------------------------------------------------------

    def add(
        self,
        name: str,
        targets: Sequence[int],
        column: Optional[int] = None,
        library: Optional[GateLibrary] = None,
    ) -> CircuitDefinition:
        """Place a gate and return self for chaining."""
        if column is None:
            column = self.next_column
        self.gates.append(
            create_gate_instance(name, targets, column, self.num_qubits, library)
        )
        return self

    def remove(self, gate_id: str) -> bool:
        """Remove a placement; returns False if the id is unknown."""
        before = len(self.gates)
        self.gates = [g for g in self.gates if g.id != gate_id]
        return len(self.gates) != before

    def move(self, gate_id: str, column: int) -> bool:
        """Change a placement's column; returns False if the id is unknown."""
        validate_column(column)
        for idx, gate in enumerate(self.gates):
            if gate.id == gate_id:
                self.gates[idx] = gate.moved_to(column)
                return True
        return False

    def clear(self) -> None:
        self.gates = []

    # -- Fixed gate set -----------------------------------------------------

    def x(self, qubit: int, column: Optional[int] = None) -> CircuitDefinition:
        """Pauli-X gate."""
        return self.add("X", (qubit,), column)

    def z(self, qubit: int, column: Optional[int] = None) -> CircuitDefinition:
        """Pauli-Z gate."""
        return self.add("Z", (qubit,), column)

    def h(self, qubit: int, column: Optional[int] = None) -> CircuitDefinition:
        """Hadamard gate."""
        return self.add("H", (qubit,), column)

    def s(self, qubit: int, column: Optional[int] = None) -> CircuitDefinition:
        """S gate."""
        return self.add("S", (qubit,), column)

    def t(self, qubit: int, column: Optional[int] = None) -> CircuitDefinition:
        """T gate."""
        return self.add("T", (qubit,), column)

    def cnot(self, control: int, target: int, column: Optional[int] = None) -> CircuitDefinition:
        """Controlled-NOT gate."""
        return self.add("CNOT", (control, target), column)

    def swap(self, qubit1: int, qubit2: int, column: Optional[int] = None) -> CircuitDefinition:
        """SWAP gate."""
        return self.add("SWAP", (qubit1, qubit2), column)

    def toffoli(
        self, control1: int, control2: int, target: int, column: Optional[int] = None
    ) -> CircuitDefinition:
        """Toffoli (CCX) gate."""
        return self.add("TOFFOLI", (control1, control2, target), column)

    # -- Plain-data views ---------------------------------------------------

    def to_dict(self) -> dict:
        """Plain mapping for persistence collaborators; no encoding is done here."""
        return {
            "numQubits": self.num_qubits,
            "gates": [g.to_dict() for g in self.gates],
            "initialState": list(normalize_initial_bits(self.num_qubits, self.initial_state)),
        }

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], library: Optional[GateLibrary] = None
    ) -> CircuitDefinition:
        """
        Rebuild and validate a circuit from :meth:`to_dict` output.

        Raises
        ------
        InvalidCircuitError
            If the mapping is malformed or the circuit fails validation.
        """
        try:
            num_qubits = data["numQubits"]
            gates = [GateInstance.from_dict(g) for g in data["gates"]]
            initial = data.get("initialState")
        except (KeyError, TypeError) as exc:
            raise InvalidCircuitError(f"Malformed circuit payload: {exc!r}") from exc
        try:
            definition = cls(num_qubits, gates, initial)
        except EngineError as exc:
            raise InvalidCircuitError(f"Invalid circuit: {exc}") from exc
        validate_circuit(definition, library)
        return definition

    def __repr__(self) -> str:
        return f"CircuitDefinition(qubits={self.num_qubits}, gates={len(self.gates)})"


def validate_circuit(
    definition: CircuitDefinition, library: Optional[GateLibrary] = None
) -> None:
    """
    Check a circuit handed to the engine from outside.

    Checks the qubit bound, gate names, target arity, range and
    distinctness, non-negative columns, unique gate ids and initial bits.

    Raises
    ------
    InvalidCircuitError
        With the specific error kind as ``__cause__``.
    """
    library = library or default_library()
    ids = [g.id for g in definition.gates]
    if len(set(ids)) != len(ids):
        raise InvalidCircuitError(f"Gate ids must be unique, got {ids}")
    try:
        enforce_qubit_limit(definition.num_qubits)
        for gate in definition.gates:
            gate_def = library.lookup(gate.name)
            if len(gate.targets) != gate_def.arity:
                raise ArityMismatchError(gate_def.name, gate_def.arity, len(gate.targets))
            validate_targets(gate.targets, definition.num_qubits)
            validate_column(gate.column)
        if definition.initial_state is not None:
            bits = definition.initial_state
            if len(bits) > definition.num_qubits or any(b not in (0, 1) for b in bits):
                raise OutOfRangeError(
                    f"Initial state {list(bits)} is not a bit pattern for "
                    f"{definition.num_qubits} qubits"
                )
    except EngineError as exc:
        raise InvalidCircuitError(f"Invalid circuit: {exc}") from exc
