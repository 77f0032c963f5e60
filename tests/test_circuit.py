"""Tests for circuit definitions and validation."""

import pytest

from tiny_qstep.circuit import (
    CircuitDefinition,
    GateInstance,
    create_gate_instance,
    normalize_initial_bits,
    validate_circuit,
)
from tiny_qstep.exceptions import (
    ArityMismatchError,
    DuplicateTargetError,
    InvalidCircuitError,
    OutOfRangeError,
    UnknownGateError,
)
from tiny_qstep.timeline import build_timeline


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def test_fluent_api_appends_columns():
    qc = CircuitDefinition(3).h(0).cnot(0, 1).toffoli(0, 1, 2)
    assert [g.name for g in qc.gates] == ["H", "CNOT", "TOFFOLI"]
    assert [g.column for g in qc.gates] == [0, 1, 2]
    assert qc.depth == 3


def test_explicit_column():
    qc = CircuitDefinition(2).h(0, column=4).h(1, column=4)
    assert qc.columns == [4]
    assert qc.next_column == 5


def test_gate_names_are_canonical():
    qc = CircuitDefinition(2).add("cnot", [0, 1])
    assert qc.gates[0].name == "CNOT"


def test_gate_ids_are_unique():
    qc = CircuitDefinition(1)
    for _ in range(20):
        qc.x(0)
    assert len({g.id for g in qc.gates}) == 20


def test_remove_and_move():
    qc = CircuitDefinition(2).h(0).x(1)
    first, second = qc.gates
    assert qc.move(second.id, 0)
    assert qc.find(second.id).column == 0
    assert qc.remove(first.id)
    assert qc.find(first.id) is None
    assert not qc.remove("missing")
    assert not qc.move("missing", 3)


def test_move_rejects_negative_column():
    qc = CircuitDefinition(1).x(0)
    with pytest.raises(OutOfRangeError):
        qc.move(qc.gates[0].id, -1)


@pytest.mark.parametrize("n", [0, 7])
def test_qubit_limit(n):
    with pytest.raises(OutOfRangeError):
        CircuitDefinition(n)


# ---------------------------------------------------------------------------
# Gate placement checks
# ---------------------------------------------------------------------------

def test_create_gate_instance():
    inst = create_gate_instance("swap", [1, 0], 2, 2)
    assert inst.name == "SWAP"
    assert inst.targets == (1, 0)
    assert inst.column == 2


@pytest.mark.parametrize("name,targets,column,error", [
    ("Y", [0], 0, UnknownGateError),
    ("CNOT", [0], 0, ArityMismatchError),
    ("H", [0, 1], 0, ArityMismatchError),
    ("H", [3], 0, OutOfRangeError),
    ("H", [-1], 0, OutOfRangeError),
    ("CNOT", [1, 1], 0, DuplicateTargetError),
    ("H", [0], -1, OutOfRangeError),
])
def test_create_gate_instance_errors(name, targets, column, error):
    with pytest.raises(error):
        create_gate_instance(name, targets, column, 3)


# ---------------------------------------------------------------------------
# Initial bits
# ---------------------------------------------------------------------------

def test_normalize_initial_bits():
    assert normalize_initial_bits(3) == (0, 0, 0)
    assert normalize_initial_bits(3, [1]) == (1, 0, 0)
    assert normalize_initial_bits(2, [1, 1, 1]) == (1, 1)
    assert normalize_initial_bits(3, [2, "1", 1]) == (0, 0, 1)


# ---------------------------------------------------------------------------
# Validation of external circuits
# ---------------------------------------------------------------------------

def test_valid_circuit_passes():
    validate_circuit(CircuitDefinition(2, initial_state=(1, 0)).h(0).cnot(0, 1))


@pytest.mark.parametrize("bad_gate,cause", [
    (GateInstance("a", "Y", (0,), 0), UnknownGateError),
    (GateInstance("a", "CNOT", (0,), 0), ArityMismatchError),
    (GateInstance("a", "H", (5,), 0), OutOfRangeError),
    (GateInstance("a", "SWAP", (1, 1), 0), DuplicateTargetError),
    (GateInstance("a", "H", (0,), -2), OutOfRangeError),
])
def test_invalid_gate_is_reported_with_cause(bad_gate, cause):
    qc = CircuitDefinition(2, [bad_gate])
    with pytest.raises(InvalidCircuitError) as info:
        validate_circuit(qc)
    assert isinstance(info.value.__cause__, cause)


def test_duplicate_ids_rejected():
    gates = [GateInstance("a", "H", (0,), 0), GateInstance("a", "X", (1,), 1)]
    with pytest.raises(InvalidCircuitError, match="unique"):
        validate_circuit(CircuitDefinition(2, gates))


def test_bad_initial_state_rejected():
    with pytest.raises(InvalidCircuitError):
        validate_circuit(CircuitDefinition(2, initial_state=(0, 2)))
    with pytest.raises(InvalidCircuitError):
        validate_circuit(CircuitDefinition(1, initial_state=(0, 1)))


# ---------------------------------------------------------------------------
# Plain-data round trip
# ---------------------------------------------------------------------------

def test_to_dict_shape():
    qc = CircuitDefinition(2).h(0)
    data = qc.to_dict()
    assert data["numQubits"] == 2
    assert data["initialState"] == [0, 0]
    assert data["gates"][0]["name"] == "H"
    assert data["gates"][0]["targets"] == [0]


def test_export_and_rebuild_reproduces_final_state():
    qc = CircuitDefinition(3, initial_state=(1, 0, 0)).h(1).t(1).cnot(1, 2).swap(0, 2).s(0)
    restored = CircuitDefinition.from_dict(qc.to_dict())
    original = build_timeline(qc.num_qubits, qc.gates, qc.initial_state)
    replayed = build_timeline(restored.num_qubits, restored.gates, restored.initial_state)
    assert original[-1].state == replayed[-1].state
    assert [g.id for g in restored.gates] == [g.id for g in qc.gates]


def test_from_dict_rejects_malformed_payload():
    with pytest.raises(InvalidCircuitError):
        CircuitDefinition.from_dict({"gates": []})
    with pytest.raises(InvalidCircuitError):
        CircuitDefinition.from_dict({"numQubits": 9, "gates": []})


def test_from_dict_rejects_unknown_gate():
    data = {"numQubits": 1, "gates": [{"id": "g1", "name": "RX", "targets": [0], "column": 0}]}
    with pytest.raises(InvalidCircuitError) as info:
        CircuitDefinition.from_dict(data)
    assert isinstance(info.value.__cause__, UnknownGateError)
