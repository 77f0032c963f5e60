"""
tiny-qstep: step-by-step state-vector simulation of small quantum circuits.

Features:
- Dense state vector, 1-6 qubits, little-endian basis ordering
- Fixed gate set: X, Z, H, S, T, CNOT, SWAP, TOFFOLI
- Column-based timeline: one immutable snapshot per execution step
- Partial projective measurement with collapse and timeline replay

Quick Start:
    >>> from tiny_qstep import CircuitDefinition, build_timeline
    >>> qc = CircuitDefinition(2).h(0).cnot(0, 1)
    >>> timeline = build_timeline(qc.num_qubits, qc.gates)
    >>> timeline[-1].state.probabilities().round(3).tolist()
    [0.5, 0.0, 0.0, 0.5]

Interactive:
    >>> from tiny_qstep import CircuitSession, show_state
    >>> session = CircuitSession(2, seed=7)
    >>> session.load_circuit(qc)
    >>> session.jump_to_step(2)
    >>> result = session.measure([0, 1])
    >>> print(show_state(session.current_entry.state))  # doctest: +SKIP
"""
__version__ = "1.0.0"
__author__ = "SK Biswas"

# Core components
from .core import (
    AmplitudeEntry,
    StateVector,
    clone_state,
    create_basis_state,
    create_zero_state,
    enumerate_amplitudes,
)
from .backends import MeasurementResult, apply_gate, measure
from .circuit import CircuitDefinition, GateInstance, validate_circuit
from .config import MAX_QUBITS, EngineConfig, enforce_qubit_limit
from .exceptions import (
    ArityMismatchError,
    DuplicateTargetError,
    EmptySelectionError,
    EngineError,
    InvalidCircuitError,
    InvalidGateError,
    NormalizationError,
    OutOfRangeError,
    UnknownGateError,
)
from .gates import GateDefinition, GateLibrary, default_library
from .session import CircuitSession
from .timeline import TimelineEntry, build_timeline, rebuild_after_measurement

# Visualization
from .visualization import (
    format_complex,
    format_probability,
    show_measurement,
    show_state,
    show_timeline,
)

__all__ = [
    # Core
    'AmplitudeEntry',
    'StateVector',
    'clone_state',
    'create_basis_state',
    'create_zero_state',
    'enumerate_amplitudes',
    'apply_gate',
    'measure',
    'MeasurementResult',
    # Circuits and timelines
    'CircuitDefinition',
    'GateInstance',
    'validate_circuit',
    'TimelineEntry',
    'build_timeline',
    'rebuild_after_measurement',
    'CircuitSession',
    # Gates
    'GateDefinition',
    'GateLibrary',
    'default_library',
    # Config
    'EngineConfig',
    'MAX_QUBITS',
    'enforce_qubit_limit',
    # Errors
    'EngineError',
    'UnknownGateError',
    'ArityMismatchError',
    'OutOfRangeError',
    'DuplicateTargetError',
    'EmptySelectionError',
    'InvalidGateError',
    'InvalidCircuitError',
    'NormalizationError',
    # Visualization
    'format_complex',
    'format_probability',
    'show_state',
    'show_measurement',
    'show_timeline',
]
