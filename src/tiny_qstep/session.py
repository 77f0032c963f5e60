"""
Interactive circuit session.

A session owns one circuit, its timeline, a cursor on the timeline and the
last measurement. Every circuit edit rebuilds the timeline; a measurement
collapses the state at the cursor and rebuilds only the steps after it.

Example
-------
>>> from tiny_qstep import CircuitSession
>>> session = CircuitSession(2, seed=3)
>>> session.add_gate("H", [0], 0).add_gate("CNOT", [0, 1], 1)
CircuitSession(qubits=2, gates=2, step=0/2)
>>> session.jump_to_step(2)
>>> result = session.measure([0])
>>> result.outcome in ("q0=0", "q0=1")
True
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence

import numpy as np

from tiny_qstep.backends.measurement import MeasurementResult, measure
from tiny_qstep.circuit import (
    CircuitDefinition,
    GateInstance,
    normalize_initial_bits,
    validate_circuit,
)
from tiny_qstep.config import EngineConfig, enforce_qubit_limit
from tiny_qstep.core.statevector import AmplitudeEntry, enumerate_amplitudes
from tiny_qstep.gates import GateLibrary, default_library
from tiny_qstep.logging import get_logger
from tiny_qstep.timeline import TimelineEntry, build_timeline, rebuild_after_measurement

logger = get_logger(__name__)


class CircuitSession:
    """
    Circuit, timeline, step cursor and last measurement.

    Parameters
    ----------
    num_qubits : int, optional
        Register size; defaults to ``config.default_qubits``.
    initial_state : sequence of int, optional
        Starting bit pattern, coerced with
        :func:`~tiny_qstep.circuit.normalize_initial_bits`.
    library : GateLibrary, optional
        Gate lookup; defaults to the shared library.
    config : EngineConfig, optional
        Defaults to ``EngineConfig()``.
    seed : int, optional
        Measurement seed; overrides ``config.seed``. Must be a
        non-negative integer.
    """

    def __init__(
        self,
        num_qubits: Optional[int] = None,
        initial_state: Optional[Sequence[int]] = None,
        library: Optional[GateLibrary] = None,
        config: Optional[EngineConfig] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.config = config or EngineConfig()
        if seed is not None:
            self.config = replace(self.config, seed=seed)
        self.library = library or default_library(self.config.epsilon)
        self._rng = np.random.default_rng(self.config.seed)

        n = self.config.default_qubits if num_qubits is None else num_qubits
        enforce_qubit_limit(n)
        self._circuit = CircuitDefinition(n, [], normalize_initial_bits(n, initial_state))
        self.timeline: List[TimelineEntry] = []
        self.current_step = 0
        self.measurement: Optional[MeasurementResult] = None
        self._rebuild()

    # -- Properties ---------------------------------------------------------

    @property
    def num_qubits(self) -> int:
        return self._circuit.num_qubits

    @property
    def initial_state(self) -> tuple[int, ...]:
        return self._circuit.initial_state

    @property
    def gates(self) -> List[GateInstance]:
        return list(self._circuit.gates)

    @property
    def current_entry(self) -> TimelineEntry:
        return self.timeline[self.current_step]

    @property
    def num_steps(self) -> int:
        return len(self.timeline)

    def amplitudes(self) -> List[AmplitudeEntry]:
        """Amplitude table of the state at the cursor."""
        return enumerate_amplitudes(self.current_entry.state)

    # -- Internal helpers ---------------------------------------------------

    def _rebuild(self) -> None:
        self.timeline = build_timeline(
            self.num_qubits, self._circuit.gates, self.initial_state, self.library
        )
        self._clamp_step()

    def _clamp_step(self) -> None:
        self.current_step = max(0, min(self.current_step, len(self.timeline) - 1))

    # -- Register -----------------------------------------------------------

    def set_num_qubits(self, value: int) -> None:
        """Resize the register. Clears all gates and the cursor."""
        enforce_qubit_limit(value)
        bits = normalize_initial_bits(value, self.initial_state)
        self._circuit = CircuitDefinition(value, [], bits)
        self.current_step = 0
        self.measurement = None
        self._rebuild()
        logger.info("Register resized to %d qubit(s)", value)

    def set_initial_state(self, bits: Sequence[int]) -> None:
        self._circuit.initial_state = normalize_initial_bits(self.num_qubits, bits)
        self.measurement = None
        self._rebuild()

    # -- Editing ------------------------------------------------------------

    def add_gate(self, name: str, targets: Sequence[int], column: int) -> CircuitSession:
        """Place a gate; negative columns are clamped to 0."""
        self._circuit.add(name, targets, max(0, column), self.library)
        self.measurement = None
        self._rebuild()
        logger.debug("Added %s on %s at column %d", name, list(targets), max(0, column))
        return self

    def remove_gate(self, gate_id: str) -> None:
        if self._circuit.remove(gate_id):
            self.measurement = None
            self._rebuild()

    def move_gate(self, gate_id: str, column: int) -> None:
        """Move a gate to another column; unknown ids are ignored."""
        if self._circuit.move(gate_id, max(0, column)):
            self.measurement = None
            self._rebuild()

    def reset_circuit(self) -> None:
        """Remove every gate and return to step 0."""
        self._circuit.clear()
        self.current_step = 0
        self.measurement = None
        self._rebuild()

    # -- Stepping -----------------------------------------------------------

    def step_forward(self) -> None:
        self.current_step = min(len(self.timeline) - 1, self.current_step + 1)
        self.measurement = None

    def step_backward(self) -> None:
        self.current_step = max(0, self.current_step - 1)
        self.measurement = None

    def jump_to_step(self, step: int) -> None:
        self.current_step = step
        self._clamp_step()
        self.measurement = None

    # -- Measurement --------------------------------------------------------

    def measure(self, qubits: Sequence[int]) -> MeasurementResult:
        """
        Measure ``qubits`` on the state at the cursor.

        The collapsed state replaces the current entry and every later step
        is replayed from it. Earlier steps are untouched.
        """
        next_state, result = measure(
            self.current_entry.state, qubits, self.num_qubits, self._rng
        )
        self.timeline = rebuild_after_measurement(
            self.timeline,
            self.current_step,
            next_state,
            self._circuit.gates,
            self.num_qubits,
            self.library,
        )
        self.measurement = result
        logger.info("Measured %s at step %d: %s", list(result.measured_qubits),
                    self.current_step, result.outcome)
        return result

    # -- Load / export ------------------------------------------------------

    def load_circuit(self, definition: CircuitDefinition) -> None:
        """
        Replace the session's circuit.

        Raises
        ------
        InvalidCircuitError
            If ``definition`` fails validation.
        """
        validate_circuit(definition, self.library)
        bits = normalize_initial_bits(definition.num_qubits, definition.initial_state)
        self._circuit = CircuitDefinition(definition.num_qubits, list(definition.gates), bits)
        self.current_step = 0
        self.measurement = None
        self._rebuild()

    def export_circuit(self) -> CircuitDefinition:
        """Independent copy of the current circuit."""
        return CircuitDefinition(
            self.num_qubits, list(self._circuit.gates), self.initial_state
        )

    def __repr__(self) -> str:
        return (
            f"CircuitSession(qubits={self.num_qubits}, gates={len(self._circuit.gates)}, "
            f"step={self.current_step}/{len(self.timeline) - 1})"
        )
