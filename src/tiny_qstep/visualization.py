"""
Text rendering of states, measurements and timelines.

Plain ASCII/Unicode output for terminals and logs; no plotting
dependencies.
"""
from typing import Sequence

import numpy as np

from tiny_qstep.backends.measurement import MeasurementResult
from tiny_qstep.core.statevector import StateVector, enumerate_amplitudes
from tiny_qstep.timeline import TimelineEntry

BAR_WIDTH = 40


def format_complex(real: float, imag: float, precision: int = 3) -> str:
    """``0.707 + 0.000i`` style, sign folded into the separator."""
    sign = '+' if imag >= 0 else '-'
    return f"{real:.{precision}f} {sign} {abs(imag):.{precision}f}i"


def format_probability(probability: float, precision: int = 2) -> str:
    """``0.5`` -> ``50.00%``"""
    return f"{probability * 100:.{precision}f}%"


def _bar(probability: float) -> str:
    return '█' * int(round(probability * BAR_WIDTH))


def show_state(state: StateVector, threshold: float = 0.0) -> str:
    """
    Amplitude table with a probability bar per basis state.

    Basis states with probability at or below ``threshold`` are skipped
    (pass a negative threshold to list all of them).
    """
    lines = ["State Vector:", "─" * 70]
    for entry in enumerate_amplitudes(state):
        if entry.probability <= threshold:
            continue
        lines.append(
            f"{entry.basis_label}: {_bar(entry.probability):{BAR_WIDTH}s} "
            f"{format_complex(entry.real, entry.imag)}  "
            f"({format_probability(entry.probability)})"
        )
    return '\n'.join(lines)


def show_measurement(result: MeasurementResult) -> str:
    """Probability of every pattern, with the sampled outcome marked."""
    qubits = ', '.join(f"q{q}" for q in result.measured_qubits)
    lines = [f"Measurement of {qubits}:", "─" * 70]
    width = max(len(label) for label in result.probabilities)
    for label, prob in result.probabilities.items():
        marker = '  ◀' if label == result.outcome else ''
        lines.append(
            f"{label:{width}s}: {_bar(prob):{BAR_WIDTH}s} {format_probability(prob):>7s}{marker}"
        )
    lines.append(f"Outcome: {result.outcome}")
    return '\n'.join(lines)


def show_timeline(timeline: Sequence[TimelineEntry]) -> str:
    """One line per step listing the gates applied at that step."""
    lines = []
    for entry in timeline:
        if entry.is_initial:
            lines.append(f"step {entry.step}: initial state")
            continue
        gates = ', '.join(
            f"{g.name}({', '.join(f'q{q}' for q in g.targets)})" for g in entry.gates
        )
        nonzero = int(np.count_nonzero(entry.state.probabilities() > 1e-12))
        lines.append(
            f"step {entry.step}: column {entry.column} │ {gates} │ {nonzero} basis state(s)"
        )
    return '\n'.join(lines)
