"""Tests for partial projective measurement."""

import numpy as np
import pytest

from tiny_qstep.backends import apply_gate, measure
from tiny_qstep.backends.measurement import (
    collapse,
    describe_pattern,
    measured_qubit_set,
    sample_pattern,
    subset_probabilities,
)
from tiny_qstep.core import StateVector, clone_state, create_basis_state, create_zero_state
from tiny_qstep.exceptions import EmptySelectionError, NormalizationError, OutOfRangeError


@pytest.fixture
def rng():
    return np.random.default_rng(42)


def bell_state():
    state = create_zero_state(2)
    apply_gate(state, "H", [0], 2)
    apply_gate(state, "CNOT", [0, 1], 2)
    return state


def ghz_state():
    state = create_zero_state(3)
    apply_gate(state, "H", [0], 3)
    apply_gate(state, "CNOT", [0, 1], 3)
    apply_gate(state, "CNOT", [1, 2], 3)
    return state


# ---------------------------------------------------------------------------
# Qubit selection and labels
# ---------------------------------------------------------------------------

def test_qubits_sorted_and_deduplicated():
    assert measured_qubit_set([2, 0, 2], 3) == (0, 2)


def test_qubits_from_generator(rng):
    assert measured_qubit_set((q for q in (1, 0)), 2) == (0, 1)
    _, result = measure(bell_state(), (q for q in [0]), 2, rng)
    assert result.measured_qubits == (0,)


def test_empty_generator_is_empty_selection():
    with pytest.raises(EmptySelectionError):
        measured_qubit_set(iter(()), 2)


def test_empty_selection():
    with pytest.raises(EmptySelectionError):
        measure(create_zero_state(2), [], 2)


@pytest.mark.parametrize("qubits", [[2], [-1], [0, 5]])
def test_qubit_out_of_range(qubits):
    with pytest.raises(OutOfRangeError):
        measure(create_zero_state(2), qubits, 2)


def test_describe_pattern_lowest_qubit_is_lsb():
    assert describe_pattern(0b01, (0, 2)) == "q0=1 q2=0"
    assert describe_pattern(0b10, (0, 2)) == "q0=0 q2=1"


# ---------------------------------------------------------------------------
# Probabilities
# ---------------------------------------------------------------------------

def test_subset_probabilities_bell():
    np.testing.assert_allclose(subset_probabilities(bell_state(), (0,)), [0.5, 0.5])
    np.testing.assert_allclose(subset_probabilities(bell_state(), (0, 1)), [0.5, 0, 0, 0.5])


def test_probabilities_keyed_by_label(rng):
    _, result = measure(ghz_state(), [0, 2], 3, rng)
    assert set(result.probabilities) == {"q0=0 q2=0", "q0=1 q2=0", "q0=0 q2=1", "q0=1 q2=1"}
    assert sum(result.probabilities.values()) == pytest.approx(1.0)
    assert result.probabilities["q0=1 q2=1"] == pytest.approx(0.5)
    assert result.probabilities["q0=1 q2=0"] == pytest.approx(0.0)


def test_deterministic_basis_state(rng):
    state = create_basis_state(3, [1, 0, 1])
    collapsed, result = measure(state, [0, 1, 2], 3, rng)
    assert result.outcome == "q0=1 q1=0 q2=1"
    assert result.pattern == 0b101
    assert result.probability() == pytest.approx(1.0)
    assert collapsed == state


# ---------------------------------------------------------------------------
# Collapse
# ---------------------------------------------------------------------------

def test_measure_does_not_mutate_input(rng):
    state = bell_state()
    before = clone_state(state)
    measure(state, [0], 2, rng)
    assert state == before


def test_bell_outcomes_are_correlated():
    for seed in range(20):
        collapsed, result = measure(bell_state(), [0], 2, np.random.default_rng(seed))
        probs = collapsed.probabilities()
        if result.outcome == "q0=0":
            np.testing.assert_allclose(probs, [1, 0, 0, 0], atol=1e-12)
        else:
            np.testing.assert_allclose(probs, [0, 0, 0, 1], atol=1e-12)


def test_remeasure_is_repeatable(rng):
    collapsed, first = measure(ghz_state(), [1, 2], 3, rng)
    for _ in range(5):
        collapsed, again = measure(collapsed, [1, 2], 3, rng)
        assert again.outcome == first.outcome
        assert again.probability() == pytest.approx(1.0)


def test_collapse_renormalizes():
    state = create_zero_state(2)
    apply_gate(state, "H", [0], 2)
    apply_gate(state, "H", [1], 2)
    collapsed, result = measure(state, [1], 2, np.random.default_rng(3))
    assert collapsed.norm() == pytest.approx(1.0)
    # q0 stays in superposition
    nonzero = np.flatnonzero(collapsed.probabilities() > 1e-12)
    assert len(nonzero) == 2
    np.testing.assert_allclose(collapsed.probabilities()[nonzero], [0.5, 0.5])


def test_collapse_of_zero_state_raises():
    state = StateVector(np.zeros(4), np.zeros(4))
    with pytest.raises(NormalizationError):
        collapse(state, (0,), 0)


def test_zero_norm_state_cannot_be_measured(rng):
    with pytest.raises(NormalizationError):
        measure(StateVector(np.zeros(2), np.zeros(2)), [0], 1, rng)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def test_sample_skips_zero_probability_patterns():
    rng = np.random.default_rng(0)
    table = np.array([0.0, 0.0, 1.0, 0.0])
    assert all(sample_pattern(table, rng) == 2 for _ in range(50))


def test_sample_all_zero_table_returns_zero():
    assert sample_pattern(np.zeros(4)) == 0


def test_sample_frequencies_follow_born_rule():
    rng = np.random.default_rng(123)
    table = np.array([0.1, 0.2, 0.3, 0.4])
    counts = np.bincount([sample_pattern(table, rng) for _ in range(4000)], minlength=4)
    np.testing.assert_allclose(counts / 4000, table, atol=0.03)


def test_seeded_measurement_is_reproducible():
    outcomes = [
        measure(ghz_state(), [0], 3, np.random.default_rng(99))[1].outcome
        for _ in range(3)
    ]
    assert len(set(outcomes)) == 1
