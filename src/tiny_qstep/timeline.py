"""
Step-by-step execution timeline.

A timeline is an ordered list of immutable snapshots. Step 0 is the
initial basis state; every later step applies all gates of one column.
Same-column gates are applied one after another in ``(column, id)`` order,
which matches simultaneous execution when their targets are disjoint. The
engine does not check disjointness.

Example
-------
>>> from tiny_qstep.circuit import CircuitDefinition
>>> from tiny_qstep.timeline import build_timeline
>>> qc = CircuitDefinition(2).h(0, column=0).h(1, column=0).cnot(0, 1)
>>> [len(entry.gates) for entry in build_timeline(qc.num_qubits, qc.gates)]
[0, 2, 1]
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import groupby
from typing import Iterable, List, Optional, Sequence, Tuple

from tiny_qstep.backends.statevector import apply_gate
from tiny_qstep.circuit import GateInstance
from tiny_qstep.core.statevector import StateVector, clone_state, create_basis_state
from tiny_qstep.exceptions import OutOfRangeError
from tiny_qstep.gates import GateLibrary, default_library
from tiny_qstep.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TimelineEntry:
    """
    Snapshot of the state after one execution step.

    The state's buffers are read-only. ``gates`` is empty and ``column`` is
    None only for the initial entry.
    """
    step: int
    state: StateVector
    gates: Tuple[GateInstance, ...] = ()
    column: Optional[int] = None

    @property
    def is_initial(self) -> bool:
        return self.column is None


def order_gates(gates: Iterable[GateInstance]) -> List[GateInstance]:
    """Sort by column, then id, so replays are deterministic."""
    return sorted(gates, key=lambda g: (g.column, g.id))


def group_by_column(
    gates: Iterable[GateInstance],
) -> List[Tuple[int, Tuple[GateInstance, ...]]]:
    """``[(column, gates_at_column), ...]`` in ascending column order."""
    return [
        (column, tuple(group))
        for column, group in groupby(order_gates(gates), key=lambda g: g.column)
    ]


def replay_columns(
    state: StateVector,
    gates: Iterable[GateInstance],
    num_qubits: int,
    start_step: int,
    library: Optional[GateLibrary] = None,
) -> List[TimelineEntry]:
    """
    Apply ``gates`` column by column on top of ``state``.

    ``state`` is not modified. Returns one entry per distinct column,
    numbered from ``start_step + 1``.
    """
    library = library or default_library()
    entries: List[TimelineEntry] = []
    previous = state
    for offset, (column, group) in enumerate(group_by_column(gates), start=1):
        working = clone_state(previous)
        for gate in group:
            apply_gate(working, gate.name, gate.targets, num_qubits, library)
        working.freeze()
        entries.append(
            TimelineEntry(step=start_step + offset, state=working, gates=group, column=column)
        )
        previous = working
    return entries


def build_timeline(
    num_qubits: int,
    gates: Iterable[GateInstance],
    initial_bits: Optional[Sequence[int]] = None,
    library: Optional[GateLibrary] = None,
) -> List[TimelineEntry]:
    """
    Replay a circuit into snapshots, one per distinct column.

    Parameters
    ----------
    num_qubits : int
        Register size, 1-6.
    gates : iterable of GateInstance
        Placements in any order.
    initial_bits : sequence of int, optional
        Starting classical pattern, default all zero.
    library : GateLibrary, optional
        Gate lookup; defaults to the shared library.

    Returns
    -------
    list of TimelineEntry
        Step 0 with the basis state, then one entry per column in ascending
        order. No randomness is involved, so equal inputs give bit-identical
        timelines.
    """
    initial = create_basis_state(num_qubits, initial_bits).freeze()
    timeline = [TimelineEntry(step=0, state=initial)]
    timeline.extend(replay_columns(initial, gates, num_qubits, 0, library))
    logger.debug(
        "Built timeline: %d qubit(s), %d step(s)", num_qubits, len(timeline) - 1
    )
    return timeline


def rebuild_after_measurement(
    timeline: Sequence[TimelineEntry],
    step: int,
    collapsed_state: StateVector,
    gates: Iterable[GateInstance],
    num_qubits: int,
    library: Optional[GateLibrary] = None,
) -> List[TimelineEntry]:
    """
    Splice a collapsed state into a timeline and replay what follows.

    Entries before ``step`` are kept. The entry at ``step`` keeps its gates
    and column but takes a copy of ``collapsed_state``. Only gates at
    columns strictly after that entry's column are replayed (the initial
    entry counts as column -1), producing steps ``step + 1`` onward.

    Raises
    ------
    OutOfRangeError
        ``step`` is not an index into ``timeline``.
    """
    if not 0 <= step < len(timeline):
        raise OutOfRangeError(f"Step {step} outside timeline of length {len(timeline)}")

    current = timeline[step]
    current_column = -1 if current.column is None else current.column
    base = TimelineEntry(
        step=current.step,
        state=clone_state(collapsed_state).freeze(),
        gates=current.gates,
        column=current.column,
    )
    future = [g for g in gates if g.column > current_column]

    rebuilt = list(timeline[:step])
    rebuilt.append(base)
    rebuilt.extend(replay_columns(base.state, future, num_qubits, step, library))
    logger.debug(
        "Rebuilt timeline from step %d: replayed %d gate(s)", step, len(future)
    )
    return rebuilt
