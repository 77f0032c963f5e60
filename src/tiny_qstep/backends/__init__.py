"""State-vector gate application and measurement."""

from tiny_qstep.backends.statevector import apply_gate
from tiny_qstep.backends.measurement import MeasurementResult, measure

__all__ = ["apply_gate", "measure", "MeasurementResult"]
