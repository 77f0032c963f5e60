"""Core state representation and complex arithmetic."""
from .statevector import (
    AmplitudeEntry,
    StateVector,
    basis_label,
    clone_state,
    create_basis_state,
    create_zero_state,
    enumerate_amplitudes,
    normalize_state,
)
from . import complex

__all__ = [
    'AmplitudeEntry',
    'StateVector',
    'basis_label',
    'clone_state',
    'create_basis_state',
    'create_zero_state',
    'enumerate_amplitudes',
    'normalize_state',
    'complex',
]
