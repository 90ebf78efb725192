# ketsim/__init__.py
"""Dense state-vector simulation of small qubit systems."""

from .circuit import Circuit, CircuitResult
from .config import Settings, get_settings
from .errors import (
    DegenerateStateError,
    DimensionMismatchError,
    InvalidGateError,
    InvalidStateError,
    KetsimError,
    NormalizationDriftError,
)
from .gates import (
    CCX,
    CNOT,
    CX,
    CZ,
    PHASE,
    RX,
    RY,
    RZ,
    SDG,
    STANDARD_GATES,
    SWAP,
    SX,
    TDG,
    TOFFOLI,
    Gate,
    H,
    I,
    S,
    T,
    X,
    Y,
    Z,
    get_gate,
)
from .measurement import MeasurementOutcome
from .state import (
    KET_MINUS,
    KET_ONE,
    KET_PLUS,
    KET_ZERO,
    AmplitudeVector,
    basis_state,
    qubit,
    tensor,
    tensor_product,
)
from .system import CompositeSystem

__all__ = [
    "AmplitudeVector",
    "CCX",
    "CNOT",
    "CX",
    "CZ",
    "Circuit",
    "CircuitResult",
    "CompositeSystem",
    "DegenerateStateError",
    "DimensionMismatchError",
    "Gate",
    "H",
    "I",
    "InvalidGateError",
    "InvalidStateError",
    "KET_MINUS",
    "KET_ONE",
    "KET_PLUS",
    "KET_ZERO",
    "KetsimError",
    "MeasurementOutcome",
    "NormalizationDriftError",
    "PHASE",
    "RX",
    "RY",
    "RZ",
    "S",
    "SDG",
    "STANDARD_GATES",
    "SWAP",
    "SX",
    "Settings",
    "T",
    "TDG",
    "TOFFOLI",
    "X",
    "Y",
    "Z",
    "basis_state",
    "get_gate",
    "get_settings",
    "qubit",
    "tensor",
    "tensor_product",
]
