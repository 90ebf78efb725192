# ketsim/validation.py
"""Invariant checks shared by states, gates and measurement."""
from typing import Iterable, Optional, Tuple

import numpy as np

from .config import get_settings
from .errors import DimensionMismatchError, InvalidGateError, InvalidStateError
from .scalar import norm2

# Normalization tolerance per precision.
_TOLERANCES = {
    np.dtype(np.complex128): 1e-9,
    np.dtype(np.complex64): 1e-6,
}


def resolve_dtype(dtype=None) -> np.dtype:
    dt = np.dtype(dtype if dtype is not None else get_settings().DTYPE)
    if dt not in _TOLERANCES:
        raise TypeError(f"unsupported amplitude dtype: {dt}")
    return dt


def default_tolerance(dtype=None) -> float:
    return _TOLERANCES[resolve_dtype(dtype)]


def resolve_tolerance(tolerance: Optional[float] = None, dtype=None) -> float:
    if tolerance is not None:
        return float(tolerance)
    configured = get_settings().TOLERANCE
    if configured is not None:
        return float(configured)
    return default_tolerance(dtype)


def is_power_of_two(m: int) -> bool:
    return m > 0 and (m & (m - 1)) == 0


def qubits_for_length(length: int) -> int:
    """Number of qubits for a vector of this length (at least one qubit)."""
    if length < 2 or not is_power_of_two(length):
        raise InvalidStateError(
            "length", f"amplitude count must be a power of two >= 2, got {length}")
    return length.bit_length() - 1


def total_probability(psi: np.ndarray) -> float:
    return float(np.sum(norm2(psi)))


def check_normalized(psi: np.ndarray, tol: float):
    n2 = total_probability(psi)
    if not (abs(1.0 - n2) <= tol):
        raise InvalidStateError("not-normalized", f"sum of |amplitude|^2 is {n2}, expected 1")


def is_unitary(U: np.ndarray, tol: float) -> bool:
    eye = np.eye(U.shape[0], dtype=U.dtype)
    return bool(np.allclose(U @ U.conj().T, eye, atol=tol, rtol=0))


def gate_qubits(U: np.ndarray) -> int:
    """k for a 2**k x 2**k matrix."""
    if U.ndim != 2 or U.shape[0] != U.shape[1] or U.shape[0] < 2 or not is_power_of_two(U.shape[0]):
        raise InvalidGateError("shape", f"gate matrix must be 2**k x 2**k with k >= 1, got {U.shape}")
    return U.shape[0].bit_length() - 1


def check_unitary(U: np.ndarray, tol: float):
    if not is_unitary(U, tol):
        raise InvalidGateError("not-unitary", "U @ U^dagger differs from the identity")


def check_positions(n: int, positions: Iterable[int], count: Optional[int] = None) -> Tuple[int, ...]:
    """Validate qubit positions against an n-qubit system; returns them as a tuple."""
    pos = tuple(positions)
    for q in pos:
        if isinstance(q, bool) or not isinstance(q, (int, np.integer)):
            raise DimensionMismatchError(f"qubit position must be an int, got {q!r}")
    pos = tuple(int(q) for q in pos)
    if count is not None and len(pos) != count:
        raise DimensionMismatchError(f"expected {count} qubit position(s), got {len(pos)}")
    if not pos:
        raise DimensionMismatchError("at least one qubit position is required")
    if any(q < 0 or q >= n for q in pos):
        raise DimensionMismatchError(f"qubit positions {pos} out of range for {n} qubit(s)")
    if len(set(pos)) != len(pos):
        raise DimensionMismatchError(f"qubit positions must be distinct, got {pos}")
    return pos
