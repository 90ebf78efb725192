# ketsim/measurement.py
"""
Measurement in the computational basis.

Outcomes for the measured positions (q_0, ..., q_{k-1}) are encoded as the
integer whose most significant bit is q_0. Sampling walks the cumulative
probabilities of the outcomes in ascending integer order, so the same
sequence of uniform draws always yields the same outcomes.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from .bits import format_bits, permutation
from .errors import DegenerateStateError
from .scalar import norm2
from .state import AmplitudeVector
from .validation import check_positions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeasurementOutcome:
    positions: Tuple[int, ...]
    value: int
    probability: float  # computed at sampling time

    @property
    def bits(self) -> Tuple[int, ...]:
        return tuple(int(c) for c in self.bitstring)

    @property
    def bitstring(self) -> str:
        return format_bits(self.value, len(self.positions))


def draw(randomness) -> float:
    """
    One uniform sample in [0, 1) from a numpy Generator, a random.Random,
    anything else with a ``random()`` method, or a zero-argument callable.
    """
    if hasattr(randomness, "random"):
        u = randomness.random()
    elif callable(randomness):
        u = randomness()
    else:
        raise TypeError(f"{randomness!r} is not a randomness source")
    u = float(u)
    if not 0.0 <= u < 1.0:
        raise ValueError(f"randomness source returned {u}, expected a value in [0, 1)")
    return u


def marginal_probabilities(state: AmplitudeVector, positions: Sequence[int]) -> np.ndarray:
    """P(outcome) for every outcome of ``positions``, summed over the other qubits."""
    pos = check_positions(state.n, positions)
    perm = permutation(state.n, pos)
    return norm2(state.psi[perm]).reshape(1 << len(pos), -1).sum(axis=1)


def choose_outcome(probabilities: np.ndarray, u: float, tol: float) -> int:
    """
    Outcome whose cumulative interval contains ``u``. Outcomes below ``tol``
    get an empty interval and are never chosen.
    """
    p = np.where(probabilities < tol, 0.0, probabilities)
    cum = np.cumsum(p)
    if cum[-1] < tol:
        raise DegenerateStateError(
            f"every outcome has probability below {tol:.1e} (total {float(np.sum(probabilities)):.3e})")
    i = int(np.searchsorted(cum, u, side="right"))
    if i == len(p):
        # u fell past the accumulated mass by rounding
        i = int(np.flatnonzero(p)[-1])
    return i


def collapse(state: AmplitudeVector, positions: Sequence[int], value: int) -> AmplitudeVector:
    """Zero every amplitude inconsistent with ``value`` on ``positions``, then renormalize."""
    pos = check_positions(state.n, positions)
    state.require_writable()
    rows = permutation(state.n, pos).reshape(1 << len(pos), -1)
    if not 0 <= value < rows.shape[0]:
        raise ValueError(f"outcome {value} out of range for {len(pos)} measured qubit(s)")
    keep = rows[value]
    kept = state.psi[keep]
    state.psi[:] = 0
    state.psi[keep] = kept
    return state.renormalize()


def measure(state: AmplitudeVector, positions: Sequence[int], randomness) -> MeasurementOutcome:
    pos = check_positions(state.n, positions)
    state.require_writable()
    probs = marginal_probabilities(state, pos)
    value = choose_outcome(probs, draw(randomness), state.tolerance)
    collapse(state, pos, value)
    outcome = MeasurementOutcome(pos, value, float(probs[value]))
    logger.debug("measured qubits %s -> %s (p=%.6f)", pos, outcome.bitstring, outcome.probability)
    return outcome


def sample_counts(state: AmplitudeVector, positions: Sequence[int], shots: int,
                  randomness) -> Dict[str, int]:
    """Histogram of ``shots`` independent draws; the state is not modified."""
    if shots < 0:
        raise ValueError("shots must be non-negative")
    pos = check_positions(state.n, positions)
    probs = marginal_probabilities(state, pos)
    counts: Dict[str, int] = {}
    for _ in range(shots):
        key = format_bits(choose_outcome(probs, draw(randomness), state.tolerance), len(pos))
        counts[key] = counts.get(key, 0) + 1
    return dict(sorted(counts.items()))
