# ketsim/system.py
import logging
from typing import Dict, Optional, Sequence

import numpy as np

from . import measurement
from .backends import load_backend
from .bits import bit_position, permutation
from .config import get_settings
from .errors import DimensionMismatchError, InvalidStateError
from .gates import Gate
from .measurement import MeasurementOutcome
from .state import AmplitudeVector, tensor
from .validation import check_positions, resolve_dtype, resolve_tolerance

logger = logging.getLogger(__name__)


class CompositeSystem:
    """
    N qubits held as one joint amplitude vector of length 2**N.

    Qubit 0 is the most significant bit of the basis index. The system owns
    its vector exclusively; ``apply_gate`` and ``measure`` are the only
    operations that change it.
    """

    def __init__(self, qubits: Sequence[AmplitudeVector], backend: Optional[str] = None,
                 tolerance: Optional[float] = None, dtype=None):
        qubits = list(qubits)
        if not qubits:
            raise DimensionMismatchError("a system needs at least one qubit")
        for i, q in enumerate(qubits):
            if not isinstance(q, AmplitudeVector) or q.n != 1:
                raise DimensionMismatchError(f"initial state {i} is not a single-qubit vector")
        self._adopt(tensor(*qubits), backend, tolerance, dtype)

    def _adopt(self, vector: AmplitudeVector, backend, tolerance, dtype):
        dt = resolve_dtype(dtype if dtype is not None else vector.dtype)
        tol = resolve_tolerance(tolerance, dt)
        # drift the input already carries is accepted, then scaled away
        slack = abs(1.0 - vector.norm2())
        state = AmplitudeVector(n=vector.n, psi=vector.psi.astype(dt),
                                tolerance=max(tol, vector.tolerance) + 2 * slack)
        state.tolerance = tol
        self._state = state.renormalize()
        self.backend = backend or get_settings().BACKEND
        load_backend(self.backend)
        logger.debug("created %d-qubit system (%s, %s backend)", vector.n, dt, self.backend)

    @classmethod
    def zeros(cls, n: int, **kwargs) -> "CompositeSystem":
        """|0...0> on n qubits."""
        if n < 1:
            raise DimensionMismatchError(f"a system needs at least one qubit, got {n}")
        return cls.from_vector(AmplitudeVector.zero(n, dtype=kwargs.get("dtype")), **kwargs)

    @classmethod
    def from_vector(cls, vector: AmplitudeVector, backend: Optional[str] = None,
                    tolerance: Optional[float] = None, dtype=None) -> "CompositeSystem":
        """System over an arbitrary (possibly entangled) joint state; the vector is copied."""
        system = cls.__new__(cls)
        system._adopt(vector, backend, tolerance, dtype)
        return system

    # ---------- read-only accessors ----------

    @property
    def num_qubits(self) -> int:
        return self._state.n

    n = num_qubits

    @property
    def dtype(self):
        return self._state.dtype

    @property
    def tolerance(self) -> float:
        return self._state.tolerance

    def bit_position(self, qubit: int) -> int:
        (q,) = check_positions(self.num_qubits, [qubit])
        return bit_position(self.num_qubits, q)

    def snapshot(self) -> AmplitudeVector:
        """Independent copy of the current state."""
        return self._state.copy()

    def amplitudes(self) -> np.ndarray:
        return self._state.psi.copy()

    def probabilities(self, positions: Optional[Sequence[int]] = None) -> np.ndarray:
        """Marginal outcome probabilities without collapsing (all qubits by default)."""
        if positions is None:
            positions = range(self.num_qubits)
        return measurement.marginal_probabilities(self._state, positions)

    def sample_counts(self, shots: int, randomness,
                      positions: Optional[Sequence[int]] = None) -> Dict[str, int]:
        if positions is None:
            positions = range(self.num_qubits)
        return measurement.sample_counts(self._state, positions, shots, randomness)

    # ---------- mutators ----------

    def apply_gate(self, gate: Gate, positions: Sequence[int],
                   backend: Optional[str] = None) -> "CompositeSystem":
        gate.apply(self, positions, backend=backend)
        return self

    def measure(self, positions: Sequence[int], randomness) -> MeasurementOutcome:
        return measurement.measure(self._state, positions, randomness)

    def measure_all(self, randomness) -> MeasurementOutcome:
        return self.measure(range(self.num_qubits), randomness)

    # ---------- derived systems ----------

    def reduce(self, positions: Sequence[int]) -> "CompositeSystem":
        """
        New system without ``positions``, which must hold a definite basis
        value (e.g. right after measuring them). Remaining qubits keep their
        relative order.
        """
        pos = check_positions(self.num_qubits, positions)
        if len(pos) == self.num_qubits:
            raise DimensionMismatchError("cannot remove every qubit of a system")
        probs = self.probabilities(pos)
        value = int(np.argmax(probs))
        if abs(1.0 - probs[value]) > self.tolerance:
            raise InvalidStateError(
                "not-separable", f"qubits {pos} are not in a definite basis state")
        rows = permutation(self.num_qubits, pos).reshape(1 << len(pos), -1)
        rest = AmplitudeVector(n=self.num_qubits - len(pos), psi=self._state.psi[rows[value]],
                               tolerance=self.tolerance)
        return CompositeSystem.from_vector(rest, backend=self.backend,
                                           tolerance=self.tolerance, dtype=self.dtype)

    def __repr__(self):
        return f"CompositeSystem(n={self.num_qubits}, backend={self.backend!r}, state={self._state!r})"
