# ketsim/state.py
from dataclasses import dataclass
from functools import reduce
from typing import Mapping, Optional, Sequence, Union

import numpy as np

from .bits import format_bits
from .errors import DegenerateStateError, InvalidStateError, NormalizationDriftError
from .scalar import ScalarLike, as_complex, norm2
from .validation import (
    check_normalized,
    qubits_for_length,
    resolve_dtype,
    resolve_tolerance,
    total_probability,
)

Label = Union[str, int]


@dataclass(eq=False, repr=False)
class AmplitudeVector:
    """
    Normalized state of n >= 1 qubits: ``psi`` has 2**n complex entries whose
    squared magnitudes sum to 1 within ``tolerance``.

    Basis index i corresponds to the bitstring ``format(i, f"0{n}b")`` with
    qubit 0 leftmost. ``psi`` is used as given (no copy); use
    ``from_amplitudes`` to build from caller-owned data.
    """
    n: int
    psi: np.ndarray  # shape (2**n,), dtype complex128/complex64
    tolerance: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.n, bool) or not isinstance(self.n, (int, np.integer)) or self.n < 1:
            raise InvalidStateError("length", f"qubit count must be an int >= 1, got {self.n!r}")
        self.n = int(self.n)
        psi = np.ascontiguousarray(self.psi)
        if psi.ndim != 1 or psi.shape[0] != 1 << self.n:
            raise InvalidStateError(
                "length", f"{self.n} qubit(s) need {1 << self.n} amplitudes, got shape {psi.shape}")
        if psi.dtype not in (np.complex64, np.complex128):
            psi = psi.astype(resolve_dtype())
        self.psi = psi
        self.tolerance = resolve_tolerance(self.tolerance, psi.dtype)
        check_normalized(self.psi, self.tolerance)

    # ---------- construction ----------

    @staticmethod
    def zero(n: int, dtype=None) -> "AmplitudeVector":
        psi = np.zeros(1 << n, dtype=resolve_dtype(dtype))
        psi[0] = 1.0 + 0.0j
        return AmplitudeVector(n=n, psi=psi)

    @staticmethod
    def from_amplitudes(amplitudes: Sequence[ScalarLike], tolerance: Optional[float] = None,
                        dtype=None) -> "AmplitudeVector":
        """
        Validated copy of the given amplitudes (length first, then norm).
        A complex ndarray keeps its own precision unless ``dtype`` is given.
        """
        if dtype is None and isinstance(amplitudes, np.ndarray) and np.iscomplexobj(amplitudes):
            dtype = amplitudes.dtype
        dt = resolve_dtype(dtype)
        if isinstance(amplitudes, np.ndarray):
            psi = np.array(amplitudes, dtype=dt).ravel()
        else:
            psi = np.array([as_complex(a) for a in amplitudes], dtype=dt)
        n = qubits_for_length(psi.shape[0])
        return AmplitudeVector(n=n, psi=psi, tolerance=tolerance)

    @staticmethod
    def from_terms(terms: Mapping[Label, ScalarLike], n: Optional[int] = None,
                   tolerance: Optional[float] = None, dtype=None) -> "AmplitudeVector":
        """
        Build ``sum_j c_j |label_j>``.

        Labels are bitstrings (qubit 0 leftmost) or integers; integer labels
        need ``n``. Repeated labels are summed.
        """
        if n is None:
            widths = {len(lbl) for lbl in terms if isinstance(lbl, str)}
            if len(widths) != 1 or any(not isinstance(lbl, str) for lbl in terms):
                raise InvalidStateError("length", "cannot infer qubit count from labels; pass n")
            n = widths.pop()
        psi = np.zeros(1 << n, dtype=resolve_dtype(dtype))
        for label, c in terms.items():
            psi[_index(label, n)] += as_complex(c)
        return AmplitudeVector(n=n, psi=psi, tolerance=tolerance)

    # ---------- raw view ----------

    @property
    def dtype(self):
        return self.psi.dtype

    def norm2(self) -> float:
        return total_probability(self.psi)

    def probabilities(self) -> np.ndarray:
        return norm2(self.psi)

    def amplitudes(self) -> np.ndarray:
        """Copy of the amplitudes, in the vector's own precision."""
        return self.psi.copy()

    def amplitude(self, label: Label) -> complex:
        return complex(self.psi[_index(label, self.n)])

    def as_numpy(self) -> np.ndarray:
        return self.psi

    # ---------- basis-decomposition view ----------

    def terms(self, atol: float = 0.0):
        """``{bitstring: amplitude}`` for amplitudes with magnitude above ``atol``."""
        out = {}
        for i, a in enumerate(self.psi):
            if abs(a) > atol:
                out[format_bits(i, self.n)] = complex(a)
        return out

    # ---------- invariants ----------

    def check_normalized(self, tol: Optional[float] = None):
        tol = self.tolerance if tol is None else tol
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise NormalizationDriftError(f"Normalization failed: ||psi||^2={n2}")

    def renormalize(self) -> "AmplitudeVector":
        """Rescale in place to unit norm (used after a measurement collapse)."""
        self.require_writable()
        n2 = self.norm2()
        if n2 < self.tolerance:
            raise DegenerateStateError(
                f"cannot renormalize: remaining probability {n2:.3e} is below {self.tolerance:.1e}")
        self.psi /= np.sqrt(n2)
        return self

    # ---------- value semantics ----------

    def copy(self) -> "AmplitudeVector":
        out = object.__new__(AmplitudeVector)
        out.n, out.psi, out.tolerance = self.n, self.psi.copy(), self.tolerance
        return out

    def isclose(self, other: "AmplitudeVector", tol: Optional[float] = None) -> bool:
        tol = self.tolerance if tol is None else tol
        return self.n == other.n and bool(np.allclose(self.psi, other.psi, atol=tol, rtol=0))

    def __eq__(self, other):
        if not isinstance(other, AmplitudeVector):
            return NotImplemented
        return self.n == other.n and bool(np.array_equal(self.psi, other.psi))

    __hash__ = None

    def __len__(self):
        return self.psi.shape[0]

    def __repr__(self):
        body = " + ".join(f"({a:.4g})|{lbl}>" for lbl, a in self.terms(atol=1e-12).items())
        return f"AmplitudeVector(n={self.n}, {body or '0'})"

    def require_writable(self):
        if not self.psi.flags.writeable:
            raise InvalidStateError(
                "read-only", "this state is read-only (e.g. a KET_* constant); work on .copy()")

    def _freeze(self) -> "AmplitudeVector":
        self.psi.setflags(write=False)
        return self


def _index(label: Label, n: int) -> int:
    if isinstance(label, str):
        if len(label) != n or set(label) - {"0", "1"}:
            raise InvalidStateError("length", f"{label!r} is not a {n}-bit basis label")
        return int(label, 2)
    i = int(label)
    if not 0 <= i < (1 << n):
        raise InvalidStateError("length", f"basis index {i} out of range for {n} qubit(s)")
    return i


def qubit(alpha: ScalarLike, beta: ScalarLike, tolerance: Optional[float] = None,
          dtype=None) -> AmplitudeVector:
    """alpha|0> + beta|1>."""
    return AmplitudeVector.from_amplitudes([alpha, beta], tolerance=tolerance, dtype=dtype)


def basis_state(label: Label, n: Optional[int] = None, dtype=None) -> AmplitudeVector:
    """Computational basis ket, e.g. ``basis_state("01")`` or ``basis_state(1, n=2)``."""
    if n is None:
        if not isinstance(label, str):
            raise InvalidStateError("length", "integer labels need n")
        n = len(label)
    psi = np.zeros(1 << n, dtype=resolve_dtype(dtype))
    psi[_index(label, n)] = 1.0
    return AmplitudeVector(n=n, psi=psi)


def tensor_product(a: AmplitudeVector, b: AmplitudeVector) -> AmplitudeVector:
    """
    a ⊗ b: entry (i, j) at index i * len(b) + j, so a's qubits come first.
    """
    tol = max(a.tolerance, b.tolerance)
    # drift already present in the inputs is allowed to carry over
    slack = abs(1.0 - a.norm2()) + abs(1.0 - b.norm2())
    out = AmplitudeVector(n=a.n + b.n, psi=np.kron(a.psi, b.psi), tolerance=tol + 2 * slack)
    out.tolerance = tol
    return out


def tensor(*vectors: AmplitudeVector) -> AmplitudeVector:
    if not vectors:
        raise InvalidStateError("length", "tensor() needs at least one vector")
    if len(vectors) == 1:
        return vectors[0].copy()
    return reduce(tensor_product, vectors)


_S = 1.0 / np.sqrt(2.0)

KET_ZERO = basis_state("0", dtype=np.complex128)._freeze()
KET_ONE = basis_state("1", dtype=np.complex128)._freeze()
KET_PLUS = qubit(_S, _S, dtype=np.complex128)._freeze()
KET_MINUS = qubit(_S, -_S, dtype=np.complex128)._freeze()
