# ketsim/gates.py
import logging
from dataclasses import InitVar, dataclass
from typing import Optional, Sequence

import numpy as np

from .backends import load_backend
from .errors import InvalidGateError
from .state import AmplitudeVector
from .validation import check_positions, check_unitary, gate_qubits, resolve_tolerance

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Gate:
    """
    Unitary 2^k x 2^k matrix acting on k qubits.

    Row/column index r of ``matrix`` is the local index of the targeted
    qubits, the first target position being its most significant bit. So
    ``CNOT`` applied to ``(c, t)`` uses c as control.
    Unitarity is checked once, here; ``apply`` only re-checks the norm.
    """
    name: str
    matrix: np.ndarray
    tolerance: InitVar[Optional[float]] = None

    def __post_init__(self, tolerance):
        try:
            U = np.array(self.matrix, dtype=np.complex128)
        except (TypeError, ValueError) as e:
            raise InvalidGateError("shape", f"not a numeric matrix: {e}") from e
        gate_qubits(U)
        check_unitary(U, resolve_tolerance(tolerance, np.complex128))
        U.setflags(write=False)
        object.__setattr__(self, "matrix", U)

    @staticmethod
    def from_matrix(matrix, name: str = "U", tolerance: Optional[float] = None) -> "Gate":
        return Gate(name, matrix, tolerance)

    @property
    def num_qubits(self) -> int:
        return self.matrix.shape[0].bit_length() - 1

    @property
    def dim(self) -> int:
        return self.matrix.shape[0]

    def apply(self, target, positions: Sequence[int], backend: Optional[str] = None):
        """
        Apply to ``positions`` of a CompositeSystem (or a bare AmplitudeVector),
        in place. Other qubits are left as they are: the gate acts as
        ``self ⊗ identity`` after bringing the targets together.
        """
        if isinstance(target, AmplitudeVector):
            state = target
        else:
            state = target._state
            backend = backend or target.backend
        pos = check_positions(state.n, positions, count=self.num_qubits)
        state.require_writable()
        mod = load_backend(backend)
        mod.apply_unitary(state, self.matrix.astype(state.dtype), pos)
        # unitarity was checked at construction; drift here is a kernel bug
        state.check_normalized()
        logger.debug("applied %s to qubits %s", self.name, pos)
        return target

    def dagger(self) -> "Gate":
        name = self.name[:-2] if self.name.endswith("DG") else self.name + "DG"
        return Gate(name, self.matrix.conj().T)

    def controlled(self, num_controls: int = 1) -> "Gate":
        """Controlled version; the controls are the first positions."""
        if num_controls < 1:
            raise InvalidGateError("shape", "num_controls must be >= 1")
        d = self.dim
        size = d << num_controls
        U = np.eye(size, dtype=np.complex128)
        U[size - d:, size - d:] = self.matrix
        return Gate("C" * num_controls + self.name, U)

    def __eq__(self, other):
        if not isinstance(other, Gate):
            return NotImplemented
        return self.name == other.name and bool(np.array_equal(self.matrix, other.matrix))

    def __hash__(self):
        return hash((self.name, self.matrix.tobytes()))

    def __repr__(self):
        return f"Gate({self.name!r}, qubits={self.num_qubits})"


# ---------- standard gates ----------

_S = np.sqrt(0.5)

I = Gate("I", [[1, 0],
               [0, 1]])
X = Gate("X", [[0, 1],
               [1, 0]])
Y = Gate("Y", [[0, -1j],
               [1j, 0]])
Z = Gate("Z", [[1, 0],
               [0, -1]])
H = Gate("H", [[_S, _S],
               [_S, -_S]])
S = Gate("S", [[1, 0],
               [0, 1j]])
SDG = S.dagger()
T = Gate("T", [[1, 0],
               [0, np.exp(0.25j*np.pi)]])
TDG = T.dagger()
SX = Gate("SX", [[0.5+0.5j, 0.5-0.5j],
                 [0.5-0.5j, 0.5+0.5j]])

# 4x4 in order 00,01,10,11 (first position is control)
CNOT = Gate("CNOT", X.controlled().matrix)
CX = CNOT
CZ = Gate("CZ", Z.controlled().matrix)
SWAP = Gate("SWAP", [[1, 0, 0, 0],
                     [0, 0, 1, 0],
                     [0, 1, 0, 0],
                     [0, 0, 0, 1]])
TOFFOLI = Gate("TOFFOLI", X.controlled(2).matrix)
CCX = TOFFOLI

STANDARD_GATES = {
    g.name: g for g in (I, X, Y, Z, H, S, SDG, T, TDG, SX, CNOT, CZ, SWAP, TOFFOLI)
}
STANDARD_GATES.update({"CX": CX, "CCX": CCX})


def get_gate(name: str) -> Gate:
    try:
        return STANDARD_GATES[name.upper()]
    except KeyError:
        raise InvalidGateError("unknown", f"Unknown gate {name}") from None


# ---------- parametric gates ----------

def RZ(theta: float) -> Gate:
    return Gate("RZ", [[np.exp(-0.5j*theta), 0],
                       [0, np.exp(+0.5j*theta)]])


def RX(theta: float) -> Gate:
    c = np.cos(theta/2.0)
    s = -1j*np.sin(theta/2.0)
    return Gate("RX", [[c, s],
                       [s, c]])


def RY(theta: float) -> Gate:
    c = np.cos(theta/2.0)
    s = np.sin(theta/2.0)
    return Gate("RY", [[c, -s],
                       [s, c]])


def PHASE(theta: float) -> Gate:
    return Gate("PHASE", [[1, 0],
                          [0, np.exp(1j*theta)]])
