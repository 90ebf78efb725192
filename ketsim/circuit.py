# ketsim/circuit.py
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from . import gates as G
from .errors import DimensionMismatchError
from .gates import Gate
from .measurement import MeasurementOutcome
from .state import AmplitudeVector
from .system import CompositeSystem
from .validation import check_positions

Op = Tuple[Optional[Gate], Tuple[int, ...]]  # (gate, positions); gate None -> measure


@dataclass
class CircuitResult:
    system: CompositeSystem
    outcomes: List[MeasurementOutcome] = field(default_factory=list)

    @property
    def state(self) -> AmplitudeVector:
        return self.system.snapshot()


@dataclass
class Circuit:
    n: int
    ops: List[Op]

    @staticmethod
    def empty(n: int) -> "Circuit":
        return Circuit(n, [])

    def gate(self, gate: Gate, *positions: int) -> "Circuit":
        self.ops.append((gate, check_positions(self.n, positions, count=gate.num_qubits)))
        return self

    def measure(self, *positions: int) -> "Circuit":
        """Measure ``positions`` (all qubits if none are given)."""
        positions = positions or tuple(range(self.n))
        self.ops.append((None, check_positions(self.n, positions)))
        return self

    def h(self, k: int): return self.gate(G.H, k)
    def x(self, k: int): return self.gate(G.X, k)
    def y(self, k: int): return self.gate(G.Y, k)
    def z(self, k: int): return self.gate(G.Z, k)
    def s(self, k: int): return self.gate(G.S, k)
    def t(self, k: int): return self.gate(G.T, k)
    def rx(self, k: int, theta: float): return self.gate(G.RX(theta), k)
    def ry(self, k: int, theta: float): return self.gate(G.RY(theta), k)
    def rz(self, k: int, theta: float): return self.gate(G.RZ(theta), k)
    def cnot(self, c: int, t: int): return self.gate(G.CNOT, c, t)
    def cz(self, c: int, t: int): return self.gate(G.CZ, c, t)
    def swap(self, a: int, b: int): return self.gate(G.SWAP, a, b)
    def toffoli(self, c0: int, c1: int, t: int): return self.gate(G.TOFFOLI, c0, c1, t)

    @property
    def num_measurements(self) -> int:
        return sum(1 for g, _ in self.ops if g is None)

    def run(self, initial: Union[None, AmplitudeVector, Sequence[AmplitudeVector]] = None,
            randomness=None, seed: Optional[int] = None, backend: Optional[str] = None,
            dtype=None) -> CircuitResult:
        """
        Run on a fresh system: |0...0> by default, a joint AmplitudeVector, or
        one single-qubit state per qubit. Measurement steps draw from
        ``randomness`` (or ``numpy.random.default_rng(seed)``).
        """
        if initial is None:
            system = CompositeSystem.zeros(self.n, backend=backend, dtype=dtype)
        elif isinstance(initial, AmplitudeVector):
            system = CompositeSystem.from_vector(initial, backend=backend, dtype=dtype)
        else:
            system = CompositeSystem(initial, backend=backend, dtype=dtype)
        if system.num_qubits != self.n:
            raise DimensionMismatchError(f"initial state has {system.num_qubits} qubits, circuit has {self.n}")

        if randomness is None and seed is not None:
            randomness = np.random.default_rng(seed)
        if randomness is None and self.num_measurements:
            raise ValueError("circuit measures qubits; pass randomness or seed")

        result = CircuitResult(system)
        for gate, positions in self.ops:
            if gate is None:
                result.outcomes.append(system.measure(positions, randomness))
            else:
                system.apply_gate(gate, positions)
        return result
