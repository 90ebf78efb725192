# ketsim/apply_serial.py
"""Reference kernels: plain Python loops over the amplitude array."""
from typing import Sequence

import numpy as np

from .bits import base_indices, bit_position, subset_offsets
from .state import AmplitudeVector


def apply_single_qubit(state: AmplitudeVector, U2: np.ndarray, q: int):
    """Apply 2x2 gate U2 to qubit q (bit n-1-q of the basis index)."""
    psi = state.psi
    assert U2.shape == (2, 2)
    N = psi.shape[0]
    step = 1 << bit_position(state.n, q)
    block = step << 1
    # iterate blocks of size 2^(bit+1), update pairs (i0, i1=i0+step)
    for base in range(0, N, block):
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0, 0]*a0 + U2[0, 1]*a1
            psi[i1] = U2[1, 0]*a0 + U2[1, 1]*a1


def apply_unitary(state: AmplitudeVector, U: np.ndarray, qubits: Sequence[int]):
    """Apply a 2^k x 2^k gate to the ordered qubits (qubits[0] is the MSB of U's index)."""
    if len(qubits) == 1:
        return apply_single_qubit(state, U, qubits[0])
    psi = state.psi
    d = U.shape[0]
    assert d == 1 << len(qubits)
    offsets = [int(o) for o in subset_offsets(state.n, qubits)]
    # one group of d amplitudes per assignment of the untouched qubits
    for base in base_indices(state.n, qubits):
        idx = [int(base) + o for o in offsets]
        amps = [psi[i] for i in idx]
        for r in range(d):
            acc = U[r, 0]*amps[0]
            for c in range(1, d):
                acc += U[r, c]*amps[c]
            psi[idx[r]] = acc
