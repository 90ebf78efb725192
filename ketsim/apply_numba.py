# ketsim/apply_numba.py
from typing import Sequence

import numpy as np
from numba import njit, prange, set_num_threads

from .bits import base_indices, bit_position, subset_offsets
from .state import AmplitudeVector

# ---------- low-level kernels (Numba JIT) ----------

@njit(parallel=True, fastmath=True)
def _single_qubit_kernel(psi, U2, b):
    N = psi.shape[0]
    step = 1 << b
    block = step << 1
    nblocks = N // block
    for blk in prange(nblocks):
        base = blk * block
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0, 0]*a0 + U2[0, 1]*a1
            psi[i1] = U2[1, 0]*a0 + U2[1, 1]*a1


@njit(parallel=True, fastmath=True)
def _unitary_kernel(psi, U, offsets, bases):
    # Each base owns a disjoint group of d amplitudes.
    d = offsets.shape[0]
    for j in prange(bases.shape[0]):
        base = bases[j]
        amps = np.empty_like(U[0])
        for c in range(d):
            amps[c] = psi[base + offsets[c]]
        for r in range(d):
            acc = U[r, 0]*amps[0]
            for c in range(1, d):
                acc += U[r, c]*amps[c]
            psi[base + offsets[r]] = acc

# ---------- user-facing apply helpers ----------

def set_threads(n: int):
    set_num_threads(n)


def apply_single_qubit(state: AmplitudeVector, U2: np.ndarray, q: int):
    _single_qubit_kernel(state.psi, np.ascontiguousarray(U2, dtype=state.dtype),
                         bit_position(state.n, q))


def apply_unitary(state: AmplitudeVector, U: np.ndarray, qubits: Sequence[int]):
    if len(qubits) == 1:
        return apply_single_qubit(state, U, qubits[0])
    _unitary_kernel(state.psi, np.ascontiguousarray(U, dtype=state.dtype),
                    subset_offsets(state.n, qubits), base_indices(state.n, qubits))
