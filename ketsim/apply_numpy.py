# ketsim/apply_numpy.py
from typing import Sequence

import numpy as np

from .bits import bit_position, permutation
from .state import AmplitudeVector


def apply_single_qubit(state: AmplitudeVector, U2: np.ndarray, q: int):
    """
    Apply a 2x2 gate to qubit q.
    Reshape-based kernel (no index arrays), in place.
    """
    psi = state.psi
    n = state.n
    b = bit_position(n, q)
    # View psi as (right, 2, left) where the middle axis is qubit q
    left = 1 << b
    right = 1 << (n - b - 1)
    psi3 = psi.reshape(right, 2, left)

    # out[r, a, l] = sum_b U2[a,b] * psi3[r, b, l]
    psi3[:] = np.einsum('ab,rbl->ral', U2, psi3, optimize=True)


def apply_unitary(state: AmplitudeVector, U: np.ndarray, qubits: Sequence[int]):
    """
    Apply a 2^k x 2^k gate by gathering the targeted qubits to the front,
    multiplying, and scattering back into the original bit order.
    """
    if len(qubits) == 1:
        return apply_single_qubit(state, U, qubits[0])
    psi = state.psi
    perm = permutation(state.n, qubits)
    block = psi[perm].reshape(U.shape[0], -1)
    psi[perm] = (U @ block).ravel()
