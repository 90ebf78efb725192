# ketsim/bits.py
"""
Basis-index bookkeeping.

Qubit 0 is the most significant bit: in an n-qubit system qubit q sits at
bit ``n - 1 - q`` of the basis index, so index i reads as the bitstring
``format(i, f"0{n}b")`` with qubit 0 leftmost.

For an ordered subset of qubits (q_0, ..., q_{k-1}) the *local* index r in
[0, 2**k) has q_0 as its most significant bit. Gate matrices and
measurement outcomes both use this local index.
"""
from functools import lru_cache
from typing import Sequence, Tuple

import numpy as np


def bit_position(n: int, qubit: int) -> int:
    return n - 1 - qubit


def bit_positions(n: int, qubits: Sequence[int]) -> Tuple[int, ...]:
    return tuple(n - 1 - q for q in qubits)


def format_bits(value: int, width: int) -> str:
    return format(value, f"0{width}b")


def extract(index: int, n: int, qubits: Sequence[int]) -> int:
    """Local index of ``qubits`` inside the full basis index."""
    r = 0
    for q in qubits:
        r = (r << 1) | ((index >> (n - 1 - q)) & 1)
    return r


def _readonly(a: np.ndarray) -> np.ndarray:
    a.setflags(write=False)
    return a


@lru_cache(maxsize=256)
def _offsets(n: int, qubits: Tuple[int, ...]) -> np.ndarray:
    k = len(qubits)
    r = np.arange(1 << k, dtype=np.int64)
    off = np.zeros(1 << k, dtype=np.int64)
    for j, b in enumerate(bit_positions(n, qubits)):
        off |= ((r >> (k - 1 - j)) & 1) << b
    return _readonly(off)


@lru_cache(maxsize=256)
def _bases(n: int, qubits: Tuple[int, ...]) -> np.ndarray:
    mask = 0
    for b in bit_positions(n, qubits):
        mask |= 1 << b
    idx = np.arange(1 << n, dtype=np.int64)
    return _readonly(idx[(idx & mask) == 0])


def subset_offsets(n: int, qubits: Sequence[int]) -> np.ndarray:
    """offsets[r] = full-index contribution of local index r."""
    return _offsets(n, tuple(qubits))


def base_indices(n: int, qubits: Sequence[int]) -> np.ndarray:
    """Ascending full indices whose ``qubits`` bits are all zero."""
    return _bases(n, tuple(qubits))


@lru_cache(maxsize=256)
def _permutation(n: int, qubits: Tuple[int, ...]) -> np.ndarray:
    perm = (_offsets(n, qubits)[:, None] + _bases(n, qubits)[None, :]).ravel()
    return _readonly(perm)


def permutation(n: int, qubits: Sequence[int]) -> np.ndarray:
    """
    Reordering of the 2**n basis indices that moves ``qubits`` to the front.

    ``psi[permutation(n, qubits)].reshape(2**k, -1)`` has one row per local
    index r (targeted qubits' values) and one column per assignment of the
    remaining qubits, the columns in ascending order of their full index.
    Every full index appears exactly once.
    """
    return _permutation(n, tuple(qubits))
