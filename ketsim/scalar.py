# ketsim/scalar.py
"""
Complex scalars.

Amplitudes are plain Python ``complex`` values (``complex128`` inside numpy
arrays). Addition, subtraction and multiplication are the native operators;
this module adds coercion and the magnitude-squared used everywhere a
probability is computed.
"""
from numbers import Number
from typing import Tuple, Union

import numpy as np

ScalarLike = Union[Number, Tuple[float, float]]

COMPLEX_ZERO = complex(0.0, 0.0)
COMPLEX_ONE = complex(1.0, 0.0)


def as_complex(value: ScalarLike) -> complex:
    """Coerce a number or a ``(re, im)`` pair to ``complex``."""
    if isinstance(value, tuple):
        if len(value) != 2:
            raise TypeError(f"expected (re, im) pair, got {value!r}")
        re, im = value
        return complex(float(re), float(im))
    if isinstance(value, (Number, np.number)):
        return complex(value)
    raise TypeError(f"cannot interpret {value!r} as a complex scalar")


def conj(z):
    return np.conj(z) if isinstance(z, np.ndarray) else complex(z).conjugate()


def norm2(z):
    """re(z)**2 + im(z)**2, elementwise for arrays."""
    if isinstance(z, np.ndarray):
        return z.real * z.real + z.imag * z.imag
    z = complex(z)
    return z.real * z.real + z.imag * z.imag
