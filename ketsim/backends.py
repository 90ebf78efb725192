# ketsim/backends.py
import logging
from typing import Optional

from .config import get_settings

logger = logging.getLogger(__name__)


def load_backend(name: Optional[str] = None):
    """
    Module implementing ``apply_single_qubit(state, U2, q)`` and
    ``apply_unitary(state, U, qubits)`` for the named backend.
    """
    settings = get_settings()
    name = name or settings.BACKEND
    if name == "serial":
        from . import apply_serial as mod
    elif name == "numpy":
        from . import apply_numpy as mod
    elif name == "numba":
        try:
            from . import apply_numba as mod
        except ImportError as e:
            raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
        if settings.NUM_THREADS is not None:
            mod.set_threads(int(settings.NUM_THREADS))
    else:
        raise NotImplementedError(f"Unknown backend: {name}")
    logger.debug("using %s backend", name)
    return mod
