# ketsim/errors.py
import logging

logger = logging.getLogger(__name__)


class KetsimError(Exception):
    """Base class for every error raised by ketsim."""


class InvalidStateError(KetsimError, ValueError):
    """Amplitude data has the wrong length or is not normalized."""

    def __init__(self, reason: str, message: str = ""):
        self.reason = reason
        super().__init__(message or reason)


class InvalidGateError(KetsimError, ValueError):
    """Matrix is not a valid gate (shape, unitarity, unknown catalog name)."""

    def __init__(self, reason: str, message: str = ""):
        self.reason = reason
        super().__init__(message or reason)


class DimensionMismatchError(KetsimError, ValueError):
    """Qubit positions are out of range, duplicated, or the wrong count."""


class DegenerateStateError(KetsimError, RuntimeError):
    """No probability mass left where some was required. Logged at ERROR when raised."""

    def __init__(self, message: str):
        logger.error("degenerate state: %s", message)
        super().__init__(message)


class NormalizationDriftError(KetsimError, AssertionError):
    """A validated gate left the state off the unit sphere (internal bug)."""
