"""Exception hierarchy for polybuffer.

All errors raised on purpose by the library derive from
:class:`PolybufferError`, so callers can catch library failures with a single
``except`` clause while still telling robustness problems apart from bad
input.
"""

from typing import List, Optional


class PolybufferError(Exception):
    """Base class for all polybuffer errors."""
    pass


class ValidationError(PolybufferError, ValueError):
    """Raised when an argument cannot be buffered at all.

    Examples are a non-geometry input or a non-finite distance. These are
    never retried at another precision.
    """
    pass


class ConfigurationError(PolybufferError, ValueError):
    """Raised for invalid buffer parameters or operation options."""
    pass


class RobustnessError(PolybufferError):
    """Raised when the noded offset linework is topologically inconsistent.

    This is the equivalent of a GEOS ``TopologyException``: the input is fine
    but the arithmetic at the attempted precision was not.
    """
    pass


class BufferComputationError(PolybufferError):
    """Raised when no precision level produced a buffer.

    Attributes:
        cause: The last :class:`RobustnessError` encountered (also chained
            as ``__cause__``)
        attempts: The attempt results in the order they were made
    """

    def __init__(
        self,
        message: str,
        cause: Optional[RobustnessError] = None,
        attempts: Optional[List] = None,
    ):
        super().__init__(message)
        self.cause = cause
        self.attempts = list(attempts) if attempts is not None else []


__all__ = [
    'PolybufferError',
    'ValidationError',
    'ConfigurationError',
    'RobustnessError',
    'BufferComputationError',
]
