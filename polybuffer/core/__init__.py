"""Core types and utilities for polybuffer.

This module provides enums, exceptions, the buffer parameters value type and
the precision model used throughout the library.
"""

from .types import (
    CapStyle,
    JoinStyle,
    PrecisionType,
)

from .errors import (
    PolybufferError,
    ValidationError,
    ConfigurationError,
    RobustnessError,
    BufferComputationError,
)

from .parameters import (
    BufferParameters,
    DEFAULT_QUADRANT_SEGMENTS,
    DEFAULT_MITRE_LIMIT,
)

from .precision import PrecisionModel

__all__ = [
    # Enums
    'CapStyle',
    'JoinStyle',
    'PrecisionType',

    # Exceptions
    'PolybufferError',
    'ValidationError',
    'ConfigurationError',
    'RobustnessError',
    'BufferComputationError',

    # Configuration
    'BufferParameters',
    'DEFAULT_QUADRANT_SEGMENTS',
    'DEFAULT_MITRE_LIMIT',
    'PrecisionModel',
]
