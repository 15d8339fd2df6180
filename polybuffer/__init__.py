"""Polybuffer - precision-adaptive polygonal buffers.

This library computes the buffer of arbitrary Shapely geometries and retries
on progressively coarser fixed precision grids when the floating-point
construction fails to node consistently.
"""

import logging

# Buffer operation
from .buffer import (
    BufferOp,
    BufferRequest,
    buffer,
    batch_buffer,
)

# Builder and noding collaborators
from .builder import BufferBuilder
from .noding import (
    FloatingNoder,
    SnapRoundingNoder,
    ScaledNoder,
)

# Precision ladder
from .ladder import (
    MAX_PRECISION_DIGITS,
    precision_scale_factor,
)

# Core types
from .core import (
    CapStyle,
    JoinStyle,
    PrecisionType,
    BufferParameters,
    PrecisionModel,
)

# Core exceptions
from .core import (
    PolybufferError,
    ValidationError,
    ConfigurationError,
    RobustnessError,
    BufferComputationError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [

    # Buffer operation
    'BufferOp',
    'BufferRequest',
    'buffer',
    'batch_buffer',

    # Collaborators
    'BufferBuilder',
    'FloatingNoder',
    'SnapRoundingNoder',
    'ScaledNoder',

    # Precision ladder
    'MAX_PRECISION_DIGITS',
    'precision_scale_factor',

    # Core types
    'CapStyle',
    'JoinStyle',
    'PrecisionType',
    'BufferParameters',
    'PrecisionModel',

    # Core exceptions
    'PolybufferError',
    'ValidationError',
    'ConfigurationError',
    'RobustnessError',
    'BufferComputationError',
]
