"""Type definitions for polybuffer operations.

This module defines enums for buffer styling and precision classification.
"""

from enum import Enum


class CapStyle(Enum):
    """Style of the caps generated at the ends of buffered lines.

    Attributes:
        ROUND: Half-disc around each line end (default)
        FLAT: Truncated flat at the line end
        SQUARE: Squared off at the buffer distance beyond the line end

    Examples:
        >>> from polybuffer import buffer, BufferParameters, CapStyle
        >>> params = BufferParameters(end_cap_style=CapStyle.FLAT)
        >>> result = buffer(line, 2.0, params)
    """
    ROUND = 'round'
    FLAT = 'flat'
    SQUARE = 'square'


class JoinStyle(Enum):
    """Style of the joins generated at convex vertices of offset curves.

    Attributes:
        ROUND: Circular fillet around the vertex (default)
        MITRE: Extended sharp corner, limited by the mitre limit
        BEVEL: Straight edge cutting off the corner

    Examples:
        >>> from polybuffer import BufferParameters, JoinStyle
        >>> params = BufferParameters(join_style=JoinStyle.MITRE, mitre_limit=2.0)
    """
    ROUND = 'round'
    MITRE = 'mitre'
    BEVEL = 'bevel'


class PrecisionType(Enum):
    """Classification of a precision model.

    Attributes:
        FLOATING: Full double precision, coordinates are never snapped
        FIXED: Coordinates are snapped to a grid of spacing ``1 / scale``
    """
    FLOATING = 'floating'
    FIXED = 'fixed'


__all__ = [
    'CapStyle',
    'JoinStyle',
    'PrecisionType',
]
