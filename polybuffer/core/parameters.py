"""Buffer parameters value type."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, replace
from typing import Union

from .errors import ConfigurationError
from .types import CapStyle, JoinStyle

# Number of facets used to approximate a quarter circle.
# 8 gives less than 2% max error in the buffer distance; use 12 for < 1%
# and 18 for < 0.1%.
DEFAULT_QUADRANT_SEGMENTS = 8

# Allows fairly pointy mitres.
DEFAULT_MITRE_LIMIT = 5.0


@dataclass(frozen=True)
class BufferParameters:
    """Styling and accuracy settings for a buffer computation.

    Every field has a default, so ``BufferParameters()`` describes the usual
    round buffer. Enum fields also accept their string values
    (``end_cap_style='flat'``).

    Attributes:
        quadrant_segments: Segments used to approximate a quarter circle (>= 1)
        end_cap_style: Cap generated at the ends of lines
        join_style: Join generated at convex vertices
        mitre_limit: Maximum ratio of mitre length to buffer distance before a
            mitre join is bevelled

    Examples:
        >>> params = BufferParameters(quadrant_segments=16, join_style='mitre')
        >>> params.join_style
        <JoinStyle.MITRE: 'mitre'>
    """

    quadrant_segments: int = DEFAULT_QUADRANT_SEGMENTS
    end_cap_style: Union[CapStyle, str] = CapStyle.ROUND
    join_style: Union[JoinStyle, str] = JoinStyle.ROUND
    mitre_limit: float = DEFAULT_MITRE_LIMIT

    def __post_init__(self) -> None:
        object.__setattr__(self, 'end_cap_style', _coerce(CapStyle, self.end_cap_style, 'end_cap_style'))
        object.__setattr__(self, 'join_style', _coerce(JoinStyle, self.join_style, 'join_style'))

        if isinstance(self.quadrant_segments, bool) or not isinstance(self.quadrant_segments, numbers.Integral):
            raise ConfigurationError(
                f"quadrant_segments must be an int, got {type(self.quadrant_segments).__name__}"
            )
        if self.quadrant_segments < 1:
            raise ConfigurationError(
                f"quadrant_segments must be >= 1, got {self.quadrant_segments}"
            )
        if not isinstance(self.mitre_limit, numbers.Real) or isinstance(self.mitre_limit, bool):
            raise ConfigurationError(
                f"mitre_limit must be a number, got {type(self.mitre_limit).__name__}"
            )
        if not math.isfinite(self.mitre_limit) or self.mitre_limit <= 0:
            raise ConfigurationError(f"mitre_limit must be positive, got {self.mitre_limit}")

    @classmethod
    def from_quadrant_segments(
        cls,
        quadrant_segments: int,
        end_cap_style: Union[CapStyle, str] = CapStyle.ROUND,
    ) -> 'BufferParameters':
        """Build parameters using the legacy signed quadrant-segment encoding.

        A positive value is a plain segment count with round joins. Zero
        selects bevel joins and a negative value selects mitre joins with a
        mitre limit of ``abs(quadrant_segments)``; in both cases the segment
        count falls back to the default.
        """
        if quadrant_segments > 0:
            return cls(quadrant_segments=quadrant_segments, end_cap_style=end_cap_style)
        if quadrant_segments == 0:
            return cls(end_cap_style=end_cap_style, join_style=JoinStyle.BEVEL)
        return cls(
            end_cap_style=end_cap_style,
            join_style=JoinStyle.MITRE,
            mitre_limit=float(abs(quadrant_segments)),
        )

    def with_changes(self, **changes) -> 'BufferParameters':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @staticmethod
    def buffer_distance_error(quadrant_segments: int) -> float:
        """Maximum relative distance error of an arc approximated with ``quadrant_segments``."""
        if quadrant_segments < 1:
            raise ConfigurationError(
                f"quadrant_segments must be >= 1, got {quadrant_segments}"
            )
        alpha = math.pi / 2.0 / quadrant_segments
        return 1 - math.cos(alpha / 2.0)


def _coerce(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ', '.join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"Invalid {field_name} {value!r}; expected one of: {valid}"
        ) from None


__all__ = [
    'BufferParameters',
    'DEFAULT_QUADRANT_SEGMENTS',
    'DEFAULT_MITRE_LIMIT',
]
