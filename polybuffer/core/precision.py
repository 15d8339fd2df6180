"""Precision models mapping real coordinates onto a representable grid.

A precision model is either *floating* (coordinates are used as they are) or
*fixed*, in which case every coordinate is snapped to the nearest multiple of
``1 / scale``. Shapely geometries carry their grid as a precision attribute
(see :func:`shapely.set_precision`), which :meth:`PrecisionModel.from_geometry`
reads back.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import shapely
from shapely.geometry.base import BaseGeometry

from .errors import ConfigurationError
from .types import PrecisionType


@dataclass(frozen=True)
class PrecisionModel:
    """Floating or fixed-grid precision.

    Attributes:
        scale: ``None`` for floating precision, otherwise the number of grid
            cells per coordinate unit (the reciprocal of the grid size)

    Examples:
        >>> pm = PrecisionModel.fixed(100.0)
        >>> pm.make_precise(1.23456)
        1.23
        >>> PrecisionModel.floating().is_floating
        True
    """

    scale: Optional[float] = None

    def __post_init__(self) -> None:
        if self.scale is None:
            return
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise ConfigurationError(f"Precision scale must be positive and finite, got {self.scale}")
        object.__setattr__(self, 'scale', float(self.scale))

    @classmethod
    def floating(cls) -> 'PrecisionModel':
        return cls(None)

    @classmethod
    def fixed(cls, scale: float) -> 'PrecisionModel':
        return cls(scale)

    @classmethod
    def from_geometry(cls, geometry: BaseGeometry) -> 'PrecisionModel':
        """Return the precision model attached to a Shapely geometry."""
        grid_size = float(shapely.get_precision(geometry))
        if grid_size > 0:
            return cls(1.0 / grid_size)
        return cls(None)

    @property
    def precision_type(self) -> PrecisionType:
        return PrecisionType.FLOATING if self.scale is None else PrecisionType.FIXED

    @property
    def is_floating(self) -> bool:
        return self.scale is None

    @property
    def grid_size(self) -> Optional[float]:
        """Grid spacing, or ``None`` for floating precision."""
        if self.scale is None:
            return None
        return 1.0 / self.scale

    def make_precise(self, values: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Snap a value or an array of coordinates to this model's grid.

        Halves round up, so ``-0.5`` snaps to ``0`` on a unit grid.
        """
        if self.scale is None:
            return values
        if isinstance(values, np.ndarray):
            return np.floor(values * self.scale + 0.5) / self.scale
        return math.floor(values * self.scale + 0.5) / self.scale

    def make_precise_geometry(self, geometry: BaseGeometry) -> BaseGeometry:
        """Snap every coordinate of ``geometry`` without repairing the result."""
        if self.scale is None or geometry.is_empty:
            return geometry
        return shapely.transform(geometry, self.make_precise)

    def __str__(self) -> str:
        if self.scale is None:
            return "Floating"
        return f"Fixed(scale={self.scale:g})"


__all__ = ['PrecisionModel']
