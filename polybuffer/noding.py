"""Noding strategies used by the buffer builder.

The builder never intersects segments itself. It hands its offset primitives
to a noder, which resolves every crossing while computing the boolean
overlays (union and difference) needed to assemble the buffer. The strategy
decides *where* the intersection vertices may land:

- :class:`FloatingNoder` keeps whatever precision the inputs have (fast).
- :class:`SnapRoundingNoder` snap-rounds every vertex onto a fixed grid.
- :class:`ScaledNoder` moves the problem onto an integer-like grid by scaling
  coordinates before delegating to another noder, and scales results back.

GEOS reports inconsistent noding as a ``TopologyException``; noders turn it
into :class:`~polybuffer.core.errors.RobustnessError` so the orchestrator can
retry at another precision. Any other GEOS failure propagates as is.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Sequence

import numpy as np
import shapely
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from .core.errors import ConfigurationError, RobustnessError
from .core.precision import PrecisionModel

logger = logging.getLogger(__name__)

_TOPOLOGY_MARKER = "TopologyException"


class Noder:
    """Base noding strategy: overlays computed at an optional grid size."""

    def grid_size(self) -> Optional[float]:
        return None

    def union_all(self, geometries: Sequence[BaseGeometry]) -> BaseGeometry:
        return _run_overlay(shapely.union_all, list(geometries), grid_size=self.grid_size())

    def difference(self, a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
        return _run_overlay(shapely.difference, a, b, grid_size=self.grid_size())

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FloatingNoder(Noder):
    """Overlay at the precision carried by the inputs.

    For floating-precision geometries this is full double precision, which is
    the fastest option and succeeds for the vast majority of inputs.
    """


class SnapRoundingNoder(Noder):
    """Overlay with every vertex snap-rounded onto a precision model's grid."""

    def __init__(self, precision_model: PrecisionModel):
        self.precision_model = precision_model

    def grid_size(self) -> Optional[float]:
        return self.precision_model.grid_size

    def __repr__(self) -> str:
        return f"SnapRoundingNoder({self.precision_model})"


class ScaledNoder(Noder):
    """Run another noder on coordinates multiplied by ``scale``.

    Wrapping a :class:`SnapRoundingNoder` on the unit grid gives snap rounding
    at a grid size of ``1 / scale`` while the inner overlay works with
    integral coordinates.

    Args:
        inner: Noder applied to the scaled geometries
        scale: Positive, finite scale factor
    """

    def __init__(self, inner: Noder, scale: float):
        if not math.isfinite(scale) or scale <= 0:
            raise ConfigurationError(f"ScaledNoder scale must be positive and finite, got {scale}")
        self.inner = inner
        self.scale = float(scale)

    @property
    def is_integer_precision(self) -> bool:
        return self.scale == 1.0

    def union_all(self, geometries: Sequence[BaseGeometry]) -> BaseGeometry:
        scaled = [self._scale(g) for g in geometries]
        return self._rescale(self.inner.union_all(scaled))

    def difference(self, a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
        return self._rescale(self.inner.difference(self._scale(a), self._scale(b)))

    def _scale(self, geometry: BaseGeometry) -> BaseGeometry:
        if self.is_integer_precision or geometry.is_empty:
            return geometry
        return _transform(geometry, lambda coords: coords * self.scale)

    def _rescale(self, geometry: BaseGeometry) -> BaseGeometry:
        if self.is_integer_precision or geometry.is_empty:
            return geometry
        return _transform(geometry, lambda coords: coords / self.scale)

    def __repr__(self) -> str:
        return f"ScaledNoder({self.inner!r}, scale={self.scale:g})"


def scaled_snap_rounding_noder(scale: float) -> ScaledNoder:
    """Scale-aware noder paired with a fixed precision model of ``scale``."""
    return ScaledNoder(SnapRoundingNoder(PrecisionModel.fixed(1.0)), scale)


def _transform(geometry: BaseGeometry, func: Callable[[np.ndarray], np.ndarray]) -> BaseGeometry:
    # drop any attached grid so the inner noder's grid applies to the scaled coordinates
    transformed = shapely.transform(geometry, func)
    if shapely.get_precision(transformed) > 0:
        transformed = shapely.set_precision(transformed, 0.0, mode="pointwise")
    return transformed


def _run_overlay(operation, *args, grid_size: Optional[float] = None) -> BaseGeometry:
    try:
        return operation(*args, grid_size=grid_size)
    except GEOSException as exc:
        if _TOPOLOGY_MARKER in str(exc):
            logger.debug("Overlay %s failed at grid size %s: %s", operation.__name__, grid_size, exc)
            raise RobustnessError(str(exc)) from exc
        raise


__all__ = [
    'Noder',
    'FloatingNoder',
    'SnapRoundingNoder',
    'ScaledNoder',
    'scaled_snap_rounding_noder',
]
