"""Precision-adaptive buffer operation.

The buffer of a geometry is the Minkowski sum (positive distance) or
difference (negative distance) of the geometry with a disc of radius
``abs(distance)``. The result is always polygonal; the zero or negative
buffer of points and lines is an empty Polygon.

Offset construction in floating point can produce linework that does not
node consistently. :class:`BufferOp` therefore tries the fast computation at
the geometry's native precision first and only falls back to fixed grids when
that fails:

- a geometry that already carries a fixed precision gets exactly one more
  attempt on its own grid with snap-rounding noding, and a failure there is
  final, since the caller chose that precision;
- a floating-precision geometry walks a ladder of fixed grids keeping 12
  significant digits down to 0, stopping at the first level that succeeds.

Only :class:`~polybuffer.core.errors.RobustnessError` is retried. Everything
else, invalid arguments included, propagates from the first attempt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from .builder import BufferBuilder
from .core.errors import BufferComputationError, ConfigurationError
from .core.parameters import BufferParameters
from .core.precision import PrecisionModel
from .ladder import (
    FAST_PATH,
    MAX_PRECISION_DIGITS,
    PrecisionAttempt,
    evaluate_attempt,
    native_fixed_attempt,
    reduced_precision_ladder,
    run_attempts,
)
from .noding import scaled_snap_rounding_noder

logger = logging.getLogger(__name__)

BuilderFactory = Callable[..., BufferBuilder]

_ON_ERROR_OPTIONS = ('raise', 'skip', 'keep')


@dataclass(frozen=True)
class BufferRequest:
    """A single buffer computation: what to buffer, how far and how."""

    geometry: BaseGeometry
    distance: float
    parameters: BufferParameters


class BufferOp:
    """Buffer operation for one geometry.

    Args:
        geometry: Geometry to buffer
        parameters: Buffer styling; defaults to ``BufferParameters()``
        builder_factory: Callable building a builder from
            ``(parameters, working_precision_model=..., noder=...)``

    Examples:
        >>> from shapely.geometry import box
        >>> op = BufferOp(box(0, 0, 1, 1))
        >>> op.get_result_geometry(0.5).area > 1.0
        True
    """

    def __init__(
        self,
        geometry: BaseGeometry,
        parameters: Optional[BufferParameters] = None,
        builder_factory: BuilderFactory = BufferBuilder,
    ):
        self.geometry = geometry
        self.parameters = parameters if parameters is not None else BufferParameters()
        self.builder_factory = builder_factory

    def get_result_geometry(self, distance: float) -> Union[Polygon, MultiPolygon]:
        """Compute the buffer at ``distance``.

        Raises:
            BufferComputationError: If every precision level failed
            ValidationError: If the geometry or distance is invalid
        """
        request = BufferRequest(self.geometry, distance, self.parameters)

        fast = evaluate_attempt(FAST_PATH, lambda attempt: self._compute(request, attempt))
        if fast.succeeded:
            return fast.geometry

        native = PrecisionModel.from_geometry(request.geometry)
        logger.warning(
            "Buffer at %s failed (%s); retrying with %s",
            native, fast.error,
            "native fixed precision" if not native.is_floating else "reduced precision",
        )

        if not native.is_floating:
            attempts = [native_fixed_attempt(native)]
        else:
            attempts = reduced_precision_ladder(request.geometry, request.distance, MAX_PRECISION_DIGITS)

        success, history = run_attempts(attempts, lambda attempt: self._compute(request, attempt))
        history = [fast] + history
        if success is not None:
            logger.debug("Buffer succeeded at %s after %d attempt(s)", success.attempt.label, len(history))
            return success.geometry

        last = history[-1]
        raise BufferComputationError(
            f"Buffer failed at every precision; last attempt ({last.attempt.label}): {last.error}",
            cause=last.error,
            attempts=history,
        ) from last.error

    def _compute(self, request: BufferRequest, attempt: PrecisionAttempt) -> BaseGeometry:
        pm = attempt.precision_model
        if pm is None:
            builder = self.builder_factory(request.parameters)
        else:
            builder = self.builder_factory(
                request.parameters,
                working_precision_model=pm,
                noder=scaled_snap_rounding_noder(pm.scale),
            )
        return builder.buffer(request.geometry, request.distance)


def buffer(
    geometry: BaseGeometry,
    distance: float,
    parameters: Optional[BufferParameters] = None,
) -> Union[Polygon, MultiPolygon]:
    """Compute the buffer of a geometry.

    Args:
        geometry: Any Shapely geometry
        distance: Signed buffer distance; negative values erode areal geometries
        parameters: Buffer styling (default: round caps and joins, 8 segments
            per quarter circle)

    Returns:
        Polygon or MultiPolygon (an empty Polygon when nothing remains)

    Raises:
        BufferComputationError: If no precision level produced a valid result
        ValidationError: If the geometry or distance is invalid

    Examples:
        >>> from shapely.geometry import Point, box
        >>> buffer(box(0, 0, 1, 1), 0.5).area > 1.0
        True
        >>> buffer(Point(0, 0), -1).is_empty
        True
    """
    return BufferOp(geometry, parameters).get_result_geometry(distance)


def batch_buffer(
    geometries: Sequence[BaseGeometry],
    distance: float,
    parameters: Optional[BufferParameters] = None,
    on_error: str = 'raise',
) -> Tuple[List[Union[Polygon, MultiPolygon]], List[int]]:
    """Buffer multiple geometries with the same distance and parameters.

    Args:
        geometries: Geometries to buffer
        distance: Signed buffer distance
        parameters: Buffer styling shared by all geometries
        on_error: What to do when a buffer fails at every precision:
            - 'raise': Raise the BufferComputationError (default)
            - 'skip': Leave the geometry out of the results
            - 'keep': Put an empty Polygon in its place

    Returns:
        Tuple of (buffered_geometries, failed_indices)

    Examples:
        >>> results, failed = batch_buffer([poly1, poly2], 1.0, on_error='skip')
    """
    if on_error not in _ON_ERROR_OPTIONS:
        raise ConfigurationError(
            f"Unknown on_error option {on_error!r}; expected one of: {', '.join(_ON_ERROR_OPTIONS)}"
        )

    results: List[Union[Polygon, MultiPolygon]] = []
    failed_indices: List[int] = []
    for i, geom in enumerate(geometries):
        try:
            results.append(buffer(geom, distance, parameters))
        except BufferComputationError as exc:
            if on_error == 'raise':
                raise
            logger.warning("Buffer of geometry %d failed: %s", i, exc)
            failed_indices.append(i)
            if on_error == 'keep':
                results.append(Polygon())

    return results, failed_indices


__all__ = [
    'BufferRequest',
    'BufferOp',
    'buffer',
    'batch_buffer',
]
