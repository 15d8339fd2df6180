"""Buffer builder: offset primitives, noding and polygon assembly.

The builder computes one buffer at one precision. It does not retry: when the
noded linework turns out to be topologically inconsistent it raises
:class:`~polybuffer.core.errors.RobustnessError` and leaves the decision to
the caller (see :mod:`polybuffer.buffer`).
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import List, Optional, Union

import numpy as np
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import explain_validity

from .core.errors import RobustnessError, ValidationError
from .core.geometry_utils import (
    has_finite_coordinates,
    iter_components,
    split_by_dimension,
    to_polygonal,
)
from .core.parameters import BufferParameters
from .core.precision import PrecisionModel
from .curves import OffsetCurveBuilder
from .noding import FloatingNoder, Noder

logger = logging.getLogger(__name__)


class BufferBuilder:
    """Build the buffer of a geometry at a single precision.

    Args:
        parameters: Buffer styling; defaults to ``BufferParameters()``
        working_precision_model: Grid the offset primitives are rounded to.
            Defaults to the precision model of the geometry being buffered.
        noder: Noding strategy used for the overlays. Defaults to
            :class:`~polybuffer.noding.FloatingNoder`.

    Examples:
        >>> from shapely.geometry import Point
        >>> result = BufferBuilder().buffer(Point(0, 0), 1.0)
        >>> round(result.area, 2)
        3.12
    """

    def __init__(
        self,
        parameters: Optional[BufferParameters] = None,
        working_precision_model: Optional[PrecisionModel] = None,
        noder: Optional[Noder] = None,
    ):
        self.parameters = parameters if parameters is not None else BufferParameters()
        self.working_precision_model = working_precision_model
        self.noder = noder

    def buffer(self, geometry: BaseGeometry, distance: float) -> Union[Polygon, MultiPolygon]:
        """Compute the buffer of ``geometry`` at ``distance``.

        Raises:
            ValidationError: If the geometry or distance cannot be buffered
            RobustnessError: If noding produced an inconsistent arrangement
        """
        _validate_arguments(geometry, distance)
        distance = float(distance)

        precision_model = self.working_precision_model
        if precision_model is None:
            precision_model = PrecisionModel.from_geometry(geometry)
        noder = self.noder if self.noder is not None else FloatingNoder()

        points, lines, polygons = split_by_dimension(geometry)
        polygons = [precision_model.make_precise_geometry(p) for p in polygons]

        if distance > 0:
            result = self._dilate(points, lines, polygons, distance, precision_model, noder)
        elif distance < 0:
            result = self._erode(polygons, -distance, precision_model, noder)
        elif polygons:
            result = noder.union_all(polygons)
        else:
            result = None

        if result is None:
            return Polygon()

        result = to_polygonal(result)
        _check_result(result)
        return result

    def _dilate(self, points, lines, polygons, distance, precision_model, noder) -> Optional[BaseGeometry]:
        curves = OffsetCurveBuilder(self.parameters, precision_model, distance)
        primitives: List[Polygon] = []
        for point in points:
            primitives.extend(curves.point_primitives(np.asarray(point.coords[0][:2], dtype=float)))
        for line in lines:
            if line.is_closed and len(line.coords) > 3:
                primitives.extend(curves.ring_primitives(np.asarray(line.coords)))
            else:
                primitives.extend(curves.line_primitives(np.asarray(line.coords)))
        for polygon in polygons:
            primitives.extend(_polygon_ring_primitives(curves, polygon))

        logger.debug(
            "Dilating %d point(s), %d line(s), %d polygon(s) with %d primitive(s) at %s",
            len(points), len(lines), len(polygons), len(primitives), precision_model,
        )
        if not primitives and not polygons:
            return None
        return noder.union_all(polygons + primitives)

    def _erode(self, polygons, distance, precision_model, noder) -> Optional[BaseGeometry]:
        if not polygons:
            return None

        areal = to_polygonal(noder.union_all(polygons))
        survivors = [
            p for p in iter_components(areal)
            if isinstance(p, Polygon) and not is_eroded_completely(p, distance)
        ]
        if not survivors:
            return None

        curves = OffsetCurveBuilder(self.parameters, precision_model, distance)
        primitives: List[Polygon] = []
        for polygon in survivors:
            primitives.extend(_polygon_ring_primitives(curves, polygon))

        logger.debug(
            "Eroding %d polygon(s) with %d primitive(s) at %s",
            len(survivors), len(primitives), precision_model,
        )
        remaining = noder.union_all(survivors)
        if not primitives:
            return remaining
        return noder.difference(remaining, noder.union_all(primitives))


def is_eroded_completely(polygon: Polygon, distance: float) -> bool:
    """Return True when a negative buffer of ``distance`` removes ``polygon`` entirely.

    Only the cheap envelope test is applied: a polygon narrower than twice the
    distance in either direction cannot survive the erosion.
    """
    if polygon.is_empty:
        return True
    minx, miny, maxx, maxy = polygon.bounds
    return min(maxx - minx, maxy - miny) < 2.0 * distance


def _polygon_ring_primitives(curves: OffsetCurveBuilder, polygon: Polygon) -> List[Polygon]:
    primitives = curves.ring_primitives(np.asarray(polygon.exterior.coords))
    for interior in polygon.interiors:
        primitives.extend(curves.ring_primitives(np.asarray(interior.coords)))
    return primitives


def _validate_arguments(geometry, distance) -> None:
    if not isinstance(geometry, BaseGeometry):
        raise ValidationError(f"Expected a Shapely geometry, got {type(geometry).__name__}")
    if isinstance(distance, bool) or not isinstance(distance, numbers.Real):
        raise ValidationError(f"Buffer distance must be a real number, got {distance!r}")
    if not math.isfinite(distance):
        raise ValidationError(f"Buffer distance must be finite, got {distance}")
    if not has_finite_coordinates(geometry):
        raise ValidationError("Geometry has non-finite coordinates")


def _check_result(result: BaseGeometry) -> None:
    if not has_finite_coordinates(result):
        raise RobustnessError("Buffer result has non-finite coordinates")
    if not result.is_valid:
        raise RobustnessError(f"Buffer result is invalid: {explain_validity(result)}")


__all__ = [
    'BufferBuilder',
    'is_eroded_completely',
]
