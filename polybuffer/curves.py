"""Raw offset primitives for buffer construction.

The buffer of a linear component at distance ``r`` is the union of simple
convex pieces: a rectangle of half-width ``r`` around every segment, a join
on the outer side of every vertex where two segments meet and a cap at each
free line end. Points and zero-length lines take the shape of the end cap.
:class:`OffsetCurveBuilder` emits these pieces as Shapely polygons whose
vertices are already rounded to the working precision model; noding and
assembly happen later in the builder.
"""

from __future__ import annotations

import math
from typing import List, Optional

import numpy as np
from shapely.geometry import Polygon

from .core.errors import ConfigurationError
from .core.parameters import BufferParameters
from .core.precision import PrecisionModel
from .core.types import CapStyle, JoinStyle

# Relative tolerance below which two consecutive segments count as collinear.
COLLINEAR_TOLERANCE = 1e-12


class OffsetCurveBuilder:
    """Generate offset primitives for one buffer distance.

    Args:
        parameters: Styling for caps, joins and arc approximation
        precision_model: Model every emitted vertex is rounded to
        distance: Positive offset distance

    Examples:
        >>> builder = OffsetCurveBuilder(BufferParameters(), PrecisionModel.floating(), 1.0)
        >>> pieces = builder.line_primitives(np.array([[0.0, 0.0], [10.0, 0.0]]))
        >>> len(pieces)  # body plus two round caps
        3
    """

    def __init__(
        self,
        parameters: BufferParameters,
        precision_model: PrecisionModel,
        distance: float,
    ):
        if distance <= 0:
            raise ConfigurationError(f"Offset distance must be positive, got {distance}")
        self.parameters = parameters
        self.precision_model = precision_model
        self.distance = distance
        self._disc_template = _unit_circle(parameters.quadrant_segments)

    def point_primitives(self, coord: np.ndarray) -> List[Polygon]:
        """Primitive for a point: a disc, a square or nothing, by end cap style."""
        style = self.parameters.end_cap_style
        if style is CapStyle.ROUND:
            return _keep(self._polygon(self._disc(coord)))
        if style is CapStyle.SQUARE:
            r = self.distance
            return _keep(self._polygon(coord + np.array([[-r, -r], [r, -r], [r, r], [-r, r]])))
        return []

    def line_primitives(self, coords: np.ndarray) -> List[Polygon]:
        """Primitives for an open line: bodies, interior joins and end caps."""
        pts = _dedupe(np.asarray(coords, dtype=float)[:, :2])
        if len(pts) == 1:
            return self.point_primitives(pts[0])

        primitives: List[Optional[Polygon]] = []
        directions = _unit_directions(pts)
        for i in range(len(pts) - 1):
            primitives.append(self._body(pts[i], pts[i + 1], directions[i]))
        for i in range(1, len(pts) - 1):
            primitives.extend(self._join(pts[i], directions[i - 1], directions[i]))
        primitives.append(self._cap(pts[0], -directions[0]))
        primitives.append(self._cap(pts[-1], directions[-1]))
        return _keep(*primitives)

    def ring_primitives(self, coords: np.ndarray) -> List[Polygon]:
        """Primitives for a closed ring: bodies and a join at every vertex."""
        pts = _dedupe(np.asarray(coords, dtype=float)[:, :2])
        if len(pts) > 1 and np.array_equal(pts[0], pts[-1]):
            pts = pts[:-1]
        if len(pts) == 1:
            return self.point_primitives(pts[0])

        closed = np.vstack([pts, pts[:1]])
        directions = _unit_directions(closed)
        count = len(directions)
        primitives: List[Optional[Polygon]] = []
        for i in range(count):
            primitives.append(self._body(closed[i], closed[i + 1], directions[i]))
            primitives.extend(self._join(closed[i], directions[i - 1], directions[i]))
        return _keep(*primitives)

    # ------------------------------------------------------------------
    # Pieces
    # ------------------------------------------------------------------

    def _body(self, p0: np.ndarray, p1: np.ndarray, direction: np.ndarray) -> Optional[Polygon]:
        offset = _left_normal(direction) * self.distance
        return self._polygon(np.array([p0 + offset, p1 + offset, p1 - offset, p0 - offset]))

    def _cap(self, coord: np.ndarray, outward: np.ndarray) -> Optional[Polygon]:
        style = self.parameters.end_cap_style
        if style is CapStyle.ROUND:
            return self._polygon(self._disc(coord))
        if style is CapStyle.SQUARE:
            offset = _left_normal(outward) * self.distance
            extension = outward * self.distance
            return self._polygon(np.array([
                coord + offset,
                coord + offset + extension,
                coord - offset + extension,
                coord - offset,
            ]))
        return None

    def _join(self, vertex: np.ndarray, incoming: np.ndarray, outgoing: np.ndarray) -> List[Optional[Polygon]]:
        """Join on the outer side of the turn at ``vertex``.

        The inner side is already covered by the two segment bodies.
        """
        cross = incoming[0] * outgoing[1] - incoming[1] * outgoing[0]
        dot = float(np.dot(incoming, outgoing))
        if abs(cross) < COLLINEAR_TOLERANCE and dot > 0:
            return []

        # a left turn has its outer side on the right
        side = -1.0 if cross > 0 else 1.0
        a = _left_normal(incoming) * side
        b = _left_normal(outgoing) * side

        style = self.parameters.join_style
        if style is JoinStyle.ROUND:
            return [self._fillet(vertex, a, b, incoming - outgoing)]
        if style is JoinStyle.MITRE:
            return [self._mitre(vertex, a, b)]
        return [self._bevel(vertex, a, b)]

    def _fillet(self, vertex: np.ndarray, a: np.ndarray, b: np.ndarray, through: np.ndarray) -> Optional[Polygon]:
        """Circular sector from normal ``a`` to normal ``b`` sweeping past ``through``."""
        start = math.atan2(a[1], a[0])
        middle = math.atan2(through[1], through[0])
        end = math.atan2(b[1], b[0])
        sweep = _wrap_angle(middle - start) + _wrap_angle(end - middle)

        step = math.pi / 2.0 / self.parameters.quadrant_segments
        count = max(1, int(math.ceil(abs(sweep) / step - COLLINEAR_TOLERANCE)))
        angles = start + sweep * np.arange(count + 1) / count
        arc = np.column_stack([np.cos(angles), np.sin(angles)]) * self.distance
        return self._polygon(np.vstack([vertex, vertex + arc]))

    def _bevel(self, vertex: np.ndarray, a: np.ndarray, b: np.ndarray) -> Optional[Polygon]:
        r = self.distance
        return self._polygon(np.array([vertex, vertex + a * r, vertex + b * r]))

    def _mitre(self, vertex: np.ndarray, a: np.ndarray, b: np.ndarray) -> Optional[Polygon]:
        """Mitre corner between offset normals ``a`` and ``b``.

        The mitre reaches ``r / cos(theta / 2)`` from the vertex. Beyond the
        mitre limit it is cut square at ``mitre_limit * r`` along the
        bisector; if even that would not clear the bevel the join is bevelled.
        """
        r = self.distance
        bisector = a + b
        length = float(np.hypot(*bisector))
        if length < COLLINEAR_TOLERANCE:
            return self._bevel(vertex, a, b)

        half_cos = length / 2.0
        unit = bisector / length
        limit = self.parameters.mitre_limit
        if 1.0 / half_cos <= limit:
            tip = vertex + unit * (r / half_cos)
            return self._polygon(np.array([vertex, vertex + a * r, tip, vertex + b * r]))
        if limit <= half_cos:
            return self._bevel(vertex, a, b)

        start_a = vertex + a * r
        start_b = vertex + b * r
        tip = vertex + unit * (r / half_cos)
        cut_a = _point_at_projection(start_a, tip, vertex, unit, limit * r)
        cut_b = _point_at_projection(start_b, tip, vertex, unit, limit * r)
        return self._polygon(np.array([vertex, start_a, cut_a, cut_b, start_b]))

    def _disc(self, center: np.ndarray) -> np.ndarray:
        return center + self._disc_template * self.distance

    def _polygon(self, coords: np.ndarray) -> Optional[Polygon]:
        coords = self.precision_model.make_precise(coords)
        if _ring_area(coords) <= 0.0:
            return None
        return Polygon(coords)


def _unit_circle(quadrant_segments: int) -> np.ndarray:
    count = 4 * quadrant_segments
    angles = np.arange(count) * (2.0 * math.pi / count)
    return np.column_stack([np.cos(angles), np.sin(angles)])


def _dedupe(coords: np.ndarray) -> np.ndarray:
    if len(coords) < 2:
        return coords
    keep = np.ones(len(coords), dtype=bool)
    keep[1:] = np.any(np.diff(coords, axis=0) != 0.0, axis=1)
    return coords[keep]


def _unit_directions(pts: np.ndarray) -> np.ndarray:
    deltas = np.diff(pts, axis=0)
    lengths = np.hypot(deltas[:, 0], deltas[:, 1])
    return deltas / lengths[:, None]


def _left_normal(direction: np.ndarray) -> np.ndarray:
    return np.array([-direction[1], direction[0]])


def _wrap_angle(angle: float) -> float:
    """Angle folded into ``(-pi, pi]``."""
    wrapped = math.fmod(angle + math.pi, 2.0 * math.pi)
    if wrapped <= 0.0:
        wrapped += 2.0 * math.pi
    return wrapped - math.pi


def _point_at_projection(
    start: np.ndarray,
    end: np.ndarray,
    origin: np.ndarray,
    axis: np.ndarray,
    target: float,
) -> np.ndarray:
    """Point on segment ``start``-``end`` whose projection on ``axis`` is ``target``."""
    p0 = float(np.dot(start - origin, axis))
    p1 = float(np.dot(end - origin, axis))
    t = (target - p0) / (p1 - p0)
    return start + (end - start) * t


def _ring_area(coords: np.ndarray) -> float:
    x = coords[:, 0]
    y = coords[:, 1]
    return abs(float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))) / 2.0


def _keep(*polygons: Optional[Polygon]) -> List[Polygon]:
    return [p for p in polygons if p is not None]


__all__ = ['OffsetCurveBuilder']
