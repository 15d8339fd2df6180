"""Common geometry helpers shared by the builder and the orchestrator."""

from typing import Iterator, List, Union

import numpy as np
import shapely
from shapely.geometry import (
    LinearRing,
    LineString,
    MultiPolygon,
    Point,
    Polygon,
)
from shapely.geometry.base import BaseGeometry, BaseMultipartGeometry


def iter_components(geometry: BaseGeometry) -> Iterator[BaseGeometry]:
    """Yield the non-empty single-part components of ``geometry``.

    Multi-part geometries and collections are flattened recursively, so the
    result only contains Points, LineStrings, LinearRings and Polygons.

    Examples:
        >>> collection = GeometryCollection([Point(0, 0), MultiPolygon([square])])
        >>> [g.geom_type for g in iter_components(collection)]
        ['Point', 'Polygon']
    """
    if geometry.is_empty:
        return
    if isinstance(geometry, BaseMultipartGeometry):
        for part in geometry.geoms:
            yield from iter_components(part)
    else:
        yield geometry


def split_by_dimension(geometry: BaseGeometry):
    """Split components into ``(points, lines, polygons)`` lists."""
    points: List[Point] = []
    lines: List[LineString] = []
    polygons: List[Polygon] = []
    for component in iter_components(geometry):
        if isinstance(component, Point):
            points.append(component)
        elif isinstance(component, (LineString, LinearRing)):
            lines.append(component)
        elif isinstance(component, Polygon):
            polygons.append(component)
    return points, lines, polygons


def envelope_size(geometry: BaseGeometry) -> float:
    """Return the larger of the width and height of the bounding envelope.

    Empty geometries have no envelope and report a size of ``0.0``.
    """
    if geometry.is_empty:
        return 0.0
    minx, miny, maxx, maxy = geometry.bounds
    return max(maxx - minx, maxy - miny)


def to_polygonal(geometry: BaseGeometry) -> Union[Polygon, MultiPolygon]:
    """Normalize an overlay result into a Polygon or MultiPolygon.

    Lower-dimensional debris left by an overlay inside a GeometryCollection
    is dropped. An empty or non-areal result becomes an empty Polygon.

    Examples:
        >>> to_polygonal(GeometryCollection()).wkt
        'POLYGON EMPTY'
    """
    if geometry.is_empty:
        return Polygon()
    if isinstance(geometry, (Polygon, MultiPolygon)):
        return geometry

    polygons = [g for g in iter_components(geometry) if isinstance(g, Polygon)]
    if not polygons:
        return Polygon()
    if len(polygons) == 1:
        return polygons[0]
    return MultiPolygon(polygons)


def has_finite_coordinates(geometry: BaseGeometry) -> bool:
    """Return True when no coordinate of ``geometry`` is NaN or infinite."""
    coords = shapely.get_coordinates(geometry)
    return bool(np.isfinite(coords).all())


__all__ = [
    'iter_components',
    'split_by_dimension',
    'envelope_size',
    'to_polygonal',
    'has_finite_coordinates',
]
