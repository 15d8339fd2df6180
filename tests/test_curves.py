"""Tests for offset primitive generation."""

import numpy as np
import pytest
import shapely

from polybuffer.core import BufferParameters, CapStyle, ConfigurationError, JoinStyle, PrecisionModel
from polybuffer.curves import OffsetCurveBuilder


def _builder(distance=1.0, precision_model=None, **params):
    return OffsetCurveBuilder(
        BufferParameters(**params),
        precision_model or PrecisionModel.floating(),
        distance,
    )


def _fan_area(radius, triangles, quadrant_segments=8):
    return 0.5 * radius ** 2 * np.sin(np.pi / 2 / quadrant_segments) * triangles


class TestLinePrimitives:

    def test_straight_line_round_caps(self):
        pieces = _builder().line_primitives(np.array([[0.0, 0.0], [10.0, 0.0]]))
        # one body, two caps
        assert len(pieces) == 3

    def test_flat_caps_only_body(self):
        pieces = _builder(end_cap_style=CapStyle.FLAT).line_primitives(np.array([[0.0, 0.0], [10.0, 0.0]]))
        assert len(pieces) == 1
        assert pieces[0].area == pytest.approx(20.0)

    def test_collinear_vertex_has_no_join(self):
        coords = np.array([[0.0, 0.0], [5.0, 0.0], [10.0, 0.0]])
        pieces = _builder(end_cap_style=CapStyle.FLAT).line_primitives(coords)
        assert len(pieces) == 2

    def test_duplicate_vertices_ignored(self):
        coords = np.array([[0.0, 0.0], [0.0, 0.0], [10.0, 0.0], [10.0, 0.0]])
        pieces = _builder(end_cap_style=CapStyle.FLAT).line_primitives(coords)
        assert len(pieces) == 1

    def test_bevel_join_pieces(self):
        coords = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0]])
        pieces = _builder(end_cap_style=CapStyle.FLAT, join_style=JoinStyle.BEVEL).line_primitives(coords)
        # two bodies and one bevel triangle on the outer side
        assert len(pieces) == 3
        assert min(p.area for p in pieces) == pytest.approx(0.5)

    def test_round_join_is_outer_sector(self):
        coords = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0]])
        pieces = _builder(end_cap_style=CapStyle.FLAT).line_primitives(coords)
        assert len(pieces) == 3

        join = min(pieces, key=lambda p: p.area)
        # a quarter disc below and right of the corner
        assert join.bounds == pytest.approx((10.0, -1.0, 11.0, 0.0))
        assert join.area == pytest.approx(_fan_area(1.0, 8))

    def test_reversal_round_join_is_half_disc(self):
        coords = np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 0.0]])
        pieces = _builder(end_cap_style=CapStyle.FLAT).line_primitives(coords)

        join = min(pieces, key=lambda p: p.area)
        assert join.bounds == pytest.approx((10.0, -1.0, 11.0, 1.0))
        assert join.area == pytest.approx(_fan_area(1.0, 16))

    def test_z_coordinates_dropped(self):
        coords = np.array([[0.0, 0.0, 5.0], [10.0, 0.0, 7.0]])
        pieces = _builder(end_cap_style=CapStyle.FLAT).line_primitives(coords)
        assert not pieces[0].has_z


class TestRingPrimitives:

    def test_square_ring_mitre(self):
        coords = np.array([[0.0, 0.0], [2.0, 0.0], [2.0, 2.0], [0.0, 2.0], [0.0, 0.0]])
        pieces = _builder(join_style=JoinStyle.MITRE).ring_primitives(coords)
        # four bodies plus an outer mitre at every corner
        assert len(pieces) == 8
        assert shapely.union_all(pieces).area == pytest.approx(16.0)

    def test_precision_model_applied(self):
        coords = np.array([[0.1, 0.1], [2.3, 0.2], [1.4, 2.6], [0.1, 0.1]])
        pieces = _builder(distance=0.7, precision_model=PrecisionModel.fixed(4.0)).ring_primitives(coords)
        coords_out = np.vstack([shapely.get_coordinates(p) for p in pieces])
        assert np.allclose(coords_out * 4, np.round(coords_out * 4))


class TestPointPrimitives:

    def test_disc_vertex_count(self):
        pieces = _builder(quadrant_segments=4).point_primitives(np.array([1.0, 1.0]))
        assert len(pieces) == 1
        # 16 vertices plus the closing coordinate
        assert len(pieces[0].exterior.coords) == 17

    def test_disc_collapsed_on_coarse_grid(self):
        pieces = _builder(distance=0.1, precision_model=PrecisionModel.fixed(1.0)).point_primitives(
            np.array([0.0, 0.0])
        )
        assert pieces == []

    def test_square_cap_gives_square(self):
        pieces = _builder(distance=2.0, end_cap_style=CapStyle.SQUARE).point_primitives(np.array([1.0, 1.0]))
        assert len(pieces) == 1
        assert pieces[0].bounds == pytest.approx((-1.0, -1.0, 3.0, 3.0))

    def test_flat_cap_gives_nothing(self):
        assert _builder(end_cap_style=CapStyle.FLAT).point_primitives(np.array([1.0, 1.0])) == []


def test_non_positive_distance_rejected():
    with pytest.raises(ConfigurationError):
        _builder(distance=0.0)
