"""Tests for scale-factor derivation and the precision ladder."""

import math

import pytest
from shapely.geometry import LineString, Point, Polygon, box

from polybuffer.core import PrecisionModel, RobustnessError, ValidationError
from polybuffer.ladder import (
    FAST_PATH,
    MAX_PRECISION_DIGITS,
    AttemptResult,
    PrecisionAttempt,
    evaluate_attempt,
    native_fixed_attempt,
    precision_scale_factor,
    reduced_precision_ladder,
    run_attempts,
)


class TestPrecisionScaleFactor:
    """Tests for precision_scale_factor()."""

    def test_unit_square(self):
        # effective size 1 -> log10 size 1 -> min unit 1e-11
        assert precision_scale_factor(box(0, 0, 1, 1), 0.0, 12) == pytest.approx(1e11)

    def test_uses_larger_envelope_dimension(self):
        assert precision_scale_factor(box(0, 0, 10, 5), 0.0, 12) == pytest.approx(1e10)

    def test_positive_distance_expands_region(self):
        # 1 + 2 * 4.5 = 10
        assert precision_scale_factor(box(0, 0, 1, 1), 4.5, 12) == pytest.approx(1e10)

    def test_negative_distance_ignored(self):
        geom = box(0, 0, 7, 3)
        assert precision_scale_factor(geom, -2.0, 12) == precision_scale_factor(geom, 0.0, 12)

    def test_independent_of_coordinate_magnitude(self):
        near = precision_scale_factor(box(0, 0, 1, 1), 0.5, 12)
        far = precision_scale_factor(box(1e6, 1e6, 1e6 + 1, 1e6 + 1), 0.5, 12)
        assert near == pytest.approx(far)

    def test_zero_digits(self):
        # at zero digits the grid unit is ten times the region size
        assert precision_scale_factor(box(0, 0, 1, 1), 0.0, 0) == pytest.approx(0.1)

    @pytest.mark.parametrize("geom, distance", [
        (box(0, 0, 1, 1), 0.5),
        (box(-300, 20, 1200, 45), 0.0),
        (LineString([(0, 0), (0.001, 0.002)]), 10.0),
        (Point(4, 4), 2.0),
    ])
    def test_monotonic_in_digits(self, geom, distance):
        scales = [precision_scale_factor(geom, distance, d) for d in range(0, MAX_PRECISION_DIGITS + 1)]
        assert all(a < b for a, b in zip(scales, scales[1:]))

    def test_deterministic(self):
        geom = Polygon([(0.1, 0.2), (3.7, 0.9), (2.2, 5.4)])
        assert precision_scale_factor(geom, 1.3, 12) == precision_scale_factor(geom, 1.3, 12)

    def test_degenerate_point_is_finite(self):
        scale = precision_scale_factor(Point(5, 5), 0.0, 12)
        assert math.isfinite(scale)
        assert scale == pytest.approx(1e11)

    def test_empty_geometry_is_finite(self):
        assert math.isfinite(precision_scale_factor(Polygon(), -1.0, 12))


class TestReducedPrecisionLadder:
    """Tests for reduced_precision_ladder()."""

    def test_digits_descend_to_zero(self):
        ladder = reduced_precision_ladder(box(0, 0, 1, 1), 1.0)
        assert [a.digits for a in ladder] == list(range(12, -1, -1))

    def test_precision_models_match_scale_factor(self):
        geom = box(0, 0, 40, 25)
        for attempt in reduced_precision_ladder(geom, 2.0):
            assert attempt.precision_model == PrecisionModel.fixed(
                precision_scale_factor(geom, 2.0, attempt.digits)
            )

    def test_custom_max_digits(self):
        ladder = reduced_precision_ladder(box(0, 0, 1, 1), 1.0, max_precision_digits=3)
        assert [a.digits for a in ladder] == [3, 2, 1, 0]

    def test_attempts_are_immutable(self):
        attempt = reduced_precision_ladder(box(0, 0, 1, 1), 1.0)[0]
        with pytest.raises(AttributeError):
            attempt.digits = 4

    def test_fast_path_has_no_precision_model(self):
        assert FAST_PATH.precision_model is None
        assert FAST_PATH.digits is None

    def test_native_fixed_attempt(self):
        attempt = native_fixed_attempt(PrecisionModel.fixed(1000.0))
        assert attempt.precision_model.scale == 1000.0
        assert attempt.digits is None


class TestRunAttempts:
    """Tests for evaluate_attempt() and run_attempts()."""

    def _attempts(self, count):
        return [PrecisionAttempt(label=f"attempt {i}", digits=i) for i in range(count)]

    def test_robustness_error_captured(self):
        def compute(attempt):
            raise RobustnessError("inconsistent noding")

        result = evaluate_attempt(FAST_PATH, compute)
        assert not result.succeeded
        assert result.geometry is None
        assert isinstance(result.error, RobustnessError)

    def test_success_captured(self):
        result = evaluate_attempt(FAST_PATH, lambda attempt: box(0, 0, 1, 1))
        assert result.succeeded
        assert result.geometry.equals(box(0, 0, 1, 1))

    def test_other_errors_propagate(self):
        def compute(attempt):
            raise ValidationError("bad distance")

        with pytest.raises(ValidationError):
            evaluate_attempt(FAST_PATH, compute)

    def test_stops_at_first_success(self):
        seen = []

        def compute(attempt):
            seen.append(attempt.digits)
            if attempt.digits == 2:
                return box(0, 0, 1, 1)
            raise RobustnessError(f"failed at {attempt.digits}")

        success, history = run_attempts(self._attempts(5), compute)

        assert success is history[-1]
        assert success.attempt.digits == 2
        assert seen == [0, 1, 2]
        assert [r.succeeded for r in history] == [False, False, True]

    def test_exhausted(self):
        def compute(attempt):
            raise RobustnessError(f"failed at {attempt.digits}")

        success, history = run_attempts(self._attempts(3), compute)

        assert success is None
        assert len(history) == 3
        assert str(history[-1].error) == "failed at 2"

    def test_empty_ladder(self):
        success, history = run_attempts([], lambda attempt: box(0, 0, 1, 1))
        assert success is None
        assert history == []

    def test_result_is_value_type(self):
        result = AttemptResult(FAST_PATH, geometry=box(0, 0, 1, 1))
        assert result.succeeded
        with pytest.raises(AttributeError):
            result.geometry = None
