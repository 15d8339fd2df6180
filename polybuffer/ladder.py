"""Precision ladder used when a buffer fails at its native precision.

A ladder is a finite, ordered sequence of immutable :class:`PrecisionAttempt`
descriptors. :func:`run_attempts` evaluates them in order, collects one
:class:`AttemptResult` per attempt and stops at the first success, so the
retry behaviour is an explicit state machine instead of exception plumbing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from shapely.geometry.base import BaseGeometry

from .core.errors import RobustnessError
from .core.geometry_utils import envelope_size
from .core.precision import PrecisionModel

logger = logging.getLogger(__name__)

# Digits of precision that leave computational headroom for floating point
# operations; must stay below the ~16 decimal digits of a double.
MAX_PRECISION_DIGITS = 12


def precision_scale_factor(
    geometry: BaseGeometry,
    distance: float,
    max_precision_digits: int,
) -> float:
    """Compute a grid scale keeping ``max_precision_digits`` significant digits.

    Digits are counted relative to the region the buffer actually covers:
    the larger envelope dimension of ``geometry`` grown by twice the distance
    when the distance is positive. A degenerate region of size zero is
    treated as having a nominal size of one unit.

    Args:
        geometry: The geometry being buffered
        distance: The buffer distance
        max_precision_digits: Significant digits the grid must preserve

    Returns:
        The reciprocal of the grid unit

    Examples:
        >>> from shapely.geometry import box
        >>> precision_scale_factor(box(0, 0, 1, 1), 0.0, 12)
        100000000000.0
    """
    expand_by = distance if distance > 0.0 else 0.0
    effective_size = envelope_size(geometry) + 2 * expand_by
    if effective_size <= 0.0:
        effective_size = 1.0

    # the smallest power of 10 greater than the buffer envelope
    size_log10 = math.log10(effective_size) + 1.0
    min_unit_log10 = size_log10 - max_precision_digits
    # scale factor is the inverse of the min unit size
    return math.pow(10.0, -min_unit_log10)


@dataclass(frozen=True)
class PrecisionAttempt:
    """One rung of the ladder.

    ``precision_model`` is ``None`` for the fast path, where the builder works
    at the geometry's own precision with its default noder.
    """

    label: str
    precision_model: Optional[PrecisionModel] = None
    digits: Optional[int] = None


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of one attempt: either a geometry or the robustness failure."""

    attempt: PrecisionAttempt
    geometry: Optional[BaseGeometry] = None
    error: Optional[RobustnessError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


FAST_PATH = PrecisionAttempt(label="original precision")


def native_fixed_attempt(precision_model: PrecisionModel) -> PrecisionAttempt:
    return PrecisionAttempt(label=f"native {precision_model}", precision_model=precision_model)


def reduced_precision_ladder(
    geometry: BaseGeometry,
    distance: float,
    max_precision_digits: int = MAX_PRECISION_DIGITS,
) -> List[PrecisionAttempt]:
    """Attempts from ``max_precision_digits`` down to 0 digits, finest first."""
    attempts = []
    for digits in range(max_precision_digits, -1, -1):
        scale = precision_scale_factor(geometry, distance, digits)
        attempts.append(PrecisionAttempt(
            label=f"{digits} digits",
            precision_model=PrecisionModel.fixed(scale),
            digits=digits,
        ))
    return attempts


def evaluate_attempt(
    attempt: PrecisionAttempt,
    compute: Callable[[PrecisionAttempt], BaseGeometry],
) -> AttemptResult:
    """Run ``compute`` for one attempt and capture a robustness failure.

    Any other exception propagates unchanged.
    """
    try:
        geometry = compute(attempt)
    except RobustnessError as exc:
        logger.debug("Buffer attempt at %s failed: %s", attempt.label, exc)
        return AttemptResult(attempt, error=exc)
    logger.debug("Buffer attempt at %s succeeded", attempt.label)
    return AttemptResult(attempt, geometry=geometry)


def run_attempts(
    attempts: Iterable[PrecisionAttempt],
    compute: Callable[[PrecisionAttempt], BaseGeometry],
) -> Tuple[Optional[AttemptResult], List[AttemptResult]]:
    """Evaluate attempts in order until one succeeds.

    Returns:
        Tuple of (first successful result or None, all results in order)
    """
    history: List[AttemptResult] = []
    for attempt in attempts:
        result = evaluate_attempt(attempt, compute)
        history.append(result)
        if result.succeeded:
            return result, history
    return None, history


__all__ = [
    'MAX_PRECISION_DIGITS',
    'precision_scale_factor',
    'PrecisionAttempt',
    'AttemptResult',
    'FAST_PATH',
    'native_fixed_attempt',
    'reduced_precision_ladder',
    'evaluate_attempt',
    'run_attempts',
]
