"""
core/challenge_eval/tolerance.py — Tolerance curves and slice scoring.

Every numeric "how close is the learner" question goes through one curve,
``score_tolerance``, with a per-domain tolerance constant:

    diff == 0          → 100
    diff <= tolerance  → 100 − (diff / tolerance) · 30        (100 … 70)
    diff >  tolerance  → 70 · (1 − min(diff / 5·tolerance, 1)) (70 … 0)

A diff of exactly one tolerance scores 70. Just past it the outer segment
takes over at 70 · 0.8 = 56, so the curve steps down at the boundary; it
reaches exactly 0 at five tolerances.

Slice scoring is a separate algorithm: count accuracy (0–60) plus spacing
evenness (0–40).

Pure module — no I/O, no logging.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from core.challenge_eval.types import SampleSlice

# Score at the tolerance boundary and the zero point multiplier.
_BOUNDARY_SCORE = 70.0
_ZERO_AT_TOLERANCES = 5.0

# Slice scoring weights.
_COUNT_POINTS = 60.0
_DISTRIBUTION_POINTS = 40.0


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tolerances:
    """Per-domain tolerance constants.

    Attributes:
        pitch: Semitones.
        time_stretch: Ratio units (0.1 = ±10 %).
        trim: Fraction of the normalized sample length.
        fade: Seconds.
        volume: dB, reference-mix fader matching.
        pan: Pan units, reference-mix matching.
        reference_eq: dB, reference-mix EQ matching.
        eq: dB, single-channel EQ matching.
        threshold: dB, compressor threshold.
        amount: Percent, compressor amount.
        attack: Seconds.
        release: Seconds.
        velocity: Drum step velocity, 0.0–1.0 scale.
        swing: Drum pattern swing, 0.0–1.0 scale.
        tempo: BPM.
    """

    pitch: float = 1.0
    time_stretch: float = 0.1
    trim: float = 0.02
    fade: float = 0.05
    volume: float = 3.0
    pan: float = 0.2
    reference_eq: float = 2.0
    eq: float = 3.0
    threshold: float = 6.0
    amount: float = 15.0
    attack: float = 0.05
    release: float = 0.1
    velocity: float = 0.15
    swing: float = 0.1
    tempo: float = 5.0

    def __post_init__(self) -> None:
        """Every tolerance must be strictly positive."""
        for name, value in vars(self).items():
            if value <= 0:
                raise ValueError(f"tolerance {name!r} must be positive, got {value}")


DEFAULT_TOLERANCES = Tolerances()
"""Tolerances used by every evaluator."""


# ---------------------------------------------------------------------------
# Core curve
# ---------------------------------------------------------------------------


def score_tolerance(actual: float, target: float, tolerance: float) -> float:
    """Map the distance between ``actual`` and ``target`` to a 0–100 score.

    Args:
        actual:    Learner value.
        target:    Target value.
        tolerance: Distance that still earns the "close" band (70–100).

    Returns:
        Score in [0, 100]. 100 only for an exact match.
    """
    diff = abs(actual - target)
    if diff == 0:
        return 100.0
    if diff <= tolerance:
        return 100.0 - (diff / tolerance) * (100.0 - _BOUNDARY_SCORE)
    ratio = min(diff / (tolerance * _ZERO_AT_TOLERANCES), 1.0)
    return _BOUNDARY_SCORE * (1.0 - ratio)


def score_pitch(actual: float, target: float) -> float:
    """Pitch accuracy, ±1 semitone tolerance."""
    return score_tolerance(actual, target, DEFAULT_TOLERANCES.pitch)


def score_time_stretch(actual: float, target: float) -> float:
    """Time-stretch accuracy, ±10 % tolerance."""
    return score_tolerance(actual, target, DEFAULT_TOLERANCES.time_stretch)


def score_trim_points(
    actual_start: float, actual_end: float, target_start: float, target_end: float
) -> float:
    """Mean accuracy of the start and end trim points (±2 % of length)."""
    tol = DEFAULT_TOLERANCES.trim
    return (
        score_tolerance(actual_start, target_start, tol)
        + score_tolerance(actual_end, target_end, tol)
    ) / 2.0


def score_fades(
    actual_fade_in: float, actual_fade_out: float, target_fade_in: float, target_fade_out: float
) -> float:
    """Mean accuracy of fade-in and fade-out lengths (±50 ms)."""
    tol = DEFAULT_TOLERANCES.fade
    return (
        score_tolerance(actual_fade_in, target_fade_in, tol)
        + score_tolerance(actual_fade_out, target_fade_out, tol)
    ) / 2.0


# ---------------------------------------------------------------------------
# Slices
# ---------------------------------------------------------------------------


def score_slices(slices: Sequence[SampleSlice], expected_count: int, duration: float) -> int:
    """Score slice count and how evenly the slices are spread.

    Count accuracy is worth 60 points, spacing evenness 40. Spacing is the
    mean absolute deviation of consecutive slice starts from the ideal even
    spacing ``duration / len(slices)``, so the score does not depend on the
    order the slices were created in.

    Args:
        slices:         Learner slices (any order).
        expected_count: Number of slices the challenge asks for.
        duration:       Sample length in seconds.

    Returns:
        Integer score 0–100.
    """
    actual_count = len(slices)

    if expected_count == 0:
        # Unwanted slicing is penalized but not zeroed.
        return 100 if actual_count == 0 else 50

    if actual_count == expected_count:
        count_score = _COUNT_POINTS
    else:
        count_ratio = abs(actual_count - expected_count) / expected_count
        count_score = max(0.0, _COUNT_POINTS * (1.0 - count_ratio))

    distribution_score = 0.0
    if actual_count >= 2 and duration > 0:
        ideal_spacing = duration / actual_count
        starts = sorted(s.start for s in slices)
        deviations = [
            abs((later - earlier) - ideal_spacing) for earlier, later in zip(starts, starts[1:])
        ]
        avg_deviation = sum(deviations) / len(deviations)
        distribution_score = max(0.0, _DISTRIBUTION_POINTS * (1.0 - avg_deviation / ideal_spacing))
    elif actual_count == 1 and expected_count == 1:
        # A single point has no spacing to measure.
        distribution_score = _DISTRIBUTION_POINTS

    return round_score(count_score + distribution_score)


def round_score(value: float) -> int:
    """Round half up to an integer score.

    Python's ``round`` rounds halves to even; scores round .5 upwards.
    A non-finite value (NaN or infinite learner input) scores 0.
    """
    if not math.isfinite(value):
        return 0
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
