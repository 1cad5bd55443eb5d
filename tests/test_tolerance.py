"""
Tests for core/challenge_eval/tolerance.py — the shared tolerance curve.

Covers:
  - score_tolerance band shape: exact, inside tolerance, boundary, zero point
  - continuity at the tolerance boundary
  - domain wrappers: pitch, time stretch, trim points, fades
  - Tolerances validation
  - round_score half-up rounding, non-finite input scores 0
"""

import pytest

from core.challenge_eval.tolerance import (
    DEFAULT_TOLERANCES,
    Tolerances,
    round_score,
    score_fades,
    score_pitch,
    score_time_stretch,
    score_tolerance,
    score_trim_points,
)

# ---------------------------------------------------------------------------
# score_tolerance
# ---------------------------------------------------------------------------


class TestScoreTolerance:
    def test_exact_match_is_100(self):
        assert score_tolerance(3.0, 3.0, 1.0) == 100.0

    def test_half_tolerance_is_85(self):
        assert score_tolerance(0.5, 0.0, 1.0) == pytest.approx(85.0)

    def test_boundary_is_exactly_70(self):
        assert score_tolerance(2.0, 0.0, 2.0) == pytest.approx(70.0)

    def test_steps_down_past_boundary(self):
        """Inside the tolerance approaches 70; the outer segment starts at 56."""
        inside = score_tolerance(0.999999, 0.0, 1.0)
        outside = score_tolerance(1.000001, 0.0, 1.0)
        assert inside == pytest.approx(70.0, abs=1e-3)
        assert outside == pytest.approx(56.0, abs=1e-3)

    def test_zero_at_five_tolerances(self):
        assert score_tolerance(5.0, 0.0, 1.0) == 0.0

    def test_beyond_five_tolerances_stays_zero(self):
        assert score_tolerance(50.0, 0.0, 1.0) == 0.0

    def test_symmetric_in_direction(self):
        assert score_tolerance(-1.5, 0.0, 1.0) == score_tolerance(1.5, 0.0, 1.0)

    @pytest.mark.parametrize("diff", [0.0, 0.3, 1.0, 2.0, 4.9, 10.0])
    def test_always_in_range(self, diff: float):
        assert 0.0 <= score_tolerance(diff, 0.0, 1.0) <= 100.0

    def test_monotonic_in_distance(self):
        scores = [score_tolerance(d / 10, 0.0, 1.0) for d in range(0, 60)]
        assert scores == sorted(scores, reverse=True)


# ---------------------------------------------------------------------------
# Domain wrappers
# ---------------------------------------------------------------------------


class TestDomainScores:
    def test_pitch_exact(self):
        assert score_pitch(0, 0) == 100

    def test_pitch_one_semitone_is_boundary(self):
        assert score_pitch(1, 0) == pytest.approx(70)

    def test_pitch_five_semitones_is_zero(self):
        assert score_pitch(5, 0) == 0

    def test_time_stretch_exact(self):
        assert score_time_stretch(1.0, 1.0) == 100

    def test_time_stretch_ten_percent_off(self):
        """1.1 - 1.0 is a hair above 0.1 in floating point, so it lands past the boundary."""
        score = score_time_stretch(1.1, 1.0)
        assert 50 < score <= 70

    def test_trim_points_mean(self):
        # start exact (100), end half a tolerance off (85)
        score = score_trim_points(0.1, 0.91, 0.1, 0.9)
        assert score == pytest.approx(92.5, abs=0.01)

    def test_fades_exact(self):
        assert score_fades(0.01, 0.2, 0.01, 0.2) == 100.0

    def test_fades_far_off(self):
        assert score_fades(1.0, 1.0, 0.0, 0.0) == 0.0


# ---------------------------------------------------------------------------
# Tolerances
# ---------------------------------------------------------------------------


class TestTolerances:
    def test_defaults(self):
        assert DEFAULT_TOLERANCES.pitch == 1.0
        assert DEFAULT_TOLERANCES.time_stretch == 0.1
        assert DEFAULT_TOLERANCES.trim == 0.02
        assert DEFAULT_TOLERANCES.fade == 0.05

    def test_zero_tolerance_rejected(self):
        with pytest.raises(ValueError, match="pitch"):
            Tolerances(pitch=0)

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError, match="volume"):
            Tolerances(volume=-1.0)

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_TOLERANCES.pitch = 2.0  # type: ignore[misc]


# ---------------------------------------------------------------------------
# round_score
# ---------------------------------------------------------------------------


class TestRoundScore:
    @pytest.mark.parametrize(
        "value,expected",
        [(59.5, 60), (74.5, 75), (89.5, 90), (0.4, 0), (100.0, 100), (2.5, 3)],
    )
    def test_half_up(self, value: float, expected: int):
        assert round_score(value) == expected

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_is_zero(self, value: float):
        assert round_score(value) == 0
