"""
Tests for core/challenge_eval/grading.py — star mapping, pass threshold, headlines.
"""

import pytest

from core.challenge_eval.grading import (
    HEADLINES,
    fallback_result,
    grade,
    headline,
    is_passed,
    mean,
    stars_for,
)
from core.challenge_eval.types import ChallengeType, ScoreBreakdown


class TestStars:
    @pytest.mark.parametrize(
        "overall,stars",
        [(0, 1), (59, 1), (60, 1), (74, 1), (75, 2), (89, 2), (90, 3), (100, 3)],
    )
    def test_bands(self, overall: int, stars: int):
        assert stars_for(overall) == stars

    def test_monotonic(self):
        stars = [stars_for(score) for score in range(101)]
        assert stars == sorted(stars)

    def test_pass_threshold(self):
        assert not is_passed(59)
        assert is_passed(60)


class TestHeadlines:
    def test_every_type_has_headlines(self):
        assert set(HEADLINES) == set(ChallengeType)

    def test_band_selection(self):
        assert headline(ChallengeType.CHOP, 95) == "Perfect chops!"
        assert headline(ChallengeType.CHOP, 80) == "Nice chopping!"
        assert headline(ChallengeType.CHOP, 65) == "Chops are acceptable"
        assert headline(ChallengeType.CHOP, 10) == "Keep practicing your chopping"


class TestGrade:
    def test_rounds_and_clamps(self):
        breakdown = ScoreBreakdown(type="chop")
        assert grade(ChallengeType.CHOP, 89.5, breakdown).overall == 90
        assert grade(ChallengeType.CHOP, 120.0, breakdown).overall == 100
        assert grade(ChallengeType.CHOP, -5.0, breakdown).overall == 0

    def test_pass_uses_rounded_score(self):
        result = grade(ChallengeType.CHOP, 59.5, ScoreBreakdown(type="chop"))
        assert result.overall == 60
        assert result.passed

    def test_headline_first(self):
        notes = ["note one", "note two"]
        result = grade(ChallengeType.GOAL, 50, ScoreBreakdown(type="goal"), notes)
        assert result.feedback == ("Review the goals and try again", "note one", "note two")

    def test_fallback(self):
        result = fallback_result("mystery")
        assert (result.overall, result.stars, result.passed) == (0, 1, False)
        assert result.breakdown.as_dict() == {"type": "mystery"}


class TestMean:
    def test_empty_is_none(self):
        assert mean([]) is None

    def test_mean(self):
        assert mean([100.0, 50.0]) == 75.0
