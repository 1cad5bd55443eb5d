"""
Tests for score_slices — slice count accuracy plus spacing evenness.
"""

import itertools

from core.challenge_eval.tolerance import score_slices
from core.challenge_eval.types import SampleSlice


def even_slices(count: int, duration: float) -> list[SampleSlice]:
    step = duration / count
    return [SampleSlice(start=i * step, end=(i + 1) * step) for i in range(count)]


class TestSliceCount:
    def test_exact_count_evenly_spaced_is_100(self):
        assert score_slices(even_slices(4, 4.0), 4, 4.0) == 100

    def test_no_slices_when_four_expected_fails(self):
        assert score_slices([], 4, 4.0) < 60

    def test_no_slices_expected_and_none_made(self):
        assert score_slices([], 0, 4.0) == 100

    def test_unwanted_slices_are_penalized_not_zeroed(self):
        assert score_slices(even_slices(2, 4.0), 0, 4.0) == 50

    def test_one_short_loses_count_points(self):
        # count: 60 * (1 - 1/4) = 45, spacing even: 40
        assert score_slices(even_slices(3, 4.0), 4, 4.0) == 85

    def test_half_the_slices(self):
        # count: 60 * (1 - 2/4) = 30, spacing even: 40
        assert score_slices(even_slices(2, 4.0), 4, 4.0) == 70

    def test_double_the_slices_loses_all_count_points(self):
        assert score_slices(even_slices(8, 4.0), 4, 4.0) == 40

    def test_single_slice_when_one_expected(self):
        assert score_slices([SampleSlice(start=0.0, end=4.0)], 1, 4.0) == 100


class TestSliceSpacing:
    def test_uneven_spacing_costs_points(self):
        bunched = [SampleSlice(start=s, end=s + 0.1) for s in (0.0, 0.1, 0.2, 0.3)]
        assert score_slices(bunched, 4, 4.0) < score_slices(even_slices(4, 4.0), 4, 4.0)

    def test_zero_duration_gets_no_spacing_points(self):
        assert score_slices(even_slices(4, 4.0), 4, 0.0) == 60

    def test_order_does_not_matter(self):
        slices = [SampleSlice(start=s, end=s + 0.5) for s in (0.0, 0.7, 2.1, 3.2)]
        expected = score_slices(slices, 4, 4.0)
        for permutation in itertools.permutations(slices):
            assert score_slices(list(permutation), 4, 4.0) == expected

    def test_result_is_int_in_range(self):
        score = score_slices([SampleSlice(start=0.3, end=1.0)] * 3, 4, 4.0)
        assert isinstance(score, int)
        assert 0 <= score <= 100
