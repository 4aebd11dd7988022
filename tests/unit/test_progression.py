# tests/unit/test_progression.py
"""
Unit tests for the progression module.

Covers the level thresholds, progress-within-level arithmetic and the
behavior at and beyond the last level.
"""

import pytest

from constants import LEVEL_THRESHOLDS, MAX_LEVEL
from exceptions import InvalidInputError
from progression import calculate_level_progress, level_for_xp, threshold_for_level


class TestCalculateLevelProgress:
    """Tests for calculate_level_progress function."""

    def test_zero_xp_is_level_one(self):
        progress = calculate_level_progress(0)

        assert progress.current_level == 1
        assert progress.level_progress == 0
        assert progress.xp_needed_for_next_level == 1000
        assert progress.progress_percentage == 0

    def test_exact_threshold_starts_new_level(self):
        progress = calculate_level_progress(1000)

        assert progress.current_level == 2
        assert progress.level_progress == 0
        assert progress.progress_percentage == 0

    def test_partial_progress_is_floored(self):
        progress = calculate_level_progress(1500)

        assert progress.current_level == 2
        assert progress.level_progress == 500
        assert progress.xp_needed_for_next_level == 1500
        # floor(500 / 1500 * 100) = 33
        assert progress.progress_percentage == 33

    def test_one_short_of_next_level(self):
        progress = calculate_level_progress(4999)

        assert progress.current_level == 3
        assert progress.level_progress == 2499
        assert progress.xp_needed_for_next_level == 2500
        assert progress.progress_percentage == 99

    def test_max_level_threshold_is_full(self):
        progress = calculate_level_progress(10000)

        assert progress.current_level == MAX_LEVEL
        assert progress.level_progress == 0
        assert progress.xp_needed_for_next_level == 0
        assert progress.progress_percentage == 100

    def test_beyond_max_level_stays_capped(self):
        progress = calculate_level_progress(250000)

        assert progress.current_level == MAX_LEVEL
        assert progress.level_progress == 240000
        assert progress.xp_needed_for_next_level == 0
        assert progress.progress_percentage == 100

    def test_current_xp_is_echoed(self):
        assert calculate_level_progress(2600).current_xp == 2600

    @pytest.mark.parametrize("xp", [0, 1, 999, 1000, 2499, 2500, 7777, 9999, 10000, 10**7])
    def test_ranges_hold_for_any_xp(self, xp):
        progress = calculate_level_progress(xp)

        assert 1 <= progress.current_level <= MAX_LEVEL
        assert progress.level_progress >= 0
        assert 0 <= progress.progress_percentage <= 100

    def test_negative_xp_rejected(self):
        with pytest.raises(InvalidInputError):
            calculate_level_progress(-1)

    @pytest.mark.parametrize("xp", [1.5, "100", None, True])
    def test_non_integer_xp_rejected(self, xp):
        with pytest.raises(InvalidInputError):
            calculate_level_progress(xp)


class TestLevelForXp:
    """Tests for level_for_xp and threshold_for_level."""

    def test_each_threshold_maps_to_its_level(self):
        for level, threshold in LEVEL_THRESHOLDS.items():
            assert level_for_xp(threshold) == level

    def test_just_below_threshold_is_previous_level(self):
        assert level_for_xp(2499) == 2
        assert level_for_xp(9999) == 4

    def test_threshold_for_level(self):
        assert threshold_for_level(1) == 0
        assert threshold_for_level(5) == 10000

    @pytest.mark.parametrize("level", [0, 6])
    def test_threshold_for_unknown_level_rejected(self, level):
        with pytest.raises(InvalidInputError):
            threshold_for_level(level)
