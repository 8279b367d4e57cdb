"""Tests for the level progression system."""

import pytest

from study_rank.levels import (
    LEVEL_THRESHOLDS,
    MAX_LEVEL,
    level_emoji,
    level_from_xp,
    level_info,
)


class TestThresholds:
    def test_thirteen_levels(self):
        assert MAX_LEVEL == 13
        assert len(LEVEL_THRESHOLDS) == 13

    def test_strictly_increasing(self):
        xps = [t.xp for t in LEVEL_THRESHOLDS]
        assert xps == sorted(xps)
        assert len(set(xps)) == len(xps)

    def test_first_level_is_free(self):
        assert LEVEL_THRESHOLDS[0].xp == 0


class TestLevelFromXp:
    @pytest.mark.parametrize(
        "xp,expected",
        [(0, 1), (59, 1), (60, 2), (179, 2), (180, 3), (600, 5), (5999, 8), (6000, 9), (60000, 13), (10**7, 13)],
    )
    def test_levels(self, xp, expected):
        assert level_from_xp(xp) == expected

    def test_monotonic(self):
        levels = [level_from_xp(xp) for xp in range(0, 70000, 250)]
        assert levels == sorted(levels)


class TestLevelInfo:
    def test_start(self):
        info = level_info(0)
        assert info.level == 1
        assert info.title == "Noob"
        assert info.current_xp == 0
        assert info.xp_for_next_level == 60
        assert info.progress_percent == 0

    def test_mid_level(self):
        info = level_info(120)
        assert info.level == 2
        assert info.title == "Beginner"
        assert info.current_xp == 60
        assert info.xp_for_current_level == 60
        assert info.xp_for_next_level == 180
        assert info.progress_percent == pytest.approx(50.0)

    def test_exact_threshold(self):
        info = level_info(600)
        assert info.level == 5
        assert info.current_xp == 0

    def test_max_level(self):
        info = level_info(75000)
        assert info.level == MAX_LEVEL
        assert info.title == "Immortal"
        assert info.progress_percent == 100.0
        assert info.total_xp == 75000


class TestLevelEmoji:
    def test_known_level(self):
        assert level_emoji(13) == LEVEL_THRESHOLDS[-1].emoji

    def test_unknown_level_falls_back(self):
        assert level_emoji(99) == LEVEL_THRESHOLDS[0].emoji
