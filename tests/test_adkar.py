"""
Tests: ADKAR rollup and performance recompute.
"""

import pytest

from app.services.adkar import (
    ADKAR_KEYS,
    adkar_rollup,
    adkar_rollup_from_dict,
    performance_from_adkar,
    round_half_up,
)


class TestRoundHalfUp:
    @pytest.mark.parametrize("value,expected", [(2.5, 3), (3.5, 4), (2.4, 2), (0.5, 1), (70.0, 70)])
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected


class TestAdkarRollup:
    def test_average_and_bottleneck(self):
        result = adkar_rollup(80, 60, 40, 70, 90)
        assert result["average"] == 68
        assert result["bottleneckStage"] == "Knowledge"
        assert result["bottleneckScore"] == 40
        assert result["bottleneckTip"] == "Provide training, documentation, and examples"

    def test_average_rounds_half_up(self):
        # 251/5 = 50.2, 253/5 = 50.6, 252.5/5 = 50.5
        assert adkar_rollup(51, 50, 50, 50, 50)["average"] == 50
        assert adkar_rollup(52, 51, 50, 50, 50)["average"] == 51
        assert adkar_rollup(50.5, 50, 50, 50, 52)["average"] == 51

    def test_tie_goes_to_first_stage(self):
        result = adkar_rollup(30, 30, 30, 30, 30)
        assert result["bottleneckStage"] == "Awareness"
        assert result["bottleneckScore"] == 30

    def test_tie_between_later_stages(self):
        result = adkar_rollup(90, 80, 20, 20, 50)
        assert result["bottleneckStage"] == "Knowledge"

    def test_bottleneck_is_minimum(self):
        scores = (45, 12, 77, 12, 99)
        result = adkar_rollup(*scores)
        assert result["bottleneckScore"] == min(scores)
        assert result["bottleneckStage"] == "Desire"

    def test_out_of_range_passes_through(self):
        result = adkar_rollup(-10, 150, 50, 50, 50)
        assert result["bottleneckScore"] == -10
        assert result["average"] == 58

    def test_from_dict(self):
        scores = dict(zip(ADKAR_KEYS, (10, 20, 30, 40, 50)))
        assert adkar_rollup_from_dict(scores)["average"] == 30


class TestPerformanceFromAdkar:
    def test_updates_override_current(self):
        current = dict.fromkeys(ADKAR_KEYS, 50)
        assert performance_from_adkar({"awareness": 100}, current) == 60

    def test_missing_values_default_to_50(self):
        assert performance_from_adkar({"desire": 0}, {}) == 40

    def test_none_current_falls_back(self):
        current = {"awareness": None, "desire": 70, "knowledge": 70, "ability": 70, "reinforcement": 70}
        assert performance_from_adkar({}, current) == 66
