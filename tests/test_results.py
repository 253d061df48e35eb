"""
Tests for result data structures.
"""

import math

import pytest

from ddstats.core.results import LogPair, ConfidenceInterval, ScaleResult, InferenceSummary


class TestConfidenceInterval:
    """Tests for ConfidenceInterval."""

    def test_basic_properties(self):
        interval = ConfidenceInterval(lower=0.5, upper=4.0, confidence_level=0.9)
        assert interval.width == pytest.approx(3.5)
        assert interval.contains(0.5)
        assert interval.contains(4.0)
        assert not interval.contains(4.1)
        assert not interval.is_empty

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValueError):
            ConfidenceInterval(lower=2.0, upper=1.0, confidence_level=0.9)

    def test_empty_interval(self):
        assert ConfidenceInterval(0.0, 0.0, 0.6).is_empty

    def test_dict_round_trip(self):
        interval = ConfidenceInterval(lower=1.1, upper=7.4, confidence_level=0.9)
        restored = ConfidenceInterval.from_dict(interval.to_dict())
        assert restored.lower == interval.lower
        assert restored.upper == interval.upper
        assert restored.confidence_level == interval.confidence_level


def test_log_pair_probabilities():
    pair = LogPair(lower=math.log(0.25), upper=math.log(0.8))
    assert pair.lower_probability == pytest.approx(0.25)
    assert pair.upper_probability == pytest.approx(0.8)


def test_scale_result_infinite_is_json_null():
    result = ScaleResult(scale=math.inf, message="no expected signal")
    assert result.is_finite is False
    assert result.to_dict()["scale"] is None


def test_summary_timestamp_is_utc():
    summary = InferenceSummary()
    assert summary.timestamp.endswith("Z")
    assert summary.excluded is None
    assert summary.pvalue is None
    assert summary.scale_factor is None
