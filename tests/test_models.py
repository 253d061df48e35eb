"""
Tests for the CountingResult snapshot and InferenceOptions.
"""

import dataclasses
import math
import pytest
import sys
import os

import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ddstats.core.models.counting_result import CountingResult
from ddstats.core.models.options import InferenceOptions, DEFAULT_LNP


class TestCountingResultCreation:
    """Tests for CountingResult creation and validation."""

    def test_create_basic_result(self):
        """Test creating a snapshot without interval data."""
        result = CountingResult(observed=3, background=1.5, signal=[4.0])

        assert result.observed == 3
        assert result.background == 1.5
        assert result.total_signal == 4.0
        assert result.num_intervals == 0
        assert result.has_intervals is False
        assert result.uses_maximum_gap is False

    def test_scalar_signal_is_promoted(self):
        """A bare total signal becomes a length-1 array."""
        result = CountingResult(observed=0, background=0.0, signal=2.5)
        assert result.signal.shape == (1,)
        assert result.total_signal == 2.5

    def test_negative_observed_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            CountingResult(observed=-1, background=0.0, signal=[1.0])

    def test_fractional_observed_rejected(self):
        with pytest.raises(ValueError, match="integer"):
            CountingResult(observed=2.5, background=0.0, signal=[1.0])

    def test_negative_background_rejected(self):
        with pytest.raises(ValueError, match="background"):
            CountingResult(observed=1, background=-0.1, signal=[1.0])

    def test_negative_signal_rejected(self):
        with pytest.raises(ValueError, match="signal"):
            CountingResult(observed=1, background=0.0, signal=[1.0, -0.5, 0.2])

    def test_empty_signal_rejected(self):
        with pytest.raises(ValueError, match="non-empty"):
            CountingResult(observed=1, background=0.0, signal=[])

    def test_snapshot_is_immutable(self):
        """Neither the fields nor the signal array can be modified."""
        result = CountingResult(observed=1, background=0.0, signal=[1.0, 0.5, 0.5])
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.observed = 2
        with pytest.raises(ValueError):
            result.signal[0] = 10.0


class TestCountingResultIntervals:
    """Tests for interval (maximum gap) bookkeeping."""

    def test_uses_maximum_gap_requires_n_plus_one_intervals(self):
        good = CountingResult(observed=2, background=0.0, signal=[3.0, 1.0, 1.5, 0.5], has_intervals=True)
        short = CountingResult(observed=2, background=0.0, signal=[3.0, 1.0, 2.0], has_intervals=True)

        assert good.uses_maximum_gap is True
        assert short.uses_maximum_gap is False

    def test_interval_flag_required(self):
        result = CountingResult(observed=1, background=0.0, signal=[2.0, 1.2, 0.8], has_intervals=False)
        assert result.uses_maximum_gap is False

    def test_max_gap_signal_and_fraction(self):
        result = CountingResult(observed=2, background=0.0, signal=[4.0, 1.0, 2.0, 1.0], has_intervals=True)
        assert result.max_gap_signal == 2.0
        assert result.max_gap_fraction == pytest.approx(0.5)

    def test_max_gap_fraction_zero_signal(self):
        result = CountingResult(observed=0, background=0.0, signal=[0.0, 0.0], has_intervals=True)
        assert result.max_gap_fraction == 0.0

    def test_from_expectations(self):
        result = CountingResult.from_expectations(1, 0.2, 3.0, [1.0, 2.0], name="toy")
        assert result.has_intervals is True
        assert result.uses_maximum_gap is True
        np.testing.assert_allclose(result.signal, [3.0, 1.0, 2.0])
        assert result.name == "toy"


class TestCountingResultOperations:
    """Tests for scaling, validation and serialization."""

    def test_scaled_returns_new_snapshot(self):
        result = CountingResult(observed=1, background=0.3, signal=[2.0, 1.5, 0.5], has_intervals=True)
        scaled = result.scaled(3.0)

        np.testing.assert_allclose(scaled.signal, [6.0, 4.5, 1.5])
        np.testing.assert_allclose(result.signal, [2.0, 1.5, 0.5])
        assert scaled.observed == result.observed
        assert scaled.background == result.background
        assert scaled.max_gap_fraction == pytest.approx(result.max_gap_fraction)

    def test_scaled_negative_rejected(self):
        result = CountingResult(observed=1, background=0.0, signal=[1.0])
        with pytest.raises(ValueError):
            result.scaled(-1.0)

    def test_validate_clean(self):
        result = CountingResult(observed=1, background=0.0, signal=[2.0, 1.0, 1.0], has_intervals=True)
        assert result.validate() == []

    def test_validate_reports_interval_mismatch(self):
        result = CountingResult(observed=3, background=0.0, signal=[2.0, 1.0, 1.0], has_intervals=True)
        warnings = result.validate()
        assert any("Poisson" in w for w in warnings)

    def test_validate_reports_zero_signal(self):
        result = CountingResult(observed=0, background=1.0, signal=[0.0])
        assert any("zero" in w for w in result.validate())

    def test_validate_reports_interval_excess(self):
        result = CountingResult(observed=1, background=0.0, signal=[1.0, 0.8, 0.8], has_intervals=True)
        assert any("more than the total" in w for w in result.validate())

    def test_dict_roundtrip(self):
        result = CountingResult(observed=2, background=0.7, signal=[3.0, 1.0, 1.0, 1.0], has_intervals=True, name="X")
        restored = CountingResult.from_dict(result.to_dict())

        assert restored.observed == result.observed
        assert restored.background == result.background
        assert restored.has_intervals == result.has_intervals
        assert restored.name == "X"
        np.testing.assert_array_equal(restored.signal, result.signal)


class TestInferenceOptions:
    """Tests for InferenceOptions defaults and validation."""

    def test_defaults(self):
        opts = InferenceOptions()
        assert opts.lnp == pytest.approx(math.log(0.1))
        assert opts.lnp == DEFAULT_LNP
        assert opts.confidence_level == pytest.approx(0.9)
        assert opts.pvalue == pytest.approx(0.1)
        assert opts.use_maximum_gap is True
        assert opts.compute_interval is True

    def test_from_confidence_level(self):
        opts = InferenceOptions.from_confidence_level(0.95, use_maximum_gap=False)
        assert opts.lnp == pytest.approx(math.log(0.05))
        assert opts.use_maximum_gap is False

    @pytest.mark.parametrize("cl", [0.0, 1.0, -0.2, 1.5])
    def test_from_confidence_level_invalid(self, cl):
        with pytest.raises(ValueError):
            InferenceOptions.from_confidence_level(cl)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"scale_x_tol": 0.0},
            {"scale_lnp_tol": -1e-5},
            {"max_bracket_steps": 0},
            {"max_bisection_steps": 0},
            {"interval_relative_precision": 1e-20},
            {"interval_max_iterations": 0},
            {"lnp": float("nan")},
        ],
    )
    def test_invalid_options(self, kwargs):
        with pytest.raises(ValueError):
            InferenceOptions(**kwargs)

    def test_dict_roundtrip(self):
        opts = InferenceOptions(lnp=math.log(0.05), use_maximum_gap=False, max_bisection_steps=50)
        restored = InferenceOptions.from_dict(opts.to_dict())
        assert restored == opts

    def test_from_dict_confidence_level(self):
        opts = InferenceOptions.from_dict({"confidence_level": 0.68})
        assert opts.confidence_level == pytest.approx(0.68)

    def test_from_dict_empty_gives_defaults(self):
        assert InferenceOptions.from_dict({}) == InferenceOptions.default()
