"""
Tests for the per-experiment entry points and analyze().
"""

import json
import logging
import math

import pytest

import ddstats
from ddstats import (
    CountingResult,
    InferenceOptions,
    InferenceSummary,
    ConvergenceError,
    log_likelihood,
    log_pvalue,
    scale_to_pvalue,
    confidence_interval,
    analyze,
    analyze_many,
)
from ddstats.core.solver.feldman_cousins import feldman_cousins_interval
from ddstats.core.statistics.poisson import log_poisson_pmf
from ddstats.core.statistics.pvalues import log_poisson_pvalue, log_maximum_gap_pvalue

LNP_90 = math.log(0.1)


class TestScalarEntryPoints:
    """Tests for log_likelihood, log_pvalue, scale_to_pvalue, confidence_interval."""

    def test_log_likelihood_with_background(self):
        assert log_likelihood(3, 1.0, 2.0) == log_poisson_pmf(3, 3.0)

    def test_log_likelihood_zero_background_uses_best_fit(self):
        """b = 0 means unknown background, fitted as max(N - s, 0)."""
        assert log_likelihood(5, 0.0, 2.0) == log_poisson_pmf(5, 5.0)
        assert log_likelihood(1, 0.0, 2.0) == log_poisson_pmf(1, 2.0)

    def test_log_pvalue_ignores_background(self):
        assert log_pvalue(2, 5.0, 3.0) == log_poisson_pvalue(2, 3.0)
        assert log_pvalue(2, 0.0, 3.0) == log_poisson_pvalue(2, 3.0)

    def test_log_pvalue_maximum_gap(self):
        assert log_pvalue(1, 0.3, 4.0, has_intervals=True, max_fraction=0.5) == log_maximum_gap_pvalue(4.0, 2.0)

    def test_scale_round_trip(self):
        """The scaled signal reaches the target p-value."""
        x = scale_to_pvalue(LNP_90, n=5, background=2.0, signal=3.0)
        assert log_pvalue(5, 2.0, x * 3.0) == pytest.approx(LNP_90, abs=1e-4)

    def test_scale_defaults_to_ninety_percent(self):
        assert scale_to_pvalue(n=0, signal=1.0) == pytest.approx(math.log(10.0), rel=1e-14)

    def test_scale_for_tiny_signal(self):
        x = scale_to_pvalue(LNP_90, n=1, background=0.0, signal=1e-300)
        assert math.isfinite(x)
        assert x * 1e-300 == pytest.approx(3.8897, abs=1e-3)

    def test_scale_without_signal_is_infinite(self):
        assert scale_to_pvalue(LNP_90, n=2, background=1.0, signal=0.0) == math.inf

    def test_scale_non_convergence_raises(self):
        options = InferenceOptions(max_bracket_steps=2)
        with pytest.raises(ConvergenceError) as excinfo:
            scale_to_pvalue(-500.0, n=5, background=0.0, signal=1.0, options=options)
        assert "DDSTATS_NO_CONVERGENCE" in str(excinfo.value)
        assert isinstance(excinfo.value, ddstats.DDStatsError)

    def test_confidence_interval_delegates(self):
        interval = confidence_interval(LNP_90, 3, 1.0)
        reference = feldman_cousins_interval(LNP_90, 3, 1.0)
        assert interval.lower == reference.lower
        assert interval.upper == reference.upper


class TestAnalyze:
    """Tests for analyze() on CountingResult snapshots."""

    def test_maximum_gap_result(self):
        result = CountingResult.from_expectations(2, 0.5, 6.0, [1.0, 3.0, 2.0], name="toy")
        summary = analyze(result)

        assert summary.success is True
        assert summary.name == "toy"
        assert summary.method == "maximum_gap"
        assert summary.log_pvalue == log_maximum_gap_pvalue(6.0, 3.0)
        assert summary.log_likelihood == log_poisson_pmf(2, 6.5)
        assert summary.scale.method == "maximum_gap"
        assert summary.scale.converged is True
        assert summary.interval is not None
        assert summary.interval.contains(1.5)
        assert summary.messages == []

    def test_maximum_gap_can_be_disabled(self):
        result = CountingResult.from_expectations(2, 0.5, 6.0, [1.0, 3.0, 2.0])
        summary = analyze(result, InferenceOptions(use_maximum_gap=False))

        assert summary.method == "poisson"
        assert summary.log_pvalue == log_poisson_pvalue(2, 6.0)
        assert summary.scale.method == "poisson"

    def test_interval_count_mismatch_falls_back_to_poisson(self, caplog):
        result = CountingResult.from_expectations(3, 0.0, 5.0, [2.0, 3.0])

        with caplog.at_level(logging.INFO, logger="ddstats"):
            summary = analyze(result)

        assert summary.method == "poisson"
        assert summary.log_pvalue == log_poisson_pvalue(3, 5.0)
        assert any("Poisson" in m for m in summary.messages)
        assert "using Poisson p-value" in caplog.text

    def test_scale_factor_matches_scalar_entry_point(self):
        result = CountingResult(observed=4, background=1.0, signal=[2.5])
        summary = analyze(result, InferenceOptions(compute_interval=False))

        assert summary.scale_factor == scale_to_pvalue(LNP_90, n=4, background=1.0, signal=2.5)
        assert summary.interval is None

    def test_excluded_flag(self):
        strong = analyze(CountingResult(observed=0, background=0.0, signal=[5.0]))
        weak = analyze(CountingResult(observed=0, background=0.0, signal=[1.0]))

        assert strong.excluded is True
        assert weak.excluded is False
        assert strong.pvalue == pytest.approx(math.exp(-5.0))

    def test_zero_signal_serializes_infinite_scale_as_null(self):
        summary = analyze(CountingResult(observed=1, background=0.5, signal=[0.0]))

        assert summary.success is True
        assert summary.scale_factor == math.inf
        data = json.loads(summary.to_json())
        assert data["scale"]["scale"] is None
        assert data["statistics"]["success"] is True
        assert data["input_summary"]["observed"] == 1

    def test_summary_dict_round_trip(self):
        summary = analyze(CountingResult(observed=2, background=1.0, signal=[3.0], name="rt"))
        restored = InferenceSummary.from_dict(summary.to_dict())

        assert restored.name == "rt"
        assert restored.success is True
        assert restored.log_pvalue == summary.log_pvalue
        assert restored.scale_factor == summary.scale_factor
        assert restored.interval.lower == summary.interval.lower
        assert restored.interval.upper == summary.interval.upper
        assert restored.timestamp == summary.timestamp

    def test_interval_failure_gives_failed_summary(self):
        options = InferenceOptions(interval_max_iterations=1)
        summary = analyze(CountingResult(observed=10, background=0.0, signal=[4.0]), options)

        assert summary.success is False
        assert "DDSTATS_NO_CONVERGENCE" in summary.error_message
        assert summary.log_pvalue == log_poisson_pvalue(10, 4.0)
        assert summary.interval is None

    def test_scale_failure_gives_failed_summary(self):
        options = InferenceOptions(lnp=-500.0, max_bracket_steps=2)
        summary = analyze(CountingResult(observed=5, background=0.0, signal=[1.0]), options)

        assert summary.success is False
        assert summary.error_message.startswith("Scale factor search did not converge")
        assert summary.scale.converged is False

    def test_failure_summary_constructor(self):
        summary = InferenceSummary.failure("boom", name="x", observed=3)
        assert summary.success is False
        assert summary.error_message == "boom"
        assert summary.observed == 3
        assert "failed" in repr(summary)


def test_analyze_many_labels_each_summary():
    results = {
        "exp-a": CountingResult(observed=0, background=0.0, signal=[2.0]),
        "exp-b": CountingResult(observed=3, background=1.0, signal=[4.0], name="named"),
    }
    summaries = analyze_many(results, InferenceOptions(compute_interval=False))

    assert list(summaries) == ["exp-a", "exp-b"]
    assert summaries["exp-a"].name == "exp-a"
    assert summaries["exp-b"].name == "named"
    assert summaries["exp-a"].log_pvalue == -2.0


def test_analyze_many_results_are_independent():
    single = analyze(CountingResult(observed=3, background=1.0, signal=[4.0]))
    many = analyze_many({
        "one": CountingResult(observed=3, background=1.0, signal=[4.0]),
        "two": CountingResult(observed=0, background=0.2, signal=[9.0]),
    })
    assert many["one"].log_pvalue == single.log_pvalue
    assert many["one"].scale_factor == single.scale_factor
    assert many["one"].interval.upper == single.interval.upper
