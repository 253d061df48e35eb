"""ddstats.core.solver.counting

Per-experiment statistics for counting experiments.

Entry points on plain numbers:
- log_likelihood:      ln P(N | s+b)
- log_pvalue:          ln p without background subtraction (Poisson or
                       maximum gap)
- scale_to_pvalue:     factor x such that the signal x*s has p-value p
- confidence_interval: Feldman-Cousins interval on s

and on CountingResult snapshots:
- analyze:       every quantity above, bundled in an InferenceSummary
- analyze_many:  independent summaries for several named experiments

The scalar entry points raise ConvergenceError if an iteration cap is hit;
analyze() reports the same condition as a failed summary instead.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Mapping

from ..errors import ConvergenceError
from ..models.counting_result import CountingResult
from ..models.options import InferenceOptions, DEFAULT_LNP
from ..results.inference_result import ConfidenceInterval, InferenceSummary, ScaleResult
from ..statistics.poisson import log_poisson_pmf
from ..statistics.pvalues import log_poisson_pvalue, log_maximum_gap_pvalue
from .feldman_cousins import feldman_cousins_interval
from .scaling import poisson_scale_to_pvalue, maximum_gap_scale_to_pvalue

logger = logging.getLogger(__name__)


def log_likelihood(n: int, background: float, signal: float) -> float:
    """Poisson log-likelihood ln P(N | s+b).

    A background of exactly zero is treated as unknown: it is replaced by
    its best fit, max(N - s, 0).

    Args:
        n: observed events N
        background: expected background b
        signal: expected signal s

    Returns:
        ln P(N | s+b)
    """
    b = float(background)
    s = float(signal)
    if b == 0.0:
        b = max(n - s, 0.0)
    return log_poisson_pmf(n, s + b)


def log_pvalue(
    n: int,
    background: float,
    signal: float,
    has_intervals: bool = False,
    max_fraction: float = 0.0,
) -> float:
    """Log p-value for the expected signal, without background subtraction.

    Uses the maximum gap method when interval data is available, otherwise
    a Poisson distribution in the number of observed events. The background
    is not used by either method.

    Args:
        n: observed events N
        background: expected background b (unused; kept for a uniform signature)
        signal: total expected signal s
        has_intervals: True if valid interval data (N+1 gaps) is available
        max_fraction: largest fraction of s expected in any single gap

    Returns:
        ln p
    """
    if has_intervals:
        return log_maximum_gap_pvalue(signal, max_fraction * signal)
    return log_poisson_pvalue(n, signal)


def scale_to_pvalue(
    lnp: float = DEFAULT_LNP,
    n: int = 0,
    background: float = 0.0,
    signal: float = 0.0,
    has_intervals: bool = False,
    max_fraction: float = 0.0,
    options: InferenceOptions | None = None,
) -> float:
    """Factor x by which the signal must be scaled to reach p-value p.

    Args:
        lnp: logarithm of the target p-value (default ln(0.1), 90% CL)
        n: observed events N
        background: expected background b (unused, see log_pvalue)
        signal: total expected signal s
        has_intervals: True if valid interval data (N+1 gaps) is available
        max_fraction: largest fraction of s expected in any single gap
        options: search tolerances and caps (defaults if None)

    Returns:
        x; +inf if no finite scale exists, 0 if p >= 1

    Raises:
        ConvergenceError: if the root search does not converge
    """
    result = _scale_result(lnp, n, signal, has_intervals, max_fraction, options)
    if not result.converged:
        raise ConvergenceError(result.message, iterations=result.iterations)
    return result.scale


def confidence_interval(
    lnp: float,
    n: int,
    background: float,
    options: InferenceOptions | None = None,
) -> ConfidenceInterval:
    """Feldman-Cousins confidence interval on the signal.

    Args:
        lnp: ln(p) with CL = 1-p
        n: observed events N
        background: expected background b

    Returns:
        ConfidenceInterval

    Raises:
        ConvergenceError: if a boundary search does not converge
    """
    return feldman_cousins_interval(lnp, n, background, options)


def _scale_result(
    lnp: float,
    n: int,
    signal: float,
    has_intervals: bool,
    max_fraction: float,
    options: InferenceOptions | None,
) -> ScaleResult:
    options = options or InferenceOptions.default()
    if signal <= 0.0:
        return ScaleResult(
            scale=math.inf,
            method="maximum_gap" if has_intervals else "poisson",
            message="no expected signal",
        )
    if has_intervals:
        return maximum_gap_scale_to_pvalue(lnp, signal, max_fraction, options)
    return poisson_scale_to_pvalue(lnp, n, signal, options)


def analyze(
    result: CountingResult,
    options: InferenceOptions | None = None,
) -> InferenceSummary:
    """Compute all statistics for one counting experiment.

    Args:
        result: Observed events and expectations
        options: Inference options (defaults if None)

    Returns:
        InferenceSummary; success is False if a search did not converge
    """
    options = options or InferenceOptions.default()

    use_gap = options.use_maximum_gap and result.uses_maximum_gap
    method = "maximum_gap" if use_gap else "poisson"
    fraction = result.max_gap_fraction if use_gap else 0.0

    messages = result.validate()
    for message in messages:
        logger.info("%s: %s", result.name or "counting result", message)

    known = dict(
        name=result.name,
        observed=result.observed,
        background=result.background,
        total_signal=result.total_signal,
        method=method,
        options=options.to_dict(),
        messages=messages,
    )

    lnlike = log_likelihood(result.observed, result.background, result.total_signal)
    lnp = log_pvalue(
        result.observed, result.background, result.total_signal, use_gap, fraction
    )

    scale = _scale_result(
        options.lnp, result.observed, result.total_signal, use_gap, fraction, options
    )
    if not scale.converged:
        return InferenceSummary.failure(
            f"Scale factor search did not converge: {scale.message}",
            log_likelihood=lnlike,
            log_pvalue=lnp,
            scale=scale,
            **known,
        )

    interval = None
    if options.compute_interval:
        try:
            interval = feldman_cousins_interval(
                options.lnp, result.observed, result.background, options
            )
        except ConvergenceError as exc:
            logger.warning("Interval construction failed for %s: %s", result.name or "result", exc)
            return InferenceSummary.failure(
                str(exc),
                log_likelihood=lnlike,
                log_pvalue=lnp,
                scale=scale,
                **known,
            )

    return InferenceSummary(
        success=True,
        log_likelihood=lnlike,
        log_pvalue=lnp,
        scale=scale,
        interval=interval,
        **known,
    )


def analyze_many(
    results: Mapping[str, CountingResult],
    options: InferenceOptions | None = None,
) -> Dict[str, InferenceSummary]:
    """Analyze several experiments independently.

    No combination is attempted; each summary depends only on its own
    snapshot.

    Args:
        results: Mapping of experiment label to snapshot
        options: Inference options shared by every experiment

    Returns:
        Mapping of the same labels to summaries
    """
    summaries: Dict[str, InferenceSummary] = {}
    for label, result in results.items():
        summary = analyze(result, options)
        if not summary.name:
            summary.name = label
        summaries[label] = summary
    return summaries
