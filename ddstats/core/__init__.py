"""
Core module for counting-experiment statistics.

This module contains pure numerical routines with no I/O. Every function is
a side-effect-free function of its arguments and may be called concurrently.
"""

from .errors import DDStatsError, ConvergenceError

from .models import CountingResult, InferenceOptions, DEFAULT_LNP

from .results import LogPair, ConfidenceInterval, ScaleResult, InferenceSummary

from .statistics import (
    log_poisson_pmf,
    log_poisson_sums,
    log_poisson_pvalue,
    log_maximum_gap_pvalue,
    poisson_upper_limit,
    garwood_interval,
)

from .solver import (
    log_likelihood,
    log_pvalue,
    scale_to_pvalue,
    confidence_interval,
    feldman_cousins_interval,
    feldman_cousins_belt,
    analyze,
    analyze_many,
)

__all__ = [
    # Errors
    "DDStatsError",
    "ConvergenceError",

    # Models
    "CountingResult",
    "InferenceOptions",
    "DEFAULT_LNP",

    # Results
    "LogPair",
    "ConfidenceInterval",
    "ScaleResult",
    "InferenceSummary",

    # Statistics
    "log_poisson_pmf",
    "log_poisson_sums",
    "log_poisson_pvalue",
    "log_maximum_gap_pvalue",
    "poisson_upper_limit",
    "garwood_interval",

    # Entry points
    "log_likelihood",
    "log_pvalue",
    "scale_to_pvalue",
    "confidence_interval",
    "feldman_cousins_interval",
    "feldman_cousins_belt",
    "analyze",
    "analyze_many",
]
