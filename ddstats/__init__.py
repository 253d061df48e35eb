"""
ddstats - statistics for rare-event counting experiments

Log-likelihoods, p-values, signal scale factors and Feldman-Cousins
confidence intervals for experiments that count a small number of events
over an expected background (e.g. direct dark-matter detection).

Conventions:
- Probabilities: natural logarithms throughout (ln p, ln L)
- Zero probability: -inf
- No finite scale factor: +inf
- Default target: p = 0.1 (90% CL)
- Background is never subtracted in p-values; it enters only the
  likelihood and the confidence interval
"""

__version__ = "1.0.0"
__author__ = "ddstats developers"

from .core.errors import DDStatsError, ConvergenceError
from .core.models import CountingResult, InferenceOptions, DEFAULT_LNP
from .core.results import LogPair, ConfidenceInterval, ScaleResult, InferenceSummary
from .core.solver import (
    log_likelihood,
    log_pvalue,
    scale_to_pvalue,
    confidence_interval,
    analyze,
    analyze_many,
)

__all__ = [
    # Version
    "__version__",

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

    # Entry points
    "log_likelihood",
    "log_pvalue",
    "scale_to_pvalue",
    "confidence_interval",
    "analyze",
    "analyze_many",
]
