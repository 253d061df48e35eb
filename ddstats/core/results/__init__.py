"""
Result classes for counting-experiment statistics.

This module provides the output data structures:
- LogPair: Lower/upper cumulative Poisson sums (log domain)
- ConfidenceInterval: Signal confidence interval
- ScaleResult: Scale factor reaching a target p-value
- InferenceSummary: Complete per-experiment results
"""

from .inference_result import (
    LogPair,
    ConfidenceInterval,
    ScaleResult,
    InferenceSummary,
)

__all__ = [
    "LogPair",
    "ConfidenceInterval",
    "ScaleResult",
    "InferenceSummary",
]
