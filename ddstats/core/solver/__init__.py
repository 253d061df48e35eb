"""ddstats.core.solver

Root finding, scale-factor searches, Feldman-Cousins intervals and the
per-experiment entry points.
"""

from .root_finding import RootResult, find_decreasing_root
from .scaling import poisson_scale_to_pvalue, maximum_gap_scale_to_pvalue
from .feldman_cousins import (
    log_ordering_term,
    ordering_peak,
    ordering_tail_start,
    accepts,
    feldman_cousins_interval,
    feldman_cousins_belt,
)
from .counting import (
    log_likelihood,
    log_pvalue,
    scale_to_pvalue,
    confidence_interval,
    analyze,
    analyze_many,
)

__all__ = [
    "RootResult",
    "find_decreasing_root",
    "poisson_scale_to_pvalue",
    "maximum_gap_scale_to_pvalue",
    "log_ordering_term",
    "ordering_peak",
    "ordering_tail_start",
    "accepts",
    "feldman_cousins_interval",
    "feldman_cousins_belt",
    "log_likelihood",
    "log_pvalue",
    "scale_to_pvalue",
    "confidence_interval",
    "analyze",
    "analyze_many",
]
