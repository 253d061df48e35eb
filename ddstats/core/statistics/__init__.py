"""Statistics utilities for counting experiments.

This package contains the log-domain numerical core:
- Log-sum-exp helpers
- Poisson log-PMF and cumulative sums
- Poisson and maximum gap p-values
- Closed-form references (incomplete gamma, chi-square, Garwood limits)

No SciPy dependency is required.
"""

from .logsum import LOG_ZERO, log_sum, log_diff, log1p, log1m_exp
from .poisson import LN_PRECISION, log_poisson_pmf, log_poisson_sums
from .pvalues import (
    log_poisson_pvalue,
    log_maximum_gap_pvalue,
    log_maximum_gap_pvalue_from_fraction,
)
from .distributions import (
    normal_ppf,
    regularized_gamma_lower,
    regularized_gamma_upper,
    poisson_cdf,
    chi2_cdf,
    chi2_ppf,
    poisson_upper_limit,
    garwood_interval,
)

__all__ = [
    "LOG_ZERO",
    "log_sum",
    "log_diff",
    "log1p",
    "log1m_exp",
    "LN_PRECISION",
    "log_poisson_pmf",
    "log_poisson_sums",
    "log_poisson_pvalue",
    "log_maximum_gap_pvalue",
    "log_maximum_gap_pvalue_from_fraction",
    "normal_ppf",
    "regularized_gamma_lower",
    "regularized_gamma_upper",
    "poisson_cdf",
    "chi2_cdf",
    "chi2_ppf",
    "poisson_upper_limit",
    "garwood_interval",
]
