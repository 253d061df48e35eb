"""ddstats.core.statistics.poisson

Poisson probabilities in the log domain.

Implemented:
- log_poisson_pmf:  ln P(k|mean)
- log_poisson_sums: ln sum_{k<=N} P(k|mean) and ln sum_{k>=N} P(k|mean)

Cumulative sums:
  Only the smaller of the two sums is summed explicitly, walking away from
  the peak of the distribution starting at k = N. The walk stops once a new
  term is smaller than the running sum by LN_PRECISION (~1e-15 relative).
  The other sum then follows from

      lower + upper = 1 + P(N|mean)

  (the k = N term is part of both sums). The small sum is the well
  conditioned one, so deriving the large sum from it loses nothing.
"""

from __future__ import annotations

import logging
import math

from .logsum import LOG_ZERO, log_sum, log_diff, log1m_exp
from ..results.inference_result import LogPair

logger = logging.getLogger(__name__)

LN_PRECISION = -35.0
"""Relative term cutoff for cumulative sums, in nats (e^-35 ~ 6e-16)."""


def _clamp_mean(mean: float) -> float:
    if mean < 0.0:
        logger.warning("Negative Poisson mean %g clamped to 0", mean)
        return 0.0
    return float(mean)


def log_poisson_pmf(k: int, mean: float) -> float:
    """Log of the Poisson probability P(k|mean) = e^{-mean} mean^k / k!.

    Args:
        k: count
        mean: Poisson mean (negative values are treated as 0)

    Returns:
        ln P(k|mean); -inf for impossible outcomes
    """
    mean = _clamp_mean(mean)
    if k < 0:
        return LOG_ZERO
    if k == 0:
        return -mean
    if mean == 0.0:
        return LOG_ZERO
    return -mean + k * math.log(mean) - math.lgamma(k + 1.0)


def _upper_term_cap(n: int, mean: float) -> int:
    """Conservative last index for the upward walk (n > mean).

    The precision cutoff is expected to end the walk first; the cap only
    guards against pathological inputs.
    """
    if (n - mean) ** 2 > mean:
        return n + int(round(-LN_PRECISION * (n / (n - mean)))) + 10
    return n + int(round(-LN_PRECISION * (1.0 + math.sqrt(mean)))) + 10


def log_poisson_sums(n: int, mean: float) -> LogPair:
    """Log of the lower and upper cumulative Poisson sums about n.

    Args:
        n: count N (terms k <= N and k >= N)
        mean: Poisson mean (negative values are treated as 0)

    Returns:
        LogPair(lower=ln sum_{k<=N} P(k|mean), upper=ln sum_{k>=N} P(k|mean))
    """
    mean = _clamp_mean(mean)
    n = int(n)

    # Special cases
    if n < 0:
        return LogPair(lower=LOG_ZERO, upper=0.0)
    if mean == 0.0:
        return LogPair(lower=0.0, upper=0.0 if n == 0 else LOG_ZERO)
    if n == 0:
        return LogPair(lower=-mean, upper=0.0)

    lnpmf0 = log_poisson_pmf(n, mean)
    lnpmf = lnpmf0

    if n <= mean:
        # Below the peak: sum k = N, N-1, ..., 0
        lnlower = lnpmf
        k = n
        while k > 0:
            k -= 1
            lnpmf += math.log((k + 1) / mean)
            lnlower = log_sum(lnlower, lnpmf)
            if lnpmf - lnlower <= LN_PRECISION:
                break
        # upper = 1 - (lower - P(N))
        lnupper = log1m_exp(log_diff(lnlower, lnpmf0))
        return LogPair(lower=lnlower, upper=lnupper)

    # Above the peak: sum k = N, N+1, ...
    lnupper = lnpmf
    kmax = _upper_term_cap(n, mean)
    k = n
    while k < kmax:
        k += 1
        lnpmf += math.log(mean / k)
        lnupper = log_sum(lnupper, lnpmf)
        if lnpmf - lnupper <= LN_PRECISION:
            break
    else:
        logger.warning("Upper Poisson sum for N=%d, mean=%g stopped at cap K=%d", n, mean, kmax)
    lnlower = log1m_exp(log_diff(lnupper, lnpmf0))
    return LogPair(lower=lnlower, upper=lnupper)
