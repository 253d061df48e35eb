"""ddstats.core.statistics.pvalues

Exclusion p-values without background subtraction.

Implemented:
- Poisson:     p = sum_{k<=N} P(k|mu)
- Maximum gap: Yellin's method for an unknown background,
    S. Yellin, Phys. Rev. D 66, 032005 (2002) [physics/0203002]

Maximum gap:
  With mu the total expected signal and x the expected signal in the largest
  gap between ordered observed events, the probability that the largest gap
  is at least this size is p = 1 - C_0(x, mu):

      p = sum_{k=1}^{floor(mu/x)} (k x - mu)^(k-1) e^(-k x) (mu - k (x-1)) / k!

  The first two orders are written in closed form to avoid cancellation.
  Three or more terms use the explicit alternating sum, which is an
  approximation whose accuracy has only been checked for small orders:
  the finite alternating series makes precision hard to guarantee.
"""

from __future__ import annotations

import logging
import math
import sys

from .logsum import LOG_ZERO, log1p
from .poisson import log_poisson_sums

logger = logging.getLogger(__name__)

# Above this many expected gaps (mu e^-x) the largest gap is almost surely at
# least x and the p-value is taken as 1.
_MANY_GAPS = 12.5

# Guards floor(mu/x) against truncation when mu/x is an integer.
_KMAX_EPS = math.sqrt(sys.float_info.epsilon)


def log_poisson_pvalue(n: int, mean: float) -> float:
    """Log of the Poisson p-value P(k <= N | mean).

    Args:
        n: observed events N
        mean: expected events

    Returns:
        ln p
    """
    return log_poisson_sums(n, mean).lower


def _maximum_gap_term(k: int, mu: float, x: float) -> float:
    """k-th term of the maximum gap sum, evaluated through its logarithm."""
    base = k * x - mu
    tail = mu - k * (x - 1.0)
    if tail == 0.0:
        return 0.0
    if base == 0.0:
        # 0^0 = 1 for the first term, zero for the rest
        if k > 1:
            return 0.0
        log_mag = -k * x - math.lgamma(k + 1.0)
        return math.exp(log_mag) * tail
    log_mag = (k - 1) * math.log(abs(base)) - k * x - math.lgamma(k + 1.0) + math.log(abs(tail))
    sign = 1.0
    if base < 0.0 and (k - 1) % 2 == 1:
        sign = -sign
    if tail < 0.0:
        sign = -sign
    return sign * math.exp(log_mag)


def log_maximum_gap_pvalue(mean: float, gap: float) -> float:
    """Log of the maximum gap p-value (Yellin's 1 - C_0).

    Args:
        mean: total expected signal events mu
        gap: expected signal events x in the largest gap (absolute, not a fraction)

    Returns:
        ln p; 0 (p = 1) for invalid or trivially unconstraining inputs
    """
    mu = float(mean)
    x = float(gap)

    if mu < 0.0 or x < 0.0:
        logger.warning("Invalid maximum gap input (mu=%g, x=%g); returning p=1", mu, x)
        return 0.0

    # Special cases
    if mu == 0.0:
        return 0.0
    if x >= mu:
        # The whole expectation sits in one gap
        return -mu
    if x == 0.0:
        return 0.0

    if mu * math.exp(-x) > _MANY_GAPS:
        return 0.0

    kmax = int(mu / x + _KMAX_EPS)

    if kmax <= 0:
        return 0.0

    if kmax == 1:
        # p = (mu-x+1) e^-x
        return -x + log1p(mu - x)

    if kmax == 2:
        # p = (mu-x+1) e^-x [1 - 1/2 (mu-2x) e^-x (mu-2(x-1))/(mu-x+1)]
        # z stays below ~0.19 in this range
        z = 0.5 * (mu - 2.0 * x) * math.exp(-x) * (mu - 2.0 * (x - 1.0)) / (mu - x + 1.0)
        return -x + log1p(mu - x) + log1p(-z)

    logger.debug("Maximum gap explicit sum with Kmax=%d (mu=%g, x=%g)", kmax, mu, x)
    psum = math.fsum(_maximum_gap_term(k, mu, x) for k in range(1, kmax + 1))
    if psum <= 0.0:
        logger.warning(
            "Maximum gap sum cancelled to %g (mu=%g, x=%g, Kmax=%d); returning p=0",
            psum, mu, x, kmax,
        )
        return LOG_ZERO
    if psum >= 1.0:
        return 0.0
    return math.log(psum)


def log_maximum_gap_pvalue_from_fraction(mean: float, fraction: float) -> float:
    """Maximum gap p-value given the largest gap as a fraction of the total.

    Args:
        mean: total expected signal events mu
        fraction: largest fraction of mu expected in any single gap

    Returns:
        ln p
    """
    return log_maximum_gap_pvalue(mean, fraction * mean)
