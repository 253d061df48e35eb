"""ddstats.core.solver.feldman_cousins

Feldman-Cousins confidence intervals for a Poisson signal with known
background:
    G. Feldman & R. Cousins, Phys. Rev. D 57, 3873 (1998) [physics/9711021]

For a hypothesized signal s and background b, counts k are ranked by the
ordering term

    R(k) = P(k|b+s) / P(k|b+s0(k)),   s0(k) = max(0, k-b)

and the acceptance region for s is the set of highest-R counts holding at
least CL = 1-p of the probability. The interval [s1, s2] is every s whose
acceptance region contains the observed N.

Acceptance test:
  R(k) rises to a single peak near k = b+s and falls beyond it. Past some
  Ktail, R(k) is below R(0) and keeps falling, so [Ktail, inf) is always
  the first mass to be excluded. Starting from the window [0, Ktail-1],
  the endpoint with the smaller R is dropped (both on an exact tie) and its
  probability added to the excluded mass, until either N leaves the window
  (reject) or the excluded mass reaches p (accept). Terms of equal R are
  accepted or rejected together, which can only over-cover.

Boundary search:
  accepts() is evaluated on s only; the lower and upper interval ends are
  located by halving/doubling to a bracket and then bisecting to a relative
  precision of 100 machine epsilon.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from ..errors import ConvergenceError
from ..models.options import InferenceOptions
from ..results.inference_result import ConfidenceInterval
from ..statistics.logsum import LOG_ZERO, log_sum, log1p
from ..statistics.poisson import log_poisson_pmf, log_poisson_sums

logger = logging.getLogger(__name__)

# An empty [0,0] interval is only possible for CL <= ~0.61, i.e. p > 0.38.
_EMPTY_INTERVAL_LNP = math.log(0.38)

_FLOOR_EPS = np.finfo(float).eps


def log_ordering_term(k: int, b: float, s: float) -> float:
    """ln R(k) for background b and signal s.

    Args:
        k: count
        b: background mean
        s: signal mean

    Returns:
        ln[P(k|b+s) / P(k|b+s0(k))] with s0(k) = max(0, k-b)
    """
    if k == 0:
        return -s
    if b + s <= 0.0:
        return LOG_ZERO
    if k <= b:
        return k * log1p(s / b) - s
    return k * math.log((b + s) / k) + k - (b + s)


def ordering_peak(b: float, s: float) -> int:
    """Count k at which R(k) is largest.

    Continued to real k, R has a single maximum at k = b+s; on the integers
    it is at the floor or the ceiling.
    """
    k = max(int(b + s), 0)
    if log_ordering_term(k + 1, b, s) > log_ordering_term(k, b, s):
        k += 1
    return k


def ordering_tail_start(b: float, s: float) -> int:
    """Smallest Ktail such that R(k) < R(0) for every k >= Ktail.

    Found from the peak by a doubling bracket followed by integer bisection.
    """
    lnr0 = log_ordering_term(0, b, s)
    step = 1
    k1 = ordering_peak(b, s)
    k2 = k1 + step
    # Bracket
    while log_ordering_term(k2, b, s) >= lnr0:
        step *= 2
        k1 = k2
        k2 = k2 + step
    # Bisection
    while k2 - k1 > 1:
        km = k1 + (k2 - k1) // 2
        if log_ordering_term(km, b, s) >= lnr0:
            k1 = km
        else:
            k2 = km
    return k1 + 1


def accepts(n: int, b: float, s: float, lnp: float) -> bool:
    """Check whether N lies in the Feldman-Cousins acceptance region for s.

    Args:
        n: observed events N
        b: background mean
        s: hypothesized signal mean
        lnp: ln(p), with CL = 1-p

    Returns:
        True if N is accepted at signal s
    """
    # s = 0 with N <= b: R = 1 on all of [0, floor(b)], so that whole range
    # is always accepted. The narrowing below cannot handle the plateau.
    if s == 0.0 and n <= b:
        return True

    # R peaks at k = b+s, so that count is the first one accepted.
    if abs(b + s - n) < 0.4:
        return True

    mu = b + s
    ktail = ordering_tail_start(b, s)

    # N in the tail: accepted unless P(k >= N) alone already exceeds p.
    if n >= ktail:
        return log_poisson_sums(n, mu).upper > lnp

    lnpsum = log_poisson_sums(ktail, mu).upper

    # Acceptance region contains at least [0, Ktail-1]
    if lnpsum > lnp:
        return True

    # Narrow [k1, k2] from both ends; lnpsum is the mass outside it.
    k1 = 0
    lnr1 = log_ordering_term(k1, b, s)
    k2 = ktail - 1
    lnr2 = log_ordering_term(k2, b, s)
    while lnpsum < lnp:
        if n < k1 or n > k2:
            return False
        if lnr1 < lnr2:
            lnpsum = log_sum(lnpsum, log_poisson_pmf(k1, mu))
            k1 += 1
            lnr1 = log_ordering_term(k1, b, s)
        elif lnr1 > lnr2:
            lnpsum = log_sum(lnpsum, log_poisson_pmf(k2, mu))
            k2 -= 1
            lnr2 = log_ordering_term(k2, b, s)
        else:
            lnpsum = log_sum(lnpsum, log_poisson_pmf(k1, mu))
            k1 += 1
            lnr1 = log_ordering_term(k1, b, s)
            lnpsum = log_sum(lnpsum, log_poisson_pmf(k2, mu))
            k2 -= 1
            lnr2 = log_ordering_term(k2, b, s)

    # Excluded mass reached p before N dropped out of the window
    return True


def _is_empty_interval(lnp: float, n: int, b: float) -> bool:
    """Measure-zero [0,0] interval check.

    The interval is empty when sum_{k=N+1}^{floor(b)} P(k|b) >= CL. The left
    side is bounded by its N=0 value, Q(floor(b), b) - P(0|b), whose global
    maximum is 0.611 at b = 4, so only p > 0.38 needs checking.
    """
    if lnp <= _EMPTY_INTERVAL_LNP:
        return False
    lnsum_n = log_poisson_sums(n, b).lower
    lnsum_b = log_poisson_sums(int(b + _FLOOR_EPS), b).lower
    return math.exp(lnsum_b) - math.exp(lnsum_n) >= -math.expm1(lnp)


def _capped(iterations: int, limit: int, what: str, n: int, b: float) -> int:
    iterations += 1
    if iterations > limit:
        raise ConvergenceError(
            f"Feldman-Cousins {what} exceeded {limit} iterations (N={n}, b={b:g})",
            iterations=iterations,
        )
    return iterations


def _lower_bound(lnp: float, n: int, b: float, precision: float, limit: int) -> float:
    if accepts(n, b, 0.0, lnp):
        return 0.0

    # s = N-b should be accepted; halve until it is not
    s1 = n - b
    iterations = 0
    while accepts(n, b, s1, lnp):
        iterations = _capped(iterations, limit, "lower bound bracketing", n, b)
        s1 *= 0.5

    # Boundary is now in [s1, s1+step]
    step = s1
    iterations = 0
    while step >= precision * s1 and step > 0.0:
        iterations = _capped(iterations, limit, "lower bound bisection", n, b)
        step *= 0.5
        if not accepts(n, b, s1 + step, lnp):
            s1 += step
    return s1


def _upper_bound(lnp: float, n: int, b: float, precision: float, limit: int) -> float:
    # Need an accepted starting point
    iterations = 0
    if n > b:
        s2 = n - b
    else:
        s2 = 1.0
        while not accepts(n, b, s2, lnp):
            iterations = _capped(iterations, limit, "upper bound seed search", n, b)
            s2 *= 0.5

    if s2 == 0.0:
        return 0.0

    iterations = 0
    while accepts(n, b, s2, lnp):
        iterations = _capped(iterations, limit, "upper bound bracketing", n, b)
        s2 *= 2.0

    # Boundary is now in [s2-step, s2]
    step = s2
    iterations = 0
    while step >= precision * s2:
        iterations = _capped(iterations, limit, "upper bound bisection", n, b)
        step *= 0.5
        if not accepts(n, b, s2 - step, lnp):
            s2 -= step
    return s2


def feldman_cousins_interval(
    lnp: float,
    n: int,
    b: float,
    options: InferenceOptions | None = None,
) -> ConfidenceInterval:
    """Feldman-Cousins confidence interval [s1, s2] on the signal.

    Args:
        lnp: ln(p) with CL = 1-p
        n: observed events N
        b: background mean (negative values are treated as 0)
        options: Precision and iteration caps (defaults if None)

    Returns:
        ConfidenceInterval at CL = 1-p

    Raises:
        ConvergenceError: If a boundary search exceeds its iteration cap
    """
    options = options or InferenceOptions.default()
    confidence_level = -math.expm1(lnp) if lnp < 0.0 else 0.0
    n = int(n)
    if n < 0:
        logger.warning("Negative observed count %d clamped to 0", n)
        n = 0
    if b < 0.0:
        logger.warning("Negative background %g clamped to 0", b)
        b = 0.0
    b = float(b)

    # A target p >= 1 accepts nothing beyond the single most likely signal
    if lnp >= 0.0:
        s = max(n - b, 0.0)
        return ConfidenceInterval(lower=s, upper=s, confidence_level=confidence_level)

    if _is_empty_interval(lnp, n, b):
        logger.debug("Empty Feldman-Cousins interval (N=%d, b=%g, lnp=%g)", n, b, lnp)
        return ConfidenceInterval(lower=0.0, upper=0.0, confidence_level=confidence_level)

    precision = options.interval_relative_precision
    limit = options.interval_max_iterations
    s1 = _lower_bound(lnp, n, b, precision, limit)
    s2 = _upper_bound(lnp, n, b, precision, limit)
    return ConfidenceInterval(lower=s1, upper=max(s1, s2), confidence_level=confidence_level)


def feldman_cousins_belt(
    lnp: float,
    b: float,
    n_max: int,
    options: InferenceOptions | None = None,
) -> np.ndarray:
    """Feldman-Cousins intervals for every N in 0..n_max.

    Args:
        lnp: ln(p) with CL = 1-p
        b: background mean
        n_max: largest observed count to tabulate

    Returns:
        (n_max+1, 2) array; row N holds [s1, s2]
    """
    if n_max < 0:
        raise ValueError("n_max cannot be negative")
    belt = np.zeros((n_max + 1, 2), dtype=float)
    for n in range(n_max + 1):
        interval = feldman_cousins_interval(lnp, n, b, options)
        belt[n, 0] = interval.lower
        belt[n, 1] = interval.upper
    return belt
