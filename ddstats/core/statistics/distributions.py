"""ddstats.core.statistics.distributions

Closed-form Poisson references (no SciPy).

Implemented:
- Standard normal PPF via stdlib ``statistics.NormalDist``
- Regularized incomplete gamma P(a, x) / Q(a, x)
- Poisson CDF via Q(N+1, mean)
- Chi-square CDF/PPF via incomplete gamma + safeguarded Newton
- Classical Poisson limits without background (Garwood)

Poisson/chi-square link:
  P(k <= N | mu) = Q(N+1, mu) = 1 - chi2_cdf(2 mu, 2(N+1))
  so the mean mu_up with P(k <= N | mu_up) = 1 - CL is
      mu_up = chi2_ppf(CL, 2(N+1)) / 2.

These are used to cross-check the log-domain Poisson engine and the
scale-factor search in the background-free case.

References (algorithms):
- Numerical Recipes / Cephes style implementations for incomplete gamma.
- Wilson-Hilferty transformation for initial chi-square quantile guess.
- F. Garwood, Biometrika 28, 437 (1936).
"""

from __future__ import annotations

import math
from statistics import NormalDist
from typing import Tuple


# ----------------------------
# Normal
# ----------------------------

_NORMAL = NormalDist()


def normal_ppf(p: float) -> float:
    """Standard normal quantile (inverse CDF).

    Args:
        p: probability in (0, 1)

    Returns:
        z such that P(Z <= z) = p
    """
    if not (0.0 < p < 1.0):
        raise ValueError("p must be in (0,1)")
    return float(_NORMAL.inv_cdf(p))


# ----------------------------
# Incomplete gamma (regularized)
# ----------------------------

_DEF_EPS = 1e-15
_DEF_MAX_IT = 5000
_TINY = 1e-300


def _log_gamma_prefactor(a: float, x: float) -> float:
    """ln(e^{-x} x^a / Gamma(a))."""
    return -x + a * math.log(x) - math.lgamma(a)


def _gamma_series(a: float, x: float, eps: float, max_it: int) -> float:
    """P(a, x) by series expansion; converges fast for x < a + 1."""
    ap = a
    summ = 1.0 / a
    delt = summ
    for _ in range(max_it):
        ap += 1.0
        delt *= x / ap
        summ += delt
        if abs(delt) < abs(summ) * eps:
            break
    return summ * math.exp(_log_gamma_prefactor(a, x))


def _gamma_continued_fraction(a: float, x: float, eps: float, max_it: int) -> float:
    """Q(a, x) by continued fraction (modified Lentz); for x >= a + 1."""
    b = x + 1.0 - a
    c = 1.0 / _TINY
    d = 1.0 / b if abs(b) >= _TINY else 1.0 / _TINY
    h = d

    for i in range(1, max_it + 1):
        an = -float(i) * (float(i) - a)
        b += 2.0
        d = an * d + b
        if abs(d) < _TINY:
            d = _TINY
        c = b + an / c
        if abs(c) < _TINY:
            c = _TINY
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < eps:
            break

    return h * math.exp(_log_gamma_prefactor(a, x))


def _clip_unit(p: float) -> float:
    """Clip due to rounding."""
    if p < 0.0:
        return 0.0
    if p > 1.0:
        return 1.0
    return p


def regularized_gamma_lower(a: float, x: float, eps: float = _DEF_EPS, max_it: int = _DEF_MAX_IT) -> float:
    """Regularized lower incomplete gamma P(a, x).

    Computes:
      P(a,x) = 1/Gamma(a) * integral_0^x t^{a-1} e^{-t} dt

    Args:
        a: shape parameter (>0)
        x: integration limit (>=0)

    Returns:
        P(a, x) in [0, 1]
    """
    if a <= 0.0:
        raise ValueError("a must be positive")
    if x <= 0.0:
        return 0.0
    if x < a + 1.0:
        return _clip_unit(_gamma_series(a, x, eps, max_it))
    return _clip_unit(1.0 - _gamma_continued_fraction(a, x, eps, max_it))


def regularized_gamma_upper(a: float, x: float, eps: float = _DEF_EPS, max_it: int = _DEF_MAX_IT) -> float:
    """Regularized upper incomplete gamma Q(a, x) = 1 - P(a, x).

    The tail that is small is computed directly, so Q keeps relative
    precision for large x.
    """
    if a <= 0.0:
        raise ValueError("a must be positive")
    if x <= 0.0:
        return 1.0
    if x < a + 1.0:
        return _clip_unit(1.0 - _gamma_series(a, x, eps, max_it))
    return _clip_unit(_gamma_continued_fraction(a, x, eps, max_it))


# ----------------------------
# Poisson
# ----------------------------


def poisson_cdf(n: int, mean: float) -> float:
    """P(k <= N | mean) via the incomplete gamma identity Q(N+1, mean).

    Args:
        n: count (>=0)
        mean: Poisson mean (>=0)

    Returns:
        cumulative probability
    """
    if n < 0:
        return 0.0
    if mean < 0.0:
        raise ValueError("mean cannot be negative")
    if mean == 0.0:
        return 1.0
    return regularized_gamma_upper(float(n) + 1.0, float(mean))


# ----------------------------
# Chi-square
# ----------------------------


def chi2_cdf(x: float, df: int) -> float:
    """CDF of chi-square distribution.

    Args:
        x: value (>=0)
        df: degrees of freedom (>0)

    Returns:
        P(X <= x)
    """
    if df <= 0:
        raise ValueError("df must be positive")
    if x <= 0.0:
        return 0.0
    return regularized_gamma_lower(0.5 * float(df), 0.5 * float(x))


def _chi2_pdf(x: float, df: int) -> float:
    """PDF of chi-square distribution."""
    if x <= 0.0:
        return 0.0
    k = 0.5 * float(df)
    # log(pdf) = (k-1)log(x) - x/2 - k log(2) - lgamma(k)
    log_pdf = (k - 1.0) * math.log(x) - 0.5 * x - k * math.log(2.0) - math.lgamma(k)
    return math.exp(log_pdf)


def chi2_ppf(p: float, df: int) -> float:
    """Quantile (inverse CDF) of chi-square distribution.

    Uses Wilson-Hilferty for an initial guess then a safeguarded Newton method
    that maintains a bracket.

    Args:
        p: probability in (0,1)
        df: degrees of freedom (>0)

    Returns:
        x such that chi2_cdf(x, df) = p
    """
    if df <= 0:
        raise ValueError("df must be positive")
    if not (0.0 < p < 1.0):
        raise ValueError("p must be in (0,1)")

    # Initial guess via Wilson-Hilferty
    k = float(df)
    z = normal_ppf(p)
    t = 1.0 - 2.0 / (9.0 * k) + z * math.sqrt(2.0 / (9.0 * k))
    x = k * max(t, 1e-12) ** 3

    lo = 0.0
    hi = max(x, 1e-12)
    for _ in range(200):
        if chi2_cdf(hi, df) >= p:
            break
        hi *= 2.0
    else:
        return float(hi)

    x = min(max(x, lo + 1e-15), hi - 1e-15)

    tol = 1e-13
    for _ in range(100):
        cdf = chi2_cdf(x, df)
        if cdf < p:
            lo = x
        else:
            hi = x

        pdf = _chi2_pdf(x, df)
        if pdf > 0.0:
            x_new = x - (cdf - p) / pdf
        else:
            x_new = float('nan')

        # Safeguard: keep inside bracket
        if (not math.isfinite(x_new)) or x_new <= lo or x_new >= hi:
            x_new = 0.5 * (lo + hi)

        if abs(x_new - x) <= tol * max(1.0, x):
            return float(x_new)
        x = x_new

    return float(x)


# ----------------------------
# Classical Poisson limits (no background)
# ----------------------------


def poisson_upper_limit(n: int, confidence_level: float) -> float:
    """One-sided upper limit on a Poisson mean with no background.

    Returns mu_up with P(k <= N | mu_up) = 1 - CL.

    Args:
        n: observed events (>=0)
        confidence_level: CL in (0,1)

    Returns:
        upper limit on the mean
    """
    if n < 0:
        raise ValueError("n cannot be negative")
    if not (0.0 < confidence_level < 1.0):
        raise ValueError("confidence_level must be in (0,1)")
    if n == 0:
        return -math.log1p(-confidence_level)
    return 0.5 * chi2_ppf(confidence_level, 2 * (n + 1))


def garwood_interval(n: int, confidence_level: float) -> Tuple[float, float]:
    """Central (Garwood) confidence interval on a Poisson mean, no background.

    Returns (lower, upper) with P(k >= N | lower) = P(k <= N | upper) = (1-CL)/2.
    """
    if n < 0:
        raise ValueError("n cannot be negative")
    if not (0.0 < confidence_level < 1.0):
        raise ValueError("confidence_level must be in (0,1)")
    alpha = 1.0 - confidence_level
    lower = 0.0 if n == 0 else 0.5 * chi2_ppf(alpha / 2.0, 2 * n)
    upper = 0.5 * chi2_ppf(1.0 - alpha / 2.0, 2 * (n + 1))
    return float(lower), float(upper)
