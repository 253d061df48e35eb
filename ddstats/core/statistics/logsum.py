"""ddstats.core.statistics.logsum

Log-domain arithmetic helpers.

Probabilities in this package are carried as natural logarithms so that very
small (or very large) terms never have to be formed explicitly. A probability
of zero is represented by ``-inf`` (``LOG_ZERO``) and passes through every
helper unchanged.

Implemented:
- log_sum:    ln(e^a + e^b)
- log_diff:   ln(e^a - e^b), a >= b
- log1p:      ln(1 + z), accurate for small z
- log1m_exp:  ln(1 - e^x), x <= 0
"""

from __future__ import annotations

import math

LOG_ZERO = -math.inf

_LN2 = math.log(2.0)


def log_sum(lna: float, lnb: float) -> float:
    """Return ln(e^lna + e^lnb).

    The larger argument is factored out so the exponential only ever sees a
    non-positive exponent.
    """
    if lna == LOG_ZERO:
        return lnb
    if lnb == LOG_ZERO:
        return lna
    if lna >= lnb:
        return lna + math.log1p(math.exp(lnb - lna))
    return lnb + math.log1p(math.exp(lna - lnb))


def log1m_exp(x: float) -> float:
    """Return ln(1 - e^x) for x <= 0.

    Uses ``log(-expm1(x))`` close to zero and ``log1p(-exp(x))`` further out
    (Maechler's split at -ln 2). Arguments above zero are clamped to zero.
    """
    if x >= 0.0:
        return LOG_ZERO
    if x == LOG_ZERO:
        return 0.0
    if x > -_LN2:
        return math.log(-math.expm1(x))
    return math.log1p(-math.exp(x))


def log_diff(lna: float, lnb: float) -> float:
    """Return ln(e^lna - e^lnb).

    Requires lna >= lnb; when lnb >= lna the difference is non-positive and
    the zero-probability sentinel is returned.
    """
    if lnb == LOG_ZERO:
        return lna
    if lnb >= lna:
        return LOG_ZERO
    return lna + log1m_exp(lnb - lna)


def log1p(z: float) -> float:
    """Return ln(1 + z), keeping precision for |z| << 1.

    z <= -1 has no real logarithm and maps to ``LOG_ZERO``.
    """
    if z <= -1.0:
        return LOG_ZERO
    return math.log1p(z)
