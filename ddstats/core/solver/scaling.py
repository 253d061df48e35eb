"""ddstats.core.solver.scaling

Scale factor reaching a target p-value.

Given an expected signal mu, find x such that scaling the signal (and hence
the cross-section) as mu -> x*mu gives p-value p (supplied as ln p). The
p-value is taken without background subtraction, either from a Poisson
distribution in the number of observed events or from the maximum gap
method.

Closed-form branches:
- mu <= 0:            no finite scale, x = inf
- ln p >= 0:          x = 0
- ln p = -inf:        x = inf
- Poisson, N = 0:     x = -ln(p)/mu
- max gap, f >= 1:    x = -ln(p)/mu  (all the signal in one gap)
- max gap, f <= 0:    x = inf
"""

from __future__ import annotations

import logging
import math

from ..models.options import InferenceOptions
from ..results.inference_result import ScaleResult
from ..statistics.pvalues import log_poisson_pvalue, log_maximum_gap_pvalue
from .root_finding import find_decreasing_root

logger = logging.getLogger(__name__)


def _trivial_scale(lnp: float, mu: float, method: str) -> ScaleResult | None:
    """Closed forms shared by both methods, or None if a search is needed."""
    if mu <= 0.0:
        return ScaleResult(scale=math.inf, method=method, message="no expected signal")
    if lnp >= 0.0:
        return ScaleResult(scale=0.0, method=method, message="target p-value >= 1")
    if lnp == -math.inf:
        return ScaleResult(scale=math.inf, method=method, message="target p-value is zero")
    return None


def poisson_scale_to_pvalue(
    lnp: float,
    n: int,
    mu: float,
    options: InferenceOptions | None = None,
) -> ScaleResult:
    """Scale factor x with P(k <= N | x*mu) = p.

    Args:
        lnp: Logarithm of the target p-value
        n: Number of observed events
        mu: Total expected signal events
        options: Search tolerances and caps (defaults if None)

    Returns:
        ScaleResult
    """
    options = options or InferenceOptions.default()

    trivial = _trivial_scale(lnp, mu, "poisson")
    if trivial is not None:
        return trivial

    # Analytic formula for N = 0
    if n <= 0:
        return ScaleResult(scale=-lnp / mu, method="poisson", message="closed form for N=0")

    result = find_decreasing_root(
        lambda x: log_poisson_pvalue(n, x * mu),
        target=lnp,
        seed=n / mu,
        x_tol=options.scale_x_tol,
        f_tol=options.scale_lnp_tol,
        geometric_x_tol=False,
        max_bracket_steps=options.max_bracket_steps,
        max_bisection_steps=options.max_bisection_steps,
    )
    logger.debug("Poisson scale search (N=%d, mu=%g, lnp=%g): %s", n, mu, lnp, result.message)
    return ScaleResult(
        scale=result.root,
        converged=result.converged,
        iterations=result.iterations,
        method="poisson",
        message=result.message,
    )


def maximum_gap_scale_to_pvalue(
    lnp: float,
    mu: float,
    fraction: float,
    options: InferenceOptions | None = None,
) -> ScaleResult:
    """Scale factor x with maximum gap p-value p at expected signal x*mu.

    Args:
        lnp: Logarithm of the target p-value
        mu: Total expected signal events
        fraction: Largest fraction of mu expected in any single gap
        options: Search tolerances and caps (defaults if None)

    Returns:
        ScaleResult
    """
    options = options or InferenceOptions.default()

    trivial = _trivial_scale(lnp, mu, "maximum_gap")
    if trivial is not None:
        return trivial

    if fraction <= 0.0:
        return ScaleResult(scale=math.inf, method="maximum_gap", message="empty maximum gap")

    if fraction >= 1.0:
        return ScaleResult(
            scale=-lnp / mu, method="maximum_gap", message="closed form for a single gap"
        )

    result = find_decreasing_root(
        lambda x: log_maximum_gap_pvalue(x * mu, x * fraction * mu),
        target=lnp,
        seed=1.0 / mu,
        x_tol=options.scale_x_tol,
        f_tol=options.scale_lnp_tol,
        geometric_x_tol=True,
        max_bracket_steps=options.max_bracket_steps,
        max_bisection_steps=options.max_bisection_steps,
    )
    logger.debug(
        "Maximum gap scale search (mu=%g, f=%g, lnp=%g): %s", mu, fraction, lnp, result.message
    )
    return ScaleResult(
        scale=result.root,
        converged=result.converged,
        iterations=result.iterations,
        method="maximum_gap",
        message=result.message,
    )
