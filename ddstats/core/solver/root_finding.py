"""Monotone root finding for positive scale factors.

Solves f(x) = target for a continuous, monotonically decreasing f over
x > 0 (for example a log p-value as a function of a signal scale factor).

Algorithm:
1. Bracket: starting from a seed, double x while f(x) >= target or halve x
   while f(x) <= target, giving x1 < x2 with f(x1) > target > f(x2).
2. Bisect at the geometric mean sqrt(x1*x2), since x may span many orders
   of magnitude, until the f gap and the x gap both fall below tolerance,
   or until the bracket can no longer be split in floating point.
3. Return the midpoint of the final bracket.

Both loops are capped; a search that hits a cap reports converged=False
rather than returning its last estimate as if it were a root.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass
class RootResult:
    """Result of a bracket-and-bisect search."""
    root: float
    converged: bool
    iterations: int
    lower: float = math.nan
    upper: float = math.nan
    message: str = ""


def find_decreasing_root(
    func: Callable[[float], float],
    target: float,
    seed: float,
    x_tol: float = 1e-5,
    f_tol: float = 1e-5,
    geometric_x_tol: bool = False,
    max_bracket_steps: int = 1100,
    max_bisection_steps: int = 200,
) -> RootResult:
    """Find x > 0 with func(x) = target for a decreasing func.

    Args:
        func: Monotonically decreasing function of x > 0
        target: Target function value
        seed: Starting point (> 0)
        x_tol: Required bracket width
        f_tol: Required |func(x2) - func(x1)|; bisection continues until
            both tolerances are met
        geometric_x_tol: Measure the bracket width as |ln(x2/x1)| instead
            of |x2 - x1|
        max_bracket_steps: Maximum doublings/halvings while bracketing
        max_bisection_steps: Maximum bisection steps

    Returns:
        RootResult with the midpoint of the final bracket
    """
    if not (seed > 0.0 and math.isfinite(seed)):
        raise ValueError("seed must be positive and finite")

    iterations = 0
    x1 = seed
    f1 = func(x1)

    # Bracket
    if f1 > target:
        x2 = 2.0 * x1
        f2 = func(x2)
        iterations += 1
        while f2 >= target:
            if iterations >= max_bracket_steps or not math.isfinite(x2):
                return _not_converged(
                    f"bracketing did not find f < {target:.6g} after {iterations} doublings (x={x2:.6g})",
                    x1, x2, iterations,
                )
            x1, f1 = x2, f2
            x2 = 2.0 * x2
            f2 = func(x2)
            iterations += 1
    else:
        x2, f2 = x1, f1
        while f1 <= target:
            if iterations >= max_bracket_steps or x1 == 0.0:
                return _not_converged(
                    f"bracketing did not find f > {target:.6g} after {iterations} halvings (x={x1:.6g})",
                    x1, x2, iterations,
                )
            x2, f2 = x1, f1
            x1 = 0.5 * x1
            f1 = func(x1)
            iterations += 1

    # Bisection (geometric)
    steps = 0
    while abs(f2 - f1) > f_tol or _width(x1, x2, geometric_x_tol) > x_tol:
        if steps >= max_bisection_steps:
            return _not_converged(
                f"bisection did not reach tolerance after {steps} steps "
                f"(bracket [{x1:.6g}, {x2:.6g}])",
                x1, x2, iterations,
            )
        # sqrt(x1 * x2) overflows for x near the float maximum
        xm = math.sqrt(x1) * math.sqrt(x2)
        if not x1 < xm < x2:
            logger.debug("Bracket [%g, %g] reached float resolution", x1, x2)
            break
        fm = func(xm)
        steps += 1
        iterations += 1
        if fm >= target:
            x1, f1 = xm, fm
        else:
            x2, f2 = xm, fm

    root = 0.5 * (x1 + x2)
    return RootResult(
        root=root,
        converged=True,
        iterations=iterations,
        lower=x1,
        upper=x2,
        message=f"converged after {iterations} evaluations (bracket [{x1:.6g}, {x2:.6g}])",
    )


def _width(x1: float, x2: float, geometric: bool) -> float:
    if geometric:
        return abs(math.log(x2 / x1))
    return abs(x2 - x1)


def _not_converged(message: str, x1: float, x2: float, iterations: int) -> RootResult:
    logger.warning("Root search failed: %s", message)
    return RootResult(
        root=math.nan,
        converged=False,
        iterations=iterations,
        lower=x1,
        upper=x2,
        message=message,
    )
