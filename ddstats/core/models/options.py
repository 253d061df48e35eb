"""
Inference options for counting-experiment statistics.

This module defines configuration options for the statistical engine,
including the target p-value, root-search tolerances and iteration caps.
"""

import math
import sys
from dataclasses import dataclass
from typing import Dict, Any


DEFAULT_LNP = math.log(0.1)
"""Default target log p-value (p = 0.1, i.e. 90% CL)."""

DEFAULT_RELATIVE_PRECISION = 100 * sys.float_info.epsilon


@dataclass
class InferenceOptions:
    """
    Configuration options for p-value scaling and interval construction.

    Attributes:
        lnp: Natural logarithm of the target p-value (default: ln(0.1))
        use_maximum_gap: Use the maximum gap method when interval data is
            available (default: True); otherwise always Poisson
        compute_interval: Whether analyze() builds a Feldman-Cousins interval
            (default: True)

        Scale-factor search:
        scale_x_tol: Bracket width tolerance (absolute for Poisson, in ln(x)
            for maximum gap) (default: 1e-5)
        scale_lnp_tol: Tolerance on the log p-value gap across the bracket
            (default: 1e-5)
        max_bracket_steps: Maximum doublings/halvings while bracketing
            (default: 1100)
        max_bisection_steps: Maximum geometric bisection steps (default: 200)

        Interval search:
        interval_relative_precision: Relative precision of the interval
            boundaries; must not be below machine epsilon
            (default: 100 * epsilon)
        interval_max_iterations: Cap on each halving/doubling/bisection loop
            of the interval search (default: 5000)
    """

    lnp: float = DEFAULT_LNP
    use_maximum_gap: bool = True
    compute_interval: bool = True

    scale_x_tol: float = 1e-5
    scale_lnp_tol: float = 1e-5
    max_bracket_steps: int = 1100
    max_bisection_steps: int = 200

    interval_relative_precision: float = DEFAULT_RELATIVE_PRECISION
    interval_max_iterations: int = 5000

    def __post_init__(self):
        """Validate options after initialization."""
        self.lnp = float(self.lnp)
        if math.isnan(self.lnp):
            raise ValueError("lnp must be a number")

        if self.scale_x_tol <= 0:
            raise ValueError("scale_x_tol must be positive")

        if self.scale_lnp_tol <= 0:
            raise ValueError("scale_lnp_tol must be positive")

        if self.max_bracket_steps < 1:
            raise ValueError("max_bracket_steps must be at least 1")

        if self.max_bisection_steps < 1:
            raise ValueError("max_bisection_steps must be at least 1")

        if self.interval_relative_precision < sys.float_info.epsilon:
            raise ValueError("interval_relative_precision must not be below machine epsilon")

        if self.interval_max_iterations < 1:
            raise ValueError("interval_max_iterations must be at least 1")

    @property
    def pvalue(self) -> float:
        """Target p-value."""
        return math.exp(self.lnp)

    @property
    def confidence_level(self) -> float:
        """
        Confidence level (complement of the p-value).

        Returns:
            CL = 1 - p
        """
        return -math.expm1(self.lnp)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize options to dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "lnp": self.lnp,
            "use_maximum_gap": self.use_maximum_gap,
            "compute_interval": self.compute_interval,
            "scale_x_tol": self.scale_x_tol,
            "scale_lnp_tol": self.scale_lnp_tol,
            "max_bracket_steps": self.max_bracket_steps,
            "max_bisection_steps": self.max_bisection_steps,
            "interval_relative_precision": self.interval_relative_precision,
            "interval_max_iterations": self.interval_max_iterations,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InferenceOptions':
        """
        Create InferenceOptions from a dictionary.

        Either ``lnp`` or ``confidence_level`` may be given; ``lnp`` wins
        when both are present.

        Args:
            data: Dictionary with option values

        Returns:
            New InferenceOptions instance
        """
        if "lnp" in data:
            lnp = data["lnp"]
        elif "confidence_level" in data:
            lnp = _lnp_from_confidence_level(float(data["confidence_level"]))
        else:
            lnp = DEFAULT_LNP

        return cls(
            lnp=lnp,
            use_maximum_gap=data.get("use_maximum_gap", True),
            compute_interval=data.get("compute_interval", True),
            scale_x_tol=data.get("scale_x_tol", 1e-5),
            scale_lnp_tol=data.get("scale_lnp_tol", 1e-5),
            max_bracket_steps=data.get("max_bracket_steps", 1100),
            max_bisection_steps=data.get("max_bisection_steps", 200),
            interval_relative_precision=data.get(
                "interval_relative_precision", DEFAULT_RELATIVE_PRECISION
            ),
            interval_max_iterations=data.get("interval_max_iterations", 5000),
        )

    @classmethod
    def default(cls) -> 'InferenceOptions':
        """
        Create options with default values (90% CL).

        Returns:
            InferenceOptions with default settings
        """
        return cls()

    @classmethod
    def from_confidence_level(cls, confidence_level: float, **kwargs) -> 'InferenceOptions':
        """
        Create options targeting a confidence level instead of a log p-value.

        Args:
            confidence_level: CL in (0, 1)
            **kwargs: Any other option overrides

        Returns:
            InferenceOptions with lnp = ln(1 - CL)
        """
        return cls(lnp=_lnp_from_confidence_level(confidence_level), **kwargs)

    def __repr__(self) -> str:
        return (
            f"InferenceOptions("
            f"lnp={self.lnp:.6g}, "
            f"cl={self.confidence_level:.4g}, "
            f"max_gap={self.use_maximum_gap})"
        )


def _lnp_from_confidence_level(confidence_level: float) -> float:
    if not 0 < confidence_level < 1:
        raise ValueError("confidence_level must be between 0 and 1")
    return math.log1p(-confidence_level)
