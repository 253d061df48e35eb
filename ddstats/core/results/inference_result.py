"""
Result classes for counting-experiment statistics.

This module defines the output data structures of the statistics engine:
paired cumulative Poisson sums, confidence intervals, scale-factor searches
and the per-experiment summary produced by analyze().
"""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Any, Optional


def _iso_utc_now() -> str:
    """Return an ISO-8601 UTC timestamp ending with 'Z'."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _json_safe_value(value: Any) -> Any:
    """Convert non-JSON-safe floats (nan/inf) to None."""
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
    return value


def _float_or_inf(value: Any, default: float) -> float:
    """Inverse of _json_safe_value for fields where None stands for a sentinel."""
    if value is None:
        return default
    return float(value)


@dataclass(frozen=True)
class LogPair:
    """
    Logarithms of the lower and upper cumulative Poisson sums about N.

    Attributes:
        lower: ln sum_{k<=N} P(k|mean)
        upper: ln sum_{k>=N} P(k|mean)

    The k=N term appears in both sums, so
    exp(lower) + exp(upper) = 1 + P(N|mean).
    """

    lower: float
    upper: float

    @property
    def lower_probability(self) -> float:
        """P(k <= N)."""
        return math.exp(self.lower)

    @property
    def upper_probability(self) -> float:
        """P(k >= N)."""
        return math.exp(self.upper)


@dataclass
class ConfidenceInterval:
    """
    Confidence interval [lower, upper] on the signal mean.

    Attributes:
        lower: Lower signal bound
        upper: Upper signal bound
        confidence_level: Coverage the interval was built for (e.g. 0.9)
    """

    lower: float
    upper: float
    confidence_level: float

    def __post_init__(self):
        if self.lower > self.upper:
            raise ValueError("interval lower bound exceeds upper bound")

    @property
    def is_empty(self) -> bool:
        """True for the measure-zero [0, 0] interval (possible only at low CL)."""
        return self.lower == 0.0 and self.upper == 0.0

    @property
    def width(self) -> float:
        """Interval length."""
        return self.upper - self.lower

    def contains(self, s: float) -> bool:
        """Check whether signal s lies in the closed interval."""
        return self.lower <= s <= self.upper

    def to_dict(self) -> Dict[str, Any]:
        """Serialize interval to dictionary."""
        return {
            "lower": _json_safe_value(self.lower),
            "upper": _json_safe_value(self.upper),
            "confidence_level": self.confidence_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConfidenceInterval':
        """Create ConfidenceInterval from dictionary."""
        return cls(
            lower=_float_or_inf(data.get("lower"), 0.0),
            upper=_float_or_inf(data.get("upper"), math.inf),
            confidence_level=data.get("confidence_level", 0.9),
        )

    def __repr__(self) -> str:
        return (
            f"ConfidenceInterval([{self.lower:.6g}, {self.upper:.6g}], "
            f"CL={self.confidence_level:.4g})"
        )


@dataclass
class ScaleResult:
    """
    Outcome of a scale-factor search.

    A scale of +inf means no finite scale reaches the target p-value (for
    example a zero expected signal). This is distinct from ``converged``
    being False, which reports that the root search hit an iteration cap.

    Attributes:
        scale: Factor x such that scaling the signal by x gives the target p-value
        converged: True if the search finished within its iteration caps
        iterations: Number of p-value evaluations after the seed
        method: "poisson" or "maximum_gap"
        message: Description of the closed-form branch or search outcome
    """

    scale: float
    converged: bool = True
    iterations: int = 0
    method: str = "poisson"
    message: str = ""

    @property
    def is_finite(self) -> bool:
        """True if a finite scale factor exists."""
        return math.isfinite(self.scale)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize scale result to dictionary."""
        return {
            "scale": _json_safe_value(self.scale),
            "converged": self.converged,
            "iterations": self.iterations,
            "method": self.method,
            "message": self.message,
        }


@dataclass
class InferenceSummary:
    """
    Complete statistics for one counting experiment.

    Attributes:
        success: True if every requested quantity was computed
        name: Experiment or analysis label
        observed: Observed event count
        background: Expected background mean
        total_signal: Total expected signal
        method: p-value method used ("poisson" or "maximum_gap")

        log_likelihood: ln P(N | s + b)
        log_pvalue: ln p without background subtraction
        scale: Scale-factor search result for the target p-value
        interval: Feldman-Cousins interval on the signal (None if disabled)

        options: Options the summary was computed with (as dictionary)
        messages: Warnings raised while validating the input
        error_message: Error description if success is False
    """

    success: bool = True
    name: str = ""
    observed: int = 0
    background: float = 0.0
    total_signal: float = 0.0
    method: str = "poisson"

    log_likelihood: Optional[float] = None
    log_pvalue: Optional[float] = None
    scale: Optional[ScaleResult] = None
    interval: Optional[ConfidenceInterval] = None

    options: Dict[str, Any] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)
    error_message: Optional[str] = None

    timestamp: Optional[str] = None
    engine_version: str = "1.0.0"

    def __post_init__(self):
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = _iso_utc_now()

    @property
    def pvalue(self) -> Optional[float]:
        """p-value (not logarithm), if computed."""
        if self.log_pvalue is None:
            return None
        return math.exp(self.log_pvalue)

    @property
    def scale_factor(self) -> Optional[float]:
        """Scale factor for the target p-value, if computed."""
        if self.scale is None:
            return None
        return self.scale.scale

    @property
    def excluded(self) -> Optional[bool]:
        """True if the current signal is excluded at the target p-value."""
        if self.log_pvalue is None or "lnp" not in self.options:
            return None
        return self.log_pvalue < self.options["lnp"]

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the summary to dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "metadata": {
                "engine_version": self.engine_version,
                "timestamp": self.timestamp,
                "name": self.name,
            },
            "input_summary": {
                "observed": self.observed,
                "background": self.background,
                "total_signal": self.total_signal,
                "method": self.method,
            },
            "statistics": {
                "success": self.success,
                "log_likelihood": _json_safe_value(self.log_likelihood),
                "log_pvalue": _json_safe_value(self.log_pvalue),
                "excluded": self.excluded,
                "error_message": self.error_message,
                "messages": self.messages,
            },
            "scale": self.scale.to_dict() if self.scale else None,
            "interval": self.interval.to_dict() if self.interval else None,
            "options": self.options,
        }

    def to_json(self, indent: int = 2) -> str:
        """
        Serialize the summary to JSON string.

        Args:
            indent: Number of spaces for indentation

        Returns:
            JSON string representation
        """
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InferenceSummary':
        """
        Create InferenceSummary from dictionary.

        Args:
            data: Dictionary with summary data

        Returns:
            New InferenceSummary instance
        """
        metadata = data.get("metadata", {})
        inputs = data.get("input_summary", {})
        stats = data.get("statistics", {})

        scale = None
        scale_data = data.get("scale")
        if scale_data:
            scale = ScaleResult(
                scale=_float_or_inf(scale_data.get("scale"), math.inf),
                converged=scale_data.get("converged", True),
                iterations=scale_data.get("iterations", 0),
                method=scale_data.get("method", "poisson"),
                message=scale_data.get("message", ""),
            )

        interval = None
        if data.get("interval"):
            interval = ConfidenceInterval.from_dict(data["interval"])

        return cls(
            success=stats.get("success", True),
            name=metadata.get("name", ""),
            observed=inputs.get("observed", 0),
            background=inputs.get("background", 0.0),
            total_signal=inputs.get("total_signal", 0.0),
            method=inputs.get("method", "poisson"),
            log_likelihood=stats.get("log_likelihood"),
            log_pvalue=stats.get("log_pvalue"),
            scale=scale,
            interval=interval,
            options=data.get("options", {}),
            messages=stats.get("messages", []),
            error_message=stats.get("error_message"),
            timestamp=metadata.get("timestamp"),
            engine_version=metadata.get("engine_version", "1.0.0"),
        )

    @classmethod
    def failure(cls, error_message: str, **kwargs) -> 'InferenceSummary':
        """
        Create a failed summary.

        Args:
            error_message: Description of the failure
            **kwargs: Any fields already known (name, observed, ...)

        Returns:
            InferenceSummary with success=False
        """
        return cls(success=False, error_message=error_message, **kwargs)

    def __repr__(self) -> str:
        status = "success" if self.success else "failed"
        lnp = "n/a" if self.log_pvalue is None else f"{self.log_pvalue:.4g}"
        return (
            f"InferenceSummary({status}, {self.method}, "
            f"N={self.observed}, lnp={lnp})"
        )
