"""
Counting result snapshot for a single experiment.

A CountingResult is the read-only hand-off from a rate calculation to the
statistics engine. It carries:
- the observed number of events N,
- the expected background mean b,
- the expected signal: signal[0] is the total, signal[1:] are the
  expectations in each sub-interval (gap between ordered observed energies),
- whether sub-interval data is available.

The engine never modifies a snapshot; rescaling a signal yields a new one.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import numpy as np


@dataclass(frozen=True, eq=False)
class CountingResult:
    """
    Observed events and expectations for one counting experiment.

    Attributes:
        observed: Observed event count N (>= 0)
        background: Expected background mean b (>= 0)
        signal: Signal expectations; signal[0] is the total expected signal,
            signal[1:] the expected signal in each sub-interval
        has_intervals: True if sub-interval expectations were supplied
        name: Optional label (analysis or experiment name)
    """

    observed: int
    background: float
    signal: Any
    has_intervals: bool = False
    name: str = ""

    def __post_init__(self):
        """Validate and normalize the snapshot after initialization."""
        observed = int(self.observed)
        if observed != self.observed:
            raise ValueError("observed must be an integer count")
        if observed < 0:
            raise ValueError("observed cannot be negative")

        background = float(self.background)
        if not np.isfinite(background) or background < 0.0:
            raise ValueError("background must be a finite, non-negative mean")

        signal = np.array(self.signal, dtype=float, ndmin=1)
        if signal.ndim != 1 or signal.size == 0:
            raise ValueError("signal must be a non-empty 1-D sequence")
        if not np.all(np.isfinite(signal)) or np.any(signal < 0.0):
            raise ValueError("signal expectations must be finite and non-negative")
        signal.setflags(write=False)

        object.__setattr__(self, "observed", observed)
        object.__setattr__(self, "background", background)
        object.__setattr__(self, "signal", signal)
        object.__setattr__(self, "has_intervals", bool(self.has_intervals))

    @property
    def total_signal(self) -> float:
        """Total expected signal (signal[0])."""
        return float(self.signal[0])

    @property
    def interval_signal(self) -> np.ndarray:
        """Expected signal in each sub-interval (signal[1:])."""
        return self.signal[1:]

    @property
    def num_intervals(self) -> int:
        """Number of sub-interval entries supplied."""
        return int(self.signal.size - 1)

    @property
    def uses_maximum_gap(self) -> bool:
        """True if interval data is valid for the maximum gap method.

        N ordered observed energies induce N+1 gaps, so exactly N+1 interval
        entries are required.
        """
        return self.has_intervals and self.num_intervals == self.observed + 1

    @property
    def max_gap_signal(self) -> float:
        """Largest expected signal in any single interval (0 if none)."""
        if self.num_intervals == 0:
            return 0.0
        return float(np.max(self.interval_signal))

    @property
    def max_gap_fraction(self) -> float:
        """Largest fraction of the total signal falling in any single interval."""
        total = self.total_signal
        if total <= 0.0:
            return 0.0
        return self.max_gap_signal / total

    def scaled(self, factor: float) -> 'CountingResult':
        """
        Return a new snapshot with every signal expectation multiplied by factor.

        Args:
            factor: Non-negative scale factor

        Returns:
            New CountingResult (this one is unchanged)
        """
        if factor < 0:
            raise ValueError("scale factor cannot be negative")
        return CountingResult(
            observed=self.observed,
            background=self.background,
            signal=self.signal * float(factor),
            has_intervals=self.has_intervals,
            name=self.name,
        )

    def validate(self) -> List[str]:
        """
        Check the snapshot for conditions that change how it is analyzed.

        Returns:
            List of warning messages (empty if nothing to report)
        """
        warnings: List[str] = []

        if self.total_signal == 0.0:
            warnings.append("Total expected signal is zero: no finite scale factor exists")

        if self.has_intervals and not self.uses_maximum_gap:
            warnings.append(
                f"Interval data has {self.num_intervals} entries but {self.observed + 1} "
                f"are required for {self.observed} observed events; using Poisson p-value"
            )

        if self.num_intervals > 0:
            interval_sum = float(np.sum(self.interval_signal))
            if interval_sum > self.total_signal * (1.0 + 1e-9):
                warnings.append(
                    f"Interval expectations sum to {interval_sum:.6g}, "
                    f"more than the total signal {self.total_signal:.6g}"
                )

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the snapshot to dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "name": self.name,
            "observed": self.observed,
            "background": self.background,
            "signal": self.signal.tolist(),
            "has_intervals": self.has_intervals,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CountingResult':
        """
        Create a CountingResult from a dictionary.

        Args:
            data: Dictionary with snapshot attributes

        Returns:
            New CountingResult instance

        Raises:
            KeyError: If required fields are missing
            ValueError: If data is invalid
        """
        return cls(
            observed=int(data["observed"]),
            background=float(data.get("background", 0.0)),
            signal=data["signal"],
            has_intervals=bool(data.get("has_intervals", False)),
            name=data.get("name", ""),
        )

    @classmethod
    def from_expectations(
        cls,
        observed: int,
        background: float,
        total_signal: float,
        interval_signal: Sequence[float] | None = None,
        name: str = "",
    ) -> 'CountingResult':
        """
        Build a snapshot from a total signal and optional per-interval signals.

        Args:
            observed: Observed event count
            background: Expected background mean
            total_signal: Total expected signal
            interval_signal: Expected signal per sub-interval, if available
            name: Optional label

        Returns:
            New CountingResult instance
        """
        intervals = [] if interval_signal is None else list(interval_signal)
        return cls(
            observed=observed,
            background=background,
            signal=[total_signal] + intervals,
            has_intervals=interval_signal is not None,
            name=name,
        )

    def __repr__(self) -> str:
        label = f"{self.name}, " if self.name else ""
        method = "max-gap" if self.uses_maximum_gap else "poisson"
        return (
            f"CountingResult({label}N={self.observed}, b={self.background:.4g}, "
            f"s={self.total_signal:.4g}, {method})"
        )
