"""Custom exceptions for the counting-statistics engine."""

from __future__ import annotations


class DDStatsError(RuntimeError):
    """Raised when a statistical quantity cannot be computed."""


class ConvergenceError(DDStatsError):
    """Raised when a bracketing or bisection loop exceeds its iteration cap."""

    error_code = "DDSTATS_NO_CONVERGENCE"

    def __init__(self, message: str, iterations: int | None = None) -> None:
        super().__init__(f"{self.error_code}: {message}")
        self.iterations = iterations
