"""
Data models for counting-experiment statistics.

This module provides the core data structures:
- CountingResult: Read-only snapshot of observed events and expectations
- InferenceOptions: Configuration for p-value scaling and intervals
"""

from .counting_result import CountingResult
from .options import InferenceOptions, DEFAULT_LNP

__all__ = [
    "CountingResult",
    "InferenceOptions",
    "DEFAULT_LNP",
]
