"""Insight Engine.

Turns a trailing window of community posts into trend and problem insights,
delegating the analysis to an external LLM and falling back to deterministic
heuristics whenever that service is unavailable.
"""

__all__ = [
    "InsightPipeline",
    "ProblemInsight",
    "Record",
    "TrendInsight",
]

__version__ = "0.1.0"

from .models import ProblemInsight, Record, TrendInsight  # noqa: E402
from .pipeline import InsightPipeline  # noqa: E402
