"""Tolerant decoding of LLM responses into insight models.

Decoding happens in two stages. :func:`decode_sequence` only demands that the
(optionally code-fenced) text is JSON whose top level is a list. The per-item
builders then treat every field as optional and fall back to defaults:

=====================  ==============================================
field                  default when missing or unusable
=====================  ==============================================
trend / problem        "Unspecified trend" / "Unspecified problem"
text fields            ""
growthPercentage       0 (a trailing "%" is accepted)
confidence             0, clamped to 0..100
frequency              0, negatives clamped to 0
Low/Medium/High enums  "Medium"
marketSize             "Medium"
potentialSolutions     ["No specific solutions suggested"]
=====================  ==============================================

Content is otherwise not validated; upstream output is trusted as prose.
"""
from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from .errors import MalformedResponse
from .models import ProblemInsight, TrendInsight

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```[\w-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")

LEVELS = ("Low", "Medium", "High")
MARKET_SIZES = ("Small", "Medium", "Large")
NO_SOLUTIONS = "No specific solutions suggested"


def strip_code_fence(text: str) -> str:
    """Remove a leading ```lang marker and a trailing ``` marker if present."""
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def decode_sequence(text: str) -> List[Any]:
    """Decode *text* as a JSON list.

    Raises :class:`MalformedResponse` if the content is not JSON. A valid JSON
    value that is not a list yields an empty list.
    """
    try:
        data = json.loads(strip_code_fence(text or ""))
    except (ValueError, RecursionError, TypeError) as exc:
        raise MalformedResponse(f"Response is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        logger.warning("Expected a JSON array, got %s; treating as empty", type(data).__name__)
        return []
    return data


def _field(item: Dict[str, Any], *names: str) -> Any:
    for name in names:
        if item.get(name) is not None:
            return item[name]
    return None


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            number = float(str(value).strip().rstrip("%"))
    except (TypeError, ValueError, OverflowError):
        return 0
    return number if math.isfinite(number) else 0


def _choice(value: Any, allowed: tuple, default: str = "Medium") -> str:
    candidate = _text(value).capitalize()
    return candidate if candidate in allowed else default


def _solutions(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return [NO_SOLUTIONS]
    solutions = [_text(v) for v in value if _text(v)]
    return solutions or [NO_SOLUTIONS]


def build_trend(item: Dict[str, Any]) -> TrendInsight:
    confidence = int(round(_number(_field(item, "confidence"))))
    return TrendInsight(
        trend=_text(_field(item, "trend"), "Unspecified trend"),
        growth_percentage=_number(_field(item, "growthPercentage", "growth_percentage")),
        time_period=_text(_field(item, "timePeriod", "time_period")),
        market_analysis=_text(_field(item, "marketAnalysis", "market_analysis")),
        competition_level=_choice(_field(item, "competitionLevel", "competition_level"), LEVELS),
        entry_cost=_choice(_field(item, "entryCost", "entry_cost"), LEVELS),
        recommendation=_text(_field(item, "recommendation")),
        confidence=min(100, max(0, confidence)),
    )


def build_problem(item: Dict[str, Any]) -> ProblemInsight:
    return ProblemInsight(
        problem=_text(_field(item, "problem"), "Unspecified problem"),
        frequency=max(0, int(_number(_field(item, "frequency")))),
        severity=_choice(_field(item, "severity"), LEVELS),
        potential_solutions=_solutions(_field(item, "potentialSolutions", "potential_solutions")),
        market_size=_choice(_field(item, "marketSize", "market_size"), MARKET_SIZES),
        urgency=_choice(_field(item, "urgency"), LEVELS),
    )


def _parse(text: str, builder, kind: str) -> list:
    try:
        items = decode_sequence(text)
    except MalformedResponse as exc:
        logger.error("Failed to parse %s response: %s", kind, exc)
        logger.debug("Raw response: %s", text)
        return []

    insights = []
    for item in items:
        if not isinstance(item, dict):
            logger.debug("Skipping non-object %s entry: %r", kind, item)
            continue
        try:
            insights.append(builder(item))
        except (ValidationError, OverflowError, RecursionError) as exc:
            logger.warning("Skipping unusable %s entry: %s", kind, exc)
    return insights


def parse_trend_insights(text: str) -> List[TrendInsight]:
    """Parse a trend response; never raises, undecodable input gives ``[]``."""
    return _parse(text, build_trend, "trend")


def parse_problem_insights(text: str) -> List[ProblemInsight]:
    """Parse a problem response; never raises, undecodable input gives ``[]``."""
    return _parse(text, build_problem, "problem")
