"""Plain-text rendering of trend and problem insights."""
from __future__ import annotations

from typing import List, Sequence

from .models import AnalysisReport, ProblemInsight, TrendInsight

NOTHING_FOUND = "No significant trends or problems identified in the current data."


def format_number(value: float) -> str:
    """Whole numbers without a decimal point, others at full precision."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _trend_lines(trends: Sequence[TrendInsight]) -> List[str]:
    lines = ["📈 EMERGING TRENDS:"]
    for i, trend in enumerate(trends, 1):
        lines += [
            f"{i}. {trend.trend} (+{format_number(trend.growth_percentage)}% over {trend.time_period})",
            f"   Market: {trend.market_analysis}",
            f"   Competition: {trend.competition_level} | Entry Cost: {trend.entry_cost}",
            f"   Recommendation: {trend.recommendation}",
            f"   Confidence: {trend.confidence}%",
            "",
        ]
    return lines


def _problem_lines(problems: Sequence[ProblemInsight]) -> List[str]:
    lines = ["🔍 IDENTIFIED PROBLEMS:"]
    for i, problem in enumerate(problems, 1):
        lines += [
            f"{i}. {problem.problem}",
            f"   Frequency: {problem.frequency} mentions | Severity: {problem.severity}",
            f"   Market Size: {problem.market_size} | Urgency: {problem.urgency}",
            f"   Potential Solutions: {', '.join(problem.potential_solutions)}",
            "",
        ]
    return lines


def synthesize(window_label: str, trends: Sequence[TrendInsight], problems: Sequence[ProblemInsight]) -> str:
    """Compose the report text; only non-empty sections are rendered."""
    lines = ["", f"=== TREND ANALYSIS REPORT ({window_label}) ===", ""]
    if trends:
        lines += _trend_lines(trends)
    if problems:
        lines += _problem_lines(problems)
    if not trends and not problems:
        lines.append(NOTHING_FOUND)
    lines += ["", "=== END OF REPORT ===", ""]
    return "\n".join(lines)


def render(report: AnalysisReport) -> str:
    return synthesize(report.window_description, report.trends, report.problems)
