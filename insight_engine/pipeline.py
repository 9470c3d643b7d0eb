"""Pipeline orchestrator: record window -> trend/problem analysis -> report."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Protocol, Sequence, TypeVar

from .breaker import CircuitBreaker
from .errors import FailureExhausted, ProviderFailure
from .fallback import FallbackProblemAnalyzer, FallbackTrendAnalyzer
from .inference_client import InferenceClient
from .models import AnalysisReport, AnalysisWindow, ProblemInsight, Record, TrendInsight
from .report import render
from .response_parser import parse_problem_insights, parse_trend_insights
from .retry import RetryExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordWindowProvider(Protocol):
    async def fetch_records(self, since: datetime) -> Sequence[Record]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InsightPipeline:
    """Produces trend and problem insights for a trailing window of records.

    Each analysis goes through the LLM when the breaker allows it and falls back
    to local heuristics when the breaker is open or every retry failed. Trend and
    problem analysis share one breaker unless ``problem_breaker`` is given.
    """

    def __init__(
        self,
        provider: RecordWindowProvider,
        client: InferenceClient,
        breaker: CircuitBreaker | None = None,
        problem_breaker: CircuitBreaker | None = None,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.provider = provider
        self.client = client
        self.breaker = breaker or CircuitBreaker()
        self.problem_breaker = problem_breaker or self.breaker
        self.trend_retry = RetryExecutor(self.breaker, max_attempts, base_delay, sleep=sleep)
        self.problem_retry = RetryExecutor(self.problem_breaker, max_attempts, base_delay, sleep=sleep)
        self.trend_fallback = FallbackTrendAnalyzer()
        self.problem_fallback = FallbackProblemAnalyzer()
        self._now = now

    async def fetch_window(self, days: int) -> AnalysisWindow:
        """Load records created within the last *days* days, newest order preserved."""
        end = self._now()
        start = end - timedelta(days=days)
        try:
            records = await self.provider.fetch_records(start)
        except Exception as exc:
            raise ProviderFailure(f"Could not fetch records since {start.isoformat()}: {exc}") from exc
        in_window = [r for r in records if r.created_at >= start]
        logger.info("Loaded %d records for the last %d days", len(in_window), days)
        return AnalysisWindow(start=start, end=end, records=in_window)

    async def _guarded(
        self,
        kind: str,
        breaker: CircuitBreaker,
        retry: RetryExecutor,
        request: Callable[[Sequence[Record]], Awaitable[str]],
        parse: Callable[[str], List[T]],
        fallback: Callable[[Sequence[Record]], List[T]],
        records: Sequence[Record],
    ) -> List[T]:
        if not records:
            return []
        if not breaker.allow_attempt():
            logger.warning("Circuit breaker is open, using fallback %s analysis", kind)
            return fallback(records)
        try:
            raw = await retry.execute(lambda: request(records), label=f"{kind} inference")
        except FailureExhausted:
            return fallback(records)
        return parse(raw)

    async def trends_for(self, records: Sequence[Record]) -> List[TrendInsight]:
        trends = await self._guarded(
            "trend",
            self.breaker,
            self.trend_retry,
            self.client.request_trend_insights,
            parse_trend_insights,
            self.trend_fallback.analyze,
            records,
        )
        logger.info("Found %d trends", len(trends))
        return trends

    async def problems_for(self, records: Sequence[Record]) -> List[ProblemInsight]:
        problems = await self._guarded(
            "problem",
            self.problem_breaker,
            self.problem_retry,
            self.client.request_problem_insights,
            parse_problem_insights,
            self.problem_fallback.analyze,
            records,
        )
        logger.info("Found %d problems", len(problems))
        return problems

    async def analyze_trends(self, days: int = 30) -> List[TrendInsight]:
        logger.info("Starting trend analysis for the last %d days", days)
        window = await self.fetch_window(days)
        if window.is_empty:
            logger.warning("No records found for trend analysis")
            return []
        return await self.trends_for(window.records)

    async def analyze_problems(self, days: int = 30) -> List[ProblemInsight]:
        logger.info("Starting problem analysis for the last %d days", days)
        window = await self.fetch_window(days)
        if window.is_empty:
            logger.warning("No records found for problem analysis")
            return []
        return await self.problems_for(window.records)

    async def build_report(self, days: int = 30) -> AnalysisReport:
        window = await self.fetch_window(days)
        label = f"{days} days"
        if window.is_empty:
            logger.warning("No records found, skipping analysis")
            return AnalysisReport(window_description=label)
        trends, problems = await asyncio.gather(
            self.trends_for(window.records),
            self.problems_for(window.records),
        )
        return AnalysisReport(window_description=label, trends=trends, problems=problems)

    async def generate_report(self, days: int = 30) -> str:
        """Render the full report for the last *days* days."""
        logger.info("🚀 Generating report for the last %d days", days)
        return render(await self.build_report(days))
