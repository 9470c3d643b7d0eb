"""Deterministic offline analyzers used when the LLM path is unavailable."""
from __future__ import annotations

import logging
import math
import re
from typing import List, Sequence

import pandas as pd

from .models import ProblemInsight, Record, TrendInsight

logger = logging.getLogger(__name__)

PROBLEM_KEYWORDS = [
    "problem",
    "issue",
    "difficult",
    "hard",
    "struggle",
    "frustrated",
    "annoying",
    "broken",
    "fix",
    "help",
]

HIGH_ENGAGEMENT_SCORE = 100
HIGH_SEVERITY_FREQUENCY = 10
LOW_ENGAGEMENT_MAX_SCORE = 5
LOW_ENGAGEMENT_MAX_COMMENTS = 3
LOW_ENGAGEMENT_SHARE = 0.3


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (``round`` uses banker's rounding)."""
    return int(math.floor(value + 0.5))


def records_frame(records: Sequence[Record]) -> pd.DataFrame:
    """Tabulate the fields the heuristics look at, preserving record order."""
    return pd.DataFrame(
        [
            {
                "subreddit": r.subreddit,
                "score": r.score,
                "comments": r.comment_count,
                "title": r.title or "",
                "body": r.body or "",
            }
            for r in records
        ],
        columns=["subreddit", "score", "comments", "title", "body"],
    )


class FallbackTrendAnalyzer:
    """Community-activity and engagement heuristics."""

    def __init__(self, time_period: str = "30 days"):
        self.time_period = time_period

    def rank_communities(self, df: pd.DataFrame) -> pd.DataFrame:
        """Post counts per community, busiest first, ties in encounter order."""
        counts = df.groupby("subreddit", sort=False).size().rename("count").reset_index()
        counts["order"] = range(len(counts))
        return counts.sort_values(by=["count", "order"], ascending=[False, True]).reset_index(drop=True)

    def analyze(self, records: Sequence[Record]) -> List[TrendInsight]:
        if not records:
            return []
        logger.info("Using fallback trend analysis on %d records", len(records))

        df = records_frame(records)
        total = len(df)
        ranked = self.rank_communities(df)
        avg_score = float(df["score"].mean())
        avg_comments = float(df["comments"].mean())

        trends: List[TrendInsight] = []
        if not ranked.empty:
            top = ranked.iloc[0]
            community, count = str(top["subreddit"]), int(top["count"])
            trends.append(
                TrendInsight(
                    trend=f"Growing activity in {community} community",
                    growth_percentage=round_half_up(count / total * 100),
                    time_period=self.time_period,
                    market_analysis=(
                        f"High engagement community with {round_half_up(avg_score)} avg score "
                        f"and {round_half_up(avg_comments)} avg comments"
                    ),
                    competition_level="Medium",
                    entry_cost="Low",
                    recommendation=f"Consider building tools for {community} community needs",
                    confidence=60,
                )
            )

        if avg_score > HIGH_ENGAGEMENT_SCORE:
            trends.append(
                TrendInsight(
                    trend="High-engagement content trend",
                    growth_percentage=round_half_up(avg_score / 100 * 10),
                    time_period=self.time_period,
                    market_analysis="Content with high engagement indicates strong community interest",
                    competition_level="High",
                    entry_cost="Medium",
                    recommendation="Focus on content creation and community management tools",
                    confidence=70,
                )
            )
        return trends


class FallbackProblemAnalyzer:
    """Keyword and low-engagement heuristics."""

    def __init__(self, keywords: Sequence[str] = PROBLEM_KEYWORDS):
        self.keywords = [k.lower() for k in keywords]
        self._pattern = "|".join(re.escape(k) for k in self.keywords)

    def keyword_mask(self, df: pd.DataFrame) -> pd.Series:
        """True for rows whose title or body mentions any keyword (case-insensitive)."""
        if not self.keywords:
            return pd.Series(False, index=df.index)
        title_hit = df["title"].str.lower().str.contains(self._pattern, regex=True)
        body_hit = df["body"].str.lower().str.contains(self._pattern, regex=True)
        return title_hit | body_hit

    def analyze(self, records: Sequence[Record]) -> List[ProblemInsight]:
        if not records:
            return []
        logger.info("Using fallback problem analysis on %d records", len(records))

        df = records_frame(records)
        problems: List[ProblemInsight] = []

        matches = int(self.keyword_mask(df).sum())
        if matches > 0:
            problems.append(
                ProblemInsight(
                    problem="User-reported issues and difficulties",
                    frequency=matches,
                    severity="High" if matches > HIGH_SEVERITY_FREQUENCY else "Medium",
                    potential_solutions=["User support tools", "Automated troubleshooting", "Community forums"],
                    market_size="Large",
                    urgency="High",
                )
            )

        low = int(((df["score"] < LOW_ENGAGEMENT_MAX_SCORE) & (df["comments"] < LOW_ENGAGEMENT_MAX_COMMENTS)).sum())
        if low > len(df) * LOW_ENGAGEMENT_SHARE:
            problems.append(
                ProblemInsight(
                    problem="Low engagement content",
                    frequency=low,
                    severity="Medium",
                    potential_solutions=["Content optimization tools", "Engagement analytics", "A/B testing platforms"],
                    market_size="Medium",
                    urgency="Medium",
                )
            )
        return problems
