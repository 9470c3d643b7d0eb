"""Pydantic data models shared by the analysis pipeline."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

Level = Literal["Low", "Medium", "High"]
MarketSize = Literal["Small", "Medium", "Large"]


class Record(BaseModel):
    """A single community post inside an analysis window."""

    title: str = Field(..., description="Post title")
    subreddit: str = Field(..., description="Community label the post was made in")
    score: int = Field(0, description="Net upvotes")
    comment_count: int = Field(0, description="Number of comments")
    created_at: datetime = Field(..., description="Creation time (UTC)")
    body: str = Field("", description="Self text, possibly empty")
    post_id: str = Field("", description="Source identifier, used for de-duplication")
    author: str = Field("", description="Author handle if known")

    model_config = {
        "frozen": True,
    }

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class TrendInsight(BaseModel):
    """An emerging trend or opportunity spotted in the window."""

    trend: str
    growth_percentage: float = 0
    time_period: str = ""
    market_analysis: str = ""
    competition_level: Level = "Medium"
    entry_cost: Level = "Medium"
    recommendation: str = ""
    confidence: int = Field(0, ge=0, le=100)

    model_config = {
        "frozen": True,
    }


class ProblemInsight(BaseModel):
    """A recurring problem people are discussing."""

    problem: str
    frequency: int = Field(0, ge=0)
    severity: Level = "Medium"
    potential_solutions: List[str] = Field(..., min_length=1)
    market_size: MarketSize = "Medium"
    urgency: Level = "Medium"

    model_config = {
        "frozen": True,
    }


class AnalysisWindow(BaseModel):
    """Records created within a trailing time range."""

    start: datetime
    end: datetime
    records: List[Record] = Field(default_factory=list)

    model_config = {
        "frozen": True,
    }

    @property
    def is_empty(self) -> bool:
        return not self.records


class AnalysisReport(BaseModel):
    """Input of the report synthesizer."""

    window_description: str
    trends: List[TrendInsight] = Field(default_factory=list)
    problems: List[ProblemInsight] = Field(default_factory=list)

    model_config = {
        "frozen": True,
    }
