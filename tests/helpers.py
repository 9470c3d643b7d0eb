"""Shared fakes for the test-suite."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from insight_engine.models import Record

NOW = datetime(2025, 1, 31, 12, 0, tzinfo=timezone.utc)


def make_record(
    subreddit: str = "saas",
    score: int = 10,
    comments: int = 5,
    title: str = "Weekly update",
    body: str = "",
    days_ago: float = 1,
    post_id: str = "",
) -> Record:
    return Record(
        title=title,
        subreddit=subreddit,
        score=score,
        comment_count=comments,
        created_at=NOW - timedelta(days=days_ago),
        body=body,
        post_id=post_id,
    )


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class ScriptedBackend:
    """Replays a script of responses; exceptions in the script are raised."""

    def __init__(self, *script):
        self.script = list(script)
        self.prompts = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        outcome = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class StaticProvider:
    def __init__(self, records):
        self.records = list(records)
        self.calls = []

    async def fetch_records(self, since):
        self.calls.append(since)
        return self.records
