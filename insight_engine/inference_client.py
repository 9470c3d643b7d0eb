"""Formats record batches into prompts for the external analyzer."""
from __future__ import annotations

import json
import logging
from typing import Dict, List, Sequence

from .backends import InferenceBackend
from .models import Record

logger = logging.getLogger(__name__)

DEFAULT_PAYLOAD_CAP = 500
TREND_BODY_CHARS = 200
PROBLEM_BODY_CHARS = 300

TREND_PROMPT = """Analyze the following Reddit posts to identify emerging trends and business opportunities.
Focus on finding problems that could be solved with SaaS products or services.

Posts data:
{payload}

Return trends in the following JSON format:
[
  {{
    "trend": "Brief description of the trend",
    "growthPercentage": 47,
    "timePeriod": "3 months",
    "marketAnalysis": "Analysis of market potential and size",
    "competitionLevel": "Low/Medium/High",
    "entryCost": "Low/Medium/High",
    "recommendation": "Specific recommendation for a SaaS opportunity",
    "confidence": 85
  }}
]

Focus on:
1. Problems people are discussing that could be solved with software
2. Growing interest in specific tools or services
3. Pain points in existing workflows
4. Emerging needs in specific industries or niches
5. Opportunities for AI-powered solutions

Return only valid JSON, no additional text."""

PROBLEM_PROMPT = """Analyze the following Reddit posts to identify specific problems people are facing that could be solved with SaaS products.

Posts data:
{payload}

Return problems in the following JSON format:
[
  {{
    "problem": "Clear description of the problem",
    "frequency": 15,
    "severity": "High/Medium/Low",
    "potentialSolutions": ["Solution 1", "Solution 2"],
    "marketSize": "Small/Medium/Large",
    "urgency": "High/Medium/Low"
  }}
]

Focus on:
1. Recurring problems mentioned across multiple posts
2. Workflow inefficiencies
3. Manual processes that could be automated
4. Data management issues
5. Communication or collaboration problems
6. Time-consuming tasks that could be optimized

Return only valid JSON, no additional text."""


def _project(record: Record, body_chars: int, with_date: bool) -> Dict:
    item = {
        "title": record.title,
        "subreddit": record.subreddit,
        "score": record.score,
        "comments": record.comment_count,
    }
    if with_date:
        item["date"] = record.created_at.isoformat()
    item["selftext"] = (record.body or "")[:body_chars]
    return item


class InferenceClient:
    """Builds bounded payloads and sends one request per call."""

    def __init__(self, backend: InferenceBackend, payload_cap: int = DEFAULT_PAYLOAD_CAP):
        self.backend = backend
        self.payload_cap = payload_cap

    def trend_payload(self, records: Sequence[Record]) -> List[Dict]:
        return [_project(r, TREND_BODY_CHARS, with_date=True) for r in records[: self.payload_cap]]

    def problem_payload(self, records: Sequence[Record]) -> List[Dict]:
        return [_project(r, PROBLEM_BODY_CHARS, with_date=False) for r in records[: self.payload_cap]]

    async def request_trend_insights(self, records: Sequence[Record]) -> str:
        payload = self.trend_payload(records)
        logger.debug("Sending %d records for trend analysis", len(payload))
        return await self.backend.complete(TREND_PROMPT.format(payload=json.dumps(payload, indent=2)))

    async def request_problem_insights(self, records: Sequence[Record]) -> str:
        payload = self.problem_payload(records)
        logger.debug("Sending %d records for problem analysis", len(payload))
        return await self.backend.complete(PROBLEM_PROMPT.format(payload=json.dumps(payload, indent=2)))
