"""Reddit listing fetcher that feeds the record store.

Uses application-only OAuth and walks listings with the ``after`` cursor,
keeping at least ``request_delay`` seconds between requests.
"""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

import httpx

from insight_engine.config import Settings
from insight_engine.errors import ConfigurationError
from insight_engine.models import Record

logger = logging.getLogger(__name__)

AUTH_URL = "https://www.reddit.com/api/v1/access_token"
API_BASE = "https://oauth.reddit.com"
PAGE_SIZE = 100

Sort = Literal["hot", "new", "top"]


def parse_listing(payload: Dict) -> tuple[List[Record], Optional[str]]:
    """Convert a listing response into records plus the next ``after`` cursor."""
    data = payload.get("data", {})
    records = []
    for child in data.get("children", []):
        post = child.get("data", {})
        records.append(
            Record(
                post_id=str(post.get("id", "")),
                title=post.get("title", ""),
                author=post.get("author") or "",
                subreddit=post.get("subreddit", ""),
                score=int(post.get("score", 0)),
                comment_count=int(post.get("num_comments", 0)),
                created_at=datetime.fromtimestamp(float(post.get("created_utc", 0)), tz=timezone.utc),
                body=post.get("selftext") or "",
            )
        )
    return records, data.get("after")


class RedditFetcher:
    """Async client for subreddit listings and search."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        user_agent: str = "insight-engine/0.1",
        request_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep=asyncio.sleep,
        clock=time.monotonic,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.user_agent = user_agent
        self.request_delay = request_delay
        self._transport = transport
        self._sleep = sleep
        self._clock = clock
        self._last_request: float | None = None
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RedditFetcher":
        if not settings.reddit_client_id or not settings.reddit_client_secret:
            raise ConfigurationError("REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET must be configured")
        return cls(settings.reddit_client_id, settings.reddit_client_secret, settings.reddit_user_agent, **kwargs)

    async def __aenter__(self) -> "RedditFetcher":
        self._client = httpx.AsyncClient(
            base_url=API_BASE,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
            timeout=30.0,
        )
        try:
            await self.authenticate()
        except BaseException:
            await self.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("RedditFetcher must be used as an async context manager")
        return self._client

    async def authenticate(self) -> None:
        response = await self.client.post(
            AUTH_URL,
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
        )
        response.raise_for_status()
        token = response.json()["access_token"]
        self.client.headers["Authorization"] = f"Bearer {token}"
        logger.info("Reddit API authentication successful")

    async def _rate_limit(self) -> None:
        if self._last_request is not None:
            wait = self.request_delay - (self._clock() - self._last_request)
            if wait > 0:
                logger.debug("Rate limiting: waiting %.2fs", wait)
                await self._sleep(wait)
        self._last_request = self._clock()

    async def _paginate(self, url: str, params: Dict[str, str], max_results: int) -> List[Record]:
        records: List[Record] = []
        after: Optional[str] = None
        max_requests = -(-max_results // PAGE_SIZE)

        for batch in range(1, max_requests + 1):
            await self._rate_limit()
            query = dict(params, limit=str(PAGE_SIZE))
            if after:
                query["after"] = after
            logger.debug("Fetching batch %d from %s, after: %s", batch, url, after or "none")

            response = await self.client.get(url, params=query)
            response.raise_for_status()
            batch_records, after = parse_listing(response.json())
            records.extend(batch_records)

            if len(records) >= max_results:
                del records[max_results:]
                logger.info("Reached maximum results limit: %d", max_results)
                break
            if not after or not batch_records:
                logger.info("No more results available")
                break
        return records

    async def fetch_subreddit(self, subreddit: str, sort: Sort = "hot", max_results: int = 1000) -> List[Record]:
        logger.info("Fetching %s posts from r/%s (max: %d)", sort, subreddit, max_results)
        records = await self._paginate(f"/r/{subreddit}/{sort}.json", {}, max_results)
        logger.info("Found %d posts in r/%s", len(records), subreddit)
        return records

    async def search(self, query: str, subreddit: str | None = None, max_results: int = 1000) -> List[Record]:
        url = f"/r/{subreddit}/search.json" if subreddit else "/search.json"
        params = {"q": query, "sort": "relevance", "t": "all"}
        if subreddit:
            params["restrict_sr"] = "1"
        logger.info("Searching Reddit for %r%s (max: %d)", query, f" in r/{subreddit}" if subreddit else "", max_results)
        return await self._paginate(url, params, max_results)
