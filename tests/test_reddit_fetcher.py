import asyncio

import httpx
import pytest

from fetchers.reddit_fetcher import RedditFetcher, parse_listing
from insight_engine.config import Settings
from insight_engine.errors import ConfigurationError

from helpers import SleepRecorder


def _post(i: int) -> dict:
    return {
        "data": {
            "id": f"p{i}",
            "title": f"Post {i}",
            "author": "someone",
            "subreddit": "saas",
            "score": i,
            "num_comments": 2,
            "created_utc": 1735689600 + i,
            "selftext": "",
        }
    }


def _listing(start: int, count: int, after):
    return {"data": {"children": [_post(i) for i in range(start, start + count)], "after": after}}


def make_transport(pages):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/v1/access_token":
            return httpx.Response(200, json={"access_token": "tok"})
        after = request.url.params.get("after")
        return httpx.Response(200, json=pages[after])

    return httpx.MockTransport(handler), seen


def test_parse_listing_maps_fields() -> None:
    records, after = parse_listing(_listing(0, 2, "t3_next"))
    assert after == "t3_next"
    assert records[1].post_id == "p1"
    assert records[1].comment_count == 2
    assert records[1].created_at.timestamp() == 1735689601


def test_fetch_subreddit_paginates_until_cursor_ends() -> None:
    transport, seen = make_transport({None: _listing(0, 100, "c1"), "c1": _listing(100, 30, None)})
    sleep = SleepRecorder()

    async def run():
        async with RedditFetcher("id", "secret", transport=transport, sleep=sleep, clock=lambda: 0.0) as fetcher:
            return await fetcher.fetch_subreddit("saas", sort="new")

    records = asyncio.run(run())

    assert len(records) == 130
    listing_calls = [r for r in seen if r.url.path == "/r/saas/new.json"]
    assert len(listing_calls) == 2
    assert listing_calls[1].url.params["after"] == "c1"
    assert listing_calls[0].headers["Authorization"] == "Bearer tok"
    assert sleep.delays == [1.0]


def test_fetch_subreddit_respects_max_results() -> None:
    transport, seen = make_transport({None: _listing(0, 100, "c1"), "c1": _listing(100, 100, "c2")})

    async def run():
        async with RedditFetcher("id", "secret", transport=transport, sleep=SleepRecorder()) as fetcher:
            return await fetcher.fetch_subreddit("saas", max_results=150)

    records = asyncio.run(run())
    assert len(records) == 150
    assert len([r for r in seen if r.url.path.endswith("hot.json")]) == 2


def test_search_uses_subreddit_scope() -> None:
    transport, seen = make_transport({None: _listing(0, 3, None)})

    async def run():
        async with RedditFetcher("id", "secret", transport=transport, sleep=SleepRecorder()) as fetcher:
            return await fetcher.search("invoicing", subreddit="smallbusiness")

    assert len(asyncio.run(run())) == 3
    request = seen[-1]
    assert request.url.path == "/r/smallbusiness/search.json"
    assert request.url.params["q"] == "invoicing"


def test_http_errors_propagate() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(401, json={}))

    async def run():
        async with RedditFetcher("id", "secret", transport=transport):
            pass

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(run())


def test_from_settings_requires_credentials() -> None:
    with pytest.raises(ConfigurationError):
        RedditFetcher.from_settings(Settings())
    fetcher = RedditFetcher.from_settings(Settings(reddit_client_id="id", reddit_client_secret="s"))
    assert fetcher.client_id == "id"
