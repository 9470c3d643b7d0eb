#!/usr/bin/env python3
"""Console-script wrappers for the insight pipeline.

After an editable install (``pip install -e .``) the following commands become
available system-wide:

* ``insight-report`` – analyse the stored records and print the report
* ``insight-fetch``  – fetch subreddit listings into the record store
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from fetchers.record_store import CsvRecordStore
from fetchers.reddit_fetcher import RedditFetcher

from .backends import build_backend
from .breaker import CircuitBreaker
from .config import Settings, load_settings
from .errors import InsightEngineError
from .inference_client import InferenceClient
from .pipeline import InsightPipeline

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def build_pipeline(settings: Settings, records_path: Path | None = None) -> InsightPipeline:
    """Wire store, backend, client and a shared breaker from *settings*."""
    store = CsvRecordStore(records_path or settings.records_path, limit=settings.fetch_limit)
    client = InferenceClient(build_backend(settings), payload_cap=settings.payload_cap)
    return InsightPipeline(
        store,
        client,
        breaker=CircuitBreaker(cooldown=settings.breaker_cooldown),
        max_attempts=settings.max_attempts,
        base_delay=settings.retry_base_delay,
    )


# ---------------------------------------------------------------------------
# Entry-points
# ---------------------------------------------------------------------------

def report(argv: Optional[List[str]] = None) -> None:
    """Generate the trend/problem report for the trailing window."""
    parser = argparse.ArgumentParser(description="Generate a trend and problem report from stored posts")
    parser.add_argument("--days", type=int, default=30, help="Size of the trailing window in days")
    parser.add_argument("--records", type=Path, default=None, help="CSV record store (overrides INSIGHT_RECORDS_PATH)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        pipeline = build_pipeline(load_settings(), args.records)
        text = asyncio.run(pipeline.generate_report(args.days))
    except InsightEngineError as exc:
        LOGGER.error("❌ Analysis failed: %s", exc)
        sys.exit(1)
    print(text)


async def _fetch_all(settings: Settings, subreddits: List[str], sort: str, max_results: int) -> int:
    store = CsvRecordStore(settings.records_path, limit=settings.fetch_limit)
    total = 0
    async with RedditFetcher.from_settings(settings) as fetcher:
        for subreddit in subreddits:
            records = await fetcher.fetch_subreddit(subreddit, sort=sort, max_results=max_results)
            inserted, updated = store.upsert_many(records)
            LOGGER.info("r/%s: %d created, %d updated", subreddit, inserted, updated)
            total += len(records)
    return total


def fetch(argv: Optional[List[str]] = None) -> None:
    """Fetch subreddit listings into the record store."""
    parser = argparse.ArgumentParser(description="Fetch subreddit posts into the record store")
    parser.add_argument("subreddits", nargs="+", help="Subreddit names without the r/ prefix")
    parser.add_argument("--sort", choices=["hot", "new", "top"], default="hot")
    parser.add_argument("--max-results", type=int, default=1000)
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        total = asyncio.run(_fetch_all(load_settings(), args.subreddits, args.sort, args.max_results))
    except (InsightEngineError, httpx.HTTPError) as exc:
        LOGGER.error("❌ Fetch failed: %s", exc)
        sys.exit(1)
    LOGGER.info("🎉 Fetched %d posts", total)


if __name__ == "__main__":
    report()
