"""Record window providers: the CSV record store and the Reddit fetcher that fills it."""

__all__ = [
    "CsvRecordStore",
    "RedditFetcher",
]

from .record_store import CsvRecordStore  # noqa: E402
from .reddit_fetcher import RedditFetcher  # noqa: E402
