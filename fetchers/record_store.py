"""CSV-backed record store used as the record window provider."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Tuple

import pandas as pd

from insight_engine.models import Record

logger = logging.getLogger(__name__)

COLUMNS = ["post_id", "title", "author", "subreddit", "score", "comment_count", "created_utc", "body"]


def record_to_row(record: Record) -> dict:
    return {
        "post_id": record.post_id,
        "title": record.title,
        "author": record.author,
        "subreddit": record.subreddit,
        "score": record.score,
        "comment_count": record.comment_count,
        "created_utc": int(record.created_at.timestamp()),
        "body": record.body,
    }


def row_to_record(row: pd.Series) -> Record:
    return Record(
        post_id=str(row["post_id"]),
        title=str(row["title"]),
        author=str(row["author"]),
        subreddit=str(row["subreddit"]),
        score=int(row["score"]),
        comment_count=int(row["comment_count"]),
        created_at=datetime.fromtimestamp(int(row["created_utc"]), tz=timezone.utc),
        body=str(row["body"]),
    )


class CsvRecordStore:
    """Stores posts in a single CSV file, one row per post."""

    def __init__(self, path: Path | str, limit: int = 1000):
        self.path = Path(path)
        self.limit = limit

    def load_frame(self) -> pd.DataFrame:
        if not self.path.exists():
            return pd.DataFrame(columns=COLUMNS)
        df = pd.read_csv(
            self.path,
            dtype={"post_id": str, "title": str, "author": str, "subreddit": str, "body": str},
            keep_default_na=False,
        )
        missing = [c for c in COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"{self.path} is missing columns: {', '.join(missing)}")
        return df[COLUMNS]

    def read_since(self, since: datetime) -> List[Record]:
        """Newest-first records created at or after *since*, at most ``limit`` of them."""
        df = self.load_frame()
        if df.empty:
            return []
        df = df[pd.to_numeric(df["created_utc"]) >= since.timestamp()]
        df = df.sort_values(by="created_utc", ascending=False, kind="stable").head(self.limit)
        return [row_to_record(row) for _, row in df.iterrows()]

    async def fetch_records(self, since: datetime) -> List[Record]:
        return await asyncio.to_thread(self.read_since, since)

    def upsert_many(self, records: Iterable[Record]) -> Tuple[int, int]:
        """Merge *records* by ``post_id`` (latest copy wins) and return (inserted, updated)."""
        incoming = pd.DataFrame([record_to_row(r) for r in records], columns=COLUMNS)
        if incoming.empty:
            return 0, 0

        existing = self.load_frame()
        known_ids = set(existing["post_id"]) - {""}
        keyed = incoming["post_id"] != ""
        updated = int(incoming.loc[keyed, "post_id"].drop_duplicates().isin(known_ids).sum())
        inserted = int(incoming.loc[keyed, "post_id"].nunique()) - updated + int((~keyed).sum())

        merged = pd.concat([existing, incoming], ignore_index=True)
        merged = pd.concat(
            [
                merged[merged["post_id"] != ""].drop_duplicates(subset="post_id", keep="last"),
                merged[merged["post_id"] == ""],
            ],
            ignore_index=True,
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        merged.to_csv(self.path, index=False)
        logger.info("Stored %d new and %d updated records in %s", inserted, updated, self.path)
        return inserted, updated
