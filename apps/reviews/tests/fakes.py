from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from apps.common.exceptions import BackendError
from apps.reviews.stores import ReviewRecord

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def record(pk: int, user_id: str, rating: int, comment: str = "", minutes_ago: int = 0) -> ReviewRecord:
    return ReviewRecord(
        id=pk,
        user_id=user_id,
        movie_id="movie-1",
        rating=rating,
        comment=comment,
        created_at=BASE_TIME - timedelta(minutes=minutes_ago),
    )


class FakeReviewStore:
    def __init__(self, records=(), error: Exception | None = None):
        self.records = list(records)
        self.error = error
        self.calls: list[str] = []

    async def for_movie(self, movie_id):
        self.calls.append(movie_id)
        if self.error is not None:
            raise self.error
        return list(self.records)


class FakeProfileStore:
    def __init__(self, names=None, error: Exception | None = None):
        self.names = dict(names or {})
        self.error = error
        self.calls: list[list[str]] = []

    async def display_names(self, user_ids):
        ids = list(user_ids)
        self.calls.append(ids)
        if self.error is not None:
            raise self.error
        return {uid: self.names[uid] for uid in ids if uid in self.names}


class BlockingReviewStore(FakeReviewStore):
    """Waits until released, so a load can be interrupted mid-flight."""

    def __init__(self, records=()):
        super().__init__(records)
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.cancelled = False

    async def for_movie(self, movie_id):
        self.started.set()
        try:
            await self.release.wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return await super().for_movie(movie_id)


def failing_store() -> FakeReviewStore:
    return FakeReviewStore(error=BackendError("connection refused"))
