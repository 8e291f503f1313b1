"""Watch progress persistence, wrapped so the service layer only sees BackendError."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db.models import Prefetch

from apps.catalog.models import Genre
from apps.common.exceptions import BackendError

from .models import WatchProgress


@dataclass(slots=True, frozen=True)
class WatchHistoryEntry:
    movie_id: str
    title: str
    thumbnail_url: str
    watched_at: datetime
    progress_seconds: int
    genres: tuple[str, ...] = field(default_factory=tuple)


class WatchProgressStore:
    UPSERT_FIELDS = ["watched_at", "progress_seconds"]

    def upsert(self, *, user_id, movie_id, progress_seconds: int, watched_at: datetime) -> None:
        """Insert the (user, movie) marker or replace its values in place."""

        row = WatchProgress(
            user_id=user_id,
            movie_id=movie_id,
            progress_seconds=progress_seconds,
            watched_at=watched_at,
        )
        try:
            WatchProgress.objects.bulk_create(
                [row],
                update_conflicts=True,
                unique_fields=["user", "movie"],
                update_fields=self.UPSERT_FIELDS,
            )
        except (DatabaseError, ValidationError) as exc:
            raise BackendError(f"progress upsert failed for user={user_id} movie={movie_id}: {exc}") from exc

    def for_user(self, user_id) -> list[WatchHistoryEntry]:
        """Watch history of one user, most recently watched first."""

        qs = (
            WatchProgress.objects
            .filter(user_id=user_id)
            .select_related("movie")
            .prefetch_related(Prefetch("movie__genres", queryset=Genre.objects.order_by("name")))
            .order_by("-watched_at", "-id")
        )
        try:
            return [
                WatchHistoryEntry(
                    movie_id=str(row.movie_id),
                    title=row.movie.title,
                    thumbnail_url=row.movie.thumbnail_url,
                    watched_at=row.watched_at,
                    progress_seconds=row.progress_seconds,
                    genres=tuple(g.name for g in row.movie.genres.all()),
                )
                for row in qs
            ]
        except DatabaseError as exc:
            raise BackendError(f"history fetch failed for user={user_id}: {exc}") from exc
