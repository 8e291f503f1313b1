"""Review persistence, wrapped so the service layer only sees BackendError."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from django.core.exceptions import ValidationError
from django.db import DatabaseError

from apps.common.exceptions import BackendError

from .models import Review


@dataclass(slots=True, frozen=True)
class ReviewRecord:
    id: int
    user_id: str
    movie_id: str
    rating: int
    comment: str
    created_at: datetime


class ReviewStore:
    FIELDS = ("id", "user_id", "movie_id", "rating", "comment", "created_at")

    async def for_movie(self, movie_id) -> list[ReviewRecord]:
        """All reviews of a movie, newest first."""

        qs = (
            Review.objects
            .filter(movie_id=movie_id)
            .order_by("-created_at", "-id")
            .values_list(*self.FIELDS)
        )
        try:
            return [
                ReviewRecord(
                    id=pk,
                    user_id=str(user_id),
                    movie_id=str(mid),
                    rating=int(rating),
                    comment=comment or "",
                    created_at=created_at,
                )
                async for pk, user_id, mid, rating, comment, created_at in qs
            ]
        except (DatabaseError, ValidationError) as exc:
            raise BackendError(f"review fetch failed for movie={movie_id}: {exc}") from exc

    def create(self, *, user, movie, rating: int, comment: str = "") -> Review:
        try:
            return Review.objects.create(user=user, movie=movie, rating=rating, comment=comment)
        except DatabaseError as exc:
            raise BackendError(f"review insert failed for movie={movie.pk}: {exc}") from exc
