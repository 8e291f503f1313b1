"""Review aggregation for the movie detail page."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from asgiref.sync import async_to_sync
from django.conf import settings

from apps.common.backend import Backend, get_backend
from apps.common.exceptions import BackendError

from .models import MAX_RATING
from .stores import ReviewRecord

log = logging.getLogger("reviews.service")

NO_REVIEWS_LABEL = "No reviews yet"
NO_COMMENT_LABEL = "No review provided"


class ReviewsLoadError(RuntimeError):
    """Raised when the reviews of a movie cannot be fetched."""


def fallback_display_name(user_id: str) -> str:
    prefix = getattr(settings, "REVIEW_FALLBACK_NAME_PREFIX", "User ")
    chars = getattr(settings, "REVIEW_FALLBACK_ID_CHARS", 6)
    return f"{prefix}{str(user_id)[:chars]}"


def average_rating(ratings: Iterable[int]) -> float:
    values = list(ratings)
    if not values:
        return 0.0
    return sum(values) / len(values)


@dataclass(slots=True, frozen=True)
class ReviewWithAuthor:
    id: int
    user_id: str
    movie_id: str
    rating: int
    comment: str
    created_at: datetime
    resolved_name: Optional[str] = None

    @classmethod
    def from_record(cls, record: ReviewRecord, resolved_name: Optional[str]) -> "ReviewWithAuthor":
        return cls(
            id=record.id,
            user_id=record.user_id,
            movie_id=record.movie_id,
            rating=record.rating,
            comment=record.comment,
            created_at=record.created_at,
            resolved_name=resolved_name,
        )

    @property
    def author_name(self) -> str:
        return self.resolved_name or fallback_display_name(self.user_id)

    @property
    def has_comment(self) -> bool:
        return bool(self.comment and self.comment.strip())

    @property
    def comment_display(self) -> str:
        return self.comment.strip() if self.has_comment else NO_COMMENT_LABEL

    @property
    def stars(self) -> list[bool]:
        return [i < self.rating for i in range(MAX_RATING)]


@dataclass(slots=True, frozen=True)
class ReviewsSummary:
    """Display-ready reviews of one movie plus the aggregate rating."""

    reviews: tuple[ReviewWithAuthor, ...]
    average_rating: float

    @property
    def count(self) -> int:
        return len(self.reviews)

    @property
    def is_empty(self) -> bool:
        return not self.reviews

    @property
    def rating_label(self) -> str:
        if self.is_empty:
            return NO_REVIEWS_LABEL
        noun = "review" if self.count == 1 else "reviews"
        return f"{self.average_rating:.1f} out of {MAX_RATING} ({self.count} {noun})"

    @property
    def stars(self) -> list[bool]:
        return [i < self.average_rating for i in range(MAX_RATING)]


class ReviewAggregator:
    """
    Loads the reviews of a movie and resolves author names.

    Profile resolution runs after the review fetch (it needs the author ids).
    A review fetch failure aborts the load; a profile lookup failure only
    degrades names to the fallback label.
    """

    def __init__(self, *, reviews, profiles):
        self.reviews = reviews
        self.profiles = profiles

    @classmethod
    def from_backend(cls, backend: Backend | None = None) -> "ReviewAggregator":
        backend = backend or get_backend()
        return cls(reviews=backend.reviews, profiles=backend.profiles)

    async def load(self, movie_id) -> ReviewsSummary:
        try:
            records = await self.reviews.for_movie(movie_id)
        except BackendError as exc:
            log.warning("reviews_fetch_failed movie=%s error=%s", movie_id, exc)
            raise ReviewsLoadError("Failed to load reviews") from exc

        author_ids = list(dict.fromkeys(record.user_id for record in records))
        names: dict[str, str] = {}
        if author_ids:
            try:
                names = await self.profiles.display_names(author_ids)
            except BackendError as exc:
                log.warning(
                    "reviews_profile_lookup_failed movie=%s authors=%s error=%s",
                    movie_id,
                    len(author_ids),
                    exc,
                )
                names = {}

        reviews = tuple(ReviewWithAuthor.from_record(r, names.get(r.user_id)) for r in records)
        summary = ReviewsSummary(
            reviews=reviews,
            average_rating=average_rating(r.rating for r in records),
        )
        log.debug(
            "reviews_loaded movie=%s count=%s resolved=%s avg=%.2f",
            movie_id,
            summary.count,
            len(names),
            summary.average_rating,
        )
        return summary

    def load_sync(self, movie_id) -> ReviewsSummary:
        return async_to_sync(self.load)(movie_id)
