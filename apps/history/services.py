"""Watch history: progress upserts and the per-user history listing."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.common.backend import Backend, get_backend
from apps.common.exceptions import BackendError

from .stores import WatchHistoryEntry, WatchProgressStore
from .tracker import PlayerSessions

log = logging.getLogger("history.service")


def _user_id(user: Any) -> Optional[str]:
    """Accept a user instance or a raw id; anonymous users resolve to None."""
    if user is None:
        return None
    if hasattr(user, "is_authenticated"):
        if not user.is_authenticated:
            return None
        return str(user.pk)
    value = str(user).strip()
    return value or None


def _valid_progress(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class WatchHistoryService:
    def __init__(self, store: WatchProgressStore, *, clock: Callable[[], datetime] = timezone.now):
        self.store = store
        self.clock = clock

    @classmethod
    def from_backend(cls, backend: Backend | None = None) -> "WatchHistoryService":
        backend = backend or get_backend()
        return cls(backend.progress)

    def add_to_history(self, user, movie_id, progress_seconds: int, *, watched_at: Optional[datetime] = None) -> bool:
        """
        Upsert the (user, movie) progress marker.

        Returns True when the row was written. Anonymous callers and invalid
        input are no-ops; persistence failures are logged and swallowed.
        """
        user_id = _user_id(user)
        if user_id is None:
            return False

        movie_key = str(movie_id).strip() if movie_id is not None else ""
        if not movie_key or not _valid_progress(progress_seconds):
            log.warning(
                "watch_progress_invalid",
                extra={"user_id": user_id, "movie_id": movie_key, "progress_seconds": progress_seconds},
            )
            return False

        try:
            self.store.upsert(
                user_id=user_id,
                movie_id=movie_key,
                progress_seconds=progress_seconds,
                watched_at=watched_at or self.clock(),
            )
        except BackendError as exc:
            log.error(
                "watch_progress_upsert_failed",
                extra={"user_id": user_id, "movie_id": movie_key, "error": str(exc)},
            )
            return False
        return True

    def schedule(self, user, movie_id, progress_seconds: int) -> None:
        """Fire-and-forget variant of ``add_to_history`` (Celery when enabled)."""
        user_id = _user_id(user)
        if user_id is None:
            return
        watched_at = self.clock()

        if not getattr(settings, "WATCH_PROGRESS_ASYNC", False):
            self.add_to_history(user_id, movie_id, progress_seconds, watched_at=watched_at)
            return

        from .tasks import record_watch_progress

        try:
            record_watch_progress.delay(user_id, str(movie_id), progress_seconds, watched_at.isoformat())
        except Exception:  # broker down or misconfigured
            log.exception("watch_progress_enqueue_failed", extra={"user_id": user_id, "movie_id": str(movie_id)})

    def history(self, user) -> list[WatchHistoryEntry]:
        """Raises BackendError; the page renders it as an error state."""
        user_id = _user_id(user)
        if user_id is None:
            return []
        return self.store.for_user(user_id)


def parse_watched_at(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    parsed = parse_datetime(raw)
    if parsed is not None and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def player_sessions(service: WatchHistoryService | None = None) -> PlayerSessions:
    service = service or WatchHistoryService.from_backend()
    return PlayerSessions(schedule=service.schedule)
