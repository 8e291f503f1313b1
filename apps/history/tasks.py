"""Celery tasks for the history app."""

from __future__ import annotations

import logging

from celery import shared_task

log = logging.getLogger("history.tasks")


@shared_task(queue="history", ignore_result=True)
def record_watch_progress(user_id: str, movie_id: str, progress_seconds: int, watched_at: str | None = None) -> bool:
    """Persist one progress marker scheduled from a player session."""

    from .services import WatchHistoryService, parse_watched_at

    written = WatchHistoryService.from_backend().add_to_history(
        user_id,
        movie_id,
        progress_seconds,
        watched_at=parse_watched_at(watched_at),
    )
    log.debug(
        "record_watch_progress",
        extra={"user_id": user_id, "movie_id": movie_id, "progress_seconds": progress_seconds, "written": written},
    )
    return written
