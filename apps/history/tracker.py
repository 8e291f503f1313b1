"""
Watch-progress tracking for a mounted movie page.

``WatchProgressTracker`` is the per-page state machine (idle -> started,
closed on unmount) bound to a single movie. ``PlayerSessions`` keeps
one tracker per rendered detail page in the Django cache, keyed by an
opaque token handed to the page script. Every render opens a new idle
session, so navigating to another movie starts over.
"""

from __future__ import annotations

import enum
import logging
import math
import secrets
from typing import Any, Callable, Iterable, Optional

from django.conf import settings
from django.core.cache import cache as default_cache

from .player import PLAYING, InfoDeliveryMessage, StateChangeMessage, decode_player_message

log = logging.getLogger("history.tracker")

Record = Callable[[str, int], Any]
ClaimStart = Callable[[str], bool]


class TrackerPhase(str, enum.Enum):
    IDLE = "idle"
    STARTED = "started"
    CLOSED = "closed"


class WatchProgressTracker:
    def __init__(
        self,
        *,
        record: Record,
        movie_id: Optional[str] = None,
        user_id: Optional[str] = None,
        trusted_hosts: Optional[Iterable[str]] = None,
        report_interval: Optional[int] = None,
        phase: TrackerPhase = TrackerPhase.IDLE,
        last_reported: Optional[int] = None,
        claim_start: Optional[ClaimStart] = None,
    ):
        self.record = record
        self.movie_id = str(movie_id) if movie_id else None
        self.user_id = str(user_id) if user_id else None
        if trusted_hosts is None:
            trusted_hosts = settings.PLAYER_TRUSTED_HOSTS
        self.trusted_hosts = tuple(trusted_hosts)
        if report_interval is None:
            report_interval = settings.PLAYER_PROGRESS_REPORT_INTERVAL
        self.report_interval = max(int(report_interval), 1)
        self.phase = phase
        self.last_reported = last_reported
        self.claim_start = claim_start

    # ------------------------------------------------------------------ state

    def close(self) -> None:
        self.phase = TrackerPhase.CLOSED

    @property
    def is_closed(self) -> bool:
        return self.phase is TrackerPhase.CLOSED

    # --------------------------------------------------------------- messages

    def handle_message(self, origin: Any, data: Any) -> bool:
        """
        Feed one player message. Returns True when it led to a progress
        record. Anything unexpected is ignored; this never raises.
        """
        if self.is_closed or not self.user_id or not self.movie_id:
            return False

        message = decode_player_message(origin, data, trusted_hosts=self.trusted_hosts)
        if message is None:
            log.debug("player_message_ignored", extra={"movie_id": self.movie_id, "origin": str(origin)[:200]})
            return False

        if isinstance(message, StateChangeMessage):
            return self._on_state_change(message.info)
        if isinstance(message, InfoDeliveryMessage):
            return self._on_progress(message.info.current_time)
        return False

    def _on_state_change(self, state: int) -> bool:
        if state != PLAYING or self.phase is not TrackerPhase.IDLE:
            return False

        self.phase = TrackerPhase.STARTED
        self.last_reported = 0
        if self.claim_start is not None and not self.claim_start(self.movie_id):
            # another request of the same session already recorded the start
            return False

        log.info("playback_started", extra={"user_id": self.user_id, "movie_id": self.movie_id})
        self.record(self.movie_id, 0)
        return True

    def _on_progress(self, current_time: float) -> bool:
        if self.phase is not TrackerPhase.STARTED:
            return False

        position = int(math.floor(current_time))
        last = self.last_reported
        if last is not None:
            moved = position - last
            if 0 <= moved < self.report_interval or -self.report_interval <= moved < 0:
                return False

        self.last_reported = position
        self.record(self.movie_id, position)
        return True

    # -------------------------------------------------------------- snapshots

    def snapshot(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "movie_id": self.movie_id,
            "phase": self.phase.value,
            "last_reported": self.last_reported,
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any], **kwargs) -> "WatchProgressTracker":
        return cls(
            movie_id=snapshot.get("movie_id"),
            user_id=snapshot.get("user_id"),
            phase=TrackerPhase(snapshot.get("phase", TrackerPhase.IDLE.value)),
            last_reported=snapshot.get("last_reported"),
            **kwargs,
        )


class PlayerSessions:
    """Cache-backed registry of open player sessions (one per rendered page)."""

    key_prefix = "history:player"

    def __init__(
        self,
        *,
        schedule: Callable[[str, str, int], Any],
        cache=None,
        ttl: Optional[int] = None,
        trusted_hosts: Optional[Iterable[str]] = None,
        report_interval: Optional[int] = None,
    ):
        self.schedule = schedule
        self.cache = cache if cache is not None else default_cache
        self.ttl = ttl if ttl is not None else settings.PLAYER_SESSION_TTL_SECONDS
        self.trusted_hosts = trusted_hosts
        self.report_interval = report_interval

    def _key(self, token: str) -> str:
        return f"{self.key_prefix}:{token}"

    def _started_key(self, token: str, movie_id: str) -> str:
        return f"{self._key(token)}:started:{movie_id}"

    def _closed_key(self, token: str) -> str:
        return f"{self._key(token)}:closed"

    def open(self, user_id, movie_id) -> str:
        token = secrets.token_urlsafe(16)
        snapshot = {
            "user_id": str(user_id),
            "movie_id": str(movie_id),
            "phase": TrackerPhase.IDLE.value,
            "last_reported": None,
        }
        self.cache.set(self._key(token), snapshot, self.ttl)
        log.debug("player_session_opened", extra={"user_id": str(user_id), "movie_id": str(movie_id)})
        return token

    def _load(self, token: str, user_id) -> Optional[dict[str, Any]]:
        if not token:
            return None
        snapshot = self.cache.get(self._key(token))
        if not isinstance(snapshot, dict):
            return None
        if snapshot.get("user_id") != str(user_id):
            log.info("player_session_user_mismatch", extra={"user_id": str(user_id)})
            return None
        return snapshot

    def handle(self, token: str, *, user_id, origin: Any, data: Any) -> tuple[bool, TrackerPhase]:
        """Route one player message to the session's tracker. Unknown sessions are closed."""
        snapshot = self._load(token, user_id)
        if snapshot is None:
            return False, TrackerPhase.CLOSED

        bound_user = snapshot["user_id"]
        tracker = WatchProgressTracker.from_snapshot(
            snapshot,
            record=lambda movie_id, seconds: self.schedule(bound_user, movie_id, seconds),
            trusted_hosts=self.trusted_hosts,
            report_interval=self.report_interval,
            claim_start=lambda movie_id: self.cache.add(self._started_key(token, movie_id), 1, self.ttl),
        )
        recorded = tracker.handle_message(origin, data)

        updated = tracker.snapshot()
        if updated != snapshot:
            self.cache.set(self._key(token), updated, self.ttl)
            if self.cache.get(self._closed_key(token)):
                # closed while this message was in flight
                self.cache.delete(self._key(token))
                return recorded, TrackerPhase.CLOSED
        return recorded, tracker.phase

    def close(self, token: str, *, user_id) -> bool:
        snapshot = self._load(token, user_id)
        if snapshot is None:
            return False
        # marker before delete; handle() checks it after writing
        self.cache.set(self._closed_key(token), 1, self.ttl)
        self.cache.delete_many([
            self._key(token),
            self._started_key(token, snapshot.get("movie_id") or ""),
        ])
        log.debug("player_session_closed", extra={"user_id": str(user_id), "movie_id": snapshot.get("movie_id")})
        return True
