from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from unittest.mock import MagicMock, patch

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.db import DatabaseError
from django.test import TestCase, override_settings

from apps.catalog.models import Genre, Movie
from apps.common.exceptions import BackendError
from apps.history.models import WatchProgress
from apps.history.services import WatchHistoryService
from apps.history.stores import WatchProgressStore


class FixedClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def tick(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class WatchHistoryServiceTests(TestCase):
    def setUp(self) -> None:
        self.user = get_user_model().objects.create_user(username="viewer", password="pw")
        self.movie = Movie.objects.create(title="Big Buck Bunny", video_url="https://youtu.be/aqz-KE-bpKQ")
        self.clock = FixedClock(datetime(2024, 5, 1, 12, 0, tzinfo=dt_timezone.utc))
        self.service = WatchHistoryService(WatchProgressStore(), clock=self.clock)

    def test_repeated_add_keeps_one_row_with_latest_values(self) -> None:
        self.assertTrue(self.service.add_to_history(self.user, self.movie.pk, 0))
        self.clock.tick(90)
        self.assertTrue(self.service.add_to_history(self.user, str(self.movie.pk), 42))

        rows = WatchProgress.objects.filter(user=self.user, movie=self.movie)
        self.assertEqual(rows.count(), 1)
        row = rows.get()
        self.assertEqual(row.progress_seconds, 42)
        self.assertEqual(row.watched_at, self.clock.now)

    def test_anonymous_user_is_a_no_op(self) -> None:
        self.assertFalse(self.service.add_to_history(AnonymousUser(), self.movie.pk, 10))
        self.assertFalse(self.service.add_to_history(None, self.movie.pk, 10))
        self.assertFalse(WatchProgress.objects.exists())

    def test_invalid_input_is_logged_and_ignored(self) -> None:
        with self.assertLogs("history.service", level="WARNING"):
            self.assertFalse(self.service.add_to_history(self.user, "", 10))
        with self.assertLogs("history.service", level="WARNING"):
            self.assertFalse(self.service.add_to_history(self.user, self.movie.pk, -1))
        with self.assertLogs("history.service", level="WARNING"):
            self.assertFalse(self.service.add_to_history(self.user, self.movie.pk, True))
        self.assertFalse(WatchProgress.objects.exists())

    def test_persistence_failure_is_swallowed(self) -> None:
        store = MagicMock()
        store.upsert.side_effect = BackendError("connection reset")
        service = WatchHistoryService(store, clock=self.clock)

        with self.assertLogs("history.service", level="ERROR") as logs:
            self.assertFalse(service.add_to_history(self.user, self.movie.pk, 5))
        self.assertIn("watch_progress_upsert_failed", logs.output[0])

    def test_store_wraps_database_errors(self) -> None:
        store = WatchProgressStore()
        with patch.object(WatchProgress.objects, "bulk_create", side_effect=DatabaseError("down")):
            with self.assertRaises(BackendError):
                store.upsert(user_id=self.user.pk, movie_id=self.movie.pk, progress_seconds=1, watched_at=self.clock.now)

    def test_schedule_runs_task(self) -> None:
        # test settings run Celery eagerly
        self.service.schedule(self.user, self.movie.pk, 30)

        row = WatchProgress.objects.get(user=self.user, movie=self.movie)
        self.assertEqual(row.progress_seconds, 30)
        self.assertEqual(row.watched_at, self.clock.now)

    @override_settings(WATCH_PROGRESS_ASYNC=False)
    def test_schedule_inline_when_async_disabled(self) -> None:
        with patch("apps.history.tasks.record_watch_progress.delay") as delay:
            self.service.schedule(self.user, self.movie.pk, 12)
        delay.assert_not_called()
        self.assertEqual(WatchProgress.objects.get(user=self.user).progress_seconds, 12)

    def test_schedule_enqueue_failure_is_swallowed(self) -> None:
        with patch("apps.history.tasks.record_watch_progress.delay", side_effect=OSError("broker down")):
            with self.assertLogs("history.service", level="ERROR"):
                self.service.schedule(self.user, self.movie.pk, 12)
        self.assertFalse(WatchProgress.objects.exists())

    def test_schedule_ignores_anonymous(self) -> None:
        with patch("apps.history.tasks.record_watch_progress.delay") as delay:
            self.service.schedule(AnonymousUser(), self.movie.pk, 12)
        delay.assert_not_called()

    def test_history_lists_newest_first(self) -> None:
        drama = Genre.objects.get(name="Drama")
        comedy = Genre.objects.get(name="Comedy")
        other = Movie.objects.create(title="Sintel", video_url="https://youtu.be/eRsGyueVLvQ")
        other.genres.set([drama, comedy])

        self.service.add_to_history(self.user, self.movie.pk, 10)
        self.clock.tick(60)
        self.service.add_to_history(self.user, other.pk, 20)

        entries = self.service.history(self.user)
        self.assertEqual([e.title for e in entries], ["Sintel", "Big Buck Bunny"])
        self.assertEqual(entries[0].genres, ("Comedy", "Drama"))
        self.assertEqual(entries[0].progress_seconds, 20)
        self.assertEqual(self.service.history(AnonymousUser()), [])
