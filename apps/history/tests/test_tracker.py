from __future__ import annotations

import json
from unittest.mock import MagicMock

from django.test import SimpleTestCase

from apps.history.tracker import TrackerPhase, WatchProgressTracker

ORIGIN = "https://www.youtube.com"
PLAYING = json.dumps({"event": "onStateChange", "info": 1})
PAUSED = json.dumps({"event": "onStateChange", "info": 2})


def progress(seconds: float) -> dict:
    return {"event": "infoDelivery", "info": {"currentTime": seconds}}


class WatchProgressTrackerTests(SimpleTestCase):
    def setUp(self) -> None:
        self.record = MagicMock()
        self.tracker = WatchProgressTracker(
            record=self.record,
            movie_id="movie-1",
            user_id="7",
            trusted_hosts=["youtube.com"],
            report_interval=15,
        )

    def test_repeated_playing_records_once(self) -> None:
        self.assertTrue(self.tracker.handle_message(ORIGIN, PLAYING))
        self.assertFalse(self.tracker.handle_message(ORIGIN, PLAYING))
        self.assertFalse(self.tracker.handle_message(ORIGIN, PLAYING))

        self.record.assert_called_once_with("movie-1", 0)
        self.assertEqual(self.tracker.phase, TrackerPhase.STARTED)

    def test_other_states_do_not_start(self) -> None:
        self.assertFalse(self.tracker.handle_message(ORIGIN, PAUSED))
        self.assertEqual(self.tracker.phase, TrackerPhase.IDLE)
        self.record.assert_not_called()

    def test_wrong_origin_and_malformed_input_are_ignored(self) -> None:
        self.assertFalse(self.tracker.handle_message("https://evil.example", PLAYING))
        self.assertFalse(self.tracker.handle_message(ORIGIN, "garbage"))
        self.assertFalse(self.tracker.handle_message(ORIGIN, {"event": "onStateChange", "info": "1"}))

        self.assertEqual(self.tracker.phase, TrackerPhase.IDLE)
        self.record.assert_not_called()

    def test_anonymous_user_is_a_no_op(self) -> None:
        tracker = WatchProgressTracker(record=self.record, movie_id="movie-1", user_id=None, trusted_hosts=["youtube.com"])
        self.assertFalse(tracker.handle_message(ORIGIN, PLAYING))
        self.assertEqual(tracker.phase, TrackerPhase.IDLE)
        self.record.assert_not_called()

    def test_progress_is_ignored_before_start(self) -> None:
        self.assertFalse(self.tracker.handle_message(ORIGIN, progress(40)))
        self.record.assert_not_called()

    def test_progress_reports_respect_interval(self) -> None:
        self.tracker.handle_message(ORIGIN, PLAYING)
        self.record.reset_mock()

        self.assertFalse(self.tracker.handle_message(ORIGIN, progress(5.2)))
        self.assertTrue(self.tracker.handle_message(ORIGIN, progress(16.9)))
        self.assertFalse(self.tracker.handle_message(ORIGIN, progress(20)))
        self.assertTrue(self.tracker.handle_message(ORIGIN, progress(31)))
        # small step back: ignored; seek far back: reported
        self.assertFalse(self.tracker.handle_message(ORIGIN, progress(25)))
        self.assertTrue(self.tracker.handle_message(ORIGIN, progress(2)))

        self.assertEqual(
            [call.args for call in self.record.call_args_list],
            [("movie-1", 16), ("movie-1", 31), ("movie-1", 2)],
        )

    def test_closed_tracker_ignores_everything(self) -> None:
        self.tracker.close()
        self.assertFalse(self.tracker.handle_message(ORIGIN, PLAYING))
        self.assertFalse(self.tracker.handle_message(ORIGIN, progress(40)))
        self.assertEqual(self.tracker.phase, TrackerPhase.CLOSED)
        self.record.assert_not_called()

    def test_lost_start_claim_does_not_record(self) -> None:
        tracker = WatchProgressTracker(
            record=self.record,
            movie_id="movie-1",
            user_id="7",
            trusted_hosts=["youtube.com"],
            claim_start=lambda movie_id: False,
        )
        self.assertFalse(tracker.handle_message(ORIGIN, PLAYING))
        self.assertEqual(tracker.phase, TrackerPhase.STARTED)
        self.record.assert_not_called()

    def test_snapshot_round_trip_keeps_state(self) -> None:
        self.tracker.handle_message(ORIGIN, PLAYING)
        restored = WatchProgressTracker.from_snapshot(
            self.tracker.snapshot(), record=self.record, trusted_hosts=["youtube.com"]
        )
        self.assertEqual(restored.phase, TrackerPhase.STARTED)
        self.assertFalse(restored.handle_message(ORIGIN, PLAYING))
        self.record.assert_called_once_with("movie-1", 0)
