from __future__ import annotations

import asyncio

from django.test import SimpleTestCase

from apps.reviews.panel import PanelStatus, ReviewsPanel
from apps.reviews.services import ReviewAggregator

from .fakes import BlockingReviewStore, FakeProfileStore, FakeReviewStore, failing_store, record


class ReviewsPanelTests(SimpleTestCase):
    def make_panel(self, store) -> ReviewsPanel:
        return ReviewsPanel(ReviewAggregator(reviews=store, profiles=FakeProfileStore()))

    async def test_refresh_applies_loaded_summary(self) -> None:
        panel = self.make_panel(FakeReviewStore([record(1, "u1", 4)]))
        panel.mount()

        state = await panel.refresh("movie-1")

        self.assertEqual(state.status, PanelStatus.READY)
        self.assertEqual(state.summary.rating_label, "4.0 out of 5 (1 review)")

    async def test_fetch_failure_sets_error_state(self) -> None:
        panel = self.make_panel(failing_store())
        panel.mount()

        with self.assertLogs("reviews.service", level="WARNING"):
            state = await panel.refresh("movie-1")

        self.assertTrue(state.is_error)
        self.assertEqual(state.error, "Failed to load reviews")

    async def test_unmounted_panel_does_not_load(self) -> None:
        store = FakeReviewStore([record(1, "u1", 4)])
        panel = self.make_panel(store)

        state = await panel.refresh("movie-1")

        self.assertEqual(state.status, PanelStatus.IDLE)
        self.assertEqual(store.calls, [])

    async def test_unmount_mid_flight_drops_the_result(self) -> None:
        store = BlockingReviewStore([record(1, "u1", 5)])
        panel = self.make_panel(store)
        panel.mount()

        pending = asyncio.ensure_future(panel.refresh("movie-1"))
        await store.started.wait()
        panel.unmount()
        store.release.set()
        state = await pending

        self.assertTrue(store.cancelled)
        self.assertFalse(panel.is_mounted)
        self.assertNotEqual(state.status, PanelStatus.READY)
        self.assertIsNone(panel.state.summary)

    async def test_unmount_without_load_is_safe(self) -> None:
        panel = self.make_panel(FakeReviewStore())
        panel.unmount()
        panel.mount()
        panel.unmount()
        self.assertFalse(panel.is_mounted)
