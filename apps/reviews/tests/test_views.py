from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from asgiref.sync import async_to_sync
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.catalog.models import Movie
from apps.common.exceptions import BackendError
from apps.reviews.models import Review
from apps.reviews.services import ReviewAggregator
from apps.reviews.stores import ReviewStore


class ReviewCreateViewTests(TestCase):
    def setUp(self) -> None:
        self.user = get_user_model().objects.create_user(username="critic", password="pw")
        self.movie = Movie.objects.create(title="Tears of Steel", video_url="https://youtu.be/R6MlUcmOul8")
        self.url = reverse("reviews:create", kwargs={"movie_id": self.movie.pk})

    def test_anonymous_is_redirected_to_login(self) -> None:
        response = self.client.post(self.url, {"rating": 4})
        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse("accounts:login"), response["Location"])
        self.assertFalse(Review.objects.exists())

    def test_creates_review_and_returns_to_movie(self) -> None:
        self.client.force_login(self.user)
        response = self.client.post(self.url, {"rating": "4", "comment": "  Loved the robots.  "})

        self.assertRedirects(response, f"{self.movie.get_absolute_url()}#reviews", fetch_redirect_response=False)
        review = Review.objects.get()
        self.assertEqual((review.user, review.movie, review.rating), (self.user, self.movie, 4))
        self.assertEqual(review.comment, "Loved the robots.")

    def test_comment_is_optional(self) -> None:
        self.client.force_login(self.user)
        self.client.post(self.url, {"rating": "2"})
        self.assertEqual(Review.objects.get().comment, "")

    def test_rating_is_required_and_bounded(self) -> None:
        self.client.force_login(self.user)
        for payload in ({}, {"rating": "0"}, {"rating": "6"}, {"rating": "abc"}):
            with self.subTest(payload=payload):
                self.client.post(self.url, payload)
        self.assertFalse(Review.objects.exists())

    def test_store_failure_reports_message(self) -> None:
        self.client.force_login(self.user)
        with patch.object(ReviewStore, "create", side_effect=BackendError("down")):
            response = self.client.post(self.url, {"rating": "5"}, follow=True)
        self.assertContains(response, "Your review could not be saved")

    def test_get_is_not_allowed(self) -> None:
        self.client.force_login(self.user)
        self.assertEqual(self.client.get(self.url).status_code, 405)


class ReviewStoreTests(TestCase):
    def setUp(self) -> None:
        User = get_user_model()
        self.ada = User.objects.create_user(username="ada", password="pw", first_name="Ada", last_name="Lovelace")
        self.anon = User.objects.create_user(username="anon", password="pw")
        self.movie = Movie.objects.create(title="Tears of Steel", video_url="https://youtu.be/R6MlUcmOul8")
        now = timezone.now()
        self.old = Review.objects.create(user=self.ada, movie=self.movie, rating=5, created_at=now - timedelta(days=2))
        self.new = Review.objects.create(user=self.anon, movie=self.movie, rating=3, comment="ok", created_at=now)

    def test_for_movie_is_newest_first(self) -> None:
        records = async_to_sync(ReviewStore().for_movie)(self.movie.pk)
        self.assertEqual([r.id for r in records], [self.new.pk, self.old.pk])
        self.assertEqual(records[0].user_id, str(self.anon.pk))

    def test_aggregator_against_the_database(self) -> None:
        summary = ReviewAggregator.from_backend().load_sync(self.movie.pk)

        self.assertEqual(summary.average_rating, 4.0)
        names = [r.author_name for r in summary.reviews]
        self.assertEqual(names, [f"User {str(self.anon.pk)[:6]}", "Ada Lovelace"])
