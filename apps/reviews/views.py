import logging

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpResponseNotAllowed
from django.shortcuts import get_object_or_404, redirect
from django.views import View

from apps.catalog.models import Movie
from apps.common.backend import get_backend
from apps.common.exceptions import BackendError

from .forms import ReviewForm

log = logging.getLogger("reviews.views")


class ReviewCreateView(LoginRequiredMixin, View):
    """Store a review for a movie and return to its detail page."""

    def post(self, request, movie_id):
        movie = get_object_or_404(Movie, pk=movie_id)
        form = ReviewForm(request.POST)
        if not form.is_valid():
            for errors in form.errors.values():
                for error in errors:
                    messages.error(request, error)
            return redirect(self._back_to_movie(movie))

        try:
            review = get_backend().reviews.create(
                user=request.user,
                movie=movie,
                rating=form.cleaned_data["rating"],
                comment=form.cleaned_data["comment"],
            )
        except BackendError:
            log.exception("review_create_failed user=%s movie=%s", request.user.id, movie.pk)
            messages.error(request, "Your review could not be saved. Please try again.")
            return redirect(self._back_to_movie(movie))

        log.info("review_created user=%s movie=%s review=%s rating=%s", request.user.id, movie.pk, review.pk, review.rating)
        messages.success(request, "Thanks! Your review was added.")
        return redirect(self._back_to_movie(movie))

    def get(self, request, movie_id):
        return HttpResponseNotAllowed(["POST"])

    def _back_to_movie(self, movie):
        return f"{movie.get_absolute_url()}#reviews"
