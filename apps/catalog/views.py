# apps/catalog/views.py
import logging

from asgiref.sync import async_to_sync
from django.conf import settings
from django.urls import reverse
from django.views.generic import DetailView, ListView

from apps.catalog.models import Genre, Movie
from apps.catalog.youtube import embed_url
from apps.history.services import player_sessions
from apps.reviews.forms import ReviewForm
from apps.reviews.panel import ReviewsPanel
from apps.reviews.services import ReviewAggregator

log = logging.getLogger("catalog.views")


class MovieListView(ListView):
    model = Movie
    paginate_by = 24
    template_name = "catalog/movie_list.html"
    context_object_name = "movies"

    def get_queryset(self):
        genre = (self.request.GET.get("genre") or "").strip()
        query = (self.request.GET.get("q") or "").strip()
        return (
            Movie.objects
            .in_genre(genre)
            .search(query)
            .with_genres()
            .only("id", "title", "thumbnail_url", "created_at")
        )

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        ctx.update({
            "genres": Genre.objects.order_by("name"),
            "selected_genre": (self.request.GET.get("genre") or "").strip(),
            "query": (self.request.GET.get("q") or "").strip(),
        })
        return ctx


class MovieDetailView(DetailView):
    model = Movie
    template_name = "catalog/movie_detail.html"
    context_object_name = "movie"

    def get_queryset(self):
        return Movie.objects.with_genres()

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        movie = self.object
        request = self.request

        # Reviews are loaded for this render only; the panel lives as long as the request.
        panel = ReviewsPanel(ReviewAggregator.from_backend())
        panel.mount()
        try:
            state = async_to_sync(panel.refresh)(movie.pk)
        finally:
            panel.unmount()
        if state.is_error:
            log.warning("movie_detail_reviews_unavailable movie=%s", movie.pk)

        video_id = movie.youtube_id
        origin = f"{request.scheme}://{request.get_host()}"
        ctx.update({
            "panel": state,
            "review_form": ReviewForm(),
            "embed_url": embed_url(video_id, origin=origin) if video_id else None,
        })

        if request.user.is_authenticated and video_id:
            token = player_sessions().open(request.user.pk, movie.pk)
            ctx.update({
                "player_event_url": reverse("history:player-event", kwargs={"token": token}),
                "player_close_url": reverse("history:player-close", kwargs={"token": token}),
                "progress_report_interval": settings.PLAYER_PROGRESS_REPORT_INTERVAL,
            })
        return ctx
