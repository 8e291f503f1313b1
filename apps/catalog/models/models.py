from __future__ import annotations
import uuid

from django.db import models
from django.urls import reverse

from apps.catalog import youtube


MOVIE_GENRES = (
    "Action",
    "Adventure",
    "Animation",
    "Comedy",
    "Crime",
    "Documentary",
    "Drama",
    "Family",
    "Fantasy",
    "Horror",
    "Mystery",
    "Romance",
    "Sci-Fi",
    "Thriller",
    "Western",
)


class Genre(models.Model):
    name = models.CharField(max_length=64, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class MovieQuerySet(models.QuerySet):
    def with_genres(self):
        return self.prefetch_related("genres")

    def in_genre(self, name: str | None):
        if not name:
            return self
        return self.filter(genres__name=name).distinct()

    def search(self, query: str | None):
        query = (query or "").strip()
        if not query:
            return self
        return self.filter(title__icontains=query)


class Movie(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    video_url = models.URLField(max_length=500)
    thumbnail_url = models.URLField(max_length=500, blank=True, default="")
    genres = models.ManyToManyField(Genre, related_name="movies", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MovieQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["title"], name="catalog_movie_title_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    def get_absolute_url(self) -> str:
        return reverse("catalog:detail", kwargs={"pk": self.pk})

    @property
    def youtube_id(self) -> str | None:
        return youtube.extract_video_id(self.video_url)
