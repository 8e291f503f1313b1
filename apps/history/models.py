from django.conf import settings
from django.db import models
from django.utils import timezone


class WatchProgress(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="watch_progress")
    movie = models.ForeignKey("catalog.Movie", on_delete=models.CASCADE, related_name="watch_progress")
    watched_at = models.DateTimeField(default=timezone.now)
    progress_seconds = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-watched_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "movie"], name="unique_watch_progress_user_movie"),
        ]
        indexes = [
            models.Index(fields=["user", "watched_at"], name="history_user_watched_idx"),
        ]

    def __str__(self):
        return f"WatchProgress(user={self.user_id}, movie={self.movie_id}, at={self.progress_seconds}s)"
