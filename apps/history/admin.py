from django.contrib import admin

from .models import WatchProgress


@admin.register(WatchProgress)
class WatchProgressAdmin(admin.ModelAdmin):
    list_display = ("user", "movie", "progress_seconds", "watched_at")
    search_fields = ("user__username", "movie__title")
    raw_id_fields = ("user", "movie")
    date_hierarchy = "watched_at"
