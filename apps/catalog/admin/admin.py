from django.contrib import admin

from apps.catalog.models import Genre, Movie


@admin.register(Genre)
class GenreAdmin(admin.ModelAdmin):
    list_display = ("name",)
    search_fields = ("name",)


@admin.register(Movie)
class MovieAdmin(admin.ModelAdmin):
    list_display = ("title", "youtube_id", "created_at")
    list_filter = ("genres",)
    search_fields = ("title", "description")
    filter_horizontal = ("genres",)
    readonly_fields = ("id", "created_at", "updated_at")
