"""
URL configuration for the minimovies project.
"""
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("accounts/", include("apps.accounts.urls", namespace="accounts")),
    path("movies/", include(("apps.catalog.urls", "catalog"), namespace="catalog")),
    path("reviews/", include(("apps.reviews.urls", "reviews"), namespace="reviews")),
    path("history/", include(("apps.history.urls", "history"), namespace="history")),
    path("", RedirectView.as_view(pattern_name="catalog:list", permanent=False), name="home"),
]
