from django.urls import path
from .views import MovieListView, MovieDetailView

app_name = "catalog"

urlpatterns = [
    path("", MovieListView.as_view(), name="list"),
    path("<uuid:pk>/", MovieDetailView.as_view(), name="detail"),
]
