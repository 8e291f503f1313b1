from django.urls import path

from .views import PlayerEventView, PlayerSessionCloseView, WatchHistoryView

app_name = "history"

urlpatterns = [
    path("", WatchHistoryView.as_view(), name="list"),
    path("player/<str:token>/events/", PlayerEventView.as_view(), name="player-event"),
    path("player/<str:token>/close/", PlayerSessionCloseView.as_view(), name="player-close"),
]
