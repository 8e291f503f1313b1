"""Player session endpoints and the watch history page."""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth.mixins import LoginRequiredMixin
from django.views.generic import TemplateView
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.common.exceptions import BackendError

from .serializers import PlayerEventSerializer
from .services import WatchHistoryService, player_sessions
from .tracker import TrackerPhase

log_api = logging.getLogger("history.api")
log = logging.getLogger("history.service")


class PlayerEventView(APIView):
    """Receive one ``{origin, data}`` message forwarded from the movie page."""

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "player_events"

    def post(self, request: Request, token: str, *args: Any, **kwargs: Any) -> Response:
        serializer = PlayerEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if not request.user.is_authenticated:
            return Response({"recorded": False, "state": TrackerPhase.CLOSED.value})

        recorded, phase = player_sessions().handle(
            token,
            user_id=request.user.pk,
            origin=serializer.validated_data["origin"],
            data=serializer.validated_data["data"],
        )
        if recorded:
            log_api.info("player_event_recorded", extra={"user_id": request.user.pk, "state": phase.value})
        return Response({"recorded": recorded, "state": phase.value})


class PlayerSessionCloseView(APIView):
    """Called from ``pagehide``; later messages for the token are ignored."""

    def post(self, request: Request, token: str, *args: Any, **kwargs: Any) -> Response:
        if not request.user.is_authenticated:
            return Response({"closed": False})
        closed = player_sessions().close(token, user_id=request.user.pk)
        return Response({"closed": closed})


class WatchHistoryView(LoginRequiredMixin, TemplateView):
    template_name = "history/watch_history.html"
    empty_message = "No watch history yet"
    error_message = "Failed to load watch history"

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        entries, error = [], None
        try:
            entries = WatchHistoryService.from_backend().history(self.request.user)
        except BackendError as exc:
            log.error("watch_history_fetch_failed", extra={"user_id": self.request.user.pk, "error": str(exc)})
            error = self.error_message
        ctx.update({
            "entries": entries,
            "error": error,
            "empty_message": self.empty_message,
        })
        return ctx
