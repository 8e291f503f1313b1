"""Serializers for the player session endpoints."""

from __future__ import annotations

from rest_framework import serializers


class PlayerEventSerializer(serializers.Serializer):
    """Envelope forwarded by the page script for each ``message`` event."""

    origin = serializers.CharField(allow_blank=True, max_length=255)
    data = serializers.JSONField(allow_null=True)
