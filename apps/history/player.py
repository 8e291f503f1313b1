"""Decoding of messages posted by the embedded YouTube player."""

from __future__ import annotations

import json
from typing import Annotated, Any, Iterable, Literal, Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

PLAYING = 1


class _PlayerModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def _require_number(value: Any) -> Any:
    # JSON numbers only; "1" or true must not pass for a player code
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("expected a JSON number")
    return value


class StateChangeMessage(_PlayerModel):
    event: Literal["onStateChange"]
    info: int

    @field_validator("info", mode="before")
    @classmethod
    def _info_is_number(cls, value: Any) -> Any:
        return _require_number(value)


class PlaybackInfo(_PlayerModel):
    current_time: float = Field(alias="currentTime", ge=0, allow_inf_nan=False)

    @field_validator("current_time", mode="before")
    @classmethod
    def _time_is_number(cls, value: Any) -> Any:
        return _require_number(value)


class InfoDeliveryMessage(_PlayerModel):
    event: Literal["infoDelivery"]
    info: PlaybackInfo


PlayerMessage = Annotated[
    Union[StateChangeMessage, InfoDeliveryMessage],
    Field(discriminator="event"),
]

_message_adapter = TypeAdapter(PlayerMessage)


def is_trusted_origin(origin: Any, trusted_hosts: Iterable[str]) -> bool:
    """True for an https origin whose host is, or is a sub-domain of, a trusted host."""
    if not isinstance(origin, str) or not origin:
        return False
    try:
        parsed = urlsplit(origin.strip())
        host = (parsed.hostname or "").lower()
    except ValueError:
        return False
    if parsed.scheme != "https" or not host:
        return False
    for trusted in trusted_hosts:
        trusted = trusted.strip().lower()
        if trusted and (host == trusted or host.endswith("." + trusted)):
            return True
    return False


def decode_player_message(
    origin: Any,
    data: Any,
    *,
    trusted_hosts: Iterable[str],
) -> Optional[Union[StateChangeMessage, InfoDeliveryMessage]]:
    """
    Return the typed message, or None when the origin is untrusted or the
    payload is not one of the known shapes. Never raises.
    """
    if not is_trusted_origin(origin, trusted_hosts):
        return None

    payload = data
    if isinstance(data, (str, bytes, bytearray)):
        try:
            payload = json.loads(data)
        except (ValueError, TypeError, RecursionError):
            return None
    if not isinstance(payload, dict):
        return None

    try:
        return _message_adapter.validate_python(payload)
    except ValidationError:
        return None
