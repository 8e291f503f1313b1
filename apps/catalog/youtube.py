"""Helpers around the embedded YouTube player."""
from __future__ import annotations

import re
from urllib.parse import urlencode

_VIDEO_ID_RE = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")
VIDEO_ID_LENGTH = 11
EMBED_BASE_URL = "https://www.youtube.com/embed/"


def extract_video_id(url: str | None) -> str | None:
    """Return the 11-character video id of a YouTube link, or None."""
    if not url:
        return None
    match = _VIDEO_ID_RE.match(url.strip())
    if not match:
        return None
    video_id = match.group(2)
    if len(video_id) != VIDEO_ID_LENGTH:
        return None
    return video_id


def embed_url(video_id: str, *, origin: str) -> str:
    params = {
        "enablejsapi": 1,
        "origin": origin,
        "modestbranding": 1,
        "rel": 0,
        "autoplay": 0,
    }
    return f"{EMBED_BASE_URL}{video_id}?{urlencode(params)}"
