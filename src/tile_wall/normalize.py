"""Source reference normalization for tile players."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlsplit

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_VIDEO_ID_RUN_RE = re.compile(r"[A-Za-z0-9_-]{11}")
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\u2060\ufeff]")

SHORT_LINK_HOST = "youtu.be"
MAIN_HOST = "youtube.com"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def is_video_id(value: object) -> bool:
    """Return True when value is a bare 11-character video identifier."""
    return isinstance(value, str) and VIDEO_ID_RE.fullmatch(value) is not None


def watch_url(video_id: str) -> str:
    """Return the canonical watch URL for a video identifier."""
    if not is_video_id(video_id):
        raise ValueError(f"Invalid video id: {video_id!r}")
    return WATCH_URL.format(video_id=video_id)


def clean_reference(raw: str) -> str:
    """Strip zero-width and BOM characters plus surrounding whitespace."""
    return _INVISIBLE_RE.sub("", raw).strip()


def extract_video_id(raw: Optional[str]) -> Optional[str]:
    """Resolve a pasted URL, short link, embed link or bare ID to a video ID.

    Returns None instead of raising: malformed input is expected and the
    caller reports it per tile.
    """
    if not raw:
        return None
    cleaned = clean_reference(str(raw))
    if not cleaned:
        return None
    if is_video_id(cleaned):
        return cleaned

    candidate = _video_id_from_url(cleaned)
    if candidate:
        return candidate

    match = _VIDEO_ID_RUN_RE.search(cleaned)
    return match.group(0) if match else None


def _video_id_from_url(text: str) -> Optional[str]:
    try:
        parts = urlsplit(text)
        host = (parts.hostname or "").lower()
    except ValueError:
        return None
    if not parts.scheme or not host:
        return None
    segments = [segment for segment in parts.path.split("/") if segment]

    if SHORT_LINK_HOST in host:
        if segments and is_video_id(segments[0]):
            return segments[0]

    if MAIN_HOST in host:
        for value in parse_qs(parts.query).get("v", [])[:1]:
            if is_video_id(value):
                return value
        for marker in ("embed", "shorts"):
            candidate = _segment_after(segments, marker)
            if candidate:
                return candidate
    return None


def _segment_after(segments: list[str], marker: str) -> Optional[str]:
    if marker not in segments:
        return None
    position = segments.index(marker) + 1
    if position < len(segments) and is_video_id(segments[position]):
        return segments[position]
    return None
