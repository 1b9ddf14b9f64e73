from __future__ import annotations

import io
import logging
import re
import unicodedata
from typing import Iterable, Optional

from mutagen import MutagenError
from mutagen.mp3 import MP3

from .id3 import ID3Metadata
from .models import Episode

logger = logging.getLogger(__name__)

SPOTIFY_DESCRIPTION_LIMIT = 4000
MAX_SLUG_LENGTH = 50
TOPICS_HEADING = "\n📰 En este episodio hablamos de:"
CALL_TO_ACTION = "\n🎧 Síguenos para más contenido de IA"

_SLUG_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")


def build_podcast_metadata(episode: Episode, podcast_name: str, *, genre: str = "Podcast") -> ID3Metadata:
    return ID3Metadata(
        title=episode.title,
        artist=podcast_name,
        album=podcast_name,
        year=str(episode.created_at.year),
        track_number=str(episode.episode_number),
        genre=genre,
        comment=episode.description or None,
        duration_ms=episode.audio_duration * 1000 if episode.audio_duration else None,
    )


def generate_spotify_description(
    episode: Episode,
    trend_titles: Optional[Iterable[str]] = None,
) -> str:
    parts: list[str] = []
    if episode.description:
        parts.append(episode.description)
    topics = list(trend_titles if trend_titles is not None else episode.trend_titles)
    if topics:
        parts.append(TOPICS_HEADING)
        parts.extend(f"{idx}. {title}" for idx, title in enumerate(topics, start=1))
    parts.append(CALL_TO_ACTION)
    return "\n".join(parts)[:SPOTIFY_DESCRIPTION_LIMIT]


def slugify(title: str) -> str:
    decomposed = unicodedata.normalize("NFD", title.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = _SLUG_DISALLOWED.sub("", stripped)
    return _WHITESPACE.sub("-", cleaned)[:MAX_SLUG_LENGTH]


def episode_filename(episode: Episode) -> str:
    return f"EP{episode.episode_number:03d}-{slugify(episode.title)}.mp3"


def episode_keywords(title: str, limit: int = 5) -> str:
    words = [word for word in title.split() if len(word) > 3]
    return ", ".join(words[:limit])


def read_duration_seconds(audio: bytes) -> Optional[int]:
    """Best-effort MP3 duration in whole seconds, ``None`` if undetectable."""
    try:
        info = MP3(io.BytesIO(audio)).info
    except MutagenError as exc:
        logger.debug("Could not read MP3 duration: %s", exc)
        return None
    if not info.length:
        return None
    return int(round(info.length))
