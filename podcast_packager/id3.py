from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .binary import decode_syncsafe, encode_syncsafe, u32be
from .models import MalformedInputTag

logger = logging.getLogger(__name__)

TAG_MAGIC = b"ID3"
TAG_HEADER_SIZE = 10
MAJOR_VERSION = 3
REVISION = 0
# UTF-8. Formally a v2.4 marker; widely tolerated in v2.3 tags.
ENCODING_UTF8 = 3
DEFAULT_LANGUAGE = "spa"

TITLE = "TIT2"
ARTIST = "TPE1"
ALBUM = "TALB"
YEAR = "TYER"
TRACK = "TRCK"
GENRE = "TCON"
LENGTH = "TLEN"
COMMENT = "COMM"


@dataclass(frozen=True, slots=True)
class ID3Metadata:
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    year: Optional[str] = None
    track_number: Optional[str] = None
    genre: Optional[str] = None
    comment: Optional[str] = None
    duration_ms: Optional[int] = None

    def text_frames(self) -> List[tuple[str, str]]:
        """Frame ID and text for every populated text field, in tag order."""
        mapping = [
            (TITLE, self.title),
            (ARTIST, self.artist),
            (ALBUM, self.album),
            (YEAR, self.year),
            (TRACK, self.track_number),
            (GENRE, self.genre),
            (LENGTH, str(self.duration_ms) if self.duration_ms else None),
        ]
        return [(frame_id, value) for frame_id, value in mapping if value]


def _frame(frame_id: str, body: bytes) -> bytes:
    # Frame sizes are plain big-endian in v2.3, unlike the tag header.
    return frame_id.encode("ascii") + u32be(len(body)) + b"\x00\x00" + body


def encode_text_frame(frame_id: str, text: str) -> bytes:
    return _frame(frame_id, bytes((ENCODING_UTF8,)) + text.encode("utf-8"))


def encode_comment_frame(text: str, language: str = DEFAULT_LANGUAGE) -> bytes:
    lang = language.encode("ascii", errors="replace")[:3].ljust(3, b"\x00")
    body = bytes((ENCODING_UTF8,)) + lang + b"\x00" + text.encode("utf-8")
    return _frame(COMMENT, body)


def encode_tag_header(frames_size: int) -> bytes:
    return TAG_MAGIC + bytes((MAJOR_VERSION, REVISION, 0)) + encode_syncsafe(frames_size)


def existing_tag_size(audio: bytes) -> int:
    """Return the byte length of a leading ID3v2 tag (header included), or 0."""
    if audio[:3] != TAG_MAGIC:
        return 0
    if len(audio) < TAG_HEADER_SIZE:
        raise MalformedInputTag(f"truncated ID3 header ({len(audio)} bytes)")
    total = TAG_HEADER_SIZE + decode_syncsafe(audio[6:10])
    if total > len(audio):
        raise MalformedInputTag(
            f"ID3 tag declares {total} bytes but the buffer holds only {len(audio)}"
        )
    return total


def strip_existing_tag(audio: bytes) -> bytes:
    size = existing_tag_size(audio)
    if size:
        logger.debug("Stripping existing %d-byte ID3 tag", size)
        return audio[size:]
    return audio


def encode_tag(metadata: ID3Metadata, *, language: str = DEFAULT_LANGUAGE) -> bytes:
    frames = [encode_text_frame(frame_id, text) for frame_id, text in metadata.text_frames()]
    if metadata.comment:
        frames.append(encode_comment_frame(metadata.comment, language))
    body = b"".join(frames)
    return encode_tag_header(len(body)) + body


def embed_metadata(
    audio: bytes,
    metadata: ID3Metadata,
    *,
    language: str = DEFAULT_LANGUAGE,
) -> bytes:
    """Prefix ``audio`` with an ID3v2.3 tag built from ``metadata``.

    Any tag already at the start of ``audio`` is replaced, never merged.
    Raises :class:`MalformedInputTag` if that tag's declared size runs past
    the end of the buffer.
    """
    stream = strip_existing_tag(audio)
    return encode_tag(metadata, language=language) + stream
