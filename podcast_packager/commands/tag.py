from __future__ import annotations

import logging
from pathlib import Path

from ..id3 import ID3Metadata, embed_metadata

logger = logging.getLogger(__name__)


def run(audio_path: Path, out: Path, metadata: ID3Metadata, *, language: str) -> Path:
    audio = audio_path.read_bytes()
    tagged = embed_metadata(audio, metadata, language=language)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(tagged)
    logger.info("Wrote %s (%d bytes)", out, len(tagged))
    return out
