from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

DOWNLOADABLE_STATUSES = frozenset({"READY", "PUBLISHED"})


@dataclass(slots=True)
class Episode:
    episode_number: int
    title: str
    created_at: datetime
    audio_path: Optional[Path] = None
    description: Optional[str] = None
    audio_duration: Optional[int] = None
    script: str = ""
    status: str = "READY"
    trend_titles: list[str] = field(default_factory=list)

    @property
    def is_downloadable(self) -> bool:
        return self.audio_path is not None and self.status.upper() in DOWNLOADABLE_STATUSES


class PackagingError(Exception):
    """Base class for failures raised while packaging episodes."""


class MalformedInputTag(PackagingError, ValueError):
    """Raised when a leading ID3 tag declares a size past the end of the buffer."""


class ArchiveLimitError(PackagingError):
    """Raised when an archive value does not fit a classic (non-ZIP64) field."""


class BatchLimitError(PackagingError):
    """Raised when a batch is empty, too large, or produced no episodes."""
