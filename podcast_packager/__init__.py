"Stored-ZIP packaging and ID3v2.3 tagging for podcast episodes."

from importlib import metadata

from .archive import ArchiveEntry, build_archive
from .id3 import ID3Metadata, embed_metadata, strip_existing_tag
from .models import MalformedInputTag, PackagingError
from .timestamps import TimestampMarker, extract_timestamps

__all__ = [
    "ArchiveEntry",
    "ID3Metadata",
    "MalformedInputTag",
    "PackagingError",
    "TimestampMarker",
    "__version__",
    "build_archive",
    "embed_metadata",
    "extract_timestamps",
    "strip_existing_tag",
]


def __getattr__(name: str) -> str:
    if name == "__version__":
        try:
            return metadata.version("podcast-packager")
        except metadata.PackageNotFoundError:  # pragma: no cover - during editable dev installs
            return "0.0.0"
    raise AttributeError(name)
