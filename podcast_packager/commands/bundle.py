from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from ..archive import ArchiveEntry, build_archive

logger = logging.getLogger(__name__)


def run(out: Path, files: Sequence[Path], *, compute_crc: bool = True) -> Path:
    entries = [ArchiveEntry(name=path.name, data=path.read_bytes()) for path in files]
    archive = build_archive(entries, compute_crc=compute_crc)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(archive)
    logger.info("Stored %d files in %s (%d bytes)", len(entries), out, len(archive))
    return out
