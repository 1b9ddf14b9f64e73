from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..config import EpisodeManifest, Settings
from ..packaging import EpisodePackager, batch_archive_name

logger = logging.getLogger(__name__)


def run(settings: Settings, manifest_path: Path, *, out: Optional[Path] = None) -> Path:
    manifest = EpisodeManifest.load(manifest_path)
    media_root = settings.podcast.media_root_for(manifest_path)
    episodes = manifest.to_episodes(media_root)
    packager = EpisodePackager(settings.podcast, settings.archive)
    archive = packager.package_batch(episodes)
    target = out or Path.cwd() / batch_archive_name()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(archive)
    print(f"Created {target.name} with {len(episodes)} requested episodes")
    return target
