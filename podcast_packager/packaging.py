from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .archive import ArchiveEntry, build_archive
from .config import ArchiveSettings, PodcastSettings
from .episodes import (
    build_podcast_metadata,
    episode_filename,
    episode_keywords,
    generate_spotify_description,
    read_duration_seconds,
)
from .id3 import ID3Metadata, embed_metadata
from .models import BatchLimitError, Episode, PackagingError
from .timestamps import extract_timestamps, format_chapter_list

logger = logging.getLogger(__name__)

METADATA_CSV_NAME = "metadata.csv"
METADATA_CSV_HEADER = [
    "Episode Number",
    "Title",
    "Description",
    "Duration (seconds)",
    "Filename",
    "Keywords",
    "Timestamps",
]


@dataclass(frozen=True, slots=True)
class PackagedEpisode:
    episode: Episode
    filename: str
    data: bytes
    metadata: ID3Metadata

    def csv_row(self) -> List[str]:
        episode = self.episode
        timestamps = ""
        if episode.audio_duration and episode.script:
            timestamps = format_chapter_list(
                extract_timestamps(episode.script, episode.audio_duration)
            )
        return [
            str(episode.episode_number),
            episode.title,
            generate_spotify_description(episode),
            str(episode.audio_duration or 0),
            self.filename,
            episode_keywords(episode.title),
            timestamps,
        ]


def batch_archive_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"podcast-episodes-{today.isoformat()}.zip"


def render_metadata_csv(rows: Iterable[Sequence[str]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(METADATA_CSV_HEADER)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


class EpisodePackager:
    """Turns episode records into tagged MP3 buffers and batch archives."""

    def __init__(self, podcast: PodcastSettings, archive: ArchiveSettings) -> None:
        self.podcast = podcast
        self.archive = archive

    def package_episode(self, episode: Episode) -> PackagedEpisode:
        if episode.audio_path is None:
            raise PackagingError(f"Episode {episode.episode_number} has no audio")
        audio = episode.audio_path.read_bytes()
        if episode.audio_duration is None:
            episode = replace(episode, audio_duration=read_duration_seconds(audio))
        metadata = build_podcast_metadata(episode, self.podcast.name, genre=self.podcast.genre)
        tagged = embed_metadata(audio, metadata, language=self.podcast.comment_language)
        filename = episode_filename(episode)
        logger.debug(
            "Tagged %s (%d -> %d bytes)", filename, len(audio), len(tagged)
        )
        return PackagedEpisode(episode=episode, filename=filename, data=tagged, metadata=metadata)

    def package_batch(
        self,
        episodes: Sequence[Episode],
        *,
        include_metadata_csv: Optional[bool] = None,
    ) -> bytes:
        if not episodes:
            raise BatchLimitError("No episodes provided")
        limit = self.archive.max_batch_episodes
        if len(episodes) > limit:
            raise BatchLimitError(f"Maximum {limit} episodes per batch (got {len(episodes)})")
        if include_metadata_csv is None:
            include_metadata_csv = self.archive.include_metadata_csv

        packaged: List[PackagedEpisode] = []
        for episode in sorted(episodes, key=lambda ep: ep.episode_number):
            if not episode.is_downloadable:
                logger.warning(
                    "Skipping episode %s (%s): not ready for download",
                    episode.episode_number,
                    episode.status,
                )
                continue
            try:
                packaged.append(self.package_episode(episode))
            except (OSError, PackagingError) as exc:
                logger.warning(
                    "Skipping episode %s (%s): %s", episode.episode_number, episode.title, exc
                )
        if not packaged:
            raise BatchLimitError("No ready episodes could be packaged")

        entries = [ArchiveEntry(name=item.filename, data=item.data) for item in packaged]
        if include_metadata_csv:
            csv_bytes = render_metadata_csv(item.csv_row() for item in packaged)
            entries.append(ArchiveEntry(name=METADATA_CSV_NAME, data=csv_bytes))
        archive = build_archive(entries, compute_crc=self.archive.compute_crc)
        logger.info("Packaged %d episodes into %d-byte archive", len(packaged), len(archive))
        return archive
