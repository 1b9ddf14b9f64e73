from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .models import Episode


class PodcastSettings(BaseModel):
    name: str = "IA Sin Filtros"
    genre: str = "Podcast"
    comment_language: str = "spa"
    media_root: Path = Path(".")

    @field_validator("comment_language")
    @classmethod
    def _check_language(cls, value: str) -> str:
        if len(value) != 3 or not value.isascii():
            raise ValueError("comment_language must be a three-letter ISO 639-2 code")
        return value.lower()

    @field_validator("media_root", mode="before")
    @classmethod
    def _expand_media_root(cls, value: str | Path) -> Path:
        return Path(value).expanduser()

    def media_root_for(self, manifest_path: Path) -> Path:
        """Relative media roots (the default included) resolve against the manifest's directory."""
        if self.media_root.is_absolute():
            return self.media_root
        return (manifest_path.parent / self.media_root).resolve()


class ArchiveSettings(BaseModel):
    compute_crc: bool = True
    max_batch_episodes: int = Field(default=20, ge=1)
    include_metadata_csv: bool = True


class Settings(BaseModel):
    podcast: PodcastSettings = PodcastSettings()
    archive: ArchiveSettings = ArchiveSettings()

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


class EpisodeRecord(BaseModel):
    episode_number: int = Field(ge=0)
    title: str
    created_at: datetime
    audio_path: Optional[Path] = None
    description: Optional[str] = None
    audio_duration: Optional[int] = Field(default=None, ge=0)
    script: str = ""
    script_path: Optional[Path] = None
    status: str = "READY"
    trend_titles: List[str] = Field(default_factory=list)

    def to_episode(self, media_root: Path) -> Episode:
        script = self.script
        if self.script_path is not None:
            script = _resolve(self.script_path, media_root).read_text(encoding="utf-8")
        audio_path = _resolve(self.audio_path, media_root) if self.audio_path else None
        return Episode(
            episode_number=self.episode_number,
            title=self.title,
            created_at=self.created_at,
            audio_path=audio_path,
            description=self.description,
            audio_duration=self.audio_duration,
            script=script,
            status=self.status,
            trend_titles=list(self.trend_titles),
        )


class EpisodeManifest(BaseModel):
    episodes: List[EpisodeRecord] = Field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "EpisodeManifest":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})

    def to_episodes(self, media_root: Path) -> List[Episode]:
        return [record.to_episode(media_root) for record in self.episodes]


def _resolve(path: Path, root: Path) -> Path:
    path = path.expanduser()
    return path if path.is_absolute() else root / path


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "config.yaml", cwd / "config.yml"):
        if candidate.exists():
            return candidate
    return None


def load_settings(explicit_path: Optional[Path]) -> Settings:
    path = find_config(explicit_path)
    if path is None:
        return Settings()
    return Settings.load(path)
