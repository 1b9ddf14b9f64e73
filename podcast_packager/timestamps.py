from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, List

SECTION_LABELS = {
    "INTRO": "Introducción",
    "HOOK": "Gancho",
    "CONTENIDO": "Contenido Principal",
    "CONTENT": "Contenido Principal",
    "VALOR": "Tip de la Semana",
    "VALUE": "Tip de la Semana",
    "CIERRE": "Cierre",
    "OUTRO": "Cierre",
}

SECTION_PATTERN = re.compile(
    r"\[(" + "|".join(SECTION_LABELS) + r")\]",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class TimestampMarker:
    label: str
    section: str
    position: float
    time_ms: int
    time_formatted: str


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_time(time_ms: int) -> str:
    total_seconds = _round_half_up(time_ms / 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def _utf16_length(text: str) -> int:
    # Characters outside the BMP count twice, as surrogate pairs.
    return len(text) + sum(1 for ch in text if ord(ch) > 0xFFFF)


def extract_timestamps(script: str, total_duration_seconds: float) -> List[TimestampMarker]:
    """Map ``[SECTION]`` markers in ``script`` onto the audio timeline.

    A marker's time is its offset as a fraction of the script length,
    scaled to ``total_duration_seconds``. Offsets and length are counted in
    UTF-16 code units, so scripts with emoji place markers where browser
    clients do.
    """
    markers: List[TimestampMarker] = []
    length = _utf16_length(script)
    for match in SECTION_PATTERN.finditer(script):
        section = match.group(1).upper()
        position = _utf16_length(script[: match.start()]) / length
        time_ms = _round_half_up(position * total_duration_seconds * 1000)
        markers.append(
            TimestampMarker(
                label=SECTION_LABELS[section],
                section=section,
                position=position,
                time_ms=time_ms,
                time_formatted=format_time(time_ms),
            )
        )
    return markers


def format_chapter_list(markers: Iterable[TimestampMarker], separator: str = "; ") -> str:
    return separator.join(f"{marker.time_formatted} - {marker.label}" for marker in markers)
