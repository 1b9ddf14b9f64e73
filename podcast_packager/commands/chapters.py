from __future__ import annotations

import json
from pathlib import Path

from ..timestamps import extract_timestamps


def run(script_path: Path, duration_seconds: float, *, json_output: bool = False) -> list[str]:
    script = script_path.read_text(encoding="utf-8")
    markers = extract_timestamps(script, duration_seconds)
    if json_output:
        payload = [
            {"label": m.label, "section": m.section, "time_ms": m.time_ms, "time": m.time_formatted}
            for m in markers
        ]
        lines = [json.dumps(payload, ensure_ascii=False, indent=2)]
    else:
        lines = [f"{m.time_formatted} - {m.label}" for m in markers]
    for line in lines:
        print(line)
    return lines
