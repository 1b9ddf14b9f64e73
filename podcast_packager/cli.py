from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .commands import batch as cmd_batch
from .commands import bundle as cmd_bundle
from .commands import chapters as cmd_chapters
from .commands import tag as cmd_tag
from .config import load_settings
from .id3 import ID3Metadata
from .models import PackagingError

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def configure_logging(level_name: str) -> WarningBufferHandler:
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    color_handler = logging.StreamHandler()
    color_handler.setFormatter(ColorFormatter(LOG_FORMAT))
    root_logger.addHandler(color_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(warn_buffer)

    logging.getLogger("mutagen").setLevel(logging.WARNING)
    return warn_buffer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Podcast episode packaging and ID3 tagging")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    tag_parser = subparsers.add_parser("tag", help="Embed an ID3v2.3 tag into an MP3 file")
    tag_parser.add_argument("audio", type=Path, help="Source MP3 file")
    tag_parser.add_argument("--out", type=Path, required=True, help="Destination MP3 file")
    tag_parser.add_argument("--title")
    tag_parser.add_argument("--artist")
    tag_parser.add_argument("--album")
    tag_parser.add_argument("--year")
    tag_parser.add_argument("--track", dest="track_number")
    tag_parser.add_argument("--genre")
    tag_parser.add_argument("--comment")
    tag_parser.add_argument("--duration-ms", type=int, default=None)
    tag_parser.add_argument(
        "--language", default=None, help="Comment language code (defaults to config)"
    )

    zip_parser = subparsers.add_parser("zip", help="Store files in an uncompressed ZIP archive")
    zip_parser.add_argument("out", type=Path, help="Archive to create")
    zip_parser.add_argument("files", type=Path, nargs="*", help="Files to store (by basename)")
    zip_parser.add_argument(
        "--no-crc",
        action="store_true",
        help="Write zero CRC-32 fields (legacy output)",
    )

    chapters_parser = subparsers.add_parser(
        "chapters", help="Print chapter timestamps for a script's [SECTION] markers"
    )
    chapters_parser.add_argument("script", type=Path, help="UTF-8 script file")
    chapters_parser.add_argument(
        "--duration", type=float, required=True, help="Audio duration in seconds"
    )
    chapters_parser.add_argument(
        "--json", action="store_true", help="Emit machine-readable JSON to stdout"
    )

    batch_parser = subparsers.add_parser(
        "batch", help="Package a manifest of episodes into one ZIP with a metadata CSV"
    )
    batch_parser.add_argument("manifest", type=Path, help="Episode manifest (YAML)")
    batch_parser.add_argument("--out", type=Path, default=None, help="Archive to create")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    warn_buffer = configure_logging(args.log_level)
    settings = load_settings(args.config)

    try:
        match args.command:
            case "tag":
                metadata = ID3Metadata(
                    title=args.title,
                    artist=args.artist,
                    album=args.album,
                    year=args.year,
                    track_number=args.track_number,
                    genre=args.genre,
                    comment=args.comment,
                    duration_ms=args.duration_ms,
                )
                cmd_tag.run(
                    args.audio,
                    args.out,
                    metadata,
                    language=args.language or settings.podcast.comment_language,
                )
            case "zip":
                cmd_bundle.run(
                    args.out,
                    args.files,
                    compute_crc=settings.archive.compute_crc and not args.no_crc,
                )
            case "chapters":
                cmd_chapters.run(args.script, args.duration, json_output=args.json)
            case "batch":
                cmd_batch.run(settings, args.manifest, out=args.out)
            case _:
                parser.error("Unknown command")
    except (PackagingError, OSError) as exc:
        logging.getLogger(__name__).error("%s", exc)
        raise SystemExit(1) from exc
    finally:
        if warn_buffer.records:
            print("\n\033[33mWarnings/Errors summary:\033[0m")
            for line in warn_buffer.records:
                print(f" - {line}")


if __name__ == "__main__":  # pragma: no cover
    main()
