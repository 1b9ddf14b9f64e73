from __future__ import annotations

import binascii
import logging
from dataclasses import dataclass
from typing import Iterable, List

from .binary import UINT16_MAX, UINT32_MAX, u16le, u32le
from .models import ArchiveLimitError

logger = logging.getLogger(__name__)

LOCAL_HEADER_SIGNATURE = 0x04034B50
CENTRAL_DIRECTORY_SIGNATURE = 0x02014B50
END_OF_CENTRAL_DIRECTORY_SIGNATURE = 0x06054B50

END_OF_CENTRAL_DIRECTORY_SIZE = 22

VERSION_NEEDED = 10
VERSION_MADE_BY = 20
METHOD_STORED = 0
# General purpose bit 11: file name is UTF-8.
FLAG_UTF8_NAME = 0x0800


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    name: str
    data: bytes


@dataclass(frozen=True, slots=True)
class EntryFields:
    """Values shared by an entry's local header and its directory record."""

    name: bytes
    flags: int
    crc: int
    size: int


def entry_fields(entry: ArchiveEntry, compute_crc: bool) -> EntryFields:
    name = entry.name.encode("utf-8")
    if len(name) > UINT16_MAX:
        raise ArchiveLimitError(f"file name too long ({len(name)} bytes): {entry.name[:40]}...")
    size = len(entry.data)
    if size > UINT32_MAX:
        raise ArchiveLimitError(f"{entry.name} is too large for a stored entry ({size} bytes)")
    flags = 0 if entry.name.isascii() else FLAG_UTF8_NAME
    crc = binascii.crc32(entry.data) & UINT32_MAX if compute_crc else 0
    return EntryFields(name=name, flags=flags, crc=crc, size=size)


def encode_local_header(fields: EntryFields) -> bytes:
    return b"".join(
        (
            u32le(LOCAL_HEADER_SIGNATURE),
            u16le(VERSION_NEEDED),
            u16le(fields.flags),
            u16le(METHOD_STORED),
            u16le(0),  # mod time
            u16le(0),  # mod date
            u32le(fields.crc),
            u32le(fields.size),  # compressed
            u32le(fields.size),  # uncompressed
            u16le(len(fields.name)),
            u16le(0),  # extra field length
            fields.name,
        )
    )


def encode_central_directory_record(fields: EntryFields, offset: int) -> bytes:
    return b"".join(
        (
            u32le(CENTRAL_DIRECTORY_SIGNATURE),
            u16le(VERSION_MADE_BY),
            u16le(VERSION_NEEDED),
            u16le(fields.flags),
            u16le(METHOD_STORED),
            u16le(0),
            u16le(0),
            u32le(fields.crc),
            u32le(fields.size),
            u32le(fields.size),
            u16le(len(fields.name)),
            u16le(0),  # extra field length
            u16le(0),  # file comment length
            u16le(0),  # disk number start
            u16le(0),  # internal attributes
            u32le(0),  # external attributes
            u32le(offset),
            fields.name,
        )
    )


def encode_end_of_central_directory(count: int, directory_size: int, directory_offset: int) -> bytes:
    if count > UINT16_MAX:
        raise ArchiveLimitError(f"too many entries for a classic archive: {count}")
    if directory_size > UINT32_MAX or directory_offset > UINT32_MAX:
        raise ArchiveLimitError("archive exceeds 4 GiB; ZIP64 is not supported")
    return b"".join(
        (
            u32le(END_OF_CENTRAL_DIRECTORY_SIGNATURE),
            u16le(0),  # this disk
            u16le(0),  # disk with central directory
            u16le(count),
            u16le(count),
            u32le(directory_size),
            u32le(directory_offset),
            u16le(0),  # comment length
        )
    )


def build_archive(entries: Iterable[ArchiveEntry], *, compute_crc: bool = True) -> bytes:
    """Assemble ``entries`` into an uncompressed ("stored") ZIP archive.

    Entries are written in the order given. Names are neither validated nor
    deduplicated. ``compute_crc=False`` writes zero into every CRC-32 field,
    which lenient readers accept but ``zipfile`` rejects on extraction.
    """
    blocks: List[bytes] = []
    directory: List[bytes] = []
    offset = 0
    count = 0
    for entry in entries:
        fields = entry_fields(entry, compute_crc)
        if offset > UINT32_MAX:
            raise ArchiveLimitError("archive exceeds 4 GiB; ZIP64 is not supported")
        header = encode_local_header(fields)
        blocks.append(header)
        blocks.append(entry.data)
        directory.append(encode_central_directory_record(fields, offset))
        offset += len(header) + fields.size
        count += 1
    directory_bytes = b"".join(directory)
    trailer = encode_end_of_central_directory(count, len(directory_bytes), offset)
    logger.debug("Built archive with %d entries (%d payload bytes)", count, offset)
    return b"".join(blocks) + directory_bytes + trailer
