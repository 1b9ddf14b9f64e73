import io
import struct
import unittest

from mutagen.id3 import ID3

from podcast_packager.binary import encode_syncsafe
from podcast_packager.id3 import (
    ID3Metadata,
    embed_metadata,
    encode_comment_frame,
    encode_text_frame,
    existing_tag_size,
    strip_existing_tag,
)
from podcast_packager.models import MalformedInputTag

MP3_STREAM = b"\xff\xfb\x90\x64" + bytes(413)

EPISODE = ID3Metadata(
    title="EP1",
    artist="Show",
    album="Show",
    year="2024",
    track_number="1",
    genre="Podcast",
)


def _frames(tag: bytes) -> list[tuple[bytes, bytes]]:
    size = existing_tag_size(tag) - 10
    body = tag[10 : 10 + size]
    frames = []
    pos = 0
    while pos < len(body):
        frame_id = body[pos : pos + 4]
        frame_size = struct.unpack(">I", body[pos + 4 : pos + 8])[0]
        frames.append((frame_id, body[pos + 10 : pos + 10 + frame_size]))
        pos += 10 + frame_size
    return frames


class TestEmbedMetadata(unittest.TestCase):
    def test_header_and_first_frame(self) -> None:
        tagged = embed_metadata(MP3_STREAM, EPISODE)
        self.assertEqual(tagged[:6], bytes([0x49, 0x44, 0x33, 0x03, 0x00, 0x00]))
        self.assertTrue(all(byte < 0x80 for byte in tagged[6:10]))
        self.assertEqual(tagged[10:14], b"TIT2")
        self.assertTrue(tagged.endswith(MP3_STREAM))

    def test_frame_order_and_bodies(self) -> None:
        metadata = ID3Metadata(
            title="EP1",
            artist="Show",
            album="Show",
            year="2024",
            track_number="1",
            genre="Podcast",
            comment="Descripción",
            duration_ms=61000,
        )
        frames = _frames(embed_metadata(MP3_STREAM, metadata))
        self.assertEqual(
            [frame_id for frame_id, _ in frames],
            [b"TIT2", b"TPE1", b"TALB", b"TYER", b"TRCK", b"TCON", b"TLEN", b"COMM"],
        )
        self.assertEqual(frames[0][1], b"\x03EP1")
        self.assertEqual(frames[6][1], b"\x0361000")
        self.assertEqual(frames[7][1], b"\x03spa\x00" + "Descripción".encode("utf-8"))

    def test_declared_size_covers_frames_exactly(self) -> None:
        tagged = embed_metadata(MP3_STREAM, EPISODE)
        self.assertEqual(tagged[existing_tag_size(tagged) :], MP3_STREAM)

    def test_standard_reader_parses_tag(self) -> None:
        metadata = ID3Metadata(
            title="Episodio 1: ¿Qué es la IA?",
            artist="Show",
            album="Show",
            year="2024",
            track_number="1",
            genre="Podcast",
            comment="Hablamos de modelos",
            duration_ms=1234000,
        )
        tags = ID3(io.BytesIO(embed_metadata(MP3_STREAM, metadata)), translate=False)
        self.assertEqual(tags.version, (2, 3, 0))
        self.assertEqual(tags["TIT2"].text[0], "Episodio 1: ¿Qué es la IA?")
        self.assertEqual(tags["TPE1"].text[0], "Show")
        self.assertEqual(tags["TYER"].text[0], "2024")
        self.assertEqual(tags["TLEN"].text[0], "1234000")
        comment = tags.getall("COMM")[0]
        self.assertEqual(comment.lang, "spa")
        self.assertEqual(comment.desc, "")
        self.assertEqual(comment.text[0], "Hablamos de modelos")

    def test_empty_metadata_yields_empty_tag(self) -> None:
        tagged = embed_metadata(MP3_STREAM, ID3Metadata())
        self.assertEqual(tagged[:10], b"ID3\x03\x00\x00\x00\x00\x00\x00")
        self.assertEqual(tagged[10:], MP3_STREAM)

    def test_empty_and_zero_fields_are_omitted(self) -> None:
        frames = _frames(embed_metadata(b"", ID3Metadata(title="", genre="Podcast", duration_ms=0)))
        self.assertEqual([frame_id for frame_id, _ in frames], [b"TCON"])

    def test_comment_language_override(self) -> None:
        frame = encode_comment_frame("hi", language="eng")
        self.assertEqual(frame[:4], b"COMM")
        self.assertEqual(frame[4:8], struct.pack(">I", 7))
        self.assertEqual(frame[10:], b"\x03eng\x00hi")

    def test_frame_size_is_plain_big_endian(self) -> None:
        text = "x" * 200
        frame = encode_text_frame("TIT2", text)
        self.assertEqual(frame[4:8], struct.pack(">I", 201))
        self.assertEqual(frame[8:10], b"\x00\x00")


class TestExistingTag(unittest.TestCase):
    def test_untagged_audio_is_untouched(self) -> None:
        self.assertEqual(existing_tag_size(MP3_STREAM), 0)
        self.assertIs(strip_existing_tag(MP3_STREAM), MP3_STREAM)

    def test_replaces_existing_tag(self) -> None:
        old = embed_metadata(MP3_STREAM, ID3Metadata(title="Old", comment="old comment"))
        new = embed_metadata(old, ID3Metadata(title="New"))
        self.assertEqual(new, embed_metadata(MP3_STREAM, ID3Metadata(title="New")))
        self.assertNotIn(b"Old", new)

    def test_re_embedding_is_idempotent_on_audio(self) -> None:
        once = embed_metadata(MP3_STREAM, EPISODE)
        twice = embed_metadata(once, EPISODE)
        self.assertEqual(once, twice)
        self.assertEqual(strip_existing_tag(twice), strip_existing_tag(once))
        self.assertEqual(strip_existing_tag(twice), MP3_STREAM)

    def test_strips_tag_with_padding(self) -> None:
        padded = b"ID3\x03\x00\x00" + encode_syncsafe(100) + bytes(100) + MP3_STREAM
        self.assertEqual(strip_existing_tag(padded), MP3_STREAM)

    def test_declared_size_past_end_is_malformed(self) -> None:
        broken = b"ID3\x03\x00\x00" + encode_syncsafe(5000) + b"short"
        with self.assertRaises(MalformedInputTag):
            embed_metadata(broken, EPISODE)

    def test_truncated_header_is_malformed(self) -> None:
        with self.assertRaises(MalformedInputTag):
            strip_existing_tag(b"ID3\x03")

    def test_tag_filling_whole_buffer_is_valid(self) -> None:
        only_tag = b"ID3\x03\x00\x00" + encode_syncsafe(4) + b"\x00" * 4
        self.assertEqual(strip_existing_tag(only_tag), b"")


if __name__ == "__main__":
    unittest.main()
