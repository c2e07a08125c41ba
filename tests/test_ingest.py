"""Tests for imgfit.ingest module."""

import io
from pathlib import Path

import pytest
from PIL import Image

from imgfit.errors import CollaboratorFailure, UnsupportedMediaType
from imgfit.ingest import (
    check_media_type,
    decode_bytes,
    decode_data_url,
    guess_media_type,
    read_source,
    to_data_url,
)


def make_png_bytes(w: int = 8, h: int = 4) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (w, h), (1, 2, 3)).save(buf, "PNG")
    return buf.getvalue()


class TestCheckMediaType:
    @pytest.mark.parametrize(
        "media_type", ["image/jpeg", "image/jpg", "image/png", "IMAGE/JPEG", "image/PNG"]
    )
    def test_accepts(self, media_type):
        check_media_type(media_type)

    @pytest.mark.parametrize(
        "media_type", ["image/gif", "image/webp", "image/png+xml", "", "text/plain"]
    )
    def test_rejects(self, media_type):
        with pytest.raises(UnsupportedMediaType):
            check_media_type(media_type)

    def test_is_type_error(self):
        with pytest.raises(TypeError):
            check_media_type("image/gif")


class TestGuessMediaType:
    def test_known_suffixes(self):
        assert guess_media_type("a.jpg") == "image/jpeg"
        assert guess_media_type(Path("b.PNG")) == "image/png"

    def test_unknown_suffix(self):
        assert guess_media_type("file.unknownext") == "application/octet-stream"


class TestReadSource:
    def test_bytes(self):
        assert read_source(b"abc") == b"abc"
        assert read_source(bytearray(b"abc")) == b"abc"

    def test_path(self, tmp_path: Path):
        path = tmp_path / "x.bin"
        path.write_bytes(b"\x01\x02")
        assert read_source(path) == b"\x01\x02"
        assert read_source(str(path)) == b"\x01\x02"

    def test_file_object(self):
        assert read_source(io.BytesIO(b"xyz")) == b"xyz"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(CollaboratorFailure):
            read_source(tmp_path / "missing.jpg")


class TestDataUrl:
    def test_to_data_url(self):
        assert to_data_url(b"\xFF\xD8", "image/jpeg") == "data:image/jpeg;base64,/9g="

    def test_decode(self):
        img = decode_data_url(to_data_url(make_png_bytes(8, 4), "image/png"))
        assert img.size == (8, 4)
        assert img.getpixel((0, 0)) == (1, 2, 3)

    def test_not_a_data_url(self):
        with pytest.raises(CollaboratorFailure):
            decode_data_url("https://example.com/a.png")

    def test_bad_base64(self):
        with pytest.raises(CollaboratorFailure):
            decode_data_url("data:image/png;base64,!!!")

    def test_not_an_image(self):
        with pytest.raises(CollaboratorFailure):
            decode_data_url(to_data_url(b"definitely not pixels", "image/png"))


class TestDecodeBytes:
    def test_truncated_image(self):
        data = make_png_bytes(64, 64)
        with pytest.raises(CollaboratorFailure):
            decode_bytes(data[:40])

    def test_oversized_image(self, monkeypatch):
        data = make_png_bytes(64, 64)
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        with pytest.raises(CollaboratorFailure, match="exceeds limit"):
            decode_bytes(data)
