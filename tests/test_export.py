"""Tests for imgfit.export module."""

from pathlib import Path

import pytest
from PIL import Image

from imgfit.errors import UnsupportedOutputFormat
from imgfit.export import output_path_for, write_output
from imgfit.render import RAW_SURFACE, RenderOutput


class TestOutputPathFor:
    def test_jpeg_extension(self, tmp_path: Path):
        assert output_path_for(Path("/in/photo.png"), tmp_path, "jpeg") == tmp_path / "photo.jpg"
        assert output_path_for(Path("/in/photo.png"), tmp_path, "jpg") == tmp_path / "photo.jpg"

    def test_png_extension(self, tmp_path: Path):
        assert output_path_for(Path("/in/photo.jpg"), tmp_path, "png") == tmp_path / "photo.png"

    def test_collision(self, tmp_path: Path):
        (tmp_path / "photo.jpg").touch()
        (tmp_path / "photo_1.jpg").touch()
        assert output_path_for(Path("photo.jpeg"), tmp_path, "jpg") == tmp_path / "photo_2.jpg"

    def test_reserved_names(self, tmp_path: Path):
        taken: set[Path] = set()
        first = output_path_for(Path("a/photo.jpg"), tmp_path, "jpg", taken)
        second = output_path_for(Path("b/photo.jpg"), tmp_path, "jpg", taken)
        assert first == tmp_path / "photo.jpg"
        assert second == tmp_path / "photo_1.jpg"
        assert taken == {first, second}

    def test_raw_surface_refused(self, tmp_path: Path):
        with pytest.raises(ValueError):
            output_path_for(Path("photo.jpg"), tmp_path, RAW_SURFACE)

    def test_unknown_format(self, tmp_path: Path):
        with pytest.raises(UnsupportedOutputFormat):
            output_path_for(Path("photo.jpg"), tmp_path, "gif")


class TestWriteOutput:
    def test_writes_bytes(self, tmp_path: Path):
        out = tmp_path / "nested" / "a.png"
        write_output(RenderOutput(format="png", data=b"\x89PNG"), out)
        assert out.read_bytes() == b"\x89PNG"

    def test_raw_refused(self, tmp_path: Path):
        output = RenderOutput(format=RAW_SURFACE, image=Image.new("RGB", (1, 1)))
        with pytest.raises(ValueError):
            write_output(output, tmp_path / "a.png")
