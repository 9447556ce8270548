"""Tests for image export.

Tests cover:
- PPM text layout (header and one pixel per line)
- Writing PPM and PNG files
- Extension-based format selection
- Input validation
"""

import numpy as np
import pytest
from PIL import Image as PILImage


@pytest.fixture
def small_image():
    """A 2-row, 3-column image with distinct pixels."""
    return np.array(
        [
            [[255, 0, 0], [0, 255, 0], [0, 0, 255]],
            [[10, 20, 30], [128, 128, 128], [255, 255, 255]],
        ],
        dtype=np.uint8,
    )


class TestFormatPPM:
    """Tests for format_ppm."""

    def test_layout(self, small_image):
        from mcray.output.export import format_ppm

        text = format_ppm(small_image)
        lines = text.splitlines()

        assert lines[:3] == ["P3", "3 2", "255"]
        assert lines[3:] == [
            "255 0 0",
            "0 255 0",
            "0 0 255",
            "10 20 30",
            "128 128 128",
            "255 255 255",
        ]
        assert text.endswith("\n")

    def test_accepts_int_arrays(self):
        from mcray.output.export import format_ppm

        text = format_ppm(np.zeros((1, 1, 3), dtype=np.int32))
        assert text == "P3\n1 1\n255\n0 0 0\n"

    @pytest.mark.parametrize(
        "pixels",
        [np.zeros((2, 3), dtype=np.uint8), np.zeros((2, 3, 4), dtype=np.uint8)],
    )
    def test_bad_shape_raises(self, pixels):
        from mcray.output.export import format_ppm

        with pytest.raises(ValueError, match="shape"):
            format_ppm(pixels)

    def test_out_of_range_raises(self):
        from mcray.output.export import format_ppm

        with pytest.raises(ValueError, match=r"\[0, 255\]"):
            format_ppm(np.full((1, 1, 3), 256, dtype=np.int32))


class TestWriteFiles:
    """Tests for write_ppm, save_png and save_image."""

    def test_write_ppm(self, small_image, tmp_path):
        from mcray.output.export import format_ppm, write_ppm

        path = tmp_path / "image.ppm"
        write_ppm(small_image, path)

        assert path.read_text(encoding="ascii") == format_ppm(small_image)

    def test_save_png(self, small_image, tmp_path):
        from mcray.output.export import save_png

        path = tmp_path / "image.png"
        save_png(small_image, path)

        with PILImage.open(path) as img:
            assert img.size == (3, 2)
            assert img.mode == "RGB"
            assert np.array_equal(np.asarray(img), small_image)

    @pytest.mark.parametrize("name", ["out.ppm", "out.PNG"])
    def test_save_image_by_extension(self, small_image, tmp_path, name):
        from mcray.output.export import save_image

        path = tmp_path / name
        save_image(small_image, path)
        assert path.exists()

    def test_save_image_unknown_extension(self, small_image, tmp_path):
        from mcray.output.export import save_image

        with pytest.raises(ValueError, match="Unsupported output format"):
            save_image(small_image, tmp_path / "out.jpg")

    def test_missing_directory_propagates_os_error(self, small_image, tmp_path):
        from mcray.output.export import write_ppm

        with pytest.raises(OSError):
            write_ppm(small_image, tmp_path / "missing" / "image.ppm")
