"""Tests for the imagetiler.canvas module."""

import struct
from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image

from imagetiler import canvas
from imagetiler.canvas import compose_canvas, load_source, save_canvas
from imagetiler.exceptions import SourceReadError, TileWriteError


class TestLoadSource:
    """Tests for the load_source function."""

    def test_loads_image(self, source_file):
        """load_source should return the decoded image."""
        img = load_source(source_file)
        assert img.size == (600, 400)
        assert img.mode == "RGB"

    def test_converts_palette_images(self, temp_dir):
        """Non RGB sources are converted to RGBA."""
        path = temp_dir / "palette.png"
        Image.new("RGB", (10, 20), (1, 2, 3)).convert("P").save(path)

        img = load_source(path)
        assert img.mode == "RGBA"
        assert img.size == (10, 20)

    def test_missing_file(self, temp_dir):
        """A missing file raises SourceReadError."""
        with pytest.raises(SourceReadError):
            load_source(temp_dir / "nope.png")

    def test_not_an_image(self, temp_dir):
        """Undecodable content raises SourceReadError."""
        path = temp_dir / "garbage.png"
        path.write_bytes(b"this is not an image")

        with pytest.raises(SourceReadError):
            load_source(path)

    def test_truncated_image(self, temp_dir, source_file):
        """A truncated file raises SourceReadError."""
        path = temp_dir / "truncated.png"
        path.write_bytes(source_file.read_bytes()[:200])

        with pytest.raises(SourceReadError):
            load_source(path)

    def test_malformed_header(self, temp_dir, source_file):
        """A PNG with a short IHDR length field raises SourceReadError."""
        data = bytearray(source_file.read_bytes())
        data[8:12] = struct.pack(">I", 5)
        path = temp_dir / "short_ihdr.png"
        path.write_bytes(bytes(data))

        with pytest.raises(SourceReadError):
            load_source(path)

    @pytest.mark.parametrize("error", [ValueError("bad header"), SyntaxError("broken chunk")])
    def test_decoder_value_and_syntax_errors(self, source_file, error):
        """Decoder errors outside OSError are reported as SourceReadError."""
        with patch.object(canvas.Image, "open", side_effect=error):
            with pytest.raises(SourceReadError):
                load_source(source_file)

    def test_max_image_pixels_applies_during_load(self, source_file):
        """A limit below the source size rejects the source."""
        with pytest.raises(SourceReadError):
            load_source(source_file, max_image_pixels=1000)

    def test_max_image_pixels_is_restored(self, temp_dir, source_file):
        """The pixel limit only applies to the source load."""
        before = Image.MAX_IMAGE_PIXELS
        load_source(source_file, max_image_pixels=1_000_000)
        assert Image.MAX_IMAGE_PIXELS == before

        with pytest.raises(SourceReadError):
            load_source(source_file, max_image_pixels=1000)
        assert Image.MAX_IMAGE_PIXELS == before

        other = temp_dir / "other.png"
        Image.new("RGB", (300, 300)).save(other)
        with Image.open(other) as img:
            img.load()


class TestComposeCanvas:
    """Tests for the compose_canvas function."""

    def test_canvas_size(self, gradient_image):
        """The canvas side is tile_size * 2**zoom for every level."""
        for zoom, scale in [(0, 2), (1, 1), (2, 0)]:
            result = compose_canvas(gradient_image, zoom, scale, 256)
            assert result.size == (256 * 2 ** zoom, 256 * 2 ** zoom)
            assert result.mode == "RGBA"

    def test_full_resolution_is_centered(self, solid_image):
        """At scale 0 the source is pasted unchanged at the center."""
        source = solid_image(600, 400)
        pixels = np.asarray(compose_canvas(source, 2, 0, 256))

        # offsets (1024 - 600) // 2 = 212, (1024 - 400) // 2 = 312
        assert tuple(pixels[312, 212]) == (255, 0, 0, 255)
        assert tuple(pixels[711, 811]) == (255, 0, 0, 255)
        assert tuple(pixels[312, 211]) == (0, 0, 0, 255)
        assert tuple(pixels[311, 212]) == (0, 0, 0, 255)
        assert tuple(pixels[712, 811]) == (0, 0, 0, 255)
        assert tuple(pixels[711, 812]) == (0, 0, 0, 255)
        assert (pixels[..., 0] == 255).sum() == 600 * 400

    def test_background_is_opaque_black(self, solid_image):
        """Everything outside the image is opaque black."""
        pixels = np.asarray(compose_canvas(solid_image(600, 400), 0, 2, 256))
        assert tuple(pixels[0, 0]) == (0, 0, 0, 255)
        assert tuple(pixels[255, 255]) == (0, 0, 0, 255)
        assert (pixels[..., 3] == 255).all()

    def test_downscaled_footprint(self, solid_image):
        """At scale 2 a 600x400 source covers 150x100 pixels at (53, 78)."""
        pixels = np.asarray(compose_canvas(solid_image(600, 400), 0, 2, 256))
        red = pixels[..., 0] > 127
        rows = np.where(red.any(axis=1))[0]
        cols = np.where(red.any(axis=0))[0]

        assert (cols[0], cols[-1]) == (53, 53 + 150 - 1)
        assert (rows[0], rows[-1]) == (78, 78 + 100 - 1)

    def test_odd_offsets_truncate(self, solid_image):
        """Odd margins put the extra pixel after the image."""
        pixels = np.asarray(compose_canvas(solid_image(5, 3), 0, 0, 8))
        red = pixels[..., 0] == 255
        rows = np.where(red.any(axis=1))[0]
        cols = np.where(red.any(axis=0))[0]

        assert cols[0] == 1 and cols[-1] == 5
        assert rows[0] == 2 and rows[-1] == 4

    def test_alpha_is_blended_over_black(self, solid_image):
        """Translucent source pixels are composited over the background."""
        source = solid_image(4, 4, (255, 255, 255, 128), mode="RGBA")
        pixels = np.asarray(compose_canvas(source, 0, 0, 4))

        assert abs(int(pixels[0, 0, 0]) - 128) <= 1
        assert pixels[0, 0, 3] == 255

    def test_transparent_source_leaves_black(self, solid_image):
        source = solid_image(4, 4, (255, 255, 255, 0), mode="RGBA")
        pixels = np.asarray(compose_canvas(source, 0, 0, 4))
        assert (pixels[..., :3] == 0).all()

    def test_source_not_modified(self, gradient_image):
        """The source keeps its size and pixels."""
        before = np.asarray(gradient_image).copy()
        compose_canvas(gradient_image, 0, 2, 256)
        assert gradient_image.size == (600, 400)
        assert (np.asarray(gradient_image) == before).all()


class TestSaveCanvas:
    """Tests for the save_canvas function."""

    def test_writes_png(self, temp_dir, gradient_image):
        """save_canvas writes canvas_<zoom>.png into the target directory."""
        result = compose_canvas(gradient_image, 1, 1, 256)
        path = save_canvas(result, temp_dir, 1)

        assert path == temp_dir / "canvas_1.png"
        with Image.open(path) as img:
            assert img.size == (512, 512)

    def test_write_failure(self, temp_dir, gradient_image):
        """A missing directory raises TileWriteError."""
        result = compose_canvas(gradient_image, 0, 2, 256)
        with pytest.raises(TileWriteError) as excinfo:
            save_canvas(result, temp_dir / "missing", 0)

        assert isinstance(excinfo.value, OSError)
        assert excinfo.value.path == temp_dir / "missing" / "canvas_0.png"
