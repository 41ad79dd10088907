"""Tests for preview sizing, the Pillow codec and the BlurHash encoder."""

import io

import pytest
from PIL import Image

from filedeck.errors import ImageProcessingError
from filedeck.services.imaging import CHECKER_LIGHT, CHECKER_LIGHTER, fit_preview_size

from conftest import make_image_bytes


class TestFitPreviewSize:
    def test_height_derived_from_width(self):
        # 400x200 with only a width: height = floor(100 * 200/400)
        assert fit_preview_size(400, 200, 100, None) == (100, 50)

    def test_width_derived_from_height(self):
        assert fit_preview_size(400, 200, None, 90) == (180, 90)

    def test_wide_image_fits_width(self):
        assert fit_preview_size(400, 200, 159, 139) == (159, 79)

    def test_tall_image_fits_height(self):
        assert fit_preview_size(200, 400, 159, 139) == (69, 139)

    def test_never_below_one_pixel(self):
        assert fit_preview_size(10000, 1, 159, 139) == (159, 1)

    def test_zero_area_rejected(self):
        with pytest.raises(ImageProcessingError):
            fit_preview_size(0, 100, 159, 139)


class TestPillowCodec:
    def test_decode_garbage(self, codec):
        with pytest.raises(ImageProcessingError):
            codec.decode(b"definitely not an image")

    def test_decode_and_dimensions(self, codec):
        image = codec.decode(make_image_bytes((30, 20)))
        assert codec.dimensions(image) == (30, 20)

    def test_exif_orientation_applied(self, codec):
        img = Image.new("RGB", (40, 20), (0, 0, 255))
        exif = img.getexif()
        exif[0x0112] = 6  # rotate 90 CW
        buf = io.BytesIO()
        img.save(buf, format="JPEG", exif=exif)

        oriented = codec.normalize_orientation(codec.decode(buf.getvalue()))
        assert codec.dimensions(oriented) == (20, 40)

    def test_transparent_pixels_show_checkerboard(self, codec):
        transparent = Image.new("RGBA", (45, 45), (0, 0, 0, 0))
        flat = codec.composite_over_checkerboard(transparent, 20)

        assert flat.mode == "RGB"
        assert flat.getpixel((5, 5)) == CHECKER_LIGHT
        assert flat.getpixel((25, 5)) == CHECKER_LIGHTER
        assert flat.getpixel((25, 25)) == CHECKER_LIGHT

    def test_opaque_pixels_cover_checkerboard(self, codec):
        opaque = Image.new("RGB", (10, 10), (1, 2, 3))
        assert codec.composite_over_checkerboard(opaque, 20).getpixel((3, 3)) == (1, 2, 3)

    def test_encode_jpeg(self, codec):
        data = codec.encode(Image.new("RGBA", (8, 8)), "JPEG", 80)
        assert Image.open(io.BytesIO(data)).format == "JPEG"

    def test_raw_pixels_shape(self, codec):
        pixels = codec.raw_pixels(Image.new("L", (7, 5)))
        assert pixels.shape == (5, 7, 3)


class TestBlurHash:
    def test_token_is_valid(self, codec, hasher):
        pixels = codec.raw_pixels(Image.new("RGB", (32, 24), (120, 80, 40)))
        token = hasher.encode_hash(pixels, 4, 3)
        assert len(token) == 4 + 2 * 4 * 3
        assert hasher.is_valid_token(token)

    @pytest.mark.parametrize("token", [None, "", "abc", "LEHV6nWB2yk8pyo0adR*.7kCMdnjXX"])
    def test_invalid_tokens(self, hasher, token):
        assert hasher.is_valid_token(token) is False
