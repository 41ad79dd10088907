"""Image codec (Pillow) and perceptual hash encoder (BlurHash)."""

from __future__ import annotations

import io
import logging
import math

import blurhash
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from filedeck.errors import ImageProcessingError

logger = logging.getLogger(__name__)

CHECKER_BACKGROUND = (70, 20, 20)
CHECKER_LIGHT = (240, 240, 240)
CHECKER_LIGHTER = (250, 250, 250)


def fit_preview_size(
    original_width: int,
    original_height: int,
    box_width: int | None,
    box_height: int | None,
) -> tuple[int, int]:
    """Target size that keeps the aspect ratio and fits inside the box.

    A missing box side is derived from the original ratio first; then the
    overflowing axis is shrunk so the image fills but never exceeds the box.
    """
    if original_width <= 0 or original_height <= 0:
        raise ImageProcessingError("Image has no area", width=original_width, height=original_height)
    if box_width is None and box_height is None:
        return original_width, original_height

    ratio = original_width / original_height
    if box_width is None:
        box_width = math.floor(ratio * box_height)
    elif box_height is None:
        box_height = math.floor((1 / ratio) * box_width)

    if ratio >= box_width / max(box_height, 1):
        width = box_width
        height = math.floor(original_height * box_width / original_width)
    else:
        width = math.floor(original_width * box_height / original_height)
        height = box_height
    return max(width, 1), max(height, 1)


class PillowCodec:
    """Decode / orient / resize / composite / encode with Pillow.

    Every failure surfaces as ``ImageProcessingError``.
    """

    def decode(self, data: bytes) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            raise ImageProcessingError(cause=e)
        return image

    def normalize_orientation(self, image: Image.Image) -> Image.Image:
        try:
            return ImageOps.exif_transpose(image)
        except (OSError, ValueError, SyntaxError) as e:
            raise ImageProcessingError("Unable to apply EXIF orientation", cause=e)

    def dimensions(self, image: Image.Image) -> tuple[int, int]:
        return image.size

    def resize(self, image: Image.Image, width: int, height: int) -> Image.Image:
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA")
        try:
            return image.resize((width, height), Image.Resampling.LANCZOS)
        except (OSError, ValueError) as e:
            raise ImageProcessingError("Unable to resize image", cause=e)

    def composite_over_checkerboard(self, image: Image.Image, tile_size: int) -> Image.Image:
        """Flatten onto a light checkerboard so transparency stays visible."""
        width, height = image.size
        canvas = Image.new("RGB", (width, height), CHECKER_BACKGROUND)
        light = Image.new("RGB", (tile_size, tile_size), CHECKER_LIGHT)
        lighter = Image.new("RGB", (tile_size, tile_size), CHECKER_LIGHTER)
        for x in range(width // tile_size + 1):
            for y in range(height // tile_size + 1):
                tile = light if (x + y) % 2 == 0 else lighter
                canvas.paste(tile, (x * tile_size, y * tile_size))

        if image.mode == "RGBA":
            canvas.paste(image, (0, 0), image)
        else:
            canvas.paste(image.convert("RGB"), (0, 0))
        return canvas

    def encode(self, image: Image.Image, fmt: str = "JPEG", quality: int = 80) -> bytes:
        buf = io.BytesIO()
        if fmt.upper() in ("JPEG", "JPG") and image.mode != "RGB":
            image = image.convert("RGB")
        try:
            image.save(buf, format=fmt, quality=quality)
        except (OSError, ValueError, KeyError) as e:
            raise ImageProcessingError("Unable to encode image", cause=e, format=fmt)
        return buf.getvalue()

    def raw_pixels(self, image: Image.Image) -> np.ndarray:
        """RGB pixel array shaped (height, width, 3)."""
        return np.asarray(image.convert("RGB"), dtype=np.uint8)


class BlurHashEncoder:
    """Short placeholder tokens summarising an image's colours."""

    def encode_hash(self, pixels: np.ndarray, x_components: int, y_components: int) -> str:
        try:
            return blurhash.encode(pixels.tolist(), x_components, y_components)
        except (ValueError, TypeError, IndexError) as e:
            raise ImageProcessingError("Unable to compute BlurHash", cause=e)

    def is_valid_token(self, token: str | None) -> bool:
        if not token or len(token) < 6:
            return False
        try:
            size_x, size_y = blurhash.components(token)
            if len(token) != 4 + 2 * size_x * size_y:
                return False
            blurhash.decode(token, 1, 1)
        except (ValueError, IndexError):
            return False
        return True
