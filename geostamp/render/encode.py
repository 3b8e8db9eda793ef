from __future__ import annotations

import io

from PIL import Image

from geostamp.exceptions import UnsupportedFormatError

JPEG_QUALITY = 95
WEBP_QUALITY = 95
PNG_COMPRESS_LEVEL = 9


def _prepare_mode(image: Image.Image, image_format: str, keep_alpha: bool) -> Image.Image:
    if image_format == "jpeg" or not keep_alpha:
        return image.convert("RGB")
    return image.convert("RGBA")


def encode_image(image: Image.Image, image_format: str, *, keep_alpha: bool = False) -> bytes:
    """Encode ``image`` back into ``image_format`` with the fixed quality settings."""
    output = _prepare_mode(image, image_format, keep_alpha)
    buffer = io.BytesIO()
    if image_format == "jpeg":
        output.save(buffer, format="JPEG", quality=JPEG_QUALITY, progressive=True, optimize=True)
    elif image_format == "png":
        output.save(buffer, format="PNG", compress_level=PNG_COMPRESS_LEVEL)
    elif image_format == "webp":
        output.save(buffer, format="WEBP", quality=WEBP_QUALITY)
    else:
        raise UnsupportedFormatError(image_format)
    return buffer.getvalue()
