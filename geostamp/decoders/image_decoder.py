from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from geostamp.constants import FORMAT_ALIASES, SUPPORTED_FORMATS
from geostamp.exceptions import InvalidImageError, UnsupportedFormatError
from geostamp.models import ImageMetadata


@dataclass(slots=True)
class DecodedImage:
    image: Image.Image
    metadata: ImageMetadata
    has_alpha: bool


def _normalize_format(raw_format: str | None) -> str | None:
    if not raw_format:
        return None
    fmt = raw_format.lower()
    return FORMAT_ALIASES.get(fmt, fmt)


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in {"RGBA", "LA", "PA"} or (image.mode == "P" and "transparency" in image.info)


def _validate(width: int | None, height: int | None, raw_format: str | None) -> ImageMetadata:
    if not width or not height or width <= 0 or height <= 0:
        raise InvalidImageError()
    fmt = _normalize_format(raw_format)
    if fmt not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(fmt)
    return ImageMetadata(width=int(width), height=int(height), format=fmt)


def probe_image(data: bytes) -> ImageMetadata:
    """Read dimensions and format without decoding pixel data."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
            raw_format = image.format
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise InvalidImageError() from exc
    return _validate(width, height, raw_format)


def decode_image_bytes(data: bytes) -> DecodedImage:
    """Decode ``data`` fully. Only the first frame of animated files is kept."""
    metadata = probe_image(data)
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            has_alpha = _has_alpha(image)
            pixels = image.convert("RGBA" if has_alpha else "RGB").copy()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise InvalidImageError(f"Invalid image file: {exc}") from exc
    return DecodedImage(image=pixels, metadata=metadata, has_alpha=has_alpha)
