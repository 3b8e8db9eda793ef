"""Error types raised by the watermark engine.

Every error carries an HTTP-style status code so a presentation layer can
map it to a response without inspecting the message.
"""

from __future__ import annotations


class WatermarkError(Exception):
    """Base class for all geostamp errors.

    Attributes:
        message: Human-readable error description
        status_code: 4xx for caller faults, 5xx for processing faults
        error_code: Stable identifier for programmatic handling
    """

    def __init__(self, message: str, status_code: int = 500, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code

    @property
    def status(self) -> str:
        return "fail" if self.is_client_error else "error"

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class InvalidImageError(WatermarkError):
    """The input bytes are not a decodable raster image or lack dimensions."""

    def __init__(self, message: str = "Invalid image file"):
        super().__init__(message, status_code=400, error_code="INVALID_IMAGE")


class UnsupportedFormatError(WatermarkError):
    """The image decoded fine but its format is not jpeg, png or webp.

    Attributes:
        image_format: The format reported by the decoder
    """

    def __init__(self, image_format: str | None):
        super().__init__("Unsupported image format", status_code=400, error_code="UNSUPPORTED_FORMAT")
        self.image_format = image_format

    def __str__(self) -> str:
        if self.image_format:
            return f"{super().__str__()} ({self.image_format})"
        return super().__str__()


class ProcessingError(WatermarkError):
    """Unexpected failure while laying out, compositing or encoding."""

    def __init__(self, cause: str):
        super().__init__(f"Image processing failed: {cause}", status_code=500, error_code="PROCESSING_FAILED")
        self.cause = cause
