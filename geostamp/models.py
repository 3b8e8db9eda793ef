from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True, frozen=True)
class ImageMetadata:
    width: int
    height: int
    format: str

    @property
    def mime_type(self) -> str:
        return f"image/{self.format}"

    def to_dict(self) -> dict[str, Any]:
        return {"width": self.width, "height": self.height, "format": self.format}


@dataclass(slots=True, frozen=True)
class ThemeOptions:
    outer_padding: int = 20
    inner_padding: int = 20
    line_gap: int = 28
    font_family: str = "Arial"
    panel_background: str = "rgba(0, 0, 0, 0.1)"
    text_color: str = "#FFFFFF"
    time_color: str = "#0A0A0A"
    badge_color: str = "#FFFFFF"
    stripe_color: str = "#FFCC33"
    verified_color: str = "#00D084"


@dataclass(slots=True, frozen=True)
class WatermarkOptions:
    align: str = "left"
    panel_width_fraction: float = 0.68
    max_address_lines: int = 3
    logo: str | None = None
    logo_size_px: int = 42
    theme: ThemeOptions = field(default_factory=ThemeOptions)


@dataclass(slots=True)
class WatermarkRequest:
    image_bytes: bytes
    address: str | None = None
    options: WatermarkOptions = field(default_factory=WatermarkOptions)


@dataclass(slots=True, frozen=True)
class TextBlock:
    lines: tuple[str, ...]
    font_size: int
    max_width: int


@dataclass(slots=True, frozen=True)
class Box:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


@dataclass(slots=True, frozen=True)
class OverlayGeometry:
    image_width: int
    image_height: int
    panel: Box
    base_font: int
    time_font: int
    address_font: int
    verified_font: int
    text_max_width: int
    badge: Box
    badge_radius: int
    stripe_width: int
    address: TextBlock
    address_baselines: tuple[int, ...]
    verified_row: Box
    logo_size: int
    bottom_padding: int


@dataclass(slots=True, frozen=True)
class AppConfig:
    timezone: str
    status_label: str
    fallback_address: str
    default_address: str | None
    font_path: Path | None
    options: WatermarkOptions
    name_template: str
    skip_existing: bool
    max_input_bytes: int


@dataclass(slots=True)
class WatermarkResult:
    data: bytes
    format: str
    width: int
    height: int
    original_size: int
    timestamp: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def mime_type(self) -> str:
        return f"image/{self.format}"
