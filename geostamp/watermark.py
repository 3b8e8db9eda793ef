from __future__ import annotations

from typing import Any, Mapping

from geostamp.clock import Clock, local_timestamp, system_clock
from geostamp.config import build_app_config
from geostamp.decoders.image_decoder import decode_image_bytes
from geostamp.exceptions import ProcessingError, WatermarkError
from geostamp.models import AppConfig, WatermarkOptions, WatermarkRequest, WatermarkResult
from geostamp.options_loader import normalize_options
from geostamp.render.encode import encode_image
from geostamp.render.panel import PanelLayout, layout_panel
from geostamp.render.raster import composite_overlay


class WatermarkService:
    """Decode an image, stamp the time/location panel on it and re-encode it.

    The service holds only its immutable configuration and a clock, so one
    instance can serve any number of concurrent callers.
    """

    def __init__(self, config: AppConfig | None = None, clock: Clock = system_clock) -> None:
        self.config = config or build_app_config()
        self._clock = clock

    def resolve_options(self, options: WatermarkOptions | Mapping[str, Any] | None = None) -> WatermarkOptions:
        if options is None:
            return self.config.options
        if isinstance(options, WatermarkOptions):
            return options
        return normalize_options(options, self.config.options)

    def resolve_address(self, address: str | None) -> str:
        text = (address or "").strip()
        return text or self.config.default_address or self.config.fallback_address

    def current_timestamp(self) -> str:
        return local_timestamp(self.config.timezone, self._clock)

    def layout(
        self,
        width: int,
        height: int,
        address: str | None = None,
        options: WatermarkOptions | Mapping[str, Any] | None = None,
        timestamp: str | None = None,
    ) -> PanelLayout:
        return layout_panel(
            width,
            height,
            timestamp if timestamp is not None else self.current_timestamp(),
            self.resolve_address(address),
            self.resolve_options(options),
            status_label=self.config.status_label,
            fallback_address=self.config.fallback_address,
        )

    def add_watermark(
        self,
        image_bytes: bytes,
        address: str | None = None,
        options: WatermarkOptions | Mapping[str, Any] | None = None,
    ) -> WatermarkResult:
        try:
            decoded = decode_image_bytes(image_bytes)
            metadata = decoded.metadata
            timestamp = self.current_timestamp()
            panel = self.layout(metadata.width, metadata.height, address, options, timestamp=timestamp)
            composed = composite_overlay(decoded.image, panel.overlay, font_path=self.config.font_path)
            data = encode_image(composed, metadata.format, keep_alpha=decoded.has_alpha)
        except WatermarkError:
            raise
        except Exception as exc:
            raise ProcessingError(str(exc)) from exc
        return WatermarkResult(
            data=data,
            format=metadata.format,
            width=metadata.width,
            height=metadata.height,
            original_size=len(image_bytes),
            timestamp=timestamp,
        )

    def process(self, request: WatermarkRequest) -> WatermarkResult:
        return self.add_watermark(request.image_bytes, request.address, request.options)
