from __future__ import annotations

import copy
from dataclasses import fields
from typing import Any, Mapping

from geostamp.models import ThemeOptions, WatermarkOptions
from geostamp.render.raster import parse_color

THEME_PRESETS: dict[str, dict[str, str]] = {
    "classic": {
        "panel_background": "rgba(0, 0, 0, 0.1)",
        "text_color": "#FFFFFF",
        "time_color": "#0A0A0A",
        "badge_color": "#FFFFFF",
    },
    "dark": {
        "panel_background": "rgba(0, 0, 0, 0.45)",
        "text_color": "#F0F0F0",
        "time_color": "#0A0A0A",
        "badge_color": "#FFFFFF",
    },
    "light": {
        "panel_background": "rgba(255, 255, 255, 0.55)",
        "text_color": "#1A1A1A",
        "time_color": "#FFFFFF",
        "badge_color": "#222222",
    },
}

_COLOR_FIELDS = (
    "panel_background",
    "text_color",
    "time_color",
    "badge_color",
    "stripe_color",
    "verified_color",
)

PANEL_WIDTH_FRACTION_MIN = 0.3
PANEL_WIDTH_FRACTION_MAX = 0.9


def _clamp_int(value: Any, minimum: int, maximum: int | None, fallback: int) -> int:
    try:
        parsed = int(float(value))
    except (TypeError, ValueError):
        parsed = fallback
    if maximum is not None:
        parsed = min(maximum, parsed)
    return max(minimum, parsed)


def _clamp_float(value: Any, minimum: float, maximum: float, fallback: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = fallback
    return max(minimum, min(maximum, parsed))


def _normalize_color(value: Any, default: str) -> str:
    text = str(value or "").strip()
    if not text:
        return default
    try:
        parse_color(text)
    except ValueError:
        return default
    return text


def normalize_theme(data: Mapping[str, Any] | None, defaults: ThemeOptions | None = None) -> ThemeOptions:
    base = defaults or ThemeOptions()
    data = dict(data or {})
    preset = str(data.pop("preset", "") or "").strip().lower()
    merged: dict[str, Any] = {}
    if preset in THEME_PRESETS:
        merged.update(THEME_PRESETS[preset])
    merged.update(data)

    font_family = str(merged.get("font_family") or "").strip() or base.font_family
    colors = {name: _normalize_color(merged.get(name), getattr(base, name)) for name in _COLOR_FIELDS}
    return ThemeOptions(
        outer_padding=_clamp_int(merged.get("outer_padding", base.outer_padding), 0, None, base.outer_padding),
        inner_padding=_clamp_int(merged.get("inner_padding", base.inner_padding), 0, None, base.inner_padding),
        line_gap=_clamp_int(merged.get("line_gap", base.line_gap), 1, None, base.line_gap),
        font_family=font_family,
        **colors,
    )


def normalize_options(data: Mapping[str, Any] | None, defaults: WatermarkOptions | None = None) -> WatermarkOptions:
    """Merge a loose option mapping over ``defaults`` and clamp every value.

    Unknown keys are ignored. ``theme`` may be a mapping of overrides or the
    name of a preset.
    """
    base = defaults or WatermarkOptions()
    data = dict(data or {})

    align = str(data.get("align") or base.align).strip().lower()
    theme_data = data.get("theme")
    if isinstance(theme_data, str):
        theme_data = {"preset": theme_data}
    elif not isinstance(theme_data, Mapping):
        theme_data = None

    logo = data.get("logo", base.logo)
    logo = str(logo).strip() if logo else None

    return WatermarkOptions(
        align="right" if align == "right" else "left",
        panel_width_fraction=_clamp_float(
            data.get("panel_width_fraction", base.panel_width_fraction),
            PANEL_WIDTH_FRACTION_MIN,
            PANEL_WIDTH_FRACTION_MAX,
            base.panel_width_fraction,
        ),
        max_address_lines=_clamp_int(data.get("max_address_lines", base.max_address_lines), 1, None, base.max_address_lines),
        logo=logo or None,
        logo_size_px=_clamp_int(data.get("logo_size_px", base.logo_size_px), 1, None, base.logo_size_px),
        theme=normalize_theme(theme_data, base.theme),
    )


def options_to_dict(options: WatermarkOptions) -> dict[str, Any]:
    payload = {f.name: copy.deepcopy(getattr(options, f.name)) for f in fields(options) if f.name != "theme"}
    payload["theme"] = {f.name: getattr(options.theme, f.name) for f in fields(options.theme)}
    return payload
