from __future__ import annotations

import copy
import os
import platform
from pathlib import Path
from typing import Any

import yaml

from geostamp.constants import (
    ADDRESS_ENV_VAR,
    DEFAULT_FALLBACK_ADDRESS,
    DEFAULT_MAX_INPUT_BYTES,
    DEFAULT_STATUS_LABEL,
    DEFAULT_TIMEZONE,
)
from geostamp.models import AppConfig
from geostamp.options_loader import normalize_options

DEFAULT_CONFIG: dict[str, Any] = {
    "timezone": DEFAULT_TIMEZONE,
    "status_label": DEFAULT_STATUS_LABEL,
    "fallback_address": DEFAULT_FALLBACK_ADDRESS,
    "font_path": None,
    "max_input_bytes": DEFAULT_MAX_INPUT_BYTES,
    "watermark": {
        "align": "left",
        "panel_width_fraction": 0.68,
        "max_address_lines": 3,
        "logo": None,
        "logo_size_px": 42,
        "theme": {
            "outer_padding": 20,
            "inner_padding": 20,
            "line_gap": 28,
            "font_family": "Arial",
            "panel_background": "rgba(0, 0, 0, 0.1)",
            "text_color": "#FFFFFF",
            "time_color": "#0A0A0A",
            "badge_color": "#FFFFFF",
            "stripe_color": "#FFCC33",
            "verified_color": "#00D084",
        },
    },
    "output": {
        "name_template": "{stem}__stamped.{ext}",
        "skip_existing": True,
    },
}


def get_user_data_dir() -> Path:
    """Return the per-user directory that holds ``Config/config.yaml``."""
    system_name = platform.system().lower()
    if system_name == "windows":
        base = (
            os.environ.get("APPDATA")
            or os.environ.get("LOCALAPPDATA")
            or str(Path.home() / "AppData" / "Roaming")
        )
        return Path(base) / "GeoStamp"
    if system_name == "darwin":
        return Path.home() / "Library" / "Application Support" / "GeoStamp"

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "GeoStamp"
    return Path.home() / ".config" / "GeoStamp"


def get_config_path() -> Path:
    return get_user_data_dir() / "Config" / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    text = cfg_path.read_text(encoding="utf-8")
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        loaded = {}
    return _deep_merge(DEFAULT_CONFIG, loaded)


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return cfg_path


def build_app_config(cfg: dict[str, Any] | None = None) -> AppConfig:
    """Freeze a loaded config dict into the value passed to the service."""
    cfg = _deep_merge(DEFAULT_CONFIG, cfg or {})
    output = cfg.get("output") or {}
    font_path = cfg.get("font_path")
    try:
        max_input_bytes = int(cfg.get("max_input_bytes") or DEFAULT_MAX_INPUT_BYTES)
    except (TypeError, ValueError):
        max_input_bytes = DEFAULT_MAX_INPUT_BYTES
    default_address = os.environ.get(ADDRESS_ENV_VAR, "").strip() or None
    return AppConfig(
        timezone=str(cfg.get("timezone") or DEFAULT_TIMEZONE),
        status_label=str(cfg.get("status_label") or DEFAULT_STATUS_LABEL),
        fallback_address=str(cfg.get("fallback_address") or DEFAULT_FALLBACK_ADDRESS),
        default_address=default_address,
        font_path=Path(font_path).expanduser() if font_path else None,
        options=normalize_options(cfg.get("watermark") or {}),
        name_template=str(output.get("name_template") or DEFAULT_CONFIG["output"]["name_template"]),
        skip_existing=bool(output.get("skip_existing", True)),
        max_input_bytes=max(1, max_input_bytes),
    )
