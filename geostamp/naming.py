from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from geostamp.constants import FORMAT_EXTENSIONS

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]')


def sanitize_token(value: str | None, fallback: str = "NA") -> str:
    text = (value or "").strip()
    if not text:
        text = fallback
    text = INVALID_FILENAME_CHARS.sub("_", text)
    text = re.sub(r"\s+", "_", text)
    text = text.strip(" ._")
    return text or fallback


def sanitize_filename(value: str, fallback: str = "output") -> str:
    text = INVALID_FILENAME_CHARS.sub("_", value).strip()
    text = text.strip(" .")
    return text or fallback


def build_output_name(
    name_template: str,
    source: Path,
    image_format: str,
    *,
    processed_at: datetime | None = None,
    json_output: bool = False,
) -> str:
    """Render the output file name for ``source``.

    Tokens: ``{stem}``, ``{date}`` (``YYYYmmdd_HHMMSS``), ``{format}`` and
    ``{ext}``. JSON envelopes always get a ``.json`` suffix.
    """
    ext = FORMAT_EXTENSIONS.get(image_format, image_format).lower().lstrip(".")
    stamp = (processed_at or datetime.now()).strftime("%Y%m%d_%H%M%S")
    values = {
        "stem": sanitize_token(source.stem, fallback="image"),
        "date": stamp,
        "format": image_format,
        "ext": ext,
    }
    try:
        rendered = name_template.format(**values)
    except KeyError as exc:
        missing = str(exc).strip("'")
        raise ValueError(f"name template contains unknown key: {missing}") from exc

    rendered = sanitize_filename(rendered, fallback=f"{values['stem']}__stamped.{ext}")
    if not Path(rendered).suffix:
        rendered = f"{rendered}.{ext}"
    if json_output:
        rendered = f"{rendered}.json"
    return rendered
