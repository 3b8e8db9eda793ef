from __future__ import annotations

import platform
import re
from functools import lru_cache
from pathlib import Path

from PIL import ImageFont

from geostamp.constants import AVG_CHAR_WIDTH, ELLIPSIS, EMPTY_LINE
from geostamp.models import TextBlock

_COMMA_SPLIT = re.compile(r",\s*")


def _system_font_candidates(bold: bool = False) -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        return [
            Path(r"C:\Windows\Fonts\arialbd.ttf" if bold else r"C:\Windows\Fonts\arial.ttf"),
            Path(r"C:\Windows\Fonts\segoeui.ttf"),
        ]
    if "darwin" in system:
        return [
            Path("/System/Library/Fonts/Supplemental/Arial Bold.ttf" if bold else "/System/Library/Fonts/Supplemental/Arial.ttf"),
            Path("/Library/Fonts/Arial Unicode.ttf"),
        ]
    if bold:
        return [
            Path("/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf"),
            Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
            Path("/usr/share/fonts/truetype/noto/NotoSans-Bold.ttf"),
        ]
    return [
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf"),
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf"),
    ]


@lru_cache(maxsize=64)
def load_font(font_path: Path | None, size: int, bold: bool = False) -> ImageFont.ImageFont:
    candidates: list[Path] = []
    if font_path:
        candidates.append(font_path)
    candidates.extend(_system_font_candidates(bold=bold))
    for candidate in candidates:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size=size)
            except OSError:
                continue
    try:
        return ImageFont.load_default(size=size)
    except TypeError:
        # Pillow < 10.1 has no scalable default font
        return ImageFont.load_default()


def estimate_width(text: str, font_size: float, avg_char_width: float = AVG_CHAR_WIDTH) -> float:
    """Approximate rendered width of ``text`` in pixels.

    No glyph metrics are consulted: every character counts as
    ``font_size * avg_char_width``.
    """
    return len(text or "") * font_size * avg_char_width


def _tokenize(text: str, prefer_comma_break: bool) -> list[str]:
    if not prefer_comma_break:
        return text.split()
    segments = _COMMA_SPLIT.split(text)
    rejoined = " ".join(
        segment + "," if index < len(segments) - 1 else segment
        for index, segment in enumerate(segments)
    )
    return rejoined.split()


def wrap_words(
    text: str | None,
    max_width: float,
    font_size: float,
    avg_char_width: float = AVG_CHAR_WIDTH,
    prefer_comma_break: bool = True,
) -> list[str]:
    """Greedily wrap ``text`` into lines no wider than ``max_width``.

    Tokens are never split: a token wider than ``max_width`` on its own is
    emitted as a single overflowing line.
    """
    clean = (text or "").strip()
    if not clean:
        return [EMPTY_LINE]

    lines: list[str] = []
    line = ""
    for word in _tokenize(clean, prefer_comma_break):
        candidate = f"{line} {word}" if line else word
        if estimate_width(candidate, font_size, avg_char_width) <= max_width:
            line = candidate
            continue
        if line:
            lines.append(line)
        if estimate_width(word, font_size, avg_char_width) > max_width:
            lines.append(word)
            line = ""
        else:
            line = word
    if line:
        lines.append(line)
    return lines or [EMPTY_LINE]


def clamp_lines(
    lines: list[str],
    max_lines: int,
    max_width: float,
    font_size: float,
    avg_char_width: float = AVG_CHAR_WIDTH,
) -> list[str]:
    """Reduce ``lines`` to at most ``max_lines``, ellipsizing the overflow.

    The kept prefix is returned verbatim. Everything from the last allowed
    line onward is merged, trimmed word by word until it fits together with
    the ellipsis, and terminated by ``…``.
    """
    max_lines = max(1, int(max_lines))
    if len(lines) <= max_lines:
        return list(lines)

    kept = list(lines[:max_lines])
    overflow = " ".join([kept[-1], *lines[max_lines:]])
    while estimate_width(overflow + ELLIPSIS, font_size, avg_char_width) > max_width and " " in overflow:
        overflow = overflow[: overflow.rindex(" ")]
    kept[-1] = (overflow or kept[-1]) + ELLIPSIS
    return kept


def layout_text_block(
    text: str | None,
    *,
    max_width: int,
    font_size: int,
    max_lines: int,
    avg_char_width: float = AVG_CHAR_WIDTH,
) -> TextBlock:
    lines = wrap_words(text, max_width, font_size, avg_char_width, prefer_comma_break=True)
    lines = clamp_lines(lines, max_lines, max_width, font_size, avg_char_width)
    return TextBlock(lines=tuple(lines), font_size=font_size, max_width=max_width)
