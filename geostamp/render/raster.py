from __future__ import annotations

import base64
import binascii
import io
import math
import re
from pathlib import Path
from typing import Callable

from PIL import Image, ImageColor, ImageDraw, ImageFont

from geostamp.render.overlay import (
    BASELINE_MIDDLE,
    CircleCommand,
    DrawCommand,
    ImageCommand,
    Overlay,
    PathCommand,
    RectCommand,
    TextCommand,
)
from geostamp.render.typography import load_font

RGBA = tuple[int, int, int, int]
Painter = Callable[[ImageDraw.ImageDraw, Image.Image, int, int], None]

_RGBA_FUNCTION = re.compile(
    r"^rgba\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*([0-9]*\.?[0-9]+)(%?)\s*\)$",
    re.IGNORECASE,
)
_DATA_URI = re.compile(r"^data:image/[a-z0-9.+-]+;base64,(?P<payload>.+)$", re.IGNORECASE | re.DOTALL)


def parse_color(value: str, opacity: float | None = None) -> RGBA:
    """Parse a CSS colour, including ``rgba()`` with a fractional alpha.

    ``ImageColor`` covers hex, names and ``rgb()``; the CSS ``rgba(r, g, b, 0.1)``
    form is handled here. Raises ``ValueError`` for anything else.
    """
    text = str(value or "").strip()
    match = _RGBA_FUNCTION.match(text)
    if match:
        r, g, b = (min(255, int(part)) for part in match.group(1, 2, 3))
        alpha = float(match.group(4))
        if match.group(5):
            alpha /= 100.0
        elif alpha > 1.0:
            # 0-255 integer alpha
            alpha /= 255.0
        a = int(round(max(0.0, min(1.0, alpha)) * 255))
    else:
        r, g, b, a = ImageColor.getcolor(text, "RGBA")
    if opacity is not None:
        a = int(round(a * max(0.0, min(1.0, opacity))))
    return (r, g, b, a)


def decode_data_uri(href: str) -> Image.Image:
    match = _DATA_URI.match(href.strip())
    if not match:
        raise ValueError("logo must be a base64 data:image URI")
    try:
        payload = base64.b64decode(match.group("payload"), validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"logo data URI is not valid base64: {exc}") from exc
    with Image.open(io.BytesIO(payload)) as logo:
        return logo.convert("RGBA").copy()


def _paint_clipped(canvas: Image.Image, bbox: tuple[float, float, float, float], painter: Painter) -> None:
    left = max(0, int(math.floor(bbox[0])))
    top = max(0, int(math.floor(bbox[1])))
    right = min(canvas.width, int(math.ceil(bbox[2])))
    bottom = min(canvas.height, int(math.ceil(bbox[3])))
    if right <= left or bottom <= top:
        return
    tile = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
    painter(ImageDraw.Draw(tile), tile, left, top)
    canvas.alpha_composite(tile, (left, top))


def _paint_rect(canvas: Image.Image, command: RectCommand) -> None:
    if command.width <= 0 or command.height <= 0:
        return
    fill = parse_color(command.fill)
    radius = max(0, min(command.radius, command.width / 2, command.height / 2))

    def painter(draw: ImageDraw.ImageDraw, _tile: Image.Image, ox: int, oy: int) -> None:
        box = [
            command.x - ox,
            command.y - oy,
            command.x + command.width - ox - 1,
            command.y + command.height - oy - 1,
        ]
        if radius >= 1:
            draw.rounded_rectangle(box, radius=int(radius), fill=fill)
        else:
            draw.rectangle(box, fill=fill)

    _paint_clipped(canvas, (command.x, command.y, command.x + command.width, command.y + command.height), painter)


def _paint_circle(canvas: Image.Image, command: CircleCommand) -> None:
    if command.r <= 0:
        return
    fill = parse_color(command.fill, opacity=command.opacity)
    bbox = (command.cx - command.r, command.cy - command.r, command.cx + command.r, command.cy + command.r)

    def painter(draw: ImageDraw.ImageDraw, _tile: Image.Image, ox: int, oy: int) -> None:
        draw.ellipse([bbox[0] - ox, bbox[1] - oy, bbox[2] - ox, bbox[3] - oy], fill=fill)

    _paint_clipped(canvas, bbox, painter)


def _paint_path(canvas: Image.Image, command: PathCommand) -> None:
    if len(command.points) < 2:
        return
    stroke = parse_color(command.stroke)
    width = max(1, int(round(command.stroke_width)))
    cap = command.stroke_width / 2
    xs = [point[0] for point in command.points]
    ys = [point[1] for point in command.points]
    bbox = (min(xs) - cap - 1, min(ys) - cap - 1, max(xs) + cap + 1, max(ys) + cap + 1)

    def painter(draw: ImageDraw.ImageDraw, _tile: Image.Image, ox: int, oy: int) -> None:
        shifted = [(x - ox, y - oy) for x, y in command.points]
        draw.line(shifted, fill=stroke, width=width, joint="curve")
        for x, y in (shifted[0], shifted[-1]):
            draw.ellipse([x - cap, y - cap, x + cap, y + cap], fill=stroke)

    _paint_clipped(canvas, bbox, painter)


def _paint_text(canvas: Image.Image, command: TextCommand, font: ImageFont.ImageFont) -> None:
    if not command.text:
        return
    fill = parse_color(command.fill)
    measure = ImageDraw.Draw(canvas)
    if isinstance(font, ImageFont.FreeTypeFont):
        anchor = "lm" if command.baseline == BASELINE_MIDDLE else "ls"
        origin = (command.x, command.y)
    else:
        # bitmap fonts only support top-left anchoring
        anchor = None
        _, top, _, bottom = measure.textbbox((0, 0), command.text, font=font)
        height = bottom - top
        offset = height / 2 if command.baseline == BASELINE_MIDDLE else height
        origin = (command.x, command.y - offset)
    bbox = measure.textbbox(origin, command.text, font=font, anchor=anchor)

    def painter(draw: ImageDraw.ImageDraw, _tile: Image.Image, ox: int, oy: int) -> None:
        draw.text((origin[0] - ox, origin[1] - oy), command.text, font=font, fill=fill, anchor=anchor)

    _paint_clipped(canvas, (bbox[0] - 1, bbox[1] - 1, bbox[2] + 1, bbox[3] + 1), painter)


def _paint_image(canvas: Image.Image, command: ImageCommand) -> None:
    size = (max(1, int(round(command.width))), max(1, int(round(command.height))))
    logo = decode_data_uri(command.href).resize(size, Image.Resampling.LANCZOS)
    bbox = (command.x, command.y, command.x + size[0], command.y + size[1])

    def painter(_draw: ImageDraw.ImageDraw, tile: Image.Image, ox: int, oy: int) -> None:
        tile.paste(logo, (int(round(command.x)) - ox, int(round(command.y)) - oy))

    _paint_clipped(canvas, bbox, painter)


def rasterize_overlay(overlay: Overlay, font_path: Path | None = None) -> Image.Image:
    """Paint ``overlay`` onto a transparent RGBA layer of the same size.

    Commands are painted in order, each alpha-composited over the previous
    ones.
    """
    layer = Image.new("RGBA", (overlay.width, overlay.height), (0, 0, 0, 0))
    for command in overlay.commands:
        if isinstance(command, RectCommand):
            _paint_rect(layer, command)
        elif isinstance(command, CircleCommand):
            _paint_circle(layer, command)
        elif isinstance(command, PathCommand):
            _paint_path(layer, command)
        elif isinstance(command, TextCommand):
            font = load_font(font_path, command.font_size, bold=command.font_weight >= 600)
            _paint_text(layer, command, font)
        elif isinstance(command, ImageCommand):
            _paint_image(layer, command)
        else:
            raise TypeError(f"unknown draw command: {type(command).__name__}")
    return layer


def composite_overlay(image: Image.Image, overlay: Overlay, font_path: Path | None = None) -> Image.Image:
    if image.size != (overlay.width, overlay.height):
        raise ValueError(
            f"overlay size {overlay.width}x{overlay.height} does not match image size {image.width}x{image.height}"
        )
    canvas = image.convert("RGBA")
    canvas.alpha_composite(rasterize_overlay(overlay, font_path=font_path), (0, 0))
    return canvas
