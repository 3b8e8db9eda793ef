"""Declarative overlay description.

The panel compositor emits a flat list of typed draw commands in absolute
image coordinates. Two consumers exist: :func:`to_svg` serializes the list
to SVG markup, and :mod:`geostamp.render.raster` paints it with Pillow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union
from xml.sax.saxutils import escape

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}

BASELINE_ALPHABETIC = "alphabetic"
BASELINE_MIDDLE = "middle"


@dataclass(slots=True, frozen=True)
class RectCommand:
    x: float
    y: float
    width: float
    height: float
    fill: str
    radius: float = 0


@dataclass(slots=True, frozen=True)
class CircleCommand:
    cx: float
    cy: float
    r: float
    fill: str
    opacity: float | None = None


@dataclass(slots=True, frozen=True)
class PathCommand:
    """Open polyline stroked with round caps and joins."""

    points: tuple[tuple[float, float], ...]
    stroke: str
    stroke_width: float


@dataclass(slots=True, frozen=True)
class TextCommand:
    x: float
    y: float
    text: str
    font_size: int
    fill: str
    font_weight: int = 400
    baseline: str = BASELINE_ALPHABETIC


@dataclass(slots=True, frozen=True)
class ImageCommand:
    x: float
    y: float
    width: float
    height: float
    href: str


DrawCommand = Union[RectCommand, CircleCommand, PathCommand, TextCommand, ImageCommand]


@dataclass(slots=True, frozen=True)
class Overlay:
    width: int
    height: int
    font_family: str
    commands: tuple[DrawCommand, ...]

    def to_svg(self) -> str:
        return to_svg(self)


def escape_markup(value: object) -> str:
    return escape(str(value), _ATTR_ENTITIES)


def _num(value: float) -> str:
    if isinstance(value, int):
        return str(value)
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _path_data(points: tuple[tuple[float, float], ...]) -> str:
    parts: list[str] = []
    for index, (x, y) in enumerate(points):
        parts.append(f"{'M' if index == 0 else 'L'} {_num(x)} {_num(y)}")
    return " ".join(parts)


def _command_markup(command: DrawCommand) -> str:
    if isinstance(command, RectCommand):
        radius = _num(command.radius)
        return (
            f'<rect x="{_num(command.x)}" y="{_num(command.y)}" width="{_num(command.width)}" '
            f'height="{_num(command.height)}" rx="{radius}" ry="{radius}" fill="{escape_markup(command.fill)}"/>'
        )
    if isinstance(command, CircleCommand):
        opacity = f' opacity="{_num(command.opacity)}"' if command.opacity is not None else ""
        return (
            f'<circle cx="{_num(command.cx)}" cy="{_num(command.cy)}" r="{_num(command.r)}" '
            f'fill="{escape_markup(command.fill)}"{opacity}/>'
        )
    if isinstance(command, PathCommand):
        return (
            f'<path d="{_path_data(command.points)}" stroke="{escape_markup(command.stroke)}" '
            f'stroke-width="{_num(command.stroke_width)}" fill="none" '
            'stroke-linecap="round" stroke-linejoin="round"/>'
        )
    if isinstance(command, TextCommand):
        baseline = ' dominant-baseline="middle"' if command.baseline == BASELINE_MIDDLE else ""
        return (
            f'<text x="{_num(command.x)}" y="{_num(command.y)}"{baseline} font-size="{command.font_size}" '
            f'font-weight="{command.font_weight}" fill="{escape_markup(command.fill)}">'
            f"{escape_markup(command.text)}</text>"
        )
    if isinstance(command, ImageCommand):
        return (
            f'<image href="{escape_markup(command.href)}" x="{_num(command.x)}" y="{_num(command.y)}" '
            f'width="{_num(command.width)}" height="{_num(command.height)}"/>'
        )
    raise TypeError(f"unknown draw command: {type(command).__name__}")


def to_svg(overlay: Overlay) -> str:
    lines = [
        f'<svg width="{overlay.width}" height="{overlay.height}" xmlns="{SVG_NAMESPACE}">',
        f"  <style>text {{ font-family: {escape_markup(overlay.font_family)}; }}</style>",
    ]
    lines.extend(f"  {_command_markup(command)}" for command in overlay.commands)
    lines.append("</svg>")
    return "\n".join(lines) + "\n"
