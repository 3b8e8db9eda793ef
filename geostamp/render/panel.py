from __future__ import annotations

import math
from dataclasses import dataclass

from geostamp.constants import AVG_CHAR_WIDTH, DEFAULT_FALLBACK_ADDRESS, DEFAULT_STATUS_LABEL
from geostamp.models import Box, OverlayGeometry, WatermarkOptions
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
from geostamp.render.typography import estimate_width, layout_text_block

MIN_PANEL_WIDTH = 260
PANEL_RADIUS = 18
MIN_BADGE_WIDTH = 200
MIN_BADGE_HEIGHT = 56
# stripe + clock icon + gap before the time text, and the trailing gap after it
BADGE_TEXT_LEFT = 40
BADGE_TEXT_RIGHT = 40
CLOCK_RADIUS = 12
CHECK_RADIUS = 12
VERIFIED_GAP_TOP = 12
ICON_STROKE = "#FFFFFF"


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(slots=True, frozen=True)
class PanelLayout:
    geometry: OverlayGeometry
    overlay: Overlay

    def to_svg(self) -> str:
        return self.overlay.to_svg()


def compute_panel_width(image_width: int, fraction: float, outer_padding: int) -> int:
    """Preferred width is ``fraction`` of the image, never under 260 px.

    The image edge wins over the 260 px floor: on narrow images the panel
    shrinks to whatever fits inside the outer padding (at least 1 px).
    """
    preferred = max(_round(image_width * fraction), MIN_PANEL_WIDTH)
    return max(1, min(preferred, image_width - 2 * outer_padding))


def compute_base_font(image_width: int) -> int:
    return max(16, min(48, _round(image_width * 0.025)))


def compute_geometry(
    image_width: int,
    image_height: int,
    timestamp: str,
    address: str | None,
    options: WatermarkOptions,
    fallback_address: str = DEFAULT_FALLBACK_ADDRESS,
) -> OverlayGeometry:
    theme = options.theme
    pad = theme.outer_padding
    inner = theme.inner_padding
    gap = theme.line_gap

    panel_width = compute_panel_width(image_width, options.panel_width_fraction, pad)
    panel_x = image_width - pad - panel_width if options.align == "right" else pad
    text_max_width = panel_width - 2 * inner

    base = compute_base_font(image_width)
    time_font = base + 6
    address_font = base - 2
    verified_font = base - 4

    badge_height = max(MIN_BADGE_HEIGHT, _round(base * 1.45))
    badge_radius = _round(base * 0.4)
    stripe_width = max(8, _round(base * 0.35))
    time_width = estimate_width(timestamp or "", time_font, AVG_CHAR_WIDTH)
    badge_width = max(
        MIN_BADGE_WIDTH,
        min(_round(stripe_width + BADGE_TEXT_LEFT + time_width + BADGE_TEXT_RIGHT), text_max_width),
    )

    block = layout_text_block(
        address or fallback_address,
        max_width=text_max_width,
        font_size=address_font,
        max_lines=options.max_address_lines,
    )

    logo_size = max(16, options.logo_size_px)
    row_height = max(logo_size, verified_font)

    # offsets relative to the panel top
    badge_top = inner
    title_top = badge_top + badge_height + _round(gap * 0.6)
    address_top = title_top + gap
    verified_top = address_top + len(block.lines) * gap + VERIFIED_GAP_TOP
    bottom_padding = max(24, math.ceil(row_height / 2) + 10)
    panel_height = verified_top + row_height + bottom_padding

    panel_y = max(pad, image_height - pad - panel_height)

    return OverlayGeometry(
        image_width=image_width,
        image_height=image_height,
        panel=Box(panel_x, panel_y, panel_width, panel_height),
        base_font=base,
        time_font=time_font,
        address_font=address_font,
        verified_font=verified_font,
        text_max_width=text_max_width,
        badge=Box(panel_x + inner, panel_y + badge_top, badge_width, badge_height),
        badge_radius=badge_radius,
        stripe_width=stripe_width,
        address=block,
        address_baselines=tuple(panel_y + address_top + index * gap for index in range(len(block.lines))),
        verified_row=Box(panel_x + inner, panel_y + verified_top, text_max_width, row_height),
        logo_size=logo_size,
        bottom_padding=bottom_padding,
    )


def _badge_commands(geometry: OverlayGeometry, timestamp: str, options: WatermarkOptions) -> list[DrawCommand]:
    theme = options.theme
    badge = geometry.badge
    stripe = geometry.stripe_width
    mid_y = badge.y + badge.height / 2
    clock_x = badge.x + stripe + 18
    return [
        RectCommand(badge.x, badge.y, badge.width, badge.height, fill=theme.badge_color, radius=geometry.badge_radius),
        RectCommand(badge.x, badge.y, stripe, badge.height, fill=theme.stripe_color, radius=geometry.badge_radius),
        CircleCommand(clock_x, mid_y, CLOCK_RADIUS, fill=theme.stripe_color),
        PathCommand(((clock_x, mid_y - 7), (clock_x, mid_y), (clock_x + 7, mid_y)), stroke=ICON_STROKE, stroke_width=3),
        TextCommand(
            badge.x + stripe + BADGE_TEXT_LEFT,
            mid_y + _round(geometry.time_font * 0.32),
            timestamp or "",
            font_size=geometry.time_font,
            fill=theme.time_color,
            font_weight=800,
        ),
    ]


def _verified_commands(geometry: OverlayGeometry, options: WatermarkOptions, status_label: str) -> list[DrawCommand]:
    theme = options.theme
    row = geometry.verified_row
    mid_y = row.y + row.height / 2
    commands: list[DrawCommand] = []
    if options.logo:
        logo = geometry.logo_size
        commands.append(CircleCommand(row.x + logo / 2 + 1, mid_y, logo / 2 + 2, fill="#FFFFFF", opacity=0.9))
        commands.append(ImageCommand(row.x + 1, row.y + (row.height - logo) / 2, logo, logo, href=options.logo))
        label_x = row.x + logo + 10
    else:
        commands.append(CircleCommand(row.x + CHECK_RADIUS, mid_y, CHECK_RADIUS, fill=theme.verified_color))
        commands.append(
            PathCommand(
                ((row.x + 6, mid_y), (row.x + 10, mid_y + 4), (row.x + 18, mid_y - 4)),
                stroke=ICON_STROKE,
                stroke_width=3,
            )
        )
        label_x = row.x + 28
    commands.append(
        TextCommand(
            label_x,
            mid_y,
            status_label,
            font_size=geometry.verified_font,
            fill=theme.text_color,
            font_weight=700,
            baseline=BASELINE_MIDDLE,
        )
    )
    return commands


def build_overlay(
    geometry: OverlayGeometry,
    timestamp: str,
    options: WatermarkOptions,
    status_label: str = DEFAULT_STATUS_LABEL,
) -> Overlay:
    theme = options.theme
    panel = geometry.panel
    commands: list[DrawCommand] = [
        RectCommand(panel.x, panel.y, panel.width, panel.height, fill=theme.panel_background, radius=PANEL_RADIUS),
    ]
    commands.extend(_badge_commands(geometry, timestamp, options))
    for line, baseline in zip(geometry.address.lines, geometry.address_baselines):
        commands.append(
            TextCommand(
                panel.x + theme.inner_padding,
                baseline,
                line,
                font_size=geometry.address_font,
                fill=theme.text_color,
                font_weight=500,
            )
        )
    commands.extend(_verified_commands(geometry, options, status_label))
    return Overlay(
        width=geometry.image_width,
        height=geometry.image_height,
        font_family=theme.font_family,
        commands=tuple(commands),
    )


def layout_panel(
    image_width: int,
    image_height: int,
    timestamp: str,
    address: str | None,
    options: WatermarkOptions | None = None,
    *,
    status_label: str = DEFAULT_STATUS_LABEL,
    fallback_address: str = DEFAULT_FALLBACK_ADDRESS,
) -> PanelLayout:
    """Lay out the watermark panel for an ``image_width`` x ``image_height`` image.

    The panel sits in the bottom-left (or bottom-right) corner and stacks the
    time badge, the wrapped address and the verified row. Callers must have
    rejected non-positive dimensions already.
    """
    options = options or WatermarkOptions()
    geometry = compute_geometry(
        image_width,
        image_height,
        timestamp,
        address,
        options,
        fallback_address=fallback_address,
    )
    return PanelLayout(geometry=geometry, overlay=build_overlay(geometry, timestamp, options, status_label))
