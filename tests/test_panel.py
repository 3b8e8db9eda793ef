import pytest

from geostamp.models import ThemeOptions, WatermarkOptions
from geostamp.render.overlay import ImageCommand, PathCommand, TextCommand
from geostamp.render.panel import compute_base_font, compute_panel_width, layout_panel

TIMESTAMP = "19 Oct 2026 14:03:22"


def test_base_font_for_full_hd_width_is_48() -> None:
    assert compute_base_font(1920) == 48


@pytest.mark.parametrize(
    ("width", "expected"),
    [(100, 16), (640, 16), (1000, 25), (1060, 27), (4000, 48)],
)
def test_base_font_is_clamped_and_rounded_half_up(width: int, expected: int) -> None:
    assert compute_base_font(width) == expected


def test_panel_width_uses_fraction_of_wide_images() -> None:
    assert compute_panel_width(1920, 0.68, 20) == 1306


def test_panel_width_floor_is_260_when_room_allows() -> None:
    assert compute_panel_width(320, 0.68, 20) == 260


def test_panel_width_shrinks_below_floor_on_narrow_images() -> None:
    assert compute_panel_width(100, 0.68, 20) == 60
    assert compute_panel_width(1, 0.68, 20) == 1


def test_layout_full_hd_geometry() -> None:
    layout = layout_panel(1920, 1080, TIMESTAMP, "Jakarta, Indonesia", WatermarkOptions())
    geometry = layout.geometry

    assert geometry.base_font == 48
    assert (geometry.time_font, geometry.address_font, geometry.verified_font) == (54, 46, 44)
    assert geometry.panel.x == 20
    assert geometry.panel.width == 1306
    assert geometry.text_max_width == 1266
    assert geometry.badge.height == 70
    assert geometry.stripe_width == 17
    assert geometry.badge.width == 723
    assert geometry.address.lines == ("Jakarta, Indonesia",)
    assert geometry.panel.height == 251
    assert geometry.panel.y == 1080 - 20 - 251
    assert geometry.panel.bottom == 1080 - 20
    assert geometry.address_baselines == (geometry.panel.y + 135,)
    assert geometry.verified_row.y == geometry.panel.y + 175
    assert geometry.bottom_padding == 32


def test_layout_right_alignment_mirrors_panel() -> None:
    options = WatermarkOptions(align="right")
    geometry = layout_panel(1920, 1080, TIMESTAMP, "Jakarta", options).geometry
    assert geometry.panel.right == 1920 - 20


def test_layout_clamps_panel_to_top_padding_on_short_images() -> None:
    geometry = layout_panel(800, 120, TIMESTAMP, "Jakarta", WatermarkOptions()).geometry
    assert geometry.panel.y == 20


@pytest.mark.parametrize("width", [1, 30, 100, 259, 260, 300, 1024, 6000])
@pytest.mark.parametrize("height", [1, 50, 400, 3000])
def test_panel_bounds_hold_for_any_image(width: int, height: int) -> None:
    options = WatermarkOptions()
    pad = options.theme.outer_padding
    geometry = layout_panel(width, height, TIMESTAMP, "Somewhere, Earth", options).geometry

    assert geometry.panel.y >= pad
    assert geometry.panel.width >= 1
    if width - 2 * pad >= 260:
        assert 260 <= geometry.panel.width <= width - 2 * pad
    else:
        assert geometry.panel.width == max(1, width - 2 * pad)


def test_empty_address_falls_back_to_literal() -> None:
    geometry = layout_panel(1920, 1080, TIMESTAMP, "", WatermarkOptions()).geometry
    assert geometry.address.lines == ("location unavailable",)


def test_long_address_is_limited_to_max_lines() -> None:
    address = "Segment one here, segment two here, segment three here, segment four here, segment five here"
    options = WatermarkOptions(max_address_lines=3)
    geometry = layout_panel(400, 900, TIMESTAMP, address, options).geometry

    assert len(geometry.address.lines) == 3
    assert geometry.address.lines[-1].endswith("…")
    assert len(geometry.address_baselines) == 3


def test_layout_is_deterministic() -> None:
    options = WatermarkOptions(theme=ThemeOptions(outer_padding=32))
    first = layout_panel(1280, 720, TIMESTAMP, "Bandung, Jawa Barat", options).to_svg()
    second = layout_panel(1280, 720, TIMESTAMP, "Bandung, Jawa Barat", options).to_svg()
    assert first == second


def test_overlay_is_sized_to_the_image() -> None:
    svg = layout_panel(1024, 768, TIMESTAMP, "Bogor", WatermarkOptions()).to_svg()
    assert svg.startswith('<svg width="1024" height="768" xmlns="http://www.w3.org/2000/svg">')


def test_overlay_escapes_address_text() -> None:
    svg = layout_panel(1920, 1080, TIMESTAMP, "Tom & Jerry <Shop> \"A\" 'B'", WatermarkOptions()).to_svg()
    assert "Tom &amp; Jerry &lt;Shop&gt; &quot;A&quot; &apos;B&apos;" in svg
    assert "<Shop>" not in svg


def test_default_verified_row_draws_check_icon() -> None:
    overlay = layout_panel(1920, 1080, TIMESTAMP, "Jakarta", WatermarkOptions()).overlay
    labels = [c for c in overlay.commands if isinstance(c, TextCommand) and c.text == "Verified"]
    paths = [c for c in overlay.commands if isinstance(c, PathCommand)]

    assert len(labels) == 1
    assert len(paths) == 2
    assert not any(isinstance(c, ImageCommand) for c in overlay.commands)


def test_logo_replaces_check_icon() -> None:
    options = WatermarkOptions(logo="data:image/png;base64,AAAA", logo_size_px=50)
    layout = layout_panel(1920, 1080, TIMESTAMP, "Jakarta", options, status_label="Checked")
    images = [c for c in layout.overlay.commands if isinstance(c, ImageCommand)]

    assert len(images) == 1
    assert images[0].width == 50
    assert layout.geometry.verified_row.height == 50
    assert any(isinstance(c, TextCommand) and c.text == "Checked" for c in layout.overlay.commands)
