from geostamp.render.overlay import (
    BASELINE_MIDDLE,
    CircleCommand,
    ImageCommand,
    Overlay,
    PathCommand,
    RectCommand,
    TextCommand,
    escape_markup,
    to_svg,
)


def test_escape_markup_covers_xml_specials() -> None:
    assert escape_markup("a & b < c > d \" e ' f") == "a &amp; b &lt; c &gt; d &quot; e &apos; f"


def test_to_svg_serializes_each_command_in_order() -> None:
    overlay = Overlay(
        width=200,
        height=100,
        font_family="Inter, 'DejaVu Sans'",
        commands=(
            RectCommand(10, 20, 30, 40, fill="#FFFFFF", radius=6),
            CircleCommand(12.5, 50, 12, fill="#00D084", opacity=0.9),
            PathCommand(((6, 50), (10, 54), (18, 46)), stroke="#fff", stroke_width=3),
            TextCommand(28, 50, "Verified", font_size=20, fill="#FFFFFF", font_weight=700, baseline=BASELINE_MIDDLE),
            ImageCommand(1, 2, 42, 42, href="data:image/png;base64,AAAA"),
        ),
    )

    svg = to_svg(overlay)
    lines = svg.strip().splitlines()

    assert lines[0] == '<svg width="200" height="100" xmlns="http://www.w3.org/2000/svg">'
    assert "font-family: Inter, &apos;DejaVu Sans&apos;;" in lines[1]
    assert lines[2].strip() == '<rect x="10" y="20" width="30" height="40" rx="6" ry="6" fill="#FFFFFF"/>'
    assert lines[3].strip() == '<circle cx="12.5" cy="50" r="12" fill="#00D084" opacity="0.9"/>'
    assert 'd="M 6 50 L 10 54 L 18 46"' in lines[4]
    assert 'dominant-baseline="middle"' in lines[5]
    assert lines[5].strip().endswith(">Verified</text>")
    assert lines[6].strip().startswith('<image href="data:image/png;base64,AAAA"')
    assert lines[-1] == "</svg>"


def test_overlay_to_svg_matches_function() -> None:
    overlay = Overlay(width=10, height=10, font_family="Arial", commands=())
    assert overlay.to_svg() == to_svg(overlay)


def test_float_coordinates_are_trimmed() -> None:
    overlay = Overlay(
        width=10,
        height=10,
        font_family="Arial",
        commands=(TextCommand(1.0, 2.333333, "x", font_size=12, fill="#000"),),
    )
    assert '<text x="1" y="2.33"' in to_svg(overlay)
