import pytest

from geostamp.render.typography import clamp_lines, estimate_width, layout_text_block, load_font, wrap_words

ADDRESS = "Jalan Sudirman No 1, Kebayoran Baru, Jakarta Selatan, DKI Jakarta, Indonesia 12190"


def test_estimate_width_is_linear_in_character_count() -> None:
    assert estimate_width("abcd", 10) == pytest.approx(4 * 10 * 0.58)
    assert estimate_width("abcd", 10, avg_char_width=1.0) == 40
    assert estimate_width("", 24) == 0


@pytest.mark.parametrize("text", ["", None, "   "])
def test_wrap_words_returns_dash_for_empty_input(text) -> None:
    assert wrap_words(text, 300, 22) == ["-"]


def test_layout_text_block_renders_dash_for_empty_address() -> None:
    block = layout_text_block("", max_width=300, font_size=22, max_lines=3)
    assert block.lines == ("-",)
    assert block.font_size == 22
    assert block.max_width == 300


def test_wrap_words_prefers_comma_boundaries() -> None:
    lines = wrap_words(ADDRESS, 300, 22)

    assert lines == [
        "Jalan Sudirman No 1,",
        "Kebayoran Baru, Jakarta",
        "Selatan, DKI Jakarta,",
        "Indonesia 12190",
    ]


def test_wrap_words_without_comma_preference_keeps_original_tokens() -> None:
    lines = wrap_words("a,b c", 1000, 10, prefer_comma_break=False)
    assert lines == ["a,b c"]
    assert wrap_words("a,b c", 1000, 10, prefer_comma_break=True) == ["a, b c"]


def test_wrap_words_keeps_every_line_within_width_except_giant_tokens() -> None:
    text = "Kp. Melayu Kecil, Bukit Duri, Tebet, Kota Jakarta Selatan, Daerah Khusus Ibukota Jakarta"
    for max_width in (120, 200, 333, 500):
        for line in wrap_words(text, max_width, 18):
            fits = estimate_width(line, 18) <= max_width
            assert fits or " " not in line


def test_wrap_words_puts_unbreakable_token_on_its_own_line() -> None:
    lines = wrap_words("go Pneumonoultramicroscopicsilicovolcanoconiosis now", 100, 10)
    assert lines == ["go", "Pneumonoultramicroscopicsilicovolcanoconiosis", "now"]


def test_clamp_lines_returns_short_input_unchanged() -> None:
    lines = ["one", "two"]
    assert clamp_lines(lines, 3, 300, 22) == ["one", "two"]


def test_clamp_lines_merges_overflow_and_appends_ellipsis() -> None:
    lines = wrap_words(ADDRESS, 300, 22)
    clamped = clamp_lines(lines, 3, 300, 22)

    assert clamped == ["Jalan Sudirman No 1,", "Kebayoran Baru, Jakarta", "Selatan, DKI Jakarta,…"]
    assert clamped[-1].endswith("…")
    assert estimate_width(clamped[-1], 22) <= 300


def test_clamp_lines_is_idempotent() -> None:
    lines = wrap_words(ADDRESS, 260, 20)
    once = clamp_lines(lines, 2, 260, 20)
    assert clamp_lines(once, 2, 260, 20) == once


def test_clamp_lines_keeps_giant_word_when_no_truncation_point_exists() -> None:
    clamped = clamp_lines(["Averyverylongwordthatnevercanfit", "tail"], 1, 50, 10)
    assert clamped == ["Averyverylongwordthatnevercanfit…"]
    assert estimate_width(clamped[0], 10) > 50


def test_clamp_lines_treats_non_positive_limit_as_one_line() -> None:
    assert clamp_lines(["a", "b", "c"], 0, 1000, 10) == ["a b c…"]


def test_layout_text_block_wraps_and_clamps() -> None:
    block = layout_text_block(ADDRESS, max_width=300, font_size=22, max_lines=3)
    assert len(block.lines) == 3
    assert block.lines[-1].endswith("…")


def test_load_font_reuses_loaded_fonts() -> None:
    regular = load_font(None, 24)
    assert load_font(None, 24) is regular
    assert load_font(None, 30) is not regular
