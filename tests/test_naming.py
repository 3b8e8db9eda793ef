from datetime import datetime
from pathlib import Path

import pytest

from geostamp.naming import build_output_name


def test_build_output_name_with_tokens() -> None:
    name = build_output_name(
        "{date}_{stem}_{format}.{ext}",
        Path("site visit 01.JPG"),
        "jpeg",
        processed_at=datetime(2026, 10, 19, 14, 3, 22),
    )
    assert name == "20261019_140322_site_visit_01_jpeg.jpg"


def test_build_output_name_adds_missing_extension_and_json_suffix() -> None:
    assert build_output_name("{stem}__stamped", Path("a.png"), "png") == "a__stamped.png"
    assert build_output_name("{stem}.{ext}", Path("a.webp"), "webp", json_output=True) == "a.webp.json"


def test_build_output_name_rejects_unknown_tokens() -> None:
    with pytest.raises(ValueError, match="unknown key: camera"):
        build_output_name("{camera}.{ext}", Path("a.png"), "png")
