from pathlib import Path

from geostamp.discover import discover_inputs


def test_discover_inputs_filters_extensions_and_output_dir(tmp_path: Path) -> None:
    for name in ("a.jpg", "b.PNG", "c.webp", "d.gif", "notes.txt"):
        (tmp_path / name).write_bytes(b"x")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "e.jpeg").write_bytes(b"x")
    output = tmp_path / "output"
    output.mkdir()
    (output / "a__stamped.jpg").write_bytes(b"x")

    flat = discover_inputs(tmp_path)
    deep = discover_inputs(tmp_path, recursive=True, exclude_dir=output)

    assert [p.name for p in flat] == ["a.jpg", "b.PNG", "c.webp"]
    assert [p.name for p in deep] == ["a.jpg", "b.PNG", "c.webp", "e.jpeg"]


def test_discover_inputs_single_file(tmp_path: Path) -> None:
    image = tmp_path / "photo.jpeg"
    image.write_bytes(b"x")
    assert discover_inputs(image) == [image]
    assert discover_inputs(tmp_path / "missing") == []


def test_discover_inputs_skips_hidden_entries(tmp_path: Path) -> None:
    (tmp_path / "photo.jpg").write_bytes(b"x")
    (tmp_path / "._photo.jpg").write_bytes(b"x")
    hidden = tmp_path / ".thumbnails"
    hidden.mkdir()
    (hidden / "thumb.png").write_bytes(b"x")

    assert [p.name for p in discover_inputs(tmp_path, recursive=True)] == ["photo.jpg"]
    assert discover_inputs(tmp_path / "._photo.jpg") == []
