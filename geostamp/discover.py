from __future__ import annotations

import os
from pathlib import Path

from geostamp.constants import SUPPORTED_EXTENSIONS


def _is_candidate(path: Path) -> bool:
    # dotfiles include macOS "._name.jpg" resource forks, which are not images
    return not path.name.startswith(".") and path.suffix.lower() in SUPPORTED_EXTENSIONS


def discover_inputs(input_path: Path, recursive: bool = False, exclude_dir: Path | None = None) -> list[Path]:
    """List the images to stamp under ``input_path``, sorted.

    ``exclude_dir`` (usually the output directory) and hidden directories are
    never descended into, so a rerun does not stamp its own output.
    """
    if input_path.is_file():
        return [input_path] if _is_candidate(input_path) else []
    if not input_path.is_dir():
        return []

    excluded = exclude_dir.resolve(strict=False) if exclude_dir is not None else None
    found: list[Path] = []
    for root, dirs, names in os.walk(input_path):
        root_path = Path(root)
        if root_path.resolve(strict=False) == excluded:
            dirs[:] = []
            continue
        found.extend(root_path / name for name in names if _is_candidate(root_path / name))
        if recursive:
            dirs[:] = [d for d in dirs if not d.startswith(".")]
        else:
            dirs[:] = []
    return sorted(found)
