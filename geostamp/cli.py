from __future__ import annotations

import json
import logging
import mimetypes
import time
from dataclasses import dataclass
from pathlib import Path

import typer

from geostamp.config import build_app_config, load_config, write_default_config
from geostamp.decoders.image_decoder import probe_image
from geostamp.discover import discover_inputs
from geostamp.envelope import build_envelope, data_uri
from geostamp.exceptions import WatermarkError
from geostamp.naming import build_output_name
from geostamp.watermark import WatermarkService

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Stamp time and location panels onto photos.")
LOGGER = logging.getLogger("geostamp")

OUTPUT_FORMATS = {"binary", "json"}


@dataclass(slots=True)
class _Result:
    source: Path
    status: str          # ok | skipped | failed
    output: Path | None = None
    elapsed: float = 0.0
    error: str | None = None


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _logo_data_uri(path: Path) -> str:
    mime_type = mimetypes.guess_type(path.name)[0] or "image/png"
    return data_uri(path.read_bytes(), mime_type)


def _option_overrides(
    align: str | None,
    panel_width: float | None,
    max_lines: int | None,
    logo: Path | None,
    theme: str | None,
) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if align is not None:
        overrides["align"] = align
    if panel_width is not None:
        overrides["panel_width_fraction"] = panel_width
    if max_lines is not None:
        overrides["max_address_lines"] = max_lines
    if logo is not None:
        overrides["logo"] = _logo_data_uri(logo)
    if theme is not None:
        overrides["theme"] = theme
    return overrides


@app.command()
def stamp(
    input_path: Path = typer.Argument(..., exists=True, resolve_path=True),
    out: Path | None = typer.Option(None, "--out", help="Output directory."),
    recursive: bool = typer.Option(False, "--recursive", help="Recursively scan input directories."),
    address: str | None = typer.Option(None, "--address", help="Address text shown under the time badge."),
    align: str | None = typer.Option(None, "--align", help="left|right"),
    panel_width: float | None = typer.Option(None, "--panel-width", help="Panel width as a fraction of the image width (0.3-0.9)."),
    max_lines: int | None = typer.Option(None, "--max-lines", min=1, help="Maximum address lines."),
    logo: Path | None = typer.Option(None, "--logo", exists=True, dir_okay=False, help="Logo image shown in the verified row."),
    theme: str | None = typer.Option(None, "--theme", help="Theme preset: classic|dark|light"),
    output_format: str = typer.Option("binary", "--format", help="binary|json"),
    name_template: str | None = typer.Option(None, "--name", help='Output filename template, e.g. "{stem}__stamped.{ext}"'),
    skip_existing: bool = typer.Option(True, "--skip-existing/--no-skip-existing", help="Skip outputs that already exist (config output.skip_existing: false disables it)."),
    config_path: Path | None = typer.Option(None, "--config", exists=True, dir_okay=False, help="YAML config file."),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Watermark images with the current time and an address."""
    _setup_logging(log_level)
    fmt = output_format.lower()
    if fmt not in OUTPUT_FORMATS:
        typer.secho(f"output format must be binary or json, got: {output_format!r}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    config = build_app_config(load_config(config_path))
    service = WatermarkService(config)
    try:
        options = service.resolve_options(_option_overrides(align, panel_width, max_lines, logo, theme))
    except OSError as exc:
        typer.secho(f"Logo load failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)
    name_tmpl = name_template or config.name_template
    skip = skip_existing and config.skip_existing

    out_dir = out
    if out_dir is None:
        out_dir = (input_path / "output") if input_path.is_dir() else (input_path.parent / "output")
    files = discover_inputs(input_path, recursive=recursive, exclude_dir=out_dir)
    if not files:
        typer.echo("No supported image files found.")
        raise typer.Exit(0)
    out_dir.mkdir(parents=True, exist_ok=True)

    def process_one(source: Path) -> _Result:
        t0 = time.perf_counter()
        try:
            size = source.stat().st_size
            if size > config.max_input_bytes:
                raise ValueError(f"image too large ({size} bytes, limit {config.max_input_bytes})")
            image_bytes = source.read_bytes()
            metadata = probe_image(image_bytes)
            output_name = build_output_name(name_tmpl, source, metadata.format, json_output=fmt == "json")
            output_file = out_dir / output_name
            if skip and output_file.exists():
                return _Result(source=source, status="skipped", output=output_file, elapsed=time.perf_counter() - t0)
            result = service.add_watermark(image_bytes, address=address, options=options)
            if fmt == "json":
                envelope = build_envelope(result)
                output_file.write_text(json.dumps(envelope, ensure_ascii=False), encoding="utf-8")
            else:
                output_file.write_bytes(result.data)
            return _Result(source=source, status="ok", output=output_file, elapsed=time.perf_counter() - t0)
        except (WatermarkError, ValueError, OSError) as exc:
            return _Result(source=source, status="failed", error=str(exc), elapsed=time.perf_counter() - t0)

    results: list[_Result] = []
    for f in files:
        r = process_one(f)
        results.append(r)
        if r.status == "ok":
            LOGGER.info("OK   %s -> %s  (%.2fs)", r.source.name, r.output.name if r.output else "-", r.elapsed)
        elif r.status == "skipped":
            LOGGER.info("SKIP %s (exists)", r.source.name)
        else:
            LOGGER.error("FAIL %s  %s", r.source.name, r.error)

    ok = sum(1 for r in results if r.status == "ok")
    skipped = sum(1 for r in results if r.status == "skipped")
    failed = [r for r in results if r.status == "failed"]
    typer.echo(f"Done. success={ok} skipped={skipped} failed={len(failed)}")
    if failed:
        typer.secho("Failures:", fg=typer.colors.RED)
        for r in failed:
            typer.secho(f"  {r.source}: {r.error}", fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command()
def layout(
    width: int = typer.Argument(..., min=1),
    height: int = typer.Argument(..., min=1),
    address: str | None = typer.Option(None, "--address"),
    timestamp: str | None = typer.Option(None, "--timestamp", help="Fixed timestamp text (default: now)."),
    align: str | None = typer.Option(None, "--align", help="left|right"),
    theme: str | None = typer.Option(None, "--theme", help="Theme preset: classic|dark|light"),
    config_path: Path | None = typer.Option(None, "--config", exists=True, dir_okay=False),
) -> None:
    """Print the overlay SVG for an image of WIDTH x HEIGHT pixels."""
    service = WatermarkService(build_app_config(load_config(config_path)))
    overrides = _option_overrides(align, None, None, None, theme)
    panel = service.layout(width, height, address=address, options=overrides or None, timestamp=timestamp)
    typer.echo(panel.to_svg(), nl=False)


@app.command("inspect")
def inspect_file(
    file: Path = typer.Argument(..., exists=True, resolve_path=True, dir_okay=False),
) -> None:
    """Print the decoded image metadata as JSON."""
    try:
        metadata = probe_image(file.read_bytes())
    except WatermarkError as exc:
        typer.secho(f"Inspect failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)
    payload = {"file": str(file), **metadata.to_dict(), "mime_type": metadata.mime_type}
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command("init-config")
def init_config(
    path: Path | None = typer.Option(None, "--path", help="Write to this file instead of the user config."),
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    written = write_default_config(path, force=force)
    typer.echo(f"Config initialized: {written}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
