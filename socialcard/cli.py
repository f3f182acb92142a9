from __future__ import annotations

import dataclasses
import logging
import time
from dataclasses import dataclass
from pathlib import Path

import typer

from socialcard.card_loader import accent_palette, list_templates, load_card, load_presets
from socialcard.config import load_config, write_default_config
from socialcard.constants import GRID_STYLE_LABELS, IMAGE_SIZES, TEMPLATE_IDS
from socialcard.discover import discover_cards
from socialcard.export import save_png, to_data_url
from socialcard.models import size_dimensions
from socialcard.naming import build_output_name
from socialcard.render.engine import CardRenderer

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Promotional social card renderer.")
LOGGER = logging.getLogger("socialcard")


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


def _resolve_out_dir(input_path: Path, out: Path | None, output_dir: str) -> Path:
    if out is not None:
        return out
    configured = Path(output_dir).expanduser()
    if configured.is_absolute():
        return configured
    base = input_path if input_path.is_dir() else input_path.parent
    return base / configured


@app.command()
def render(
    input_path: Path = typer.Argument(..., exists=True, resolve_path=True, help="Card file (.yaml/.yml/.json) or a directory of them."),
    out: Path | None = typer.Option(None, "--out", help="Output .png file (single card) or output directory."),
    recursive: bool = typer.Option(False, "--recursive", help="Recursively scan input directories."),
    size: str | None = typer.Option(None, "--size", help=f"Size preset override: {'|'.join(IMAGE_SIZES)}"),
    template: str | None = typer.Option(None, "--template", help="Template id override."),
    seed: int | None = typer.Option(None, "--seed", help="Noise seed for reproducible output."),
    data_url: bool = typer.Option(False, "--data-url", help="Print a PNG data URL instead of writing a file (single card only)."),
    skip_existing: bool = typer.Option(False, "--skip-existing/--no-skip-existing"),
    config_path: Path | None = typer.Option(None, "--config", exists=True, dir_okay=False, help="Config YAML path."),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Render card descriptions to PNG."""
    _setup_logging(log_level)
    cfg = load_config(config_path)

    if size is not None:
        try:
            size_dimensions(size)
        except ValueError as exc:
            typer.secho(str(exc), err=True, fg=typer.colors.RED)
            raise typer.Exit(1)
    if template is not None and template not in TEMPLATE_IDS:
        LOGGER.warning("unknown template %r: only background and footer will be drawn", template)

    files = discover_cards(input_path, recursive=recursive)
    if not files:
        typer.echo("No card files found.")
        raise typer.Exit(0)
    if data_url and len(files) != 1:
        typer.secho("--data-url needs exactly one card file.", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    single_target = out is not None and out.suffix.lower() == ".png" and len(files) == 1
    out_dir = out.parent if single_target else _resolve_out_dir(input_path, out, str(cfg.get("output_dir") or "output"))
    noise_seed = seed if seed is not None else cfg.get("noise_seed")

    def process_one(renderer: CardRenderer, source: Path) -> _Result:
        t0 = time.perf_counter()
        try:
            data = load_card(source, default_accent=str(cfg.get("accent_color")))
            if template is not None:
                data = dataclasses.replace(data, template=template)
            if size is not None:
                data = dataclasses.replace(data, size=size)
            output_file = out if single_target else out_dir / build_output_name(source, data.template, data.size)
            if not data_url and skip_existing and output_file.exists():
                return _Result(source=source, status="skipped", output=output_file, elapsed=time.perf_counter() - t0)
            image = renderer.render(data, noise_seed=noise_seed)
            if data_url:
                typer.echo(to_data_url(image))
                return _Result(source=source, status="ok", elapsed=time.perf_counter() - t0)
            saved = save_png(image, output_file)
            return _Result(source=source, status="ok", output=saved, elapsed=time.perf_counter() - t0)
        except Exception as exc:
            return _Result(source=source, status="failed", error=str(exc), elapsed=time.perf_counter() - t0)

    results: list[_Result] = []
    with CardRenderer(cfg) as renderer:
        for f in files:
            r = process_one(renderer, f)
            results.append(r)
            if r.status == "ok":
                LOGGER.info("OK   %s -> %s  (%.2fs)", r.source.name, r.output.name if r.output else "data url", r.elapsed)
            elif r.status == "skipped":
                LOGGER.info("SKIP %s (exists)", r.source.name)
            else:
                LOGGER.error("FAIL %s  %s", r.source.name, r.error)

    ok = sum(1 for r in results if r.status == "ok")
    skip = sum(1 for r in results if r.status == "skipped")
    failed = [r for r in results if r.status == "failed"]
    if not data_url:
        typer.echo(f"Done. success={ok} skipped={skip} failed={len(failed)}")
    if failed:
        typer.secho("Failures:", err=True, fg=typer.colors.RED)
        for r in failed:
            typer.secho(f"  {r.source}: {r.error}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command("templates")
def templates_command() -> None:
    """List the template catalog with field defaults."""
    for spec in list_templates():
        typer.echo(f"{spec.id}  ({spec.name}, {spec.default_size})")
        if spec.description:
            typer.echo(f"    {spec.description}")
        for item in spec.fields:
            options = f"  options: {', '.join(value for value, _ in item.options)}" if item.options else ""
            typer.echo(f"    - {item.id}: {item.default!r}{options}")


@app.command("tokens")
def tokens_command() -> None:
    """List preset tokens."""
    for token in load_presets().values():
        typer.echo(f"{token.symbol:<10} {token.name:<24} {token.color}  {token.asset_id or '-'}")


@app.command("sizes")
def sizes_command() -> None:
    """List size presets, grid styles and the accent palette."""
    for key, (width, height) in IMAGE_SIZES.items():
        typer.echo(f"{key:<10} {width}x{height}")
    typer.echo("grid styles: " + ", ".join(GRID_STYLE_LABELS))
    typer.echo("accents: " + ", ".join(f"{value} ({label})" for value, label in accent_palette()))


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    path = write_default_config(force=force)
    typer.echo(f"Config initialized: {path}")


@app.command()
def gui(
    file: Path | None = typer.Option(
        None,
        "--file",
        exists=True,
        resolve_path=True,
        dir_okay=False,
        help="Open this card file on startup.",
    ),
) -> None:
    try:
        from socialcard.gui.preview import launch_gui
    except ImportError as exc:
        typer.secho(f"GUI is unavailable: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    try:
        launch_gui(startup_file=file)
    except Exception as exc:
        typer.secho(f"GUI failed to start: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
