from __future__ import annotations

from pathlib import Path

import typer

from ..config import Config
from ..gestures import Shapes
from ..shapes import ShapeRasterizer
from .common import DEFAULT_USER_CONFIG_PATH, app, setup_logging


@app.command(name="shape")
def shape_cmd(
    text: str = typer.Argument(..., help="Text to rasterize, or a shape name with --kind"),
    scale: float = typer.Option(0.35, "--scale", help="Scale applied to the bitmap coordinates"),
    kind: Shapes | None = typer.Option(None, "--kind", "-k", help="Named parametric shape instead of a text"),
    config_path: Path | None = typer.Option(  # noqa: B008
        None, "--config", "-c", help=f"Path to config file. Default: {DEFAULT_USER_CONFIG_PATH}"
    ),
) -> None:
    """Show how many particles a text or a shape turns into."""
    config = Config.load(config_path)
    setup_logging(config.cli.log_level)

    shape = ShapeRasterizer(config.shapes).get(text, scale, kind)
    if shape.is_empty:
        print(f"{text!r} produces no points: nothing would be launched.")
        raise typer.Exit(1)

    min_x, min_y, _ = shape.points.min(axis=0)
    max_x, max_y, _ = shape.points.max(axis=0)
    print(f"{shape.key.name!r}: {len(shape)} particles")
    print(f"  x: {min_x:.1f} .. {max_x:.1f}")
    print(f"  y: {min_y:.1f} .. {max_y:.1f}")


@app.command(name="init-config")
def init_config_cmd(
    config_path: Path | None = typer.Option(  # noqa: B008
        None, "--config", "-c", help=f"Path to config file. Default: {DEFAULT_USER_CONFIG_PATH}"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config file"),
) -> None:
    """Write the default configuration, to be edited by hand."""
    path = Config.validate_path(config_path)
    if path.exists() and not force:
        print(f"Config file {path} already exists, use --force to overwrite it.")
        raise typer.Exit(1)
    print(f"Default config written to {Config().save(path)}")
