"""Command-line interface for imagetiler.

This module provides CLI commands for cutting images into zoomable tile
pyramids using the Typer framework.
"""
import logging
from typing import Optional

import typer

from . import config
from .exceptions import TilerError
from .tile import cut_tiles, plan_source

app = typer.Typer(no_args_is_help=True)


@app.callback()
def callback():
    """
    Cut large images into slippy map tiles for zoomable viewers.
    """


def _setup(env, quiet):
    logging.basicConfig(level=logging.WARNING if quiet else logging.INFO,
                        format="%(message)s")
    if env != "DEFAULT":
        config.change_env(env)


@app.command()
def cut(source_path: str = typer.Option(..., "--sourcePath", "--source-path",
                                        help="Image to cut in tiles"),
        target_path: str = typer.Option(..., "--targetPath", "--target-path",
                                        help="Destination location for the generated image tiles"),
        tile_size: int = typer.Option(..., "--tileSize", "--tile-size",
                                      help="Size of the image tiles"),
        workers: Optional[int] = typer.Option(None, help="Tile writer threads"),
        save_canvas: Optional[bool] = typer.Option(None, "--save-canvas/--no-save-canvas",
                                                   help="Also write canvas_<zoom>.png per level"),
        palette: Optional[bool] = typer.Option(None, "--palette/--no-palette",
                                               help="Quantize tiles to a color palette"),
        manifest: Optional[bool] = typer.Option(None, "--manifest/--no-manifest",
                                                help="Write tilemap.json when done"),
        quiet: bool = typer.Option(False, "--quiet", "-q", help="No progress bars"),
        env: str = "DEFAULT"):
    """
    Generate the tile pyramid of an image.
    """
    _setup(env, quiet)
    try:
        cut_tiles(source_path, target_path, tile_size,
                  workers=workers,
                  save_canvas=save_canvas,
                  palette=palette,
                  write_manifest=manifest,
                  verbose=False if quiet else None)
    except TilerError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1)
    typer.echo("Tiles generation finished")


@app.command()
def plan(source_path: str = typer.Option(..., "--sourcePath", "--source-path",
                                         help="Image to cut in tiles"),
         tile_size: int = typer.Option(..., "--tileSize", "--tile-size",
                                       help="Size of the image tiles"),
         env: str = "DEFAULT"):
    """
    Show the zoom levels an image would get, without writing tiles.
    """
    _setup(env, quiet=True)
    try:
        pyramid = plan_source(source_path, tile_size)
    except TilerError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Source {pyramid.source_width}x{pyramid.source_height}, "
               f"tile size {pyramid.tile_size}")
    typer.echo(f"Total number of zoom levels {pyramid.max_zoom}")
    for zoom, scale in pyramid.schedule():
        width, height = pyramid.scaled_size(zoom)
        size = pyramid.canvas_size(zoom)
        typer.echo(f"  zoom {zoom}: canvas {size}x{size}, image {width}x{height}, "
                   f"{pyramid.tiles_at(zoom)} tiles (scale {scale})")
    typer.echo(f"Total tiles {pyramid.total_tiles}")


if __name__ == "__main__":
    app()
