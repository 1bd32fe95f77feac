"""Cut level canvases into square tiles.

Tiles are written to ``<target>/<zoom>/<x>/<y>.png``, the slippy map layout
understood by Leaflet, OpenLayers and friends.
"""
import logging
import pathlib
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from typing import Iterator, Tuple

from PIL import Image

from .exceptions import TileWriteError
from .progress import NullProgress

logger = logging.getLogger(__name__)


def grid_shape(canvas, tile_size: int) -> Tuple[int, int]:
    """Number of tiles along x and y of a canvas."""
    return canvas.width // tile_size, canvas.height // tile_size


def progress_total(canvas, tile_size: int) -> int:
    """Expected tile count reported to the progress sink.

    Canvases are square, so the x count squared is the full grid.
    """
    num_x, _ = grid_shape(canvas, tile_size)
    return num_x * num_x


def tile_grid(canvas, tile_size: int) -> Iterator[Tuple[int, int, Tuple[int, int, int, int]]]:
    """Yield ``(x, y, box)`` for every tile of a canvas, row by row.

    Parameters
    ----------
    canvas : PIL.Image.Image
        Level canvas, each side a multiple of ``tile_size``.
    tile_size : int
        Tile edge length in pixels.

    Yields
    ------
    tuple
        Grid coordinates and the Pillow crop box ``(left, upper, right, lower)``.
    """
    num_x, num_y = grid_shape(canvas, tile_size)
    for y in range(num_y):
        top = y * tile_size
        for x in range(num_x):
            left = x * tile_size
            yield x, y, (left, top, left + tile_size, top + tile_size)


def cut_tile(canvas, x: int, y: int, tile_size: int):
    left = x * tile_size
    top = y * tile_size
    return canvas.crop((left, top, left + tile_size, top + tile_size))


def encode_tile(tile, palette=True, colors=256):
    """Reduce a tile to an indexed palette image.

    Fast octree quantization is the Pillow method that keeps the alpha
    channel of RGBA tiles.

    Parameters
    ----------
    tile : PIL.Image.Image
        Tile crop.
    palette : bool, optional
        If False the tile is returned unchanged, by default True.
    colors : int, optional
        Palette size, by default 256.
    """
    if not palette:
        return tile
    if tile.mode not in ("RGB", "RGBA"):
        tile = tile.convert("RGBA")
    return tile.quantize(colors=colors, method=Image.Quantize.FASTOCTREE)


def tile_path(target, zoom: int, x: int, y: int) -> pathlib.Path:
    return pathlib.Path(target) / str(zoom) / str(x) / f"{y}.png"


def make_tile_dirs(target, zoom: int, num_x: int) -> None:
    """Create ``<target>/<zoom>/<x>`` for every column of a level."""
    zoom_dir = pathlib.Path(target) / str(zoom)
    for x in range(num_x):
        path = zoom_dir / str(x)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise TileWriteError(path, err) from err


def write_tile(canvas, zoom, x, y, tile_size, target, palette=True, colors=256):
    """Cut, encode and save one tile.

    Returns
    -------
    pathlib.Path
        Path of the written tile.

    Raises
    ------
    TileWriteError
        If the tile cannot be saved.
    """
    path = tile_path(target, zoom, x, y)
    tile = encode_tile(cut_tile(canvas, x, y, tile_size), palette=palette, colors=colors)
    try:
        tile.save(path, format="PNG")
    except OSError as err:
        raise TileWriteError(path, err) from err
    return path


def _advance_on_success(progress):
    def callback(future):
        if not future.cancelled() and future.exception() is None:
            progress.advance()
    return callback


def slice_canvas(canvas, zoom, tile_size, target, workers=1, palette=True,
                 colors=256, progress=None):
    """Write all tiles of one level canvas.

    Parameters
    ----------
    canvas : PIL.Image.Image
        Level canvas.
    zoom : int
        Zoom level of the canvas, used for the output path.
    tile_size : int
        Tile edge length in pixels.
    target : str or pathlib.Path
        Root directory of the tile tree.
    workers : int, optional
        Number of writer threads; 1 writes in row-major order in the
        calling thread, by default 1.
    palette : bool, optional
        Quantize tiles to a palette, by default True.
    colors : int, optional
        Palette size, by default 256.
    progress : ProgressSink, optional
        Receives one update per written tile.

    Returns
    -------
    int
        Number of tiles written.

    Raises
    ------
    TileWriteError
        On the first failed write. Remaining tiles of the level are skipped.
    """
    progress = progress or NullProgress()
    num_x, _ = grid_shape(canvas, tile_size)
    make_tile_dirs(target, zoom, num_x)

    progress.start(progress_total(canvas, tile_size), desc=f"Zoom {zoom}")
    written = 0
    try:
        if workers <= 1:
            for x, y, _ in tile_grid(canvas, tile_size):
                write_tile(canvas, zoom, x, y, tile_size, target, palette, colors)
                written += 1
                progress.advance()
            return written

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(write_tile, canvas, zoom, x, y, tile_size,
                                target, palette, colors)
                for x, y, _ in tile_grid(canvas, tile_size)
            ]
            for future in futures:
                future.add_done_callback(_advance_on_success(progress))
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()
            for future in done:
                # re-raises the first write failure
                future.result()
            written = len(done)
        return written
    finally:
        progress.close()
