"""Build a complete tile pyramid from one source image.

Levels are generated from the coarsest (zoom 0) to the finest. For every
level the source is composed onto a canvas, which is then cut into tiles.
With more than one worker the tiles of a level are written by a thread
pool while the canvas of the next level is composed in the background.
"""
import logging
import pathlib
from concurrent.futures import ThreadPoolExecutor

from PIL import Image

from . import config
from .canvas import load_source, compose_canvas, save_canvas as write_canvas
from .exceptions import TileWriteError
from .manifest import generate_manifest
from .progress import progress_factory
from .pyramid import plan_pyramid
from .slicer import slice_canvas

logger = logging.getLogger(__name__)


def _setting(value, key):
    return config.get(key) if value is None else value


def prepare_target(target_path):
    """Create the output directory, including missing parents."""
    target = pathlib.Path(target_path)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise TileWriteError(target, err) from err
    return target


def plan_source(source_path, tile_size):
    """Plan the pyramid of an image file without generating anything.

    Returns
    -------
    PyramidPlan
    """
    source = load_source(source_path, config.get("max_image_pixels"))
    return plan_pyramid(source.width, source.height, tile_size)


def cut_tiles(source_path, target_path, tile_size, workers=None, save_canvas=None,
              palette=None, write_manifest=None, verbose=None, progress=None,
              resample=Image.LANCZOS):
    """Generate the full tile pyramid of an image.

    Parameters
    ----------
    source_path : str or pathlib.Path
        Image to cut in tiles.
    target_path : str or pathlib.Path
        Destination directory for the tile tree. Created if missing.
    tile_size : int
        Tile edge length in pixels.
    workers : int, optional
        Writer threads per level. If None, uses the ``workers`` setting.
    save_canvas : bool, optional
        Also write ``canvas_<zoom>.png`` per level. If None, uses settings.
    palette : bool, optional
        Quantize tiles to a palette. If None, uses settings.
    write_manifest : bool, optional
        Write ``tilemap.json`` after the last level. If None, uses settings.
    verbose : bool, optional
        Show tqdm progress bars. If None, uses settings.
    progress : callable, optional
        Factory returning a new ``ProgressSink`` per level; overrides
        ``verbose``.
    resample : int, optional
        Pillow resampling filter for the level resize.

    Returns
    -------
    PyramidPlan
        The plan the pyramid was built from.
    """
    workers = int(_setting(workers, "workers"))
    save_canvas = _setting(save_canvas, "save_canvas")
    palette = _setting(palette, "palette")
    write_manifest = _setting(write_manifest, "write_manifest")
    colors = int(config.get("palette_colors"))
    if progress is None:
        progress = progress_factory(_setting(verbose, "verbose"))

    target = prepare_target(target_path)
    source = load_source(source_path, config.get("max_image_pixels"))
    plan = plan_pyramid(source.width, source.height, tile_size)
    logger.info(f"Total number of zoom levels {plan.max_zoom}")
    logger.info(f"Tiles to generate over all levels: {plan.total_tiles}")

    schedule = plan.schedule()

    def compose(zoom, scale):
        return compose_canvas(source, zoom, scale, tile_size, resample)

    def run_level(zoom, canvas):
        logger.info(f"Generating map tiles for zoom level {zoom}")
        if save_canvas:
            write_canvas(canvas, target, zoom)
        with progress() as sink:
            slice_canvas(canvas, zoom, tile_size, target, workers=workers,
                         palette=palette, colors=colors, progress=sink)

    if workers <= 1:
        for zoom, scale in schedule:
            run_level(zoom, compose(zoom, scale))
    else:
        # Compose level n+1 while level n is being sliced
        with ThreadPoolExecutor(max_workers=1) as composer:
            pending = composer.submit(compose, *schedule[0])
            for index, (zoom, _) in enumerate(schedule):
                canvas = pending.result()
                if index + 1 < len(schedule):
                    pending = composer.submit(compose, *schedule[index + 1])
                run_level(zoom, canvas)

    if write_manifest:
        generate_manifest(plan, target)
    logger.info("Finished generating tiles")
    return plan
