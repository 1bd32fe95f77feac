"""Per-level canvas composition.

A canvas is the full square raster of one zoom level: the source image
resized for that level and centered over an opaque black background.
"""
import logging
import pathlib

from PIL import Image, UnidentifiedImageError

from .exceptions import SourceReadError, TileWriteError
from .pyramid import scale_dimension

logger = logging.getLogger(__name__)

BACKGROUND = (0, 0, 0, 255)


def load_source(path, max_image_pixels=None):
    """Open and decode the source image.

    Parameters
    ----------
    path : str or pathlib.Path
        Image file readable by Pillow.
    max_image_pixels : int, optional
        Overrides ``Image.MAX_IMAGE_PIXELS`` during this load only. ``None`` keeps
        Pillow's decompression bomb limit.

    Returns
    -------
    PIL.Image.Image
        The fully decoded image.

    Raises
    ------
    SourceReadError
        If the file is missing, of an unknown format or corrupt.
    """
    previous_limit = Image.MAX_IMAGE_PIXELS
    if max_image_pixels is not None:
        Image.MAX_IMAGE_PIXELS = max_image_pixels
    try:
        with Image.open(path) as img:
            img.load()
            source = img.copy() if img.mode in ("RGB", "RGBA") else img.convert("RGBA")
    # Pillow reports some malformed headers as ValueError or SyntaxError
    except (OSError, ValueError, SyntaxError, UnidentifiedImageError,
            Image.DecompressionBombError) as err:
        raise SourceReadError(f"Cannot read source image {path}: {err}") from err
    finally:
        Image.MAX_IMAGE_PIXELS = previous_limit
    logger.debug(f"Loaded {path} ({source.width}x{source.height}, {source.mode})")
    return source


def compose_canvas(source, zoom, scale, tile_size, resample=Image.LANCZOS):
    """Build the canvas for one zoom level.

    Parameters
    ----------
    source : PIL.Image.Image
        Decoded source image. It is not modified.
    zoom : int
        Zoom level; the canvas side is ``tile_size * 2**zoom``.
    scale : int
        Scale exponent of the level, see ``scale_dimension``.
    tile_size : int
        Tile edge length in pixels.
    resample : int, optional
        Pillow resampling filter, by default ``Image.LANCZOS``.

    Returns
    -------
    PIL.Image.Image
        RGBA canvas with the scaled source alpha-composited at its center.
    """
    canvas_size = tile_size * 2 ** zoom
    width = scale_dimension(source.width, scale)
    height = scale_dimension(source.height, scale)

    resized = source.resize((width, height), resample)
    if resized.mode != "RGBA":
        resized = resized.convert("RGBA")

    left = int((canvas_size - width) / 2)
    top = int((canvas_size - height) / 2)
    logger.debug(f"Zoom {zoom}: canvas {canvas_size}px, image {width}x{height} at ({left}, {top})")

    canvas = Image.new("RGBA", (canvas_size, canvas_size), BACKGROUND)
    canvas.alpha_composite(resized, dest=(left, top))
    return canvas


def canvas_path(target, zoom):
    return pathlib.Path(target) / f"canvas_{zoom}.png"


def save_canvas(canvas, target, zoom):
    """Write a level canvas next to the tiles, for debugging.

    Returns
    -------
    pathlib.Path
        The written file.
    """
    path = canvas_path(target, zoom)
    try:
        canvas.save(path)
    except OSError as err:
        raise TileWriteError(path, err) from err
    return path
