"""Zoom level planning for tile pyramids.

The pyramid for a source image has levels ``0..max_zoom``. Level ``z`` is a
square canvas of ``tile_size * 2**z`` pixels holding the source shrunk by
``max_zoom - z`` successive halvings.
"""
import math
import numbers
from dataclasses import dataclass
from typing import List, Tuple

from .exceptions import InvalidDimension


def _check_positive(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
        raise InvalidDimension(f"{name} must be a positive integer, got {value!r}")


def scale_dimension(dimension: int, scale: int) -> int:
    """Shrink a pixel dimension by ``scale`` successive halvings.

    Each halving is rounded up before the next one is applied, so the
    result never drops below one pixel.

    Parameters
    ----------
    dimension : int
        Source width or height in pixels.
    scale : int
        Number of halvings (the scale exponent of a zoom level).

    Returns
    -------
    int
        The scaled dimension.
    """
    scaled = dimension
    for _ in range(scale):
        scaled = math.ceil(scaled * 0.5)
    return scaled


@dataclass(frozen=True)
class PyramidPlan:
    """Zoom range and scale schedule for one source image.

    Attributes
    ----------
    source_width : int
        Source width in pixels.
    source_height : int
        Source height in pixels.
    tile_size : int
        Edge length of the square tiles in pixels.
    max_zoom : int
        Finest zoom level.
    total_tiles : int
        Number of tiles over all levels, for reporting.
    min_zoom : int
        Coarsest zoom level, always 0.
    """

    source_width: int
    source_height: int
    tile_size: int
    max_zoom: int
    total_tiles: int
    min_zoom: int = 0

    def zoom_levels(self) -> range:
        return range(self.min_zoom, self.max_zoom + 1)

    def scale_for(self, zoom: int) -> int:
        """Scale exponent of ``zoom``: how often the source is halved."""
        if zoom not in self.zoom_levels():
            raise ValueError(f"zoom {zoom} outside {self.min_zoom}..{self.max_zoom}")
        return self.max_zoom - zoom

    def schedule(self) -> List[Tuple[int, int]]:
        """(zoom, scale) pairs from the coarsest to the finest level."""
        return [(zoom, self.scale_for(zoom)) for zoom in self.zoom_levels()]

    def canvas_size(self, zoom: int) -> int:
        return self.tile_size * 2 ** zoom

    def scaled_size(self, zoom: int) -> Tuple[int, int]:
        """Size of the source image as rendered on the canvas of ``zoom``."""
        scale = self.scale_for(zoom)
        return (scale_dimension(self.source_width, scale),
                scale_dimension(self.source_height, scale))

    def tiles_at(self, zoom: int) -> int:
        return 4 ** zoom


def plan_pyramid(source_width: int, source_height: int, tile_size: int) -> PyramidPlan:
    """Work out how many zoom levels a source image needs.

    The finest level is the first one, starting from 1, whose tile grid
    spans the larger source dimension. Zoom 0 alone is never enough: even a
    source that fits a single tile gets a second level.

    Parameters
    ----------
    source_width : int
        Source width in pixels.
    source_height : int
        Source height in pixels.
    tile_size : int
        Tile edge length in pixels.

    Returns
    -------
    PyramidPlan
        The immutable plan for the run.

    Raises
    ------
    InvalidDimension
        If any argument is not a positive integer.
    """
    _check_positive("tile_size", tile_size)
    _check_positive("source_width", source_width)
    _check_positive("source_height", source_height)

    max_tile_dim = math.ceil(max(source_width, source_height) / tile_size)

    max_zoom = 0
    total_tiles = 1
    while True:
        max_zoom += 1
        total_tiles += 4 ** max_zoom
        if 2 ** max_zoom >= max_tile_dim:
            break

    return PyramidPlan(source_width=source_width,
                       source_height=source_height,
                       tile_size=tile_size,
                       max_zoom=max_zoom,
                       total_tiles=total_tiles)
