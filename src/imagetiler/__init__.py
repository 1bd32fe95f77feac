"""Cut large images into zoomable tile pyramids.

The package turns one raster image into the ``<zoom>/<x>/<y>.png`` tile
tree used by slippy map viewers.
"""
from . import config, tile, manifest
from .exceptions import TilerError, InvalidDimension, SourceReadError, TileWriteError
from .pyramid import PyramidPlan, plan_pyramid, scale_dimension
from .tile import cut_tiles, plan_source

__all__ = [
    "config",
    "tile",
    "manifest",
    "TilerError",
    "InvalidDimension",
    "SourceReadError",
    "TileWriteError",
    "PyramidPlan",
    "plan_pyramid",
    "scale_dimension",
    "cut_tiles",
    "plan_source",
]
