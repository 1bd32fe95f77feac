"""Tile map manifest.

Writes ``tilemap.json`` into the tile directory once every level is done,
so a viewer can find the zoom range and tile size without probing files.
"""
import json
import pathlib

from jinja2 import Template

from .exceptions import TileWriteError

MANIFEST_NAME = "tilemap.json"

TEMPLATE = """{
  "tile_size": {{ plan.tile_size }},
  "min_zoom": {{ plan.min_zoom }},
  "max_zoom": {{ plan.max_zoom }},
  "total_tiles": {{ plan.total_tiles }},
  "source": {"width": {{ plan.source_width }}, "height": {{ plan.source_height }}},
  "url_template": {{ url_template | tojson }},
  "levels": {{ levels | tojson(indent=4) }}
}
"""


def generate_manifest(plan, target, tile_format="png"):
    """Render the manifest of a finished pyramid.

    Args:
        plan: The PyramidPlan the tiles were generated from
        target: Root directory of the tile tree
        tile_format: File extension of the tiles (default: "png")

    Returns:
        Path of the written manifest
    """
    levels = []
    for zoom, scale in plan.schedule():
        width, height = plan.scaled_size(zoom)
        levels.append({
            "zoom": zoom,
            "scale": scale,
            "canvas_size": plan.canvas_size(zoom),
            "image_size": [width, height],
            "tiles": plan.tiles_at(zoom),
        })

    rendered = Template(TEMPLATE).render(
        plan=plan,
        url_template=f"{{z}}/{{x}}/{{y}}.{tile_format}",
        levels=levels,
    )

    output_path = pathlib.Path(target) / MANIFEST_NAME
    try:
        with open(output_path, "w") as fp:
            fp.write(rendered)
    except OSError as err:
        raise TileWriteError(output_path, err) from err
    return output_path


def read_manifest(target):
    with open(pathlib.Path(target) / MANIFEST_NAME) as fp:
        return json.load(fp)
