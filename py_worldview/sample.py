"""
Sample world for hosts that run without a world generator.

Builds a region carrying every facet kind from closed-form fields plus a
Voronoi graph facet, and the layer stack the viewer starts with.
"""

from typing import Optional

import numpy as np
import structlog

from .config import Settings
from .core.color import Color
from .core.compositor import LayerStack
from .core.region import FacetKind, FieldFacet, ObjectFacet, Rect, Region
from .core.voronoi_graph import generate_graph_facet
from .layers.field import FieldFacetLayer
from .layers.graph import GraphFacetLayer
from .layers.nominal import NominalFacetLayer

logger = structlog.get_logger()

SEA_LEVEL = 32.0

BIOME_COLORS = {
    "ocean": Color(0, 0, 96),
    "beach": Color(96, 96, 32),
    "plains": Color(24, 80, 24),
    "forest": Color(0, 56, 0),
    "mountains": Color(64, 48, 48),
    "snow": Color(96, 96, 96),
}


def biome_color(biome: str) -> Color:
    return BIOME_COLORS[biome]


def classify_biome(height: float) -> Optional[str]:
    if not np.isfinite(height):
        return None
    if height < SEA_LEVEL:
        return "ocean"
    if height < SEA_LEVEL + 3:
        return "beach"
    if height < 70:
        return "plains"
    if height < 90:
        return "forest"
    if height < 110:
        return "mountains"
    return "snow"


def build_sample_region(rect: Rect, seed: str = "sample", graph_size: int = 64,
                        cells_per_graph: int = 40) -> Region:
    """
    Region with height, temperature, humidity, biome and graph facets.

    Args:
        rect: World area of the region
        seed: Seed for the graph facet
        graph_size: Edge length of each Voronoi graph tile
        cells_per_graph: Desired cells per graph tile
    """
    zs, xs = np.mgrid[rect.min_z:rect.max_z, rect.min_x:rect.max_x].astype(np.float64)

    height = 60 + 40 * np.sin(xs / 17.0) * np.cos(zs / 23.0) + 15 * np.sin((xs + zs) / 7.0)
    temperature = 30 - np.abs(zs) / 10.0 - np.maximum(height - SEA_LEVEL, 0) / 8.0
    humidity = np.clip(100 - np.maximum(height - SEA_LEVEL, 0), 0, 100)

    biomes = np.empty(height.shape, dtype=object)
    for idx, h in np.ndenumerate(height):
        biomes[idx] = classify_biome(h)

    facets = {
        FacetKind.SURFACE_HEIGHT: FieldFacet(FacetKind.SURFACE_HEIGHT, rect, height),
        FacetKind.TEMPERATURE: FieldFacet(FacetKind.TEMPERATURE, rect, temperature),
        FacetKind.HUMIDITY: FieldFacet(FacetKind.HUMIDITY, rect, humidity),
        FacetKind.BIOME: ObjectFacet(FacetKind.BIOME, rect, biomes),
        FacetKind.GRAPH: generate_graph_facet(rect, graph_size, cells_per_graph, seed),
    }

    logger.info("Sample region built", rect=rect, facets=[k.label for k in facets])
    return Region(rect, facets)


def default_layer_stack(settings: Optional[Settings] = None) -> LayerStack:
    """Layers the viewer shows on startup, bottom to top."""
    return LayerStack([
        FieldFacetLayer(FacetKind.SURFACE_HEIGHT, offset=0, scale=1),
        NominalFacetLayer(FacetKind.BIOME, biome_color),
        GraphFacetLayer(settings=settings),
    ])
