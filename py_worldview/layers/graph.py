"""
Graph layer: draws the Voronoi graphs of a graph facet.

Geometry is rasterized with Pillow into a transparent overlay the size of
the region, translated so the region's world minimum lands on pixel (0, 0).
Passes are drawn one after another, so later passes cover earlier ones
inside the overlay. The finished overlay is then blended into the buffer
wherever it has coverage.
"""

import time
from typing import Callable, Optional, Tuple

import numpy as np
import structlog
from PIL import Image, ImageDraw

from ..config import Settings, settings as default_settings
from ..core.alea_prng import AleaPRNG
from ..core.color import BLACK, MAGENTA, PINK, RED, WHITE, Color
from ..core.compositor import PixelBuffer, blend_saturating
from ..core.graph import Graph, GraphFacet, GraphRegion, Triangle
from ..core.region import FacetKind
from .base import AbstractFacetLayer, LayerConfig, ToggleField
from .field import round_half_up

logger = structlog.get_logger()

Origin = Tuple[int, int]

EDGE_COLOR = Color(192, 192, 192, 160)


class GraphLayerConfig(LayerConfig):
    """Persistent graph layer toggles."""

    show_edges: bool = True
    show_bounds: bool = True
    show_corners: bool = True
    show_sites: bool = True
    show_lookup: bool = False
    show_tris: bool = False


def _ink(color: Color) -> Tuple[int, int, int, int]:
    return color.r, color.g, color.b, color.a


def _round(value: float) -> int:
    return int(round_half_up(value))


def draw_edges(draw: ImageDraw.ImageDraw, graph: Graph, origin: Origin = (0, 0)) -> None:
    dx, dz = origin
    for edge in graph.edges:
        x0, z0 = edge.corner0.location
        x1, z1 = edge.corner1.location
        draw.line([(int(x0) - dx, int(z0) - dz), (int(x1) - dx, int(z1) - dz)],
                  fill=_ink(EDGE_COLOR), width=1)


def draw_polys(draw: ImageDraw.ImageDraw, graph: Graph,
               color_func: Callable[[GraphRegion], Color], origin: Origin = (0, 0)) -> None:
    """Fill every cell polygon with the color chosen by ``color_func``."""
    dx, dz = origin
    for reg in graph.regions:
        if len(reg.corners) < 3:
            continue
        points = [(int(c.location[0]) - dx, int(c.location[1]) - dz) for c in reg.corners]
        draw.polygon(points, fill=_ink(color_func(reg)))


def draw_triangle(draw: ImageDraw.ImageDraw, tri: Triangle, color: Color,
                  origin: Origin = (0, 0)) -> None:
    dx, dz = origin
    points = [(_round(x) - dx, _round(z) - dz) for x, z in tri.points]
    draw.polygon(points, fill=_ink(color))


def draw_triangles(draw: ImageDraw.ImageDraw, graph: Graph, seed: int,
                   origin: Origin = (0, 0)) -> None:
    """Fill each fan triangle with a color drawn from a fresh seeded generator."""
    prng = AleaPRNG(seed)
    for reg in graph.regions:
        for tri in reg.compute_triangles():
            draw_triangle(draw, tri, Color.from_rgb(prng.next_int(0xFFFFFF)), origin)


def _draw_marker(draw: ImageDraw.ImageDraw, x: float, z: float, color: Color, origin: Origin) -> None:
    dx, dz = origin
    x0 = int(np.floor(x - 1)) - dx
    z0 = int(np.floor(z - 1)) - dz
    draw.rectangle([x0, z0, x0 + 1, z0 + 1], fill=_ink(color))


def draw_sites(draw: ImageDraw.ImageDraw, graph: Graph, origin: Origin = (0, 0)) -> None:
    for reg in graph.regions:
        _draw_marker(draw, reg.center[0], reg.center[1], BLACK, origin)


def draw_corners(draw: ImageDraw.ImageDraw, graph: Graph, origin: Origin = (0, 0)) -> None:
    for corner in graph.corners:
        _draw_marker(draw, corner.location[0], corner.location[1], WHITE, origin)


def draw_bounds(draw: ImageDraw.ImageDraw, graph: Graph, origin: Origin = (0, 0)) -> None:
    dx, dz = origin
    b = graph.bounds
    if b.width <= 0 or b.height <= 0:
        return
    draw.rectangle([b.min_x - dx, b.min_z - dz, b.max_x - dx, b.max_z - dz], outline=_ink(PINK))


def fill_bounds(draw: ImageDraw.ImageDraw, graph: Graph, origin: Origin = (0, 0)) -> None:
    """Fill the inside of the bounds outline."""
    dx, dz = origin
    b = graph.bounds
    if b.width < 2 or b.height < 2:
        return
    draw.rectangle([b.min_x + 1 - dx, b.min_z + 1 - dz, b.max_x - 1 - dx, b.max_z - 1 - dz],
                   fill=_ink(MAGENTA))


def draw_triangle_lookup(draw: ImageDraw.ImageDraw, facet: GraphFacet, origin: Origin = (0, 0),
                         size: Optional[Tuple[int, int]] = None,
                         radius: int = 5, width: int = 3) -> int:
    """
    Circle every world point of the facet that no triangle covers.

    Args:
        draw: Target drawing context
        facet: Graph facet whose cached lookup is queried
        origin: World coordinate of overlay pixel (0, 0)
        size: Overlay size; markers entirely outside it are skipped
        radius: Marker radius in pixels
        width: Marker stroke width

    Returns:
        Number of uncovered points in the facet
    """
    dx, dz = origin
    misses = facet.triangle_lookup.misses()
    total = len(misses)

    if size is not None and total:
        w, h = size
        px = misses[:, 0] - dx
        pz = misses[:, 1] - dz
        near = (px >= -radius) & (px < w + radius) & (pz >= -radius) & (pz < h + radius)
        misses = misses[near]

    for x, z in misses:
        x, z = int(x) - dx, int(z) - dz
        draw.ellipse([x - radius, z - radius, x + radius, z + radius],
                     outline=_ink(RED), width=width)

    if total:
        logger.info("Triangle lookup has gaps", misses=total, rect=facet.world_rect)
    return total


class GraphFacetLayer(AbstractFacetLayer):
    """Draws Voronoi graphs and the point-location diagnostic overlay."""

    CONFIG_FIELDS = (
        ToggleField("show_edges", "Voronoi edges"),
        ToggleField("show_bounds", "Graph bounding boxes"),
        ToggleField("show_corners", "Voronoi corners"),
        ToggleField("show_sites", "Cell centers"),
        ToggleField("show_lookup", "Mark points missed by the triangle lookup"),
        ToggleField("show_tris", "Fan triangulation"),
    )

    def __init__(self, config: Optional[GraphLayerConfig] = None, settings: Optional[Settings] = None):
        super().__init__(config or GraphLayerConfig())
        self._settings = settings or default_settings

    def get_facet_kind(self) -> FacetKind:
        return FacetKind.GRAPH

    def render(self, buffer: PixelBuffer, region) -> None:
        config = self._config
        facet = region.get_facet(FacetKind.GRAPH)

        start = time.perf_counter()

        view = buffer.view(region.rect.width, region.rect.height)
        height, width = view.shape
        overlay = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        origin = (region.min_x, region.min_z)

        for graph in facet.get_all_graphs():
            if config.show_edges:
                draw_edges(draw, graph, origin)

            if config.show_tris:
                draw_triangles(draw, graph, self._settings.triangle_color_seed, origin)

            if config.show_corners:
                draw_corners(draw, graph, origin)

            if config.show_sites:
                draw_sites(draw, graph, origin)

            if config.show_bounds:
                draw_bounds(draw, graph, origin)

        if config.show_lookup:
            draw_triangle_lookup(draw, facet, origin, (width, height),
                                 self._settings.lookup_marker_radius,
                                 self._settings.lookup_marker_width)

        pixels = np.asarray(overlay, dtype=np.uint32)
        covered = pixels[..., 3] > 0
        src = (pixels[..., 0] << 16) | (pixels[..., 1] << 8) | pixels[..., 2]
        blend_saturating(view, src, covered)

        logger.debug("Graph layer rendered", graphs=len(facet.get_all_graphs()),
                     elapsed_ms=round((time.perf_counter() - start) * 1000, 2))

    def get_world_text(self, region, wx: int, wy: int) -> Optional[str]:
        """
        Counts of the first graph whose bounds contain the point.

        A graph with bounds but no geometry still matches and reports
        ``"0 regs, 0 corners, 0 edges"``.
        """
        facet = region.get_facet(FacetKind.GRAPH)
        graph = facet.get_world_graph(wx, wy)
        if graph is None:
            return None
        return f"{len(graph.regions)} regs, {len(graph.corners)} corners, {len(graph.edges)} edges"

    @property
    def show_edges(self) -> bool:
        return self._config.show_edges

    @show_edges.setter
    def show_edges(self, value: bool) -> None:
        self._update_config(show_edges=value)

    @property
    def show_bounds(self) -> bool:
        return self._config.show_bounds

    @show_bounds.setter
    def show_bounds(self, value: bool) -> None:
        self._update_config(show_bounds=value)

    @property
    def show_corners(self) -> bool:
        return self._config.show_corners

    @show_corners.setter
    def show_corners(self, value: bool) -> None:
        self._update_config(show_corners=value)

    @property
    def show_sites(self) -> bool:
        return self._config.show_sites

    @show_sites.setter
    def show_sites(self, value: bool) -> None:
        self._update_config(show_sites=value)

    @property
    def show_tris(self) -> bool:
        return self._config.show_tris

    @show_tris.setter
    def show_tris(self, value: bool) -> None:
        self._update_config(show_tris=value)

    @property
    def show_lookup(self) -> bool:
        return self._config.show_lookup

    @show_lookup.setter
    def show_lookup(self, value: bool) -> None:
        self._update_config(show_lookup=value)
