"""
Voronoi graph construction for graph facets.

The rendering core only reads graphs; this module builds them from a
jittered point grid with scipy so hosts without a world generator (demos,
tests, the viewer's sample world) have realistic data to draw.
"""

from typing import Dict, List, NamedTuple, Optional

import numpy as np
import structlog
from scipy.spatial import Voronoi

from .alea_prng import AleaPRNG
from .graph import Corner, Edge, Graph, GraphFacet, GraphRegion
from .region import Rect

logger = structlog.get_logger()


class GridConfig(NamedTuple):
    """Configuration for a single graph."""
    bounds: Rect
    cells_desired: int


def get_jittered_grid(bounds: Rect, spacing: float, seed: str = "default") -> np.ndarray:
    """
    Square grid of points inside ``bounds``, each moved by up to 45% of the spacing.

    Returns:
        Array of [x, z] world coordinates
    """
    prng = AleaPRNG(seed)

    radius = spacing / 2
    jittering = radius * 0.9

    points = []
    z = radius
    while z < bounds.height:
        x = radius
        while x < bounds.width:
            xj = min(x + prng.uniform(-jittering, jittering), bounds.width)
            zj = min(z + prng.uniform(-jittering, jittering), bounds.height)
            points.append([bounds.min_x + xj, bounds.min_z + zj])
            x += spacing
        z += spacing

    return np.array(points, dtype=float).reshape(-1, 2)


def get_boundary_points(bounds: Rect, spacing: float) -> np.ndarray:
    """
    Ring of points one spacing outside ``bounds``.

    They keep every grid cell finite; their own cells are discarded.
    """
    offset = -spacing
    b_spacing = spacing * 2
    w = bounds.width - offset * 2
    h = bounds.height - offset * 2

    number_x = max(int(np.ceil(w / b_spacing) - 1), 1)
    number_z = max(int(np.ceil(h / b_spacing) - 1), 1)

    points = []
    for i in range(number_x):
        x = w * (i + 0.5) / number_x + offset
        points.append([x, offset])
        points.append([x, h + offset])

    for i in range(number_z):
        z = h * (i + 0.5) / number_z + offset
        points.append([offset, z])
        points.append([w + offset, z])

    # Corners close the ring diagonally
    points.extend([[offset, offset], [w + offset, offset],
                   [offset, h + offset], [w + offset, h + offset]])

    return np.array(points) + [bounds.min_x, bounds.min_z]


def build_graph(points: np.ndarray, boundary_points: np.ndarray, bounds: Rect) -> Graph:
    """
    Convert a scipy Voronoi diagram into a ``Graph``.

    Only cells of ``points`` are kept; corners and edges are those the kept
    cells touch.
    """
    n_points = len(points)
    vor = Voronoi(np.vstack([points, boundary_points]))

    corners: Dict[int, Corner] = {}

    def corner(vertex_idx: int) -> Corner:
        if vertex_idx not in corners:
            x, z = vor.vertices[vertex_idx]
            corners[vertex_idx] = Corner(len(corners), (float(x), float(z)))
        return corners[vertex_idx]

    regions: List[GraphRegion] = []
    for i in range(n_points):
        vertex_ids = vor.regions[vor.point_region[i]]
        if not vertex_ids or -1 in vertex_ids:
            continue
        center = (float(points[i][0]), float(points[i][1]))
        regions.append(GraphRegion(len(regions), center, [corner(v) for v in vertex_ids]))

    edges: List[Edge] = []
    for (p1, p2), ridge in zip(vor.ridge_points, vor.ridge_vertices):
        if -1 in ridge or (p1 >= n_points and p2 >= n_points):
            continue
        v1, v2 = ridge
        edges.append(Edge(corner(v1), corner(v2)))

    logger.info("Voronoi graph built", regions=len(regions),
                corners=len(corners), edges=len(edges))

    return Graph(bounds=bounds, regions=regions, corners=list(corners.values()), edges=edges)


def generate_graph(config: GridConfig, seed: Optional[str] = None) -> Graph:
    """Generate one graph with roughly ``cells_desired`` cells."""
    bounds = config.bounds
    spacing = round(float(np.sqrt((bounds.width * bounds.height) / config.cells_desired)), 2)

    logger.info("Generating Voronoi graph", bounds=bounds,
                cells_desired=config.cells_desired, spacing=spacing, seed=seed)

    grid_points = get_jittered_grid(bounds, spacing, seed or "default")
    boundary_points = get_boundary_points(bounds, spacing)
    return build_graph(grid_points, boundary_points, bounds)


def generate_graph_facet(world_rect: Rect, graph_size: int, cells_per_graph: int,
                         seed: Optional[str] = None) -> GraphFacet:
    """
    Tile ``world_rect`` with independent square graphs.

    Args:
        world_rect: Area the facet covers
        graph_size: Edge length of each graph's bounds
        cells_per_graph: Desired cell count per graph
        seed: Base seed; each tile derives its own from its position

    Returns:
        GraphFacet with one graph per tile
    """
    graphs = []
    for z in range(world_rect.min_z, world_rect.max_z, graph_size):
        for x in range(world_rect.min_x, world_rect.max_x, graph_size):
            bounds = Rect.from_bounds(x, z, min(x + graph_size, world_rect.max_x),
                                      min(z + graph_size, world_rect.max_z))
            tile_seed = f"{seed or 'default'}:{x}:{z}"
            graphs.append(generate_graph(GridConfig(bounds, cells_per_graph), tile_seed))
    return GraphFacet(world_rect, graphs)
