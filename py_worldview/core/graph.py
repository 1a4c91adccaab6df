"""
Voronoi graph geometry consumed by the graph layer.

A graph facet holds one or more independent planar subdivisions. Each
subdivision (``Graph``) has corners, edges between corner pairs and cell
regions. A region is an ordered loop of corners around a center point;
fanning the loop from the center yields the region's triangles.

All coordinates are world coordinates ``(x, z)`` as floats.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .region import FacetKind, Rect

logger = structlog.get_logger()

Point = Tuple[float, float]


@dataclass(eq=False)
class Corner:
    """Voronoi vertex."""
    index: int
    location: Point


@dataclass(eq=False)
class Edge:
    """Voronoi edge between two corners."""
    corner0: Corner
    corner1: Corner


@dataclass(eq=False)
class Triangle:
    """Fan triangle: region center plus two adjacent corners of its loop."""
    region: "GraphRegion"
    corner1: Corner
    corner2: Corner

    @property
    def points(self) -> Tuple[Point, Point, Point]:
        return self.region.center, self.corner1.location, self.corner2.location

    def contains(self, x: float, z: float) -> bool:
        a, b, c = self.points
        return bool(_inside(a, b, c, np.array([x]), np.array([z]))[0])


@dataclass(eq=False)
class GraphRegion:
    """Voronoi cell with an ordered corner loop."""
    index: int
    center: Point
    corners: List[Corner] = field(default_factory=list)

    def compute_triangles(self) -> List[Triangle]:
        """Fan-triangulate the cell around its center."""
        n = len(self.corners)
        if n < 3:
            return []
        return [
            Triangle(self, self.corners[i], self.corners[(i + 1) % n])
            for i in range(n)
        ]


@dataclass(eq=False)
class Graph:
    """One planar subdivision with integer bounds."""
    bounds: Rect
    regions: List[GraphRegion] = field(default_factory=list)
    corners: List[Corner] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def triangles(self) -> List[Triangle]:
        return [t for reg in self.regions for t in reg.compute_triangles()]


def _inside(a: Point, b: Point, c: Point, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
    """
    Edge-function test for points against triangle ``abc``.

    Points on an edge count as inside. Degenerate triangles contain nothing.
    """
    area2 = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
    if area2 == 0:
        return np.zeros(np.broadcast(xs, zs).shape, dtype=bool)

    w0 = (b[0] - a[0]) * (zs - a[1]) - (b[1] - a[1]) * (xs - a[0])
    w1 = (c[0] - b[0]) * (zs - b[1]) - (c[1] - b[1]) * (xs - b[0])
    w2 = (a[0] - c[0]) * (zs - c[1]) - (a[1] - c[1]) * (xs - c[0])

    # Points on a shared edge must land in one of the two neighbours
    eps = 1e-9 * abs(area2)
    if area2 < 0:
        w0, w1, w2 = -w0, -w1, -w2
    return (w0 >= -eps) & (w1 >= -eps) & (w2 >= -eps)


class TriangleLookup:
    """
    Rasterized point-location index over a world rectangle.

    Every integer point of ``rect`` stores the index of the first triangle
    covering it, or -1 when no triangle does.
    """

    def __init__(self, rect: Rect, triangles: Sequence[Triangle]):
        self.rect = rect
        self.triangles = list(triangles)
        self.index = np.full((rect.height, rect.width), -1, dtype=np.int32)

        for i, tri in enumerate(self.triangles):
            self._rasterize(i, tri)

        logger.debug("Triangle lookup built", triangles=len(self.triangles),
                     width=rect.width, height=rect.height)

    def _rasterize(self, i: int, tri: Triangle) -> None:
        a, b, c = tri.points
        xs_all = (a[0], b[0], c[0])
        zs_all = (a[1], b[1], c[1])

        x0 = max(int(np.ceil(min(xs_all))), self.rect.min_x)
        x1 = min(int(np.floor(max(xs_all))), self.rect.max_x - 1)
        z0 = max(int(np.ceil(min(zs_all))), self.rect.min_z)
        z1 = min(int(np.floor(max(zs_all))), self.rect.max_z - 1)
        if x0 > x1 or z0 > z1:
            return

        zs, xs = np.mgrid[z0:z1 + 1, x0:x1 + 1]
        mask = _inside(a, b, c, xs, zs)

        window = self.index[z0 - self.rect.min_z:z1 - self.rect.min_z + 1,
                            x0 - self.rect.min_x:x1 - self.rect.min_x + 1]
        window[mask & (window < 0)] = i

    def find(self, x: int, z: int) -> Optional[Triangle]:
        if not self.rect.contains(x, z):
            return None
        idx = self.index[z - self.rect.min_z, x - self.rect.min_x]
        if idx < 0:
            return None
        return self.triangles[idx]

    def misses(self) -> np.ndarray:
        """World coordinates ``(x, z)`` of every point no triangle covers."""
        zs, xs = np.nonzero(self.index < 0)
        return np.column_stack([xs + self.rect.min_x, zs + self.rect.min_z])


class GraphFacet:
    """Facet holding the graphs generated for a world area."""

    kind = FacetKind.GRAPH

    def __init__(self, world_rect: Rect, graphs: Optional[Sequence[Graph]] = None):
        self.world_rect = world_rect
        self.graphs = list(graphs or [])

    def get_all_graphs(self) -> List[Graph]:
        return self.graphs

    def get_world_graph(self, wx: int, wz: int) -> Optional[Graph]:
        for graph in self.graphs:
            if graph.bounds.contains(wx, wz):
                return graph
        return None

    @cached_property
    def triangle_lookup(self) -> TriangleLookup:
        triangles = [t for graph in self.graphs for t in graph.triangles()]
        return TriangleLookup(self.world_rect, triangles)

    def get_world_triangle(self, wx: int, wz: int) -> Optional[Triangle]:
        return self.triangle_lookup.find(wx, wz)
