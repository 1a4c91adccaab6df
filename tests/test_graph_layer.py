"""Tests for the graph layer and its drawing passes."""

import numpy as np
import pytest
from PIL import Image, ImageDraw

from py_worldview.config import Settings
from py_worldview.core.color import Color
from py_worldview.core.compositor import PixelBuffer
from py_worldview.core.graph import Corner, Edge, Graph, GraphFacet, GraphRegion
from py_worldview.core.region import FacetKind, Rect, Region
from py_worldview.layers.graph import (
    EDGE_COLOR, GraphFacetLayer, GraphLayerConfig,
    draw_polys, draw_triangle_lookup, fill_bounds,
)

BLACK_ARGB = 0xFF000000


def square_graph(closed=True, origin=(0, 0), size=10):
    ox, oz = origin
    locations = [(ox, oz), (ox + size, oz), (ox + size, oz + size), (ox, oz + size)]
    if not closed:
        locations = locations[:3]
    corners = [Corner(i, loc) for i, loc in enumerate(locations)]
    edges = [Edge(corners[i], corners[(i + 1) % len(corners)]) for i in range(len(corners))]
    region = GraphRegion(0, (ox + size / 2, oz + size / 2), corners)
    return Graph(Rect(ox, oz, size, size), [region], corners, edges)


def graph_region(graphs, rect=Rect(0, 0, 16, 16)):
    return Region(rect, {FacetKind.GRAPH: GraphFacet(rect, graphs)})


class EllipseRecorder:
    """Stand-in drawing context that keeps the center of each ellipse."""

    def __init__(self):
        self.centers = []

    def ellipse(self, box, **kwargs):
        x0, z0, x1, z1 = box
        self.centers.append(((x0 + x1) // 2, (z0 + z1) // 2))


def only(**toggles):
    """Config with every pass off except the given ones."""
    off = dict(show_edges=False, show_bounds=False, show_corners=False,
               show_sites=False, show_lookup=False, show_tris=False)
    off.update(toggles)
    return GraphLayerConfig(**off)


class TestEmptyGraph:
    """Test that graphs without geometry leave the buffer alone."""

    def test_no_graphs(self):
        region = graph_region([])
        buffer = PixelBuffer.create(16, 16)
        layer = GraphFacetLayer()

        layer.render(buffer, region)

        assert np.all(buffer.pixels == BLACK_ARGB)
        assert layer.get_world_text(region, 3, 3) is None

    def test_graph_without_geometry(self):
        region = graph_region([Graph(Rect(0, 0, 0, 0))])
        buffer = PixelBuffer.create(16, 16)
        layer = GraphFacetLayer(only(show_edges=True, show_bounds=True, show_corners=True,
                                     show_sites=True, show_tris=True))

        layer.render(buffer, region)

        assert np.all(buffer.pixels == BLACK_ARGB)
        for z in range(16):
            for x in range(16):
                assert layer.get_world_text(region, x, z) is None


class TestDrawingPasses:
    """Test the individual geometry passes."""

    def test_edges(self):
        a, b = Corner(0, (1.0, 1.0)), Corner(1, (6.0, 1.0))
        region = graph_region([Graph(Rect(0, 0, 16, 16), [], [a, b], [Edge(a, b)])])
        buffer = PixelBuffer.create(16, 16)

        GraphFacetLayer(only(show_edges=True)).render(buffer, region)

        for x in range(1, 7):
            assert buffer.get(x, 1) == Color(EDGE_COLOR.r, EDGE_COLOR.g, EDGE_COLOR.b)
        assert buffer.get(7, 1) == Color(0, 0, 0)
        assert buffer.get(3, 2) == Color(0, 0, 0)

    def test_translated_to_region_origin(self):
        a, b = Corner(0, (101.0, 201.0)), Corner(1, (106.0, 201.0))
        rect = Rect(100, 200, 16, 16)
        region = graph_region([Graph(rect, [], [a, b], [Edge(a, b)])], rect)
        buffer = PixelBuffer.create(16, 16)

        GraphFacetLayer(only(show_edges=True)).render(buffer, region)

        assert buffer.get(1, 1) == Color(192, 192, 192)
        assert buffer.get(6, 1) == Color(192, 192, 192)
        assert buffer.get(0, 0) == Color(0, 0, 0)

    def test_bounds_outline(self):
        region = graph_region([Graph(Rect(1, 1, 4, 4))])
        buffer = PixelBuffer.create(16, 16)

        GraphFacetLayer(only(show_bounds=True)).render(buffer, region)

        assert buffer.get(1, 1) == Color(255, 175, 175)
        assert buffer.get(5, 5) == Color(255, 175, 175)
        assert buffer.get(3, 1) == Color(255, 175, 175)
        assert buffer.get(3, 3) == Color(0, 0, 0)

    def test_corner_markers(self):
        region = graph_region([Graph(Rect(0, 0, 16, 16), [], [Corner(0, (4.0, 4.0))], [])])
        buffer = PixelBuffer.create(16, 16)

        GraphFacetLayer(only(show_corners=True)).render(buffer, region)

        white = Color(255, 255, 255)
        assert [buffer.get(x, z) for x, z in [(3, 3), (4, 3), (3, 4), (4, 4)]] == [white] * 4
        assert buffer.get(5, 5) == Color(0, 0, 0)

    def test_site_markers_blend_black(self):
        """Test that black site markers add nothing to existing content."""
        region = graph_region([square_graph()])
        fill = Color(40, 40, 40).argb()
        buffer = PixelBuffer.create(16, 16, fill=fill)

        GraphFacetLayer(only(show_sites=True)).render(buffer, region)

        assert np.all(buffer.pixels == fill)

    def test_triangles_deterministic(self):
        region = graph_region([square_graph()])
        layer = GraphFacetLayer(only(show_tris=True), Settings(triangle_color_seed=99))

        first = PixelBuffer.create(16, 16)
        second = PixelBuffer.create(16, 16)
        layer.render(first, region)
        layer.render(second, region)

        np.testing.assert_array_equal(first.pixels, second.pixels)
        # fills cover the square and leave the rest untouched
        assert first.get(5, 2) != Color(0, 0, 0)
        assert first.get(14, 14) == Color(0, 0, 0)

    def test_triangles_distinct_colors(self):
        region = graph_region([square_graph()])
        buffer = PixelBuffer.create(16, 16)

        GraphFacetLayer(only(show_tris=True)).render(buffer, region)

        # one interior point per fan triangle: bottom, right, top, left
        samples = {buffer.get(5, 2), buffer.get(8, 5), buffer.get(5, 8), buffer.get(2, 5)}
        assert len(samples) == 4

    def test_later_pass_overwrites_earlier(self):
        """Test that corners drawn after edges replace the edge color, not add to it."""
        a, b = Corner(0, (2.0, 2.0)), Corner(1, (8.0, 2.0))
        region = graph_region([Graph(Rect(0, 0, 16, 16), [], [a, b], [Edge(a, b)])])
        buffer = PixelBuffer.create(16, 16)

        GraphFacetLayer(only(show_edges=True, show_corners=True)).render(buffer, region)

        assert buffer.get(2, 2) == Color(255, 255, 255)
        assert buffer.get(5, 2) == Color(192, 192, 192)

    def test_missing_facet(self):
        region = Region(Rect(0, 0, 4, 4), {})
        with pytest.raises(KeyError):
            GraphFacetLayer().render(PixelBuffer.create(4, 4), region)


class TestLookupOverlay:
    """Test the point-location diagnostic overlay."""

    def test_tiling_draws_nothing(self):
        region = graph_region([square_graph()], Rect(0, 0, 10, 10))
        buffer = PixelBuffer.create(10, 10)

        GraphFacetLayer(only(show_lookup=True)).render(buffer, region)

        assert np.all(buffer.pixels == BLACK_ARGB)

    def test_gap_draws_markers(self):
        region = graph_region([square_graph(closed=False)], Rect(0, 0, 10, 10))
        buffer = PixelBuffer.create(10, 10)

        GraphFacetLayer(only(show_lookup=True)).render(buffer, region)

        reds = (buffer.pixels >> 16) & 0xFF
        greens = (buffer.pixels >> 8) & 0xFF
        assert reds.max() == 255
        assert greens.max() == 0

    def test_marker_count(self):
        facet = GraphFacet(Rect(0, 0, 10, 10), [square_graph(closed=False)])
        image = Image.new("RGBA", (10, 10), (0, 0, 0, 0))

        assert draw_triangle_lookup(ImageDraw.Draw(image), facet) == 45

    def test_markers_exactly_at_gap(self):
        """Test that one circle is centered on every gap point and nowhere else."""
        facet = GraphFacet(Rect(0, 0, 10, 10), [square_graph(closed=False)])
        draw = EllipseRecorder()

        draw_triangle_lookup(draw, facet, radius=5, width=3)

        expected = {(x, z) for z in range(10) for x in range(10) if z > x}
        assert len(draw.centers) == 45
        assert set(draw.centers) == expected
        assert {(x, z) for x, z in facet.triangle_lookup.misses()} == expected

    def test_closed_square_covers_far_row(self):
        """Test that points on the max edge of a closed cell are found."""
        corners = [Corner(i, loc) for i, loc in enumerate([(0, 0), (20, 0), (20, 20), (0, 20)])]
        graph = Graph(Rect(0, 0, 20, 20), [GraphRegion(0, (10, 10), corners)], corners, [])
        facet = GraphFacet(Rect(0, 0, 21, 21), [graph])
        image = Image.new("RGBA", (21, 21), (0, 0, 0, 0))

        count = draw_triangle_lookup(ImageDraw.Draw(image), facet, radius=5, width=1)
        pixels = np.asarray(image)

        # row and column 20 are covered by the closed square, so no misses
        assert count == 0
        assert pixels[..., 3].max() == 0

    def test_default_off(self):
        assert GraphFacetLayer().show_lookup is False


class TestGraphHelpers:
    """Test the polygon and bounds fill helpers."""

    def test_draw_polys(self):
        image = Image.new("RGBA", (12, 12), (0, 0, 0, 0))
        draw_polys(ImageDraw.Draw(image), square_graph(), lambda reg: Color(10, 20, 30))

        assert image.getpixel((5, 5)) == (10, 20, 30, 255)
        assert image.getpixel((11, 11)) == (0, 0, 0, 0)

    def test_fill_bounds(self):
        image = Image.new("RGBA", (12, 12), (0, 0, 0, 0))
        fill_bounds(ImageDraw.Draw(image), square_graph())

        assert image.getpixel((0, 0)) == (0, 0, 0, 0)
        assert image.getpixel((1, 1)) == (255, 0, 255, 255)
        assert image.getpixel((9, 9)) == (255, 0, 255, 255)
        assert image.getpixel((10, 10)) == (0, 0, 0, 0)


class TestGraphWorldText:

    def test_counts(self):
        region = graph_region([square_graph()])
        assert GraphFacetLayer().get_world_text(region, 4, 4) == "1 regs, 4 corners, 4 edges"

    def test_first_containing_graph(self):
        left = square_graph()
        right = square_graph(closed=False, origin=(10, 0))
        region = graph_region([left, right], Rect(0, 0, 20, 10))

        assert GraphFacetLayer().get_world_text(region, 12, 1) == "1 regs, 3 corners, 3 edges"

    def test_outside_all_graphs(self):
        region = graph_region([square_graph()])
        assert GraphFacetLayer().get_world_text(region, 12, 12) is None

    def test_graph_without_geometry_still_described(self):
        """Test that a graph with bounds but no cells reports zero counts and draws its outline."""
        region = graph_region([Graph(Rect(2, 2, 6, 6))])
        layer = GraphFacetLayer(only(show_bounds=True))
        buffer = PixelBuffer.create(16, 16)

        layer.render(buffer, region)

        assert layer.get_world_text(region, 4, 4) == "0 regs, 0 corners, 0 edges"
        assert buffer.get(2, 2) == Color(255, 175, 175)
