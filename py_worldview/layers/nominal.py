"""Categorical layer: colors each cell of an object facet through a mapping function."""

import time
from typing import Any, Callable, Dict, Optional

import numpy as np
import structlog

from ..core.color import MISSING, Color
from ..core.compositor import PixelBuffer, blend_saturating
from ..core.region import FacetCategory, FacetKind
from .base import MISSING_TEXT, AbstractFacetLayer

logger = structlog.get_logger()

ColorMap = Callable[[Any], Color]


class NominalFacetLayer(AbstractFacetLayer):
    """
    Renders an object facet with a fixed value -> color function.

    The function must accept every non-None value the facet can hold. Within
    one render call it is called once per distinct hashable value (values of
    different types never share a color) and once per cell otherwise.
    """

    def __init__(self, facet_kind: FacetKind, color_map: ColorMap):
        if facet_kind.category is not FacetCategory.OBJECT:
            raise ValueError(f"{facet_kind} is not an object facet")
        super().__init__(None)
        self._facet_kind = facet_kind
        self._color_map = color_map

    def get_facet_kind(self) -> FacetKind:
        return self._facet_kind

    @property
    def color_map(self) -> ColorMap:
        return self._color_map

    def colors(self, values: np.ndarray) -> np.ndarray:
        """Packed RGB colors for a block of values."""
        cache: Dict[Any, int] = {}
        missing = MISSING.rgb()
        out = np.empty(values.shape, dtype=np.uint32)
        flat_out = out.reshape(-1)
        for i, value in enumerate(values.flat):
            if value is None:
                flat_out[i] = missing
                continue
            key = (type(value), value)
            try:
                rgb = cache.get(key)
            except TypeError:
                # unhashable, e.g. a list
                flat_out[i] = self._color_map(value).rgb()
                continue
            if rgb is None:
                rgb = self._color_map(value).rgb()
                cache[key] = rgb
            flat_out[i] = rgb
        return out

    def render(self, buffer: PixelBuffer, region) -> None:
        facet = region.get_facet(self._facet_kind)

        start = time.perf_counter()

        view = buffer.view(region.rect.width, region.rect.height)
        height, width = view.shape
        blend_saturating(view, self.colors(facet.data[:height, :width]))

        logger.debug("Nominal layer rendered", facet=self._facet_kind.label,
                     width=width, height=height,
                     elapsed_ms=round((time.perf_counter() - start) * 1000, 2))

    def get_world_text(self, region, wx: int, wy: int) -> Optional[str]:
        facet = region.get_facet(self._facet_kind)
        if not facet.world_rect.contains(wx, wy):
            return None
        value = facet.get_world(wx, wy)
        if value is None:
            return MISSING_TEXT
        return str(value)
