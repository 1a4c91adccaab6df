"""Scalar field layer: maps values linearly onto the grayscale ramp."""

import math
import time
from typing import Optional, Tuple

import numpy as np
import structlog

from ..core.color import GRAYS_RGB, MISSING
from ..core.compositor import PixelBuffer, blend_saturating
from ..core.region import FacetCategory, FacetKind
from .base import MISSING_TEXT, AbstractFacetLayer, LayerConfig, RangeField

logger = structlog.get_logger()


class FieldLayerConfig(LayerConfig):
    """Persistent field layer settings."""

    facet_kind: FacetKind
    offset: float = 0.0
    scale: float = 1.0


def round_half_up(values):
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    values = np.asarray(values, dtype=np.float64)
    # x + 0.5 is inexact just below a tie, so compare the fractional part instead
    magnitude = np.abs(values)
    whole = np.floor(magnitude)
    with np.errstate(invalid="ignore"):
        rounded = whole + (magnitude - whole >= 0.5)
    return np.where(values < 0, -rounded, rounded)


def gray_indices(values: np.ndarray, offset: float, scale: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Ramp indices for a block of scalar samples.

    Returns:
        Tuple of (indices clamped to [0, 255], mask of finite samples).
        Indices of non-finite samples are 0 and must be ignored.
    """
    values = np.asarray(values, dtype=np.float64)
    finite = np.isfinite(values)
    with np.errstate(over="ignore", invalid="ignore"):
        scaled = round_half_up(offset + scale * np.where(finite, values, 0.0))
    # inf from an extreme scale clips like any other out-of-range index
    scaled = np.nan_to_num(scaled, nan=0.0)
    idx = np.clip(scaled, 0, 255).astype(np.intp)
    return idx, finite


class FieldFacetLayer(AbstractFacetLayer):
    """Renders a scalar field facet as grayscale."""

    CONFIG_FIELDS = (
        RangeField("offset", min=-100, max=100, increment=1.0, precision=1,
                   description="Added to the scaled value before ramp lookup"),
        RangeField("scale", min=0, max=100, increment=0.1, precision=1,
                   description="Multiplier applied to each sample"),
    )

    def __init__(self, facet_kind: FacetKind, offset: float = 0.0, scale: float = 1.0):
        if facet_kind.category is not FacetCategory.FIELD:
            raise ValueError(f"{facet_kind} is not a field facet")
        super().__init__(FieldLayerConfig(facet_kind=facet_kind, offset=offset, scale=scale))

    @classmethod
    def from_config(cls, config: FieldLayerConfig) -> "FieldFacetLayer":
        return cls(config.facet_kind, config.offset, config.scale)

    def get_facet_kind(self) -> FacetKind:
        return self._config.facet_kind

    @property
    def offset(self) -> float:
        return self._config.offset

    @offset.setter
    def offset(self, offset: float) -> None:
        self._update_config(offset=offset)

    @property
    def scale(self) -> float:
        return self._config.scale

    @scale.setter
    def scale(self, scale: float) -> None:
        self._update_config(scale=scale)

    def colors(self, values: np.ndarray, config: Optional[FieldLayerConfig] = None) -> np.ndarray:
        """Packed RGB colors for a block of samples."""
        config = config or self._config
        idx, finite = gray_indices(values, config.offset, config.scale)
        return np.where(finite, GRAYS_RGB[idx], np.uint32(MISSING.rgb())).astype(np.uint32)

    def render(self, buffer: PixelBuffer, region) -> None:
        config = self._config
        facet = region.get_facet(config.facet_kind)

        start = time.perf_counter()

        view = buffer.view(region.rect.width, region.rect.height)
        height, width = view.shape
        blend_saturating(view, self.colors(facet.data[:height, :width], config))

        logger.debug("Field layer rendered", facet=config.facet_kind.label,
                     width=width, height=height,
                     elapsed_ms=round((time.perf_counter() - start) * 1000, 2))

    def get_world_text(self, region, wx: int, wy: int) -> Optional[str]:
        facet = region.get_facet(self._config.facet_kind)
        if not facet.world_rect.contains(wx, wy):
            return None
        value = facet.get_world(wx, wy)
        if not math.isfinite(value):
            return MISSING_TEXT
        return f"{value:.2f}"
