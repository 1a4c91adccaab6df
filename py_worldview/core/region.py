"""
Region and facet data contract.

A region is an axis-aligned rectangle of world space carrying facets: typed
grids that cover exactly the region's extent. Grids are stored row-major as
``data[z, x]`` in region-local coordinates.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple

import numpy as np

from .errors import FacetNotPresentError, OutOfBoundsError


class Rect(NamedTuple):
    """Integer rectangle; ``min`` inclusive, ``max`` exclusive."""

    min_x: int
    min_z: int
    width: int
    height: int

    @property
    def max_x(self) -> int:
        return self.min_x + self.width

    @property
    def max_z(self) -> int:
        return self.min_z + self.height

    def contains(self, x: float, z: float) -> bool:
        return self.min_x <= x < self.max_x and self.min_z <= z < self.max_z

    @classmethod
    def from_bounds(cls, min_x: int, min_z: int, max_x: int, max_z: int) -> "Rect":
        return cls(min_x, min_z, max_x - min_x, max_z - min_z)


class FacetCategory(Enum):
    """Shape of the data a facet holds."""

    FIELD = "field"
    OBJECT = "object"
    GRAPH = "graph"


class FacetKind(Enum):
    """Closed set of facet kinds a world generator can provide."""

    SURFACE_HEIGHT = ("surface_height", FacetCategory.FIELD)
    TEMPERATURE = ("temperature", FacetCategory.FIELD)
    HUMIDITY = ("humidity", FacetCategory.FIELD)
    DISTANCE_TO_COAST = ("distance_to_coast", FacetCategory.FIELD)
    BIOME = ("biome", FacetCategory.OBJECT)
    LAND_TYPE = ("land_type", FacetCategory.OBJECT)
    GRAPH = ("graph", FacetCategory.GRAPH)

    def __init__(self, label: str, category: FacetCategory):
        self.label = label
        self.category = category

    @classmethod
    def from_label(cls, label: str) -> "FacetKind":
        for kind in cls:
            if kind.label == label:
                return kind
        raise ValueError(f"Unknown facet kind: {label}")


class _GridFacet:
    """Shared addressing for grid facets."""

    def __init__(self, kind: FacetKind, world_rect: Rect, data: np.ndarray):
        if data.shape != (world_rect.height, world_rect.width):
            raise ValueError(
                f"Facet data shape {data.shape} does not match region "
                f"{world_rect.width}x{world_rect.height}"
            )
        self.kind = kind
        self.world_rect = world_rect
        self.data = data

    @property
    def width(self) -> int:
        return self.world_rect.width

    @property
    def height(self) -> int:
        return self.world_rect.height

    def get(self, x: int, z: int):
        """Sample at region-local coordinates."""
        if not (0 <= x < self.width and 0 <= z < self.height):
            raise OutOfBoundsError(x, z, self.world_rect)
        return self.data[z, x]

    def get_world(self, wx: int, wz: int):
        """Sample at world coordinates."""
        if not self.world_rect.contains(wx, wz):
            raise OutOfBoundsError(wx, wz, self.world_rect)
        return self.data[wz - self.world_rect.min_z, wx - self.world_rect.min_x]


class FieldFacet(_GridFacet):
    """Scalar field; non-finite values mark invalid samples."""

    def __init__(self, kind: FacetKind, world_rect: Rect, values):
        super().__init__(kind, world_rect, np.asarray(values, dtype=np.float64))

    def get(self, x: int, z: int) -> float:
        return float(super().get(x, z))

    def get_world(self, wx: int, wz: int) -> float:
        return float(super().get_world(wx, wz))


class ObjectFacet(_GridFacet):
    """Categorical grid of arbitrary values; ``None`` marks an absent sample."""

    def __init__(self, kind: FacetKind, world_rect: Rect, values):
        if isinstance(values, np.ndarray) and values.dtype == object:
            data = values
        else:
            # Fill cell by cell so tuple values are not unpacked into a new axis
            rows = list(values)
            data = np.empty((len(rows), len(rows[0]) if rows else 0), dtype=object)
            for z, row in enumerate(rows):
                for x, value in enumerate(row):
                    data[z, x] = value
        super().__init__(kind, world_rect, data)


@dataclass(frozen=True, eq=False)
class Region:
    """World rectangle plus the facets generated for it."""

    rect: Rect
    facets: Mapping[FacetKind, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "facets", MappingProxyType(dict(self.facets)))

    @property
    def min_x(self) -> int:
        return self.rect.min_x

    @property
    def min_z(self) -> int:
        return self.rect.min_z

    def has_facet(self, kind: FacetKind) -> bool:
        return kind in self.facets

    def get_facet(self, kind: FacetKind):
        try:
            return self.facets[kind]
        except KeyError:
            raise FacetNotPresentError(kind, self.rect) from None
