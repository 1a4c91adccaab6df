"""
Facet kind -> layer constructor registry.

Hosts use this to build a layer for a facet kind and to learn which layer
type will consume which data before asking the generator for it.
"""

from typing import Callable, Dict

from ..core.region import FacetCategory, FacetKind
from .base import AbstractFacetLayer
from .field import FieldFacetLayer
from .graph import GraphFacetLayer
from .nominal import NominalFacetLayer

LayerFactory = Callable[..., AbstractFacetLayer]

LAYER_REGISTRY: Dict[FacetCategory, LayerFactory] = {
    FacetCategory.FIELD: FieldFacetLayer,
    FacetCategory.OBJECT: NominalFacetLayer,
    FacetCategory.GRAPH: lambda kind, **kwargs: GraphFacetLayer(**kwargs),
}


def layer_type(kind: FacetKind) -> LayerFactory:
    return LAYER_REGISTRY[kind.category]


def create_layer(kind: FacetKind, *args, **kwargs) -> AbstractFacetLayer:
    """
    Build the layer that renders ``kind``.

    Extra arguments go to the layer constructor, e.g. ``offset`` and
    ``scale`` for field layers or the color map for nominal layers.

    Examples:
        create_layer(FacetKind.SURFACE_HEIGHT, offset=0, scale=2)
        create_layer(FacetKind.BIOME, biome_color)
        create_layer(FacetKind.GRAPH)
    """
    return LAYER_REGISTRY[kind.category](kind, *args, **kwargs)
