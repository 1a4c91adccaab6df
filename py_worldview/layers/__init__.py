"""
Facet layers.
"""

from .base import AbstractFacetLayer, RangeField, ToggleField
from .field import FieldFacetLayer
from .graph import GraphFacetLayer
from .nominal import NominalFacetLayer
from .registry import LAYER_REGISTRY, create_layer

__all__ = ['AbstractFacetLayer', 'RangeField', 'ToggleField',
           'FieldFacetLayer', 'GraphFacetLayer', 'NominalFacetLayer',
           'LAYER_REGISTRY', 'create_layer']
