"""
Core data model and compositing.
"""

from .color import Color, GRAYS, MISSING
from .compositor import LayerStack, PixelBuffer, blend_saturating
from .errors import (
    FacetNotPresentError, InvalidBufferError, OutOfBoundsError, UnknownConfigFieldError, WorldViewError,
)
from .graph import Corner, Edge, Graph, GraphFacet, GraphRegion, Triangle, TriangleLookup
from .region import FacetCategory, FacetKind, FieldFacet, ObjectFacet, Rect, Region

__all__ = ['Color', 'GRAYS', 'MISSING',
           'LayerStack', 'PixelBuffer', 'blend_saturating',
           'FacetNotPresentError', 'InvalidBufferError', 'OutOfBoundsError',
           'UnknownConfigFieldError', 'WorldViewError',
           'Corner', 'Edge', 'Graph', 'GraphFacet', 'GraphRegion', 'Triangle', 'TriangleLookup',
           'FacetCategory', 'FacetKind', 'FieldFacet', 'ObjectFacet', 'Rect', 'Region']
