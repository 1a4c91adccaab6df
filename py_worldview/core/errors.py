"""Exceptions raised by the rendering core."""


class WorldViewError(Exception):
    """Base class for all rendering core errors."""


class FacetNotPresentError(WorldViewError, KeyError):
    """A region was asked for a facet kind it does not carry."""

    def __init__(self, kind, region=None):
        self.kind = kind
        self.region = region
        super().__init__(f"Facet {kind} not present in region {region}")

    def __str__(self):
        return self.args[0]


class OutOfBoundsError(WorldViewError, IndexError):
    """A point query fell outside a facet's extent."""

    def __init__(self, x: int, z: int, rect=None):
        self.x = x
        self.z = z
        self.rect = rect
        super().__init__(f"Point ({x}, {z}) outside {rect}")


class UnknownConfigFieldError(WorldViewError, KeyError):
    """Generic configuration access used a field name the layer does not declare."""

    def __init__(self, layer_name: str, field_name: str):
        self.layer_name = layer_name
        self.field_name = field_name
        super().__init__(f"{layer_name} has no config field '{field_name}'")

    def __str__(self):
        return self.args[0]


class InvalidBufferError(WorldViewError, ValueError):
    """Pixel data is not a 2D uint32 array."""
