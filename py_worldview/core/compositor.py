"""
Pixel buffer, blend rule and the layer stack compositor.

Every layer contribution is applied with the same rule: the source alpha
is discarded, red, green and blue are added to the buffer with saturation
at 255, and the resulting alpha is forced opaque.
"""

import threading
import time
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import structlog
from PIL import Image

from .color import Color
from .errors import InvalidBufferError

logger = structlog.get_logger()

OPAQUE = np.uint32(0xFF000000)


class PixelBuffer:
    """
    Caller-owned 2D array of packed ARGB pixels.

    The core only writes into the wrapped array; it never allocates or
    resizes it.
    """

    def __init__(self, pixels: np.ndarray):
        if not isinstance(pixels, np.ndarray) or pixels.ndim != 2 or pixels.dtype != np.uint32:
            raise InvalidBufferError("Pixel buffer must be a 2D uint32 array")
        self.pixels = pixels

    @classmethod
    def create(cls, width: int, height: int, fill: int = 0xFF000000) -> "PixelBuffer":
        """Allocate a buffer filled with one ARGB value (host side helper)."""
        return cls(np.full((height, width), fill, dtype=np.uint32))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def view(self, width: int, height: int) -> np.ndarray:
        """Writable view of the top-left ``width`` x ``height`` pixels, clipped."""
        return self.pixels[:min(height, self.height), :min(width, self.width)]

    def get(self, x: int, z: int) -> Color:
        return Color.from_argb(int(self.pixels[z, x]))

    def to_image(self) -> Image.Image:
        """Copy the buffer into a Pillow RGBA image."""
        px = self.pixels
        rgba = np.empty(px.shape + (4,), dtype=np.uint8)
        rgba[..., 0] = (px >> 16) & 0xFF
        rgba[..., 1] = (px >> 8) & 0xFF
        rgba[..., 2] = px & 0xFF
        rgba[..., 3] = (px >> 24) & 0xFF
        return Image.fromarray(rgba)


def blend_pixel(dst: int, src: Color) -> int:
    """Scalar form of the blend rule, returns the new ARGB value."""
    r = min(0xFF, ((dst >> 16) & 0xFF) + src.r)
    g = min(0xFF, ((dst >> 8) & 0xFF) + src.g)
    b = min(0xFF, (dst & 0xFF) + src.b)
    return 0xFF000000 | (r << 16) | (g << 8) | b


def blend_saturating(dst: np.ndarray, src_rgb: np.ndarray,
                     mask: Optional[np.ndarray] = None) -> None:
    """
    Blend packed 0x00RRGGBB colors into ARGB pixels in place.

    Args:
        dst: Writable uint32 view into the pixel buffer
        src_rgb: Source colors, same shape as ``dst``; bits above 24 are ignored
        mask: Optional boolean array selecting the pixels to touch
    """
    src = src_rgb.astype(np.uint32, copy=False)
    r = np.minimum(((dst >> 16) & 0xFF) + ((src >> 16) & 0xFF), 0xFF)
    g = np.minimum(((dst >> 8) & 0xFF) + ((src >> 8) & 0xFF), 0xFF)
    b = np.minimum((dst & 0xFF) + (src & 0xFF), 0xFF)
    mix = OPAQUE | (r << 16) | (g << 8) | b

    if mask is None:
        dst[...] = mix
    else:
        dst[mask] = mix[mask]


class LayerStack:
    """
    Ordered layers rendered bottom (index 0) to top.

    Observers registered on the stack are told whenever one of its layers
    changes or the order changes, which is what a host needs to repaint.
    """

    def __init__(self, layers: Optional[Sequence] = None):
        self._layers: List = []
        self._observers: List[Callable] = []
        self._lock = threading.Lock()
        for layer in layers or []:
            self.add(layer)

    def __iter__(self) -> Iterator:
        return iter(list(self._layers))

    def __len__(self) -> int:
        return len(self._layers)

    def __getitem__(self, index: int):
        return self._layers[index]

    @property
    def layers(self) -> List:
        return list(self._layers)

    def add(self, layer, index: Optional[int] = None) -> None:
        with self._lock:
            if index is None:
                self._layers.append(layer)
            else:
                self._layers.insert(index, layer)
        layer.add_observer(self._on_layer_changed)
        logger.info("Layer added", layer=type(layer).__name__, size=len(self._layers))
        self._notify(layer)

    def remove(self, layer) -> None:
        with self._lock:
            self._layers.remove(layer)
        layer.remove_observer(self._on_layer_changed)
        logger.info("Layer removed", layer=type(layer).__name__, size=len(self._layers))
        self._notify(layer)

    def move(self, src: int, dst: int) -> None:
        """Move the layer at ``src`` so it ends up at index ``dst``."""
        if src == dst:
            return
        with self._lock:
            layer = self._layers.pop(src)
            self._layers.insert(dst, layer)
        logger.info("Layer moved", layer=type(layer).__name__, src=src, dst=dst)
        self._notify(layer)

    def visible_layers(self) -> List:
        return [layer for layer in self._layers if layer.visible]

    def required_facet_kinds(self) -> list:
        """Facet kinds the host must provide, in first-use order."""
        kinds = []
        for layer in self.visible_layers():
            kind = layer.get_facet_kind()
            if kind not in kinds:
                kinds.append(kind)
        return kinds

    def render(self, buffer: PixelBuffer, region) -> None:
        start = time.perf_counter()
        layers = self.visible_layers()
        for layer in layers:
            layer.render(buffer, region)
        logger.debug("Region composited", layers=len(layers), rect=region.rect,
                     elapsed_ms=round((time.perf_counter() - start) * 1000, 2))

    def world_text(self, region, wx: int, wz: int) -> Optional[str]:
        """Text of the topmost visible layer that has something at the point."""
        for layer in reversed(self.visible_layers()):
            text = layer.get_world_text(region, wx, wz)
            if text is not None:
                return text
        return None

    def world_texts(self, region, wx: int, wz: int) -> List[Tuple[object, Optional[str]]]:
        """Text of every visible layer, bottom to top."""
        return [(layer, layer.get_world_text(region, wx, wz)) for layer in self.visible_layers()]

    def add_observer(self, callback: Callable) -> None:
        self._observers.append(callback)

    def remove_observer(self, callback: Callable) -> None:
        self._observers.remove(callback)

    def _on_layer_changed(self, layer) -> None:
        self._notify(layer)

    def _notify(self, layer) -> None:
        for callback in list(self._observers):
            callback(layer)
