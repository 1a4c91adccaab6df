"""
Common contract for facet layers.

A layer renders one facet kind of a region into the shared pixel buffer and
describes the sample under the pointer. Tunable state lives in an immutable
configuration snapshot (a frozen pydantic model) that setters replace as a
whole, so a render call that reads the snapshot once sees consistent values
even while another thread edits the layer.

Each layer declares its editable fields in ``CONFIG_FIELDS`` so a UI can
build widgets from the table instead of inspecting the config type.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

import structlog
from pydantic import BaseModel, ConfigDict

from ..core.errors import UnknownConfigFieldError
from ..core.region import FacetKind

logger = structlog.get_logger()

MISSING_TEXT = "<missing>"

Observer = Callable[["AbstractFacetLayer"], None]


@dataclass(frozen=True)
class RangeField:
    """Numeric config field; bounds are advisory hints for widgets."""
    name: str
    min: float
    max: float
    increment: float
    precision: int
    description: str = ""

    def coerce(self, value) -> float:
        return float(value)


@dataclass(frozen=True)
class ToggleField:
    """Boolean config field."""
    name: str
    description: str = ""

    def coerce(self, value) -> bool:
        return bool(value)


ConfigField = Union[RangeField, ToggleField]


class LayerConfig(BaseModel):
    """Base for layer configuration snapshots."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class AbstractFacetLayer(ABC):
    """Base class for all facet layers."""

    CONFIG_FIELDS: Tuple[ConfigField, ...] = ()

    def __init__(self, config: Optional[LayerConfig] = None):
        self._config = config
        self._visible = True
        self._observers: List[Observer] = []
        self._lock = threading.Lock()

    @abstractmethod
    def render(self, buffer, region) -> None:
        """Blend this layer's contribution for ``region`` into ``buffer``."""

    @abstractmethod
    def get_world_text(self, region, wx: int, wy: int) -> Optional[str]:
        """Describe the sample at a world coordinate, or None outside the facet."""

    @abstractmethod
    def get_facet_kind(self) -> FacetKind:
        """Facet kind the host must supply before calling ``render``."""

    def get_config(self) -> Optional[LayerConfig]:
        return self._config

    def config_fields(self) -> Tuple[ConfigField, ...]:
        return self.CONFIG_FIELDS

    def _field(self, name: str) -> ConfigField:
        for config_field in self.CONFIG_FIELDS:
            if config_field.name == name:
                return config_field
        raise UnknownConfigFieldError(type(self).__name__, name)

    def get_config_value(self, name: str) -> Any:
        self._field(name)
        return getattr(self._config, name)

    def set_config_value(self, name: str, value: Any) -> bool:
        """Set a declared field by name; returns True if the value changed."""
        config_field = self._field(name)
        return self._update_config(**{name: config_field.coerce(value)})

    def _update_config(self, **changes) -> bool:
        with self._lock:
            current = self._config
            if all(getattr(current, key) == value for key, value in changes.items()):
                return False
            self._config = current.model_copy(update=changes)
        logger.debug("Layer config changed", layer=type(self).__name__, **changes)
        self.notify_observers()
        return True

    @property
    def visible(self) -> bool:
        return self._visible

    @visible.setter
    def visible(self, visible: bool) -> None:
        with self._lock:
            if self._visible == visible:
                return
            self._visible = visible
        self.notify_observers()

    def add_observer(self, observer: Observer) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: Observer) -> None:
        self._observers.remove(observer)

    def notify_observers(self) -> None:
        for observer in list(self._observers):
            observer(self)

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.get_facet_kind().label})"
