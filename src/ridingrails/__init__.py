"""ridingrails - track visited metro systems of world cities."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ridingrails")
except PackageNotFoundError:
    __version__ = "0+local"
from ridingrails.color import (
    DEFAULT_ACCENT,
    MARKER_BACKGROUND,
    RGBA,
    UNVISITED_GRAY,
    PieSlice,
    marker_colors,
    parse_hex_color,
    pie_slices,
    system_color,
)
from ridingrails.config import RailsConfig
from ridingrails.dataset import load_cities, load_dataset, parse_dataset, sample_cities
from ridingrails.exceptions import RailsConfigError, RailsDatasetError, RailsError, RailsPersistenceError
from ridingrails.models import City, Coordinate, TransitSystem
from ridingrails.persistence import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    VisitedStatePersistence,
)
from ridingrails.search import filter_cities
from ridingrails.state.events import StoreEvent, StoreEventKind
from ridingrails.state.store import MetroStore

__all__ = [
    "__version__",
    "City",
    "Coordinate",
    "DEFAULT_ACCENT",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MARKER_BACKGROUND",
    "MemoryKeyValueStore",
    "MetroStore",
    "PieSlice",
    "RGBA",
    "RailsConfig",
    "RailsConfigError",
    "RailsDatasetError",
    "RailsError",
    "RailsPersistenceError",
    "StoreEvent",
    "StoreEventKind",
    "TransitSystem",
    "UNVISITED_GRAY",
    "VisitedStatePersistence",
    "filter_cities",
    "load_cities",
    "load_dataset",
    "marker_colors",
    "parse_dataset",
    "parse_hex_color",
    "pie_slices",
    "sample_cities",
    "system_color",
]
