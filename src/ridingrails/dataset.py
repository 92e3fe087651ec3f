"""Static city dataset loading.

The dataset is a JSON document, either a list of cities or an object with a
``cities`` list::

    [
      {
        "id": "0016d3f6-c1f7-41c0-8b39-0f429a7aa64a",
        "name": "London",
        "country": "UK",
        "coordinate": [51.5074, -0.1278],
        "systems": [
          {"id": "...", "name": "London Underground", "colorHex": "#000000"}
        ]
      }
    ]

Visited state is keyed by id, so ids must not change between loads.
Entries without an ``id`` get a deterministic one derived from their names
(see :func:`ridingrails._constants.city_uuid`), never a random one.
"""

from __future__ import annotations

import importlib.resources
import json
import logging
import uuid
from collections import Counter
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ridingrails._constants import BUNDLED_DATASET, city_uuid, system_uuid
from ridingrails.exceptions import RailsDatasetError
from ridingrails.models.city import City
from ridingrails.models.coordinate import Coordinate
from ridingrails.models.transit import TransitSystem

_logger = logging.getLogger(__name__)

_CITY_LIST = TypeAdapter(list[City])
_VISITED_KEYS = frozenset({"visitedSystemIDs", "visitedSystemIds", "visited_system_ids"})


def _prepare_entry(entry: Any) -> Any:
    """Drop visited state and fill in missing city/system ids from names.

    Visited state only comes from persistence, never from the static dataset.
    """
    if not isinstance(entry, dict):
        return entry
    working = {key: value for key, value in entry.items() if key not in _VISITED_KEYS}
    if working.get("id") is None and isinstance(working.get("name"), str):
        working["id"] = str(city_uuid(working["name"], str(working.get("country") or "")))
        _logger.debug("Derived id %s for dataset city %r", working["id"], working["name"])

    systems = working.get("systems")
    if isinstance(systems, list) and working.get("id") is not None:
        seen: Counter[str] = Counter()
        patched: list[Any] = []
        for system in systems:
            if isinstance(system, dict) and system.get("id") is None and isinstance(system.get("name"), str):
                key = system["name"].strip().lower()
                system = {**system, "id": str(system_uuid(uuid.UUID(str(working["id"])), system["name"], seen[key]))}
                seen[key] += 1
            patched.append(system)
        working["systems"] = patched
    return working


def _check_unique_ids(cities: Iterable[City], source: str) -> None:
    city_ids: set[uuid.UUID] = set()
    for city in cities:
        if city.id in city_ids:
            raise RailsDatasetError(f"Duplicate city id {city.id}", source=source)
        city_ids.add(city.id)
        system_ids = [system.id for system in city.systems]
        if len(system_ids) != len(set(system_ids)):
            raise RailsDatasetError(f"Duplicate system id in city {city.name!r}", source=source)


def parse_dataset(document: Any, *, source: str = "") -> list[City]:
    """Validate a decoded dataset document into cities.

    Raises
    ------
    RailsDatasetError
        If the document does not describe a list of valid cities.
    """
    if isinstance(document, dict) and "cities" in document:
        document = document["cities"]
    if not isinstance(document, list):
        raise RailsDatasetError("Dataset must be a list of cities", source=source)

    try:
        cities = _CITY_LIST.validate_python([_prepare_entry(entry) for entry in document])
    except ValidationError as exc:
        raise RailsDatasetError(f"Invalid dataset: {exc.error_count()} validation error(s)", source=source) from exc
    except ValueError as exc:
        raise RailsDatasetError(f"Invalid dataset: {exc}", source=source) from exc

    _check_unique_ids(cities, source)
    return cities


def load_dataset(path: Path | None = None) -> list[City]:
    """Read and validate a dataset file, or the bundled dataset when *path* is ``None``.

    Raises
    ------
    RailsDatasetError
        If the file is missing, unreadable, not JSON, or invalid.
    """
    if path is not None:
        source = str(path)
        _logger.debug("Loading city dataset from %s", path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise RailsDatasetError(f"Dataset not found: {path}", source=source) from exc
        except UnicodeDecodeError as exc:
            raise RailsDatasetError(f"Dataset is not valid UTF-8: {path}", source=source) from exc
        except OSError as exc:
            raise RailsDatasetError(f"Dataset unreadable: {path}: {exc}", source=source) from exc
    else:
        source = f"ridingrails:{BUNDLED_DATASET}"
        _logger.debug("Loading city dataset from package data")
        try:
            text = importlib.resources.files("ridingrails").joinpath(BUNDLED_DATASET).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise RailsDatasetError("cities.json not found in package data", source=source) from exc
        except UnicodeDecodeError as exc:
            raise RailsDatasetError("Bundled cities.json is not valid UTF-8", source=source) from exc

    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RailsDatasetError(f"Dataset is not valid JSON: {exc}", source=source) from exc
    return parse_dataset(document, source=source)


def sample_cities() -> list[City]:
    """The fixed two-city fallback dataset.

    Ids match the bundled dataset so visited state carries over.
    """
    return [
        City(
            id=uuid.UUID("e47af611-f665-406b-98b9-3a5309f6ce61"),
            name="New York City",
            country="USA",
            coordinate=Coordinate(latitude=40.7128, longitude=-74.0060),
            systems=(
                TransitSystem(
                    id=uuid.UUID("d32193cb-5e56-403c-8378-68254fb72ac5"), name="NYC Subway", color_hex="#0039A6"
                ),
                TransitSystem(id=uuid.UUID("0dd89c93-2377-4a96-a3ce-4665323ef1c2"), name="PATH", color_hex="#6CACE4"),
            ),
        ),
        City(
            id=uuid.UUID("0016d3f6-c1f7-41c0-8b39-0f429a7aa64a"),
            name="London",
            country="UK",
            coordinate=Coordinate(latitude=51.5074, longitude=-0.1278),
            systems=(
                TransitSystem(
                    id=uuid.UUID("cd029a8f-204f-45e1-bf1f-ed264894f95d"),
                    name="London Underground",
                    color_hex="#000000",
                ),
                TransitSystem(id=uuid.UUID("c2c4ae1e-ac59-445f-baa4-74114daddf18"), name="DLR", color_hex="#00AFAD"),
            ),
        ),
    ]


def load_cities(path: Path | None = None, *, sample_fallback: bool = False) -> list[City]:
    """Load the dataset, falling back instead of raising.

    On any :class:`RailsDatasetError` the result is the sample dataset when
    *sample_fallback* is set, otherwise an empty list.
    """
    try:
        return load_dataset(path)
    except RailsDatasetError as exc:
        fallback = "sample dataset" if sample_fallback else "empty city list"
        _logger.warning("City dataset %s failed to load (%s); using %s", exc.source, exc, fallback, exc_info=True)
        return sample_cities() if sample_fallback else []


def dataset_document(cities: Iterable[City]) -> list[dict[str, Any]]:
    """Serialize cities back to the dataset wire form (without visited state)."""
    return [
        city.model_dump(mode="json", by_alias=True, exclude={"visited_system_ids"})
        for city in cities
    ]
