"""Visited-state persistence.

The persisted state is one key-value slot holding a mapping of city id to
the ids of its visited systems, all as strings::

    {"0016d3f6-...": ["cd029a8f-..."], "e47af611-...": []}

Nothing else about a city is stored; names, colors and coordinates always
come from the static dataset.
"""

from __future__ import annotations

import contextlib
import copy
import json
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError

from ridingrails._constants import DEFAULT_STATE_KEY
from ridingrails.exceptions import RailsPersistenceError
from ridingrails.models._base import safe_uuid
from ridingrails.models.city import City

_logger = logging.getLogger(__name__)

VisitedMapping = dict[str, list[str]]

_MAPPING = TypeAdapter(VisitedMapping)


class KeyValueStore(Protocol):
    """A settings-style store of named slots holding JSON-compatible values."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryKeyValueStore:
    """Dict-backed key-value store; state lives as long as the process."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._slots: dict[str, Any] = copy.deepcopy(dict(initial)) if initial else {}

    def get(self, key: str) -> Any | None:
        value = self._slots.get(key)
        return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        self._slots[key] = copy.deepcopy(value)


class JsonFileKeyValueStore:
    """Key-value store kept as one JSON object on disk.

    Each top-level key of the object is a slot. A missing, unreadable, or
    non-object file reads as an empty store. Writes replace the file
    atomically.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError:
            _logger.warning("State file %s is not valid UTF-8; ignoring it", self._path)
            return {}
        except OSError:
            _logger.warning("Could not read state file %s", self._path, exc_info=True)
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("State file %s is not valid JSON; ignoring it", self._path)
            return {}
        if not isinstance(data, dict):
            _logger.warning("State file %s does not hold a JSON object; ignoring it", self._path)
            return {}
        return data

    def get(self, key: str) -> Any | None:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        slots = self._read_all()
        slots[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(slots, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise


def build_mapping(cities: Iterable[City]) -> VisitedMapping:
    """The persisted form of *cities*' visited sets.

    Every city gets an entry, empty or not. Ids follow display order, with
    ids not among the city's systems appended in sorted order.
    """
    mapping: VisitedMapping = {}
    for city in cities:
        ordered = [str(system.id) for system in city.systems if system.id in city.visited_system_ids]
        known = {system.id for system in city.systems}
        ordered.extend(sorted(str(sid) for sid in city.visited_system_ids if sid not in known))
        mapping[str(city.id)] = ordered
    return mapping


class VisitedStatePersistence:
    """Save, load and apply visited state through one key-value slot.

    Parameters
    ----------
    kv : KeyValueStore
        Backing store.
    key : str
        Slot name. No other slots are touched.
    """

    def __init__(self, kv: KeyValueStore, key: str = DEFAULT_STATE_KEY) -> None:
        self._kv = kv
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def save(self, cities: Iterable[City]) -> None:
        """Overwrite the slot with the visited state of *cities*."""
        mapping = build_mapping(cities)
        self._kv.set(self._key, mapping)
        _logger.debug("Saved visited state for %d cities to slot %r", len(mapping), self._key)

    def load_strict(self) -> VisitedMapping:
        """Read the slot.

        Returns an empty mapping when the slot is absent.

        Raises
        ------
        RailsPersistenceError
            If the slot holds anything but a mapping of string to list of
            strings.
        """
        raw = self._kv.get(self._key)
        if raw is None:
            return {}
        try:
            return _MAPPING.validate_python(raw, strict=True)
        except ValidationError as exc:
            raise RailsPersistenceError(
                f"Malformed visited state in slot {self._key!r}: {exc.error_count()} error(s)",
                key=self._key,
            ) from exc

    def load(self) -> VisitedMapping:
        """Read the slot; absent or malformed state yields ``{}``."""
        try:
            return self.load_strict()
        except RailsPersistenceError:
            _logger.warning("Ignoring malformed visited state in slot %r", self._key, exc_info=True)
            return {}

    @staticmethod
    def apply(cities: Iterable[City], mapping: Mapping[str, Iterable[str]]) -> list[City]:
        """Return *cities* with visited sets replaced from *mapping*.

        Cities without an entry keep their current visited set. Entries
        that do not parse as ids are dropped.
        """
        result: list[City] = []
        for city in cities:
            entry = mapping.get(str(city.id))
            if entry is None:
                result.append(city)
                continue
            visited = set()
            for raw_id in entry:
                parsed = safe_uuid(raw_id)
                if parsed is None:
                    _logger.debug("Dropping unparsable system id %r for city %s", raw_id, city.id)
                    continue
                visited.add(parsed)
            result.append(city.with_visited(visited))
        return result
