"""In-memory metro store.

This is the only component allowed to change visited state.
"""

from __future__ import annotations

import logging
import uuid
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from pathlib import Path

from ridingrails.config import RailsConfig
from ridingrails.dataset import load_cities
from ridingrails.models.city import City
from ridingrails.persistence import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    VisitedMapping,
    VisitedStatePersistence,
    build_mapping,
)
from ridingrails.state.events import StoreEvent

_logger = logging.getLogger(__name__)

Listener = Callable[[StoreEvent], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _key_value_store(state_path: Path | None) -> KeyValueStore:
    if state_path is None:
        return MemoryKeyValueStore()
    return JsonFileKeyValueStore(state_path)


class MetroStore:
    """Owner of the city list and its visited state.

    The store holds immutable :class:`City` snapshots. ``toggle_visited``
    replaces one city's snapshot, saves the visited state when persistence
    is attached, and publishes a :class:`StoreEvent` to subscribers.

    Single-threaded: all calls are expected on one event-handling thread.
    Toggles issued by a listener while an event is being delivered are
    applied immediately; their events are queued behind the current one.
    """

    def __init__(
        self,
        cities: Iterable[City] = (),
        *,
        persistence: VisitedStatePersistence | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._cities: list[City] = list(cities)
        self._index: dict[uuid.UUID, int] = {city.id: i for i, city in enumerate(self._cities)}
        self._persistence = persistence
        self._clock = clock
        self._listeners: list[Listener] = []
        self._pending: deque[StoreEvent] = deque()
        self._dispatching = False

    @classmethod
    def initialize(
        cls,
        config: RailsConfig | None = None,
        *,
        cities: Iterable[City] | None = None,
        persistence: VisitedStatePersistence | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> MetroStore:
        """Build a store from configuration. Never raises on bad data.

        Parameters
        ----------
        config : RailsConfig or None
            Dataset and persistence settings. Defaults to ``RailsConfig()``.
        cities : iterable of City or None
            Injected cities; skips dataset loading when given.
        persistence : VisitedStatePersistence or None
            Injected persistence; otherwise one is built from
            ``config.state_path`` when ``config.persist`` is set.
        """
        config = config or RailsConfig()
        if cities is None:
            loaded = load_cities(config.dataset_path, sample_fallback=config.sample_fallback)
        else:
            loaded = list(cities)
        _logger.debug("Store initialized with %d cities", len(loaded))

        if persistence is None and config.persist:
            persistence = VisitedStatePersistence(_key_value_store(config.state_path), key=config.state_key)

        store = cls(loaded, persistence=persistence, clock=clock)
        if persistence is not None:
            store.restore(persistence.load())
        return store

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def cities(self) -> tuple[City, ...]:
        return tuple(self._cities)

    @property
    def persistence(self) -> VisitedStatePersistence | None:
        return self._persistence

    def city(self, city_id: uuid.UUID) -> City | None:
        idx = self._index.get(city_id)
        return self._cities[idx] if idx is not None else None

    def snapshot(self) -> VisitedMapping:
        """The visited state in its persisted form."""
        return build_mapping(self._cities)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def toggle_visited(self, city_id: uuid.UUID, system_id: uuid.UUID) -> bool | None:
        """Flip whether *system_id* of *city_id* is visited.

        Returns the new visited flag, or ``None`` when the city is unknown
        or the system is not one of the city's systems (both no-ops).
        """
        idx = self._index.get(city_id)
        if idx is None:
            _logger.debug("toggle_visited ignored: unknown city %s", city_id)
            return None
        city = self._cities[idx]
        if city.system(system_id) is None:
            _logger.debug("toggle_visited ignored: system %s not in city %s", system_id, city_id)
            return None

        visited = set(city.visited_system_ids)
        if system_id in visited:
            visited.remove(system_id)
            now_visited = False
        else:
            visited.add(system_id)
            now_visited = True
        self._cities[idx] = city.with_visited(visited)

        self._save()
        self._publish(StoreEvent.toggled(city_id, system_id, now_visited, self._clock()))
        return now_visited

    def restore(self, mapping: Mapping[str, Iterable[str]]) -> None:
        """Replace visited sets from a persisted mapping and notify subscribers."""
        self._cities = VisitedStatePersistence.apply(self._cities, mapping)
        self._publish(StoreEvent.restored(self._clock()))

    def _save(self) -> None:
        if self._persistence is None:
            return
        try:
            self._persistence.save(self._cities)
        except OSError:
            _logger.warning("Failed to save visited state; keeping in-memory change", exc_info=True)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for store events; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self, event: StoreEvent) -> None:
        self._pending.append(event)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                current = self._pending.popleft()
                for listener in list(self._listeners):
                    try:
                        listener(current)
                    except Exception:
                        _logger.debug("Store listener failed for %s event", current.kind, exc_info=True)
        finally:
            self._dispatching = False
