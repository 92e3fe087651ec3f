"""City model."""

from __future__ import annotations

import uuid

from pydantic import Field

from ridingrails.models._base import RailsBaseModel
from ridingrails.models.coordinate import Coordinate
from ridingrails.models.transit import TransitSystem


class City(RailsBaseModel):
    """A city, its transit systems, and which of them were visited.

    Instances are immutable snapshots. Only
    :meth:`ridingrails.state.store.MetroStore.toggle_visited` produces a
    city with a different visited set.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    """Stable record identifier; the persistence key."""
    name: str
    """Display name (e.g. ``"London"``)."""
    country: str = ""
    """Display country (e.g. ``"UK"``)."""
    coordinate: Coordinate
    """Map position, ``[latitude, longitude]`` on the wire."""
    systems: tuple[TransitSystem, ...] = ()
    """Transit systems in display order. Names may repeat; ids may not."""
    visited_system_ids: frozenset[uuid.UUID] = Field(default_factory=frozenset, alias="visitedSystemIDs")
    """Ids of the systems in :attr:`systems` the user marked visited."""

    @property
    def any_visited(self) -> bool:
        return len(self.visited_system_ids) > 0

    @property
    def visited_systems(self) -> list[TransitSystem]:
        """Visited systems in display order."""
        return [system for system in self.systems if system.id in self.visited_system_ids]

    def system(self, system_id: uuid.UUID) -> TransitSystem | None:
        for system in self.systems:
            if system.id == system_id:
                return system
        return None

    def is_visited(self, system_id: uuid.UUID) -> bool:
        return system_id in self.visited_system_ids

    def with_visited(self, visited: frozenset[uuid.UUID] | set[uuid.UUID]) -> City:
        """Return a copy of this city with *visited* as its visited set."""
        return self.model_copy(update={"visited_system_ids": frozenset(visited)})
