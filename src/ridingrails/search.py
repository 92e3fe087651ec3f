"""Substring filtering over the city list."""

from __future__ import annotations

from collections.abc import Iterable

from ridingrails.models.city import City


def matches(city: City, query: str) -> bool:
    """Case-insensitive match on city name, country, or any system name."""
    q = query.strip().casefold()
    if not q:
        return True
    if q in city.name.casefold() or q in city.country.casefold():
        return True
    return any(q in system.name.casefold() for system in city.systems)


def filter_cities(cities: Iterable[City], query: str | None) -> list[City]:
    """Return the cities matching *query*, in their original order.

    A blank query matches everything.
    """
    if query is None or not query.strip():
        return list(cities)
    return [city for city in cities if matches(city, query)]
