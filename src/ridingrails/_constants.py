"""Internal constants shared across the library."""

from __future__ import annotations

import uuid

DEFAULT_STATE_KEY = "visitedSystems"
BUNDLED_DATASET = "data/cities.json"

# Namespace for deterministic ids of dataset entries that ship without one.
ID_NAMESPACE = uuid.UUID("5b0e7c4a-3f1d-5a8e-9c2b-6d4f1e0a7b93")

# ------------------------------------------------------------------
# Marker colors  (sRGB bytes)
# ------------------------------------------------------------------

ACCENT_RGB: tuple[int, int, int] = (0x00, 0x7A, 0xFF)
GRAY_RGB: tuple[int, int, int] = (0x8E, 0x8E, 0x93)
UNVISITED_OPACITY = 0.6
BACKGROUND_OPACITY = 0.3


def city_uuid(name: str, country: str) -> uuid.UUID:
    """Stable id for a dataset city that has no explicit ``id``."""
    return uuid.uuid5(ID_NAMESPACE, f"city:{country.strip().lower()}:{name.strip().lower()}")


def system_uuid(city_id: uuid.UUID, name: str, occurrence: int = 0) -> uuid.UUID:
    """Stable id for a dataset system that has no explicit ``id``.

    *occurrence* counts earlier systems of the same name in the same city,
    so duplicates by name still get distinct ids.
    """
    return uuid.uuid5(ID_NAMESPACE, f"system:{city_id}:{name.strip().lower()}:{occurrence}")
