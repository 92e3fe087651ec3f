"""Base model and parsing helpers shared by the ridingrails models.

Every entity inherits from :class:`RailsBaseModel` which provides:

* ``frozen=True`` so snapshots handed to readers cannot be mutated; the
  store produces new snapshots with ``model_copy``.
* ``alias_generator=to_camel`` so the camelCase keys of the dataset file
  (``colorHex``) map to snake_case fields.
"""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def safe_uuid(value: Any) -> uuid.UUID | None:
    """Parse *value* as a UUID, returning ``None`` when it is not one."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        return None


class RailsBaseModel(BaseModel):
    """Base for city and transit-system models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
