"""Store events.

Every change to visited state is published as one of these events, in the
order the changes happened.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoreEventKind(StrEnum):
    TOGGLED = "toggled"
    RESTORED = "restored"


class StoreEvent(BaseModel):
    """A visited-state transition published by the store."""

    model_config = ConfigDict(frozen=True)

    kind: StoreEventKind
    city_id: uuid.UUID | None = Field(default=None, description="City whose visited set changed, if a single one")
    system_id: uuid.UUID | None = Field(default=None, description="Toggled system")
    visited: bool | None = Field(default=None, description="Visited flag after the toggle")
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @classmethod
    def toggled(cls, city_id: uuid.UUID, system_id: uuid.UUID, visited: bool, observed_at: datetime) -> StoreEvent:
        return cls(
            kind=StoreEventKind.TOGGLED,
            city_id=city_id,
            system_id=system_id,
            visited=visited,
            observed_at=observed_at,
        )

    @classmethod
    def restored(cls, observed_at: datetime) -> StoreEvent:
        return cls(kind=StoreEventKind.RESTORED, observed_at=observed_at)
