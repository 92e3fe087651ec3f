"""Transit system model."""

from __future__ import annotations

import uuid

from pydantic import Field, field_validator

from ridingrails.models._base import RailsBaseModel


class TransitSystem(RailsBaseModel):
    """A named transit network (metro, subway, light rail) of a city."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    """Generated once at construction; stable for the system's lifetime."""
    name: str
    """Display name (e.g. ``"London Underground"``)."""
    color_hex: str = ""
    """Representative color as 3, 6 or 8 hex digits, ``#`` optional.

    Kept verbatim even when it does not parse; marker derivation falls back
    to the accent color in that case.
    """

    @field_validator("color_hex", mode="before")
    @classmethod
    def _coerce_color(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value)
