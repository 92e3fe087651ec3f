"""Geographic coordinate model."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_serializer, model_validator


class Coordinate(BaseModel):
    """A latitude/longitude pair.

    On the wire a coordinate is the two-element array
    ``[latitude, longitude]``, both when read and when written. A mapping
    with ``latitude``/``longitude`` (or ``lat``/``lon``) keys is accepted
    on input as well.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, values: Any) -> Any:
        if isinstance(values, Mapping):
            merged = dict(values)
            if "lat" in merged and "latitude" not in merged:
                merged["latitude"] = merged.pop("lat")
            for key in ("lon", "lng"):
                if key in merged and "longitude" not in merged:
                    merged["longitude"] = merged.pop(key)
            return merged
        if isinstance(values, Sequence) and not isinstance(values, (str, bytes, bytearray)):
            if len(values) != 2:
                raise ValueError(f"coordinate pair must have 2 elements, got {len(values)}")
            return {"latitude": values[0], "longitude": values[1]}
        return values

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        # bool is an int subclass and would otherwise pass as 0.0 / 1.0
        if isinstance(value, bool):
            raise ValueError("coordinate component must be a number")
        return value

    @model_serializer
    def _to_pair(self) -> list[float]:
        return [self.latitude, self.longitude]
