"""Data models for cities and their transit systems."""

from ridingrails.models._base import RailsBaseModel, safe_uuid
from ridingrails.models.city import City
from ridingrails.models.coordinate import Coordinate
from ridingrails.models.transit import TransitSystem

__all__ = [
    "City",
    "Coordinate",
    "RailsBaseModel",
    "TransitSystem",
    "safe_uuid",
]
