"""Custom exception hierarchy for ridingrails.

None of these escape the public store entry points: they are raised by the
strict loaders and caught where the store falls back to a safe default.
"""

from __future__ import annotations


class RailsError(Exception):
    """Base exception for all ridingrails errors."""


class RailsConfigError(RailsError):
    """Invalid configuration value."""


class RailsDatasetError(RailsError):
    """Static city dataset missing or undecodable."""

    def __init__(self, message: str, *, source: str = "") -> None:
        self.source = source
        super().__init__(message)


class RailsPersistenceError(RailsError):
    """Persisted visited state is malformed.

    Raised by :meth:`VisitedStatePersistence.load_strict`; the lenient
    :meth:`VisitedStatePersistence.load` turns it into an empty mapping.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)
