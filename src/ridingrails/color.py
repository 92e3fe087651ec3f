"""Hex color parsing and pie-marker derivation.

A city's map marker is a disc split into one equal slice per transit
system, in display order, starting at 12 o'clock and running clockwise.
Visited systems show their own color, unvisited ones a translucent gray.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

from ridingrails._constants import ACCENT_RGB, BACKGROUND_OPACITY, GRAY_RGB, UNVISITED_OPACITY
from ridingrails.models.city import City
from ridingrails.models.transit import TransitSystem

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class RGBA(NamedTuple):
    """An sRGB color with channels normalized to ``[0, 1]``."""

    red: float
    green: float
    blue: float
    alpha: float = 1.0

    @classmethod
    def from_bytes(cls, red: int, green: int, blue: int, alpha: int = 255) -> RGBA:
        return cls(red / 255, green / 255, blue / 255, alpha / 255)

    def with_alpha(self, alpha: float) -> RGBA:
        return self._replace(alpha=alpha)

    def to_bytes(self) -> tuple[int, int, int, int]:
        return tuple(round(channel * 255) for channel in self)  # type: ignore[return-value]

    def to_hex(self) -> str:
        """``#RRGGBB`` for opaque colors, ``#AARRGGBB`` otherwise."""
        r, g, b, a = self.to_bytes()
        if a == 255:
            return f"#{r:02X}{g:02X}{b:02X}"
        return f"#{a:02X}{r:02X}{g:02X}{b:02X}"


DEFAULT_ACCENT = RGBA.from_bytes(*ACCENT_RGB)
UNVISITED_GRAY = RGBA.from_bytes(*GRAY_RGB).with_alpha(UNVISITED_OPACITY)
MARKER_BACKGROUND = RGBA.from_bytes(*GRAY_RGB).with_alpha(BACKGROUND_OPACITY)


def parse_hex_color(value: str | None) -> RGBA | None:
    """Parse a 3, 6 or 8 digit hex color.

    Every non-alphanumeric character is stripped first, so ``"#00AFAD"``
    and ``"00afad"`` are equivalent. Then:

    * 3 digits: ``RGB``, each nibble repeated (``F`` -> ``FF``), opaque.
    * 6 digits: ``RRGGBB``, opaque.
    * 8 digits: ``AARRGGBB``, alpha first.

    Returns ``None`` for any other length or for non-hex content.
    """
    if value is None:
        return None
    digits = "".join(ch for ch in value if ch.isalnum())
    if not digits or not set(digits) <= _HEX_DIGITS:
        return None

    number = int(digits, 16)
    if len(digits) == 3:
        a, r, g, b = 255, (number >> 8) * 17, (number >> 4 & 0xF) * 17, (number & 0xF) * 17
    elif len(digits) == 6:
        a, r, g, b = 255, number >> 16, number >> 8 & 0xFF, number & 0xFF
    elif len(digits) == 8:
        a, r, g, b = number >> 24, number >> 16 & 0xFF, number >> 8 & 0xFF, number & 0xFF
    else:
        return None
    return RGBA.from_bytes(r, g, b, a)


def system_color(system: TransitSystem) -> RGBA:
    """The system's own color, or the accent color when it does not parse."""
    parsed = parse_hex_color(system.color_hex)
    return parsed if parsed is not None else DEFAULT_ACCENT


def marker_colors(city: City) -> list[RGBA]:
    """One color per system of *city*, aligned with ``city.systems``."""
    return [
        system_color(system) if system.id in city.visited_system_ids else UNVISITED_GRAY for system in city.systems
    ]


class PieSlice(NamedTuple):
    """One marker slice; angles are degrees clockwise from 12 o'clock."""

    color: RGBA
    start_degrees: float
    end_degrees: float

    @property
    def sweep_degrees(self) -> float:
        return self.end_degrees - self.start_degrees


def pie_slices(colors: Sequence[RGBA]) -> list[PieSlice]:
    """Split a full turn into equal slices, one per color, in order.

    An empty sequence yields no slices; the marker then shows only
    :data:`MARKER_BACKGROUND`.
    """
    if not colors:
        return []
    step = 360.0 / len(colors)
    return [PieSlice(color, index * step, (index + 1) * step) for index, color in enumerate(colors)]
