#!/usr/bin/env python3
"""Browse cities, toggle visited metro systems, and print map markers.

Usage
-----
::

    python scripts/rails_cli.py list --query london
    python scripts/rails_cli.py toggle London DLR
    python scripts/rails_cli.py markers --json

Options::

    --dataset FILE      City dataset JSON (default: bundled dataset)
    --state FILE        Visited-state file (default: $RAILS_STATE_PATH,
                        else ~/.ridingrails/state.json)
    --json              Output machine-readable JSON
    --verbose, -v       Enable debug logging
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from ridingrails import (  # noqa: E402
    City,
    MetroStore,
    RailsConfig,
    TransitSystem,
    filter_cities,
    marker_colors,
    pie_slices,
)

_DEFAULT_STATE = Path("~/.ridingrails/state.json").expanduser()


def _find_city(store: MetroStore, ref: str) -> City | None:
    try:
        return store.city(uuid.UUID(ref))
    except ValueError:
        pass
    needle = ref.strip().casefold()
    for city in store.cities:
        if city.name.casefold() == needle:
            return city
    return None


def _find_system(city: City, ref: str) -> TransitSystem | None:
    try:
        return city.system(uuid.UUID(ref))
    except ValueError:
        pass
    needle = ref.strip().casefold()
    for system in city.systems:
        if system.name.casefold() == needle:
            return system
    return None


def _city_record(city: City) -> dict[str, Any]:
    return {
        "id": str(city.id),
        "name": city.name,
        "country": city.country,
        "coordinate": city.coordinate.model_dump(),
        "systems": [
            {
                "id": str(system.id),
                "name": system.name,
                "colorHex": system.color_hex,
                "visited": city.is_visited(system.id),
            }
            for system in city.systems
        ],
    }


def _marker_record(city: City) -> dict[str, Any]:
    return {
        "id": str(city.id),
        "name": city.name,
        "slices": [
            {"color": s.color.to_hex(), "start": round(s.start_degrees, 3), "end": round(s.end_degrees, 3)}
            for s in pie_slices(marker_colors(city))
        ],
    }


def _cmd_list(store: MetroStore, args: argparse.Namespace) -> int:
    cities = filter_cities(store.cities, args.query)
    if args.json_mode:
        print(json.dumps([_city_record(c) for c in cities], indent=2, ensure_ascii=False))
        return 0
    for city in cities:
        print(f"{city.name} ({city.country}) {len(city.visited_systems)}/{len(city.systems)} visited")
        for system in city.systems:
            mark = "x" if city.is_visited(system.id) else " "
            print(f"  [{mark}] {system.name}")
    return 0


def _cmd_toggle(store: MetroStore, args: argparse.Namespace) -> int:
    city = _find_city(store, args.city)
    if city is None:
        print(f"Unknown city: {args.city}", file=sys.stderr)
        return 1
    system = _find_system(city, args.system)
    if system is None:
        print(f"Unknown system in {city.name}: {args.system}", file=sys.stderr)
        return 1
    visited = store.toggle_visited(city.id, system.id)
    if args.json_mode:
        print(json.dumps({"city": str(city.id), "system": str(system.id), "visited": visited}))
    else:
        print(f"{city.name} / {system.name}: {'visited' if visited else 'not visited'}")
    return 0


def _cmd_markers(store: MetroStore, args: argparse.Namespace) -> int:
    cities = filter_cities(store.cities, args.query)
    records = [_marker_record(c) for c in cities]
    if args.json_mode:
        print(json.dumps(records, indent=2, ensure_ascii=False))
        return 0
    for record in records:
        colors = " ".join(s["color"] for s in record["slices"]) or "-"
        print(f"{record['name']}: {colors}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Track visited metro systems")
    parser.add_argument("--dataset", type=Path, help="City dataset JSON (default: bundled dataset)")
    parser.add_argument("--state", type=Path, help="Visited-state JSON file")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List cities and their systems")
    p_list.add_argument("--query", "-q", default="", help="Filter by city, country or system name")
    p_list.set_defaults(handler=_cmd_list)

    p_toggle = sub.add_parser("toggle", help="Toggle a system's visited flag")
    p_toggle.add_argument("city", help="City id or name")
    p_toggle.add_argument("system", help="System id or name")
    p_toggle.set_defaults(handler=_cmd_toggle)

    p_markers = sub.add_parser("markers", help="Print pie-marker colors per city")
    p_markers.add_argument("--query", "-q", default="", help="Filter by city, country or system name")
    p_markers.set_defaults(handler=_cmd_markers)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.dataset is not None:
        overrides["dataset_path"] = args.dataset
    if args.state is not None:
        overrides["state_path"] = args.state
    config = RailsConfig.from_env(**overrides)
    if config.persist and config.state_path is None:
        config = RailsConfig.from_env(**{**overrides, "state_path": _DEFAULT_STATE})

    store = MetroStore.initialize(config)
    return int(args.handler(store, args))


if __name__ == "__main__":
    sys.exit(main())
