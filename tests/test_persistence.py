from __future__ import annotations

import json
import uuid
from pathlib import Path

import pytest

from ridingrails.exceptions import RailsPersistenceError
from ridingrails.models import City, Coordinate, TransitSystem
from ridingrails.persistence import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    VisitedStatePersistence,
    build_mapping,
)


def _city(name: str, *system_names: str) -> City:
    return City(
        name=name,
        country="Testland",
        coordinate=Coordinate(latitude=0.0, longitude=0.0),
        systems=tuple(TransitSystem(name=n, color_hex="#123") for n in system_names),
    )


def _visited_cities() -> list[City]:
    a = _city("Alpha", "A1", "A2", "A3")
    b = _city("Beta", "B1")
    c = _city("Gamma", "C1", "C2")
    return [
        a.with_visited({a.systems[0].id, a.systems[2].id}),
        b,
        c.with_visited({c.systems[1].id}),
    ]


def _fresh(cities: list[City]) -> list[City]:
    return [city.with_visited(set()) for city in cities]


@pytest.fixture(params=["memory", "file"])
def kv(request: pytest.FixtureRequest, tmp_path: Path) -> KeyValueStore:
    if request.param == "memory":
        return MemoryKeyValueStore()
    return JsonFileKeyValueStore(tmp_path / "state" / "visited.json")


def test_round_trip_restores_visited_sets(kv: KeyValueStore) -> None:
    cities = _visited_cities()
    persistence = VisitedStatePersistence(kv)

    persistence.save(cities)
    restored = persistence.apply(_fresh(cities), persistence.load())

    assert [c.visited_system_ids for c in restored] == [c.visited_system_ids for c in cities]


def test_empty_visited_sets_still_get_an_entry() -> None:
    cities = _visited_cities()
    mapping = build_mapping(cities)

    assert mapping[str(cities[1].id)] == []
    assert set(mapping) == {str(c.id) for c in cities}


def test_mapping_follows_display_order() -> None:
    alpha = _visited_cities()[0]
    assert build_mapping([alpha])[str(alpha.id)] == [str(alpha.systems[0].id), str(alpha.systems[2].id)]


def test_save_overwrites_previous_value() -> None:
    kv = MemoryKeyValueStore({"visitedSystems": {"stale": ["x"]}})
    cities = _visited_cities()

    VisitedStatePersistence(kv).save(cities)

    assert "stale" not in kv.get("visitedSystems")


def test_only_the_named_slot_is_touched(tmp_path: Path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
    kv = JsonFileKeyValueStore(path)

    VisitedStatePersistence(kv, key="visited").save(_visited_cities())

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["theme"] == "dark"
    assert "visited" in stored


def test_load_absent_slot_is_empty() -> None:
    assert VisitedStatePersistence(MemoryKeyValueStore()).load() == {}


@pytest.mark.parametrize(
    "raw",
    [
        "not a mapping",
        ["a", "b"],
        {"city": "not-a-list"},
        {"city": [1, 2]},
        42,
    ],
)
def test_load_malformed_slot_is_empty(raw: object) -> None:
    persistence = VisitedStatePersistence(MemoryKeyValueStore({"visitedSystems": raw}))

    assert persistence.load() == {}
    with pytest.raises(RailsPersistenceError):
        persistence.load_strict()


def test_corrupt_state_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "visited.json"
    path.write_text("{not json", encoding="utf-8")

    assert VisitedStatePersistence(JsonFileKeyValueStore(path)).load() == {}


def test_non_object_state_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "visited.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert JsonFileKeyValueStore(path).get("visitedSystems") is None


def test_apply_drops_only_unparsable_ids() -> None:
    city = _city("Alpha", "A1", "A2")
    good = city.systems[1].id
    mapping = {str(city.id): ["garbage", str(good), "", "1234"]}

    (restored,) = VisitedStatePersistence.apply([city], mapping)

    assert restored.visited_system_ids == frozenset({good})


def test_apply_leaves_unlisted_cities_alone() -> None:
    cities = _visited_cities()
    mapping = {str(cities[1].id): [str(cities[1].systems[0].id)]}

    restored = VisitedStatePersistence.apply(cities, mapping)

    assert restored[0] == cities[0]
    assert restored[1].visited_system_ids == frozenset({cities[1].systems[0].id})
    assert restored[2] == cities[2]


def test_state_survives_reordering_and_renaming() -> None:
    cities = _visited_cities()
    mapping = build_mapping(cities)
    regenerated = [c.model_copy(update={"name": c.name.upper()}) for c in reversed(_fresh(cities))]

    restored = VisitedStatePersistence.apply(regenerated, mapping)

    by_id = {c.id: c.visited_system_ids for c in restored}
    assert by_id == {c.id: c.visited_system_ids for c in cities}


def test_memory_store_returns_copies() -> None:
    kv = MemoryKeyValueStore()
    value = {"a": [str(uuid.uuid4())]}
    kv.set("slot", value)
    value["a"].append("mutated")

    assert kv.get("slot") != value


def test_non_utf8_state_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "visited.json"
    path.write_bytes(b'{"visitedSystems": {"\xff\xfe": []}}')
    kv = JsonFileKeyValueStore(path)

    assert VisitedStatePersistence(kv).load() == {}

    VisitedStatePersistence(kv).save([])
    assert json.loads(path.read_text(encoding="utf-8")) == {"visitedSystems": {}}
