from __future__ import annotations

import importlib.util
import json
from pathlib import Path
from types import ModuleType

import pytest

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "rails_cli.py"


@pytest.fixture(scope="module")
def cli() -> ModuleType:
    spec = importlib.util.spec_from_file_location("rails_cli", _SCRIPT)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("RAILS_DATASET_PATH", "RAILS_STATE_PATH", "RAILS_STATE_KEY", "RAILS_PERSIST", "RAILS_SAMPLE_FALLBACK"):
        monkeypatch.delenv(key, raising=False)


def test_toggle_by_name_persists(cli: ModuleType, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    state = tmp_path / "state.json"

    assert cli.main(["--state", str(state), "toggle", "london", "DLR"]) == 0
    assert "London / DLR: visited" in capsys.readouterr().out

    assert cli.main(["--state", str(state), "list", "--query", "london"]) == 0
    out = capsys.readouterr().out
    assert "London (UK) 1/2 visited" in out
    assert "[x] DLR" in out
    assert "[ ] London Underground" in out


def test_toggle_by_id_json(cli: ModuleType, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    state = tmp_path / "state.json"
    city_id = "0016d3f6-c1f7-41c0-8b39-0f429a7aa64a"
    system_id = "cd029a8f-204f-45e1-bf1f-ed264894f95d"

    assert cli.main(["--state", str(state), "--json", "toggle", city_id, system_id]) == 0

    assert json.loads(capsys.readouterr().out) == {"city": city_id, "system": system_id, "visited": True}
    assert json.loads(state.read_text(encoding="utf-8"))["visitedSystems"][city_id] == [system_id]


def test_unknown_city_or_system(cli: ModuleType, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    state = tmp_path / "state.json"

    assert cli.main(["--state", str(state), "toggle", "Atlantis", "DLR"]) == 1
    assert "Unknown city" in capsys.readouterr().err
    assert cli.main(["--state", str(state), "toggle", "London", "Monorail"]) == 1
    assert "Unknown system" in capsys.readouterr().err


def test_markers_json(cli: ModuleType, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    state = tmp_path / "state.json"
    cli.main(["--state", str(state), "toggle", "London", "London Underground"])
    capsys.readouterr()

    assert cli.main(["--state", str(state), "--json", "markers", "--query", "london"]) == 0

    (record,) = json.loads(capsys.readouterr().out)
    assert [s["color"] for s in record["slices"]] == ["#000000", "#998E8E93"]
    assert [(s["start"], s["end"]) for s in record["slices"]] == [(0.0, 180.0), (180.0, 360.0)]
