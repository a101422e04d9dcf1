import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import compact, read_row
from modeload_core import __version__
from store.locator import candidate_paths
from transfer.cli import app
from transfer.config import CONFIG_ENV_VAR

runner = CliRunner()

MODES = [{"id": "mode-1", "name": "Planner"}, {"id": "mode-2", "name": "Reviewer"}]
SETTINGS = {"composerState": {"modes4": MODES, "other": "keep"}, "extra": "keep2"}


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_save_exports_modes(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db(SETTINGS)
    output = tmp_path / "modes.json"

    result = runner.invoke(app, ["save", str(output), "--db-path", str(db_path)])

    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text(encoding="utf-8")) == MODES
    assert "Successfully saved 2 modes" in result.output
    assert '1. "Planner" (mode-1)' in result.output


def test_save_without_modes_reports_warning(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db({"composerState": {}})
    output = tmp_path / "modes.json"

    result = runner.invoke(app, ["save", str(output), "--db-path", str(db_path)])

    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text(encoding="utf-8")) == []
    assert "No custom modes found" in result.output


def test_save_requires_json_extension(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db(SETTINGS)

    result = runner.invoke(app, ["save", str(tmp_path / "modes.txt"), "--db-path", str(db_path)])

    assert result.exit_code == 1
    assert ".json" in result.output


def test_save_missing_custom_db(tmp_path: Path) -> None:
    missing = tmp_path / "missing.vscdb"

    result = runner.invoke(app, ["save", str(tmp_path / "m.json"), "--db-path", str(missing)])

    assert result.exit_code == 1
    assert f"Custom database path not found: {missing}" in result.output


def test_save_rejects_non_sqlite_file(tmp_path: Path) -> None:
    bogus = tmp_path / "state.vscdb"
    bogus.write_text("hello", encoding="utf-8")

    result = runner.invoke(app, ["save", str(tmp_path / "m.json"), "--db-path", str(bogus)])

    assert result.exit_code == 1
    assert "not a valid SQLite file" in result.output


def test_save_missing_settings_row(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db()

    result = runner.invoke(app, ["save", str(tmp_path / "m.json"), "--db-path", str(db_path)])

    assert result.exit_code == 1
    assert "Save failed: Settings not found in database" in result.output


def test_load_cancelled_leaves_store_untouched(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db(SETTINGS)
    before = read_row(db_path)
    source = tmp_path / "in.json"
    source.write_text(json.dumps([{"id": "new"}]), encoding="utf-8")

    result = runner.invoke(app, ["load", str(source), "--db-path", str(db_path)], input="n\n")

    assert result.exit_code == 0, result.output
    assert "cancelled" in result.output
    assert "Cursor MUST be completely closed" in result.output
    assert read_row(db_path) == before


def test_load_empty_answer_cancels(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db(SETTINGS)
    before = read_row(db_path)
    source = tmp_path / "in.json"
    source.write_text("[]", encoding="utf-8")

    result = runner.invoke(app, ["load", str(source), "--db-path", str(db_path)], input="\n")

    assert result.exit_code == 0, result.output
    assert read_row(db_path) == before


def test_load_confirmed_interactively(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db(SETTINGS)
    source = tmp_path / "in.json"
    source.write_text(json.dumps([{"id": "a", "name": "A"}]), encoding="utf-8")

    result = runner.invoke(app, ["load", str(source), "--db-path", str(db_path)], input="YES\n")

    assert result.exit_code == 0, result.output
    stored = json.loads(read_row(db_path))
    assert stored["composerState"] == {"modes4": [{"id": "a", "name": "A"}], "other": "keep"}
    assert stored["extra"] == "keep2"
    assert "Restart Cursor" in result.output


def test_load_with_yes_flag(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db({"unrelated": True})
    source = tmp_path / "in.json"
    source.write_text(json.dumps(MODES), encoding="utf-8")

    result = runner.invoke(app, ["load", str(source), "--db-path", str(db_path), "-y"])

    assert result.exit_code == 0, result.output
    assert "Skipping confirmation" in result.output
    assert read_row(db_path) == compact({"unrelated": True, "composerState": {"modes4": MODES}})


def test_load_rejects_malformed_file(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db(SETTINGS)
    before = read_row(db_path)
    source = tmp_path / "in.json"
    source.write_text("{broken", encoding="utf-8")

    result = runner.invoke(app, ["load", str(source), "--db-path", str(db_path), "-y"])

    assert result.exit_code == 1
    assert "Load failed: Failed to read/parse JSON file" in result.output
    assert read_row(db_path) == before


def test_load_rejects_non_array(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db(SETTINGS)
    source = tmp_path / "in.json"
    source.write_text('{"id": "a"}', encoding="utf-8")

    result = runner.invoke(app, ["load", str(source), "--db-path", str(db_path), "-y"])

    assert result.exit_code == 1
    assert "must contain an array of modes" in result.output


def test_load_auto_confirm_from_config(make_cursor_db, tmp_path: Path) -> None:
    db_path = make_cursor_db(SETTINGS)
    source = tmp_path / "in.json"
    source.write_text("[]", encoding="utf-8")
    config = tmp_path / "modeload.yaml"
    config.write_text(f"auto_confirm: true\ndb_path: {json.dumps(str(db_path))}\n", encoding="utf-8")

    result = runner.invoke(app, ["load", str(source), "--config", str(config)])

    assert result.exit_code == 0, result.output
    assert json.loads(read_row(db_path))["composerState"]["modes4"] == []


def test_invalid_config_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["locate", "--config", str(tmp_path / "absent.yaml")])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_show_lists_modes(make_cursor_db) -> None:
    db_path = make_cursor_db(SETTINGS)

    result = runner.invoke(app, ["show", "--db-path", str(db_path)])

    assert result.exit_code == 0, result.output
    assert '2. "Reviewer" (mode-2)' in result.output


def test_locate_uses_home_candidates(make_cursor_db, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    home = tmp_path / "home"
    monkeypatch.setenv("HOME", str(home))
    target = candidate_paths(home)[2]
    target.parent.mkdir(parents=True)
    make_cursor_db(SETTINGS).replace(target)

    result = runner.invoke(app, ["locate"])

    assert result.exit_code == 0, result.output
    assert str(target) in result.output


def test_locate_reports_all_candidates(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    home = tmp_path / "empty-home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))

    result = runner.invoke(app, ["locate"])

    assert result.exit_code == 1
    for path in candidate_paths(home):
        assert str(path) in result.output
