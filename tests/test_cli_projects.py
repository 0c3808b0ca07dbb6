"""CLI tests for project, script, and recent-project commands."""

from __future__ import annotations

import json
import os
import shutil
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from domate.cli import cli
from domate.registry import Registry, open_registry
from domate.registry.models import Base


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env


def _new_project(runner: CliRunner, tmp_path: Path, env: dict[str, Any], name: str) -> Path:
    result = runner.invoke(cli, ["new", name, "--location", str(tmp_path)], env=env)
    assert result.exit_code == 0, result.output
    return tmp_path / f"{name}.domt"


def test_new_creates_project_and_records_it(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    root = _new_project(runner, tmp_path, env, "study")

    assert (root / "project.json").exists()
    result = runner.invoke(cli, ["recent", "--json"], env=env)
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert [entry["name"] for entry in payload] == ["study"]
    assert payload[0]["path"] == str(root.resolve())


def test_open_emits_overview_json(tmp_path: Path) -> None:
    """Opening a project reports counts, scripts, and creates its metadata file.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    root = _new_project(runner, tmp_path, env, "study")
    runner.invoke(cli, ["scripts", "new", str(root), "clean"], env=env)

    result = runner.invoke(cli, ["open", str(root), "--json"], env=env)

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["project"]["name"] == "study"
    assert payload["project"]["location"] == str(tmp_path.resolve())
    assert payload["counts"] == {"data_file_count": 0, "tag_count": 0}
    assert payload["scripts"] == ["clean.do"]
    assert (root / "domate-metadata.json").exists()


def test_open_invalid_folder_reports_json_error(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    folder = tmp_path / "plain"
    folder.mkdir()

    result = runner.invoke(cli, ["open", str(folder), "--json"], env=env)

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "project_error"
    assert ".domt" in payload["error"]["message"]


def test_open_invalid_folder_plain_error(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    folder = tmp_path / "plain"
    folder.mkdir()

    result = runner.invoke(cli, ["open", str(folder)], env=env)

    assert result.exit_code == 1
    assert "not a DoMate project" in result.output


def test_recent_respects_limit(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    for name in ("alpha", "beta", "gamma"):
        _new_project(runner, tmp_path, env, name)

    result = runner.invoke(cli, ["recent", "--limit", "2", "--json"], env=env)

    assert result.exit_code == 0
    assert len(json.loads(result.output)) == 2


def test_reopen_missing_project_is_forgotten(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    root = _new_project(runner, tmp_path, env, "study")
    shutil.rmtree(root)

    result = runner.invoke(cli, ["reopen", str(root)], env=env)

    assert result.exit_code == 1
    assert "no longer exists" in result.output
    listed = runner.invoke(cli, ["recent", "--json"], env=env)
    assert json.loads(listed.output) == []


def test_reopen_plain_folder_is_not_recorded(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    folder = tmp_path / "plain"
    folder.mkdir()

    result = runner.invoke(cli, ["reopen", str(folder)], env=env)

    assert result.exit_code == 1
    assert "not a DoMate project" in result.output
    listed = runner.invoke(cli, ["recent", "--json"], env=env)
    assert json.loads(listed.output) == []


def test_registry_database_error_reports_json_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Database failures inside a command become a registry error payload.

    Args:
        tmp_path: Temporary directory provided by pytest.
        monkeypatch: Pytest monkeypatch fixture.
    """
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    def _open_without_tables(path: str | Path) -> Registry:
        registry = open_registry(path)
        Base.metadata.drop_all(registry.engine)
        return registry

    monkeypatch.setattr("domate.cli.open_registry", _open_without_tables)

    result = runner.invoke(cli, ["recent", "--json"], env=env)

    assert result.exit_code == 1
    assert json.loads(result.output)["error"]["code"] == "registry_error"


def test_forget_removes_recent_entry(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    root = _new_project(runner, tmp_path, env, "study")

    result = runner.invoke(cli, ["forget", str(root)], env=env)

    assert result.exit_code == 0
    assert "Forgot" in result.output
    listed = runner.invoke(cli, ["recent", "--json"], env=env)
    assert json.loads(listed.output) == []


def test_scripts_list_and_quiet(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    root = _new_project(runner, tmp_path, env, "study")

    created = runner.invoke(cli, ["--quiet", "scripts", "new", str(root), "analysis"], env=env)
    assert created.exit_code == 0
    assert created.output == ""

    listed = runner.invoke(cli, ["scripts", "list", str(root)], env=env)
    assert listed.exit_code == 0
    assert "analysis.do" in listed.output
