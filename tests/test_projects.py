"""Project folder tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

import pytest

from domate.metadata import METADATA_FILENAME
from domate.projects import (
    PROJECT_INFO_FILENAME,
    InvalidProjectError,
    ProjectExistsError,
    ProjectNotFoundError,
    create_project,
    create_script,
    list_scripts,
    open_project,
    project_display_name,
    read_project_info,
    validate_project_dir,
)
from domate.registry import ProjectRegistry, Registry, open_registry


@pytest.fixture
def registry(tmp_path: Path) -> Iterator[Registry]:
    handle = open_registry(tmp_path / "registry.db")
    yield handle
    handle.close()


def test_create_project_writes_descriptor(tmp_path: Path) -> None:
    """New projects get the `.domt` suffix and a `project.json` descriptor.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    root = create_project(tmp_path, "study")

    assert root == tmp_path / "study.domt"
    data = json.loads((root / PROJECT_INFO_FILENAME).read_text(encoding="utf-8"))
    assert data["name"] == "study"
    assert data["creator"] == "domate"
    assert isinstance(data["created_date"], float)

    info = read_project_info(root)
    assert info is not None and info.name == "study"


def test_create_project_keeps_existing_suffix(tmp_path: Path) -> None:
    assert create_project(tmp_path, "panel.domt") == tmp_path / "panel.domt"


def test_create_project_refuses_existing_folder(tmp_path: Path) -> None:
    create_project(tmp_path, "study")

    with pytest.raises(ProjectExistsError):
        create_project(tmp_path, "study")


def test_validate_project_dir(tmp_path: Path) -> None:
    plain = tmp_path / "plain"
    plain.mkdir()

    with pytest.raises(InvalidProjectError):
        validate_project_dir(plain)
    with pytest.raises(ProjectNotFoundError):
        validate_project_dir(tmp_path / "missing.domt")

    root = create_project(tmp_path, "study")
    assert validate_project_dir(root) == root


def test_read_project_info_ignores_bad_descriptor(tmp_path: Path) -> None:
    root = create_project(tmp_path, "study")
    (root / PROJECT_INFO_FILENAME).write_text("{}", encoding="utf-8")

    assert read_project_info(root) is None


def test_scripts_are_listed_by_name(tmp_path: Path) -> None:
    root = create_project(tmp_path, "study")
    create_script(root, "clean")
    create_script(root, "Analysis.do")
    (root / "notes.txt").write_text("", encoding="utf-8")
    (root / "archive.do").mkdir()

    assert [path.name for path in list_scripts(root)] == ["Analysis.do", "clean.do"]

    with pytest.raises(ProjectExistsError):
        create_script(root, "clean")


def test_project_display_name() -> None:
    assert project_display_name("/work/study.domt") == "study"
    assert project_display_name(Path("/work/plain")) == "plain"


def test_open_project_records_recent_and_loads_metadata(
    tmp_path: Path, registry: Registry
) -> None:
    """Opening a project records it as recent and creates its metadata document.

    Args:
        tmp_path: Temporary directory provided by pytest.
        registry: Registry fixture.
    """
    root = create_project(tmp_path, "study")
    create_script(root, "clean")
    projects = ProjectRegistry(registry)

    session = open_project(root, projects)

    assert session.name == "study"
    assert session.info is not None
    assert [path.name for path in session.scripts()] == ["clean.do"]
    assert session.overview().data_file_count == 0
    assert (root / METADATA_FILENAME).exists()
    assert [entry.path for entry in projects.list_recent()] == [str(root)]


def test_open_invalid_folder_does_not_record(tmp_path: Path, registry: Registry) -> None:
    folder = tmp_path / "plain"
    folder.mkdir()
    projects = ProjectRegistry(registry)

    with pytest.raises(InvalidProjectError):
        open_project(folder, projects)

    assert projects.list_recent() == []
    assert not (folder / METADATA_FILENAME).exists()
