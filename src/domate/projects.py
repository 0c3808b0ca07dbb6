"""Project folder conventions: `.domt` folders holding `.do` scripts."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ValidationError

from domate.metadata import MetadataRepository, ProjectMetadataStore, ProjectOverview

if TYPE_CHECKING:
    from domate.registry import ProjectRegistry

LOGGER = logging.getLogger(__name__)

PROJECT_SUFFIX = ".domt"
SCRIPT_SUFFIX = ".do"
PROJECT_INFO_FILENAME = "project.json"
PROJECT_CREATOR = "domate"


class ProjectError(Exception):
    """Base exception for project folder operations."""


class InvalidProjectError(ProjectError):
    """Raised when a folder is not a `.domt` project."""


class ProjectNotFoundError(ProjectError):
    """Raised when a project folder does not exist."""


class ProjectExistsError(ProjectError):
    """Raised when creating a project or script that already exists."""


class ProjectInfo(BaseModel):
    """Descriptor written to `project.json` when a project is created."""

    name: str
    created_date: float
    creator: str = PROJECT_CREATOR


@dataclass(slots=True)
class ProjectSession:
    """An open project and the metadata store loaded for it."""

    root: Path
    name: str
    store: ProjectMetadataStore
    info: Optional[ProjectInfo] = None

    def overview(self) -> ProjectOverview:
        return self.store.overview()

    def scripts(self) -> list[Path]:
        return list_scripts(self.root)


def project_display_name(path: str | Path) -> str:
    """Return the folder name of ``path`` without the `.domt` suffix."""
    name = Path(path).name
    if name.endswith(PROJECT_SUFFIX):
        return name[: -len(PROJECT_SUFFIX)]
    return name


def validate_project_dir(path: Path) -> Path:
    """Ensure ``path`` names an existing `.domt` folder.

    Args:
        path: Candidate project folder.

    Returns:
        Path: The validated folder.

    Raises:
        InvalidProjectError: If the folder name lacks the `.domt` suffix.
        ProjectNotFoundError: If the folder does not exist.
    """
    if path.suffix != PROJECT_SUFFIX:
        raise InvalidProjectError(
            f"{path} is not a DoMate project; choose a folder ending in {PROJECT_SUFFIX}."
        )
    if not path.is_dir():
        raise ProjectNotFoundError(f"Project folder {path} does not exist.")
    return path


def create_project(location: Path, name: str) -> Path:
    """Create a new `.domt` folder under ``location`` with its `project.json`.

    Args:
        location: Parent directory for the new project.
        name: Project name; the `.domt` suffix is appended when missing.

    Returns:
        Path: The created project folder.

    Raises:
        ProjectExistsError: If the folder already exists.
        ProjectError: If the folder cannot be created.
    """
    folder_name = name if name.endswith(PROJECT_SUFFIX) else f"{name}{PROJECT_SUFFIX}"
    root = location / folder_name
    if root.exists():
        raise ProjectExistsError(f"{root} already exists.")

    info = ProjectInfo(
        name=project_display_name(root),
        created_date=datetime.now(timezone.utc).timestamp(),
    )
    try:
        root.mkdir(parents=True)
        (root / PROJECT_INFO_FILENAME).write_text(
            json.dumps(info.model_dump(mode="json"), indent=2), encoding="utf-8"
        )
    except OSError as exc:
        raise ProjectError(f"Unable to create project at {root}: {exc}") from exc

    LOGGER.info("Created project %s", root)
    return root


def read_project_info(root: Path) -> Optional[ProjectInfo]:
    """Return the parsed `project.json`, or None when absent or unreadable."""
    path = root / PROJECT_INFO_FILENAME
    if not path.exists():
        return None
    try:
        return ProjectInfo.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        LOGGER.warning("Ignoring unreadable %s: %s", path, exc)
        return None


def list_scripts(root: Path) -> list[Path]:
    """Return the `.do` scripts directly inside ``root``, sorted by name."""
    return sorted(
        (path for path in root.iterdir() if path.is_file() and path.suffix == SCRIPT_SUFFIX),
        key=lambda path: path.name.lower(),
    )


def create_script(root: Path, name: str) -> Path:
    """Create an empty `.do` script in the project.

    Raises:
        ProjectExistsError: If a script with that name already exists.
    """
    filename = name if name.endswith(SCRIPT_SUFFIX) else f"{name}{SCRIPT_SUFFIX}"
    path = root / filename
    if path.exists():
        raise ProjectExistsError(f"Script {path} already exists.")
    path.write_text("", encoding="utf-8")
    return path


def open_project(
    path: Path,
    registry: "ProjectRegistry | None" = None,
    *,
    repository: MetadataRepository | None = None,
) -> ProjectSession:
    """Validate a project folder, record it as recent, and load its metadata.

    Args:
        path: Project folder to open.
        registry: Recent-project registry updated on success.
        repository: Metadata repository used to load the document.

    Returns:
        ProjectSession: The opened project.
    """
    root = validate_project_dir(path)
    if registry is not None:
        registry.record_open(root, project_display_name(root))
    store = ProjectMetadataStore.load(root, repository)
    return ProjectSession(
        root=root,
        name=project_display_name(root),
        store=store,
        info=read_project_info(root),
    )


__all__ = [
    "PROJECT_SUFFIX",
    "SCRIPT_SUFFIX",
    "PROJECT_INFO_FILENAME",
    "ProjectError",
    "InvalidProjectError",
    "ProjectNotFoundError",
    "ProjectExistsError",
    "ProjectInfo",
    "ProjectSession",
    "project_display_name",
    "validate_project_dir",
    "create_project",
    "read_project_info",
    "list_scripts",
    "create_script",
    "open_project",
]
