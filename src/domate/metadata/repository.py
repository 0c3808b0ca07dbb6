"""Reading and writing the per-project metadata document."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from .errors import MetadataError, MetadataWriteError, MissingMetadataError
from .models import ProjectMetadata

METADATA_FILENAME = "domate-metadata.json"


class MetadataRepository:
    """Read and write the metadata document stored inside a project folder."""

    def __init__(self, *, pretty: bool = True) -> None:
        """Initialize the repository.

        Args:
            pretty: Whether to indent the JSON written to disk.
        """
        self._pretty = pretty

    def path_for(self, root: Path) -> Path:
        """Return the metadata file location for a project root.

        Args:
            root: Project folder.

        Returns:
            Path: Location of `domate-metadata.json` inside ``root``.
        """
        return root / METADATA_FILENAME

    def read(self, root: Path) -> ProjectMetadata:
        """Load the metadata document for the given project.

        Args:
            root: Project folder.

        Returns:
            ProjectMetadata: Parsed metadata document.

        Raises:
            MissingMetadataError: If no metadata file is present.
            MetadataError: If the stored data cannot be parsed.
        """
        path = self.path_for(root)
        if not path.exists():
            raise MissingMetadataError(f"No project metadata found at {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MetadataError(f"Invalid project metadata in {path}: {exc}") from exc

        try:
            return ProjectMetadata.model_validate(data)
        except ValidationError as exc:
            raise MetadataError(f"Invalid project metadata in {path}: {exc}") from exc

    def write(self, root: Path, metadata: ProjectMetadata) -> Path:
        """Persist the full metadata document, refreshing `last_modified`.

        Args:
            root: Project folder.
            metadata: Document to serialize.

        Returns:
            Path: Location that was written.

        Raises:
            MetadataWriteError: If the file cannot be written.
        """
        path = self.path_for(root)
        now = datetime.now(timezone.utc)
        payload = json.dumps(
            metadata.model_copy(update={"last_modified": now}).to_json_dict(),
            indent=2 if self._pretty else None,
            ensure_ascii=False,
        )
        try:
            path.write_text(payload + "\n", encoding="utf-8")
        except OSError as exc:
            raise MetadataWriteError(f"Unable to write project metadata to {path}: {exc}") from exc
        metadata.last_modified = now
        return path


__all__ = ["METADATA_FILENAME", "MetadataRepository"]
