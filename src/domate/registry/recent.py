"""Recent-project bookkeeping backed by the registry database."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import delete, select
from domate.projects import ProjectNotFoundError, project_display_name, validate_project_dir

from .database import Registry
from .errors import RegistryError
from .models import Project, as_utc, utc_now

LOGGER = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10


@dataclass(slots=True)
class ProjectEntry:
    """Detached snapshot of a registry project record."""

    name: str
    path: str
    created_at: datetime
    last_opened_at: datetime

    @classmethod
    def from_record(cls, record: Project) -> "ProjectEntry":
        return cls(
            name=record.name,
            path=record.path,
            created_at=as_utc(record.created_at),
            last_opened_at=as_utc(record.last_opened_at),
        )


class ProjectRegistry:
    """Track opened projects, keyed by their folder path."""

    def __init__(self, registry: Registry, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._registry = registry
        self._clock = clock

    def record_open(
        self,
        path: str | Path,
        display_name: Optional[str] = None,
    ) -> Optional[ProjectEntry]:
        """Create or refresh the record for ``path``.

        Database errors are logged and swallowed so callers can continue with
        the project they are opening.

        Args:
            path: Project folder path used as the natural key.
            display_name: Name to store for new records; defaults to the folder name.

        Returns:
            ProjectEntry | None: Stored record, or None if the write failed.
        """
        key = str(path)
        now = self._clock()
        try:
            with self._registry.session() as session:
                record = session.scalars(select(Project).where(Project.path == key)).first()
                if record is None:
                    record = Project(
                        name=display_name or project_display_name(key),
                        path=key,
                        created_at=now,
                        last_opened_at=now,
                    )
                    session.add(record)
                else:
                    record.last_opened_at = now
                session.commit()
                return ProjectEntry.from_record(record)
        except RegistryError as exc:
            LOGGER.error("Failed to record project %s in registry: %s", key, exc)
            return None

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[ProjectEntry]:
        """Return projects ordered from most to least recently opened."""
        statement = (
            select(Project)
            .order_by(Project.last_opened_at.desc(), Project.id.desc())
            .limit(max(0, limit))
        )
        with self._registry.session() as session:
            return [ProjectEntry.from_record(record) for record in session.scalars(statement)]

    def get(self, path: str | Path) -> Optional[ProjectEntry]:
        with self._registry.session() as session:
            record = session.scalars(select(Project).where(Project.path == str(path))).first()
            return ProjectEntry.from_record(record) if record is not None else None

    def reopen(self, path: str | Path) -> Path:
        """Refresh a recent project, dropping its record if the folder is gone.

        Args:
            path: Project folder path previously recorded.

        Returns:
            Path: The project folder, ready to be loaded.

        Raises:
            ProjectNotFoundError: If the folder no longer exists.
            InvalidProjectError: If the folder is not a `.domt` project.
        """
        key = str(path)
        if not Path(key).exists():
            self.forget(key)
            LOGGER.warning("Removed missing project %s from recent projects", key)
            raise ProjectNotFoundError(f"Project folder {key} no longer exists.")
        validate_project_dir(Path(key))
        self.record_open(key)
        return Path(key)

    def forget(self, path: str | Path) -> bool:
        """Delete the record for ``path``.

        Returns:
            bool: True if a record was removed.
        """
        with self._registry.session() as session:
            result = session.execute(delete(Project).where(Project.path == str(path)))
            session.commit()
            return bool(result.rowcount)


__all__ = ["DEFAULT_RECENT_LIMIT", "ProjectEntry", "ProjectRegistry"]
