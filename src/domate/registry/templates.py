"""Tag template library backed by the registry database."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from domate.config.models import TemplateSettings

from .database import Registry
from .errors import RegistryError, TemplateNotFoundError
from .models import TagTemplate, as_utc, utc_now

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class TemplateEntry:
    """Detached snapshot of a tag template."""

    name: str
    begin_format: str
    end_format: str
    is_default: bool
    created_at: datetime

    @classmethod
    def from_record(cls, record: TagTemplate) -> "TemplateEntry":
        return cls(
            name=record.name,
            begin_format=record.begin_format,
            end_format=record.end_format,
            is_default=record.is_default,
            created_at=as_utc(record.created_at),
        )


class TemplateLibrary:
    """Create, list, and select tag templates.

    Several templates may carry the default flag; :meth:`default` resolves
    that by returning the earliest-created one.
    """

    def __init__(self, registry: Registry, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._registry = registry
        self._clock = clock

    def add(
        self,
        name: str,
        begin_format: str,
        end_format: str,
        *,
        is_default: bool = False,
    ) -> TemplateEntry:
        """Store a new template.

        Raises:
            RegistryError: If a template with ``name`` already exists.
        """
        record = TagTemplate(
            name=name,
            begin_format=begin_format,
            end_format=end_format,
            is_default=is_default,
            created_at=self._clock(),
        )
        with self._registry.session() as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError as exc:
                raise RegistryError(f"Template '{name}' already exists.") from exc
            return TemplateEntry.from_record(record)

    def list(self) -> list[TemplateEntry]:
        statement = select(TagTemplate).order_by(TagTemplate.created_at, TagTemplate.id)
        with self._registry.session() as session:
            return [TemplateEntry.from_record(record) for record in session.scalars(statement)]

    def get(self, name: str) -> Optional[TemplateEntry]:
        with self._registry.session() as session:
            record = session.scalars(select(TagTemplate).where(TagTemplate.name == name)).first()
            return TemplateEntry.from_record(record) if record is not None else None

    def remove(self, name: str) -> bool:
        with self._registry.session() as session:
            record = session.scalars(select(TagTemplate).where(TagTemplate.name == name)).first()
            if record is None:
                return False
            session.delete(record)
            session.commit()
            return True

    def set_default(self, name: str) -> TemplateEntry:
        """Mark ``name`` as the only default template.

        Raises:
            TemplateNotFoundError: If no template is called ``name``.
        """
        with self._registry.session() as session:
            record = session.scalars(select(TagTemplate).where(TagTemplate.name == name)).first()
            if record is None:
                raise TemplateNotFoundError(f"No tag template named '{name}'.")
            session.execute(
                update(TagTemplate).where(TagTemplate.id != record.id).values(is_default=False)
            )
            record.is_default = True
            session.commit()
            return TemplateEntry.from_record(record)

    def default(self) -> Optional[TemplateEntry]:
        statement = (
            select(TagTemplate)
            .where(TagTemplate.is_default.is_(True))
            .order_by(TagTemplate.created_at, TagTemplate.id)
        )
        with self._registry.session() as session:
            record = session.scalars(statement).first()
            return TemplateEntry.from_record(record) if record is not None else None

    def ensure_builtin(self, settings: TemplateSettings) -> Optional[TemplateEntry]:
        """Seed the configured built-in template into an empty library.

        Returns:
            TemplateEntry | None: The seeded template, or None if nothing was added.
        """
        if not settings.seed_builtin or self.list():
            return None
        LOGGER.info("Seeding built-in tag template '%s'", settings.builtin_name)
        return self.add(
            settings.builtin_name,
            settings.begin_format,
            settings.end_format,
            is_default=True,
        )


__all__ = ["TemplateEntry", "TemplateLibrary"]
