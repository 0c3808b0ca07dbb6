"""Application-wide catalog of dataset references."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import select

from .database import Registry
from .models import DataFile, as_utc, utc_now


@dataclass(slots=True)
class CatalogEntry:
    """Detached snapshot of a catalog data file."""

    id: int
    label: str
    path: str
    date_added: datetime

    @classmethod
    def from_record(cls, record: DataFile) -> "CatalogEntry":
        return cls(
            id=record.id,
            label=record.label,
            path=record.path,
            date_added=as_utc(record.date_added),
        )


class DataFileCatalog:
    """Keep dataset references that can be imported into any project."""

    def __init__(self, registry: Registry, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._registry = registry
        self._clock = clock

    def add(self, label: str, path: str) -> CatalogEntry:
        record = DataFile(label=label, path=path, date_added=self._clock())
        with self._registry.session() as session:
            session.add(record)
            session.commit()
            return CatalogEntry.from_record(record)

    def list(self) -> list[CatalogEntry]:
        with self._registry.session() as session:
            records = session.scalars(select(DataFile).order_by(DataFile.label, DataFile.id))
            return [CatalogEntry.from_record(record) for record in records]

    def get(self, entry_id: int) -> Optional[CatalogEntry]:
        with self._registry.session() as session:
            record = session.get(DataFile, entry_id)
            return CatalogEntry.from_record(record) if record is not None else None

    def remove(self, entry_id: int) -> bool:
        with self._registry.session() as session:
            record = session.get(DataFile, entry_id)
            if record is None:
                return False
            session.delete(record)
            session.commit()
            return True


__all__ = ["CatalogEntry", "DataFileCatalog"]
