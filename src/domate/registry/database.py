"""Engine and session management for the registry database."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import RegistryError
from .models import Base

LOGGER = logging.getLogger(__name__)


class Registry:
    """Hold the engine and session factory for one registry database."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that is rolled back if the block raises.

        Raises:
            RegistryError: If the database rejects a statement issued in the block.
        """
        session = self._sessions()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            raise RegistryError(f"Registry database error: {exc}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self._engine.dispose()


def open_registry(database_path: str | Path) -> Registry:
    """Open (creating if needed) the SQLite registry at ``database_path``.

    Args:
        database_path: Location of the SQLite file; ``~`` is expanded.

    Returns:
        Registry: Handle exposing sessions over the database.

    Raises:
        RegistryError: If the database cannot be created or opened.
    """

    path = Path(database_path).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(f"sqlite:///{path}")
        Base.metadata.create_all(engine)
    except (OSError, SQLAlchemyError) as exc:
        raise RegistryError(f"Unable to open registry database at {path}: {exc}") from exc

    LOGGER.debug("Opened registry database at %s", path)
    return Registry(engine)


__all__ = ["Registry", "open_registry"]
