"""Application-wide registry of recent projects, tag templates, and datasets."""

from .catalog import CatalogEntry, DataFileCatalog
from .database import Registry, open_registry
from .errors import RegistryError, TemplateNotFoundError
from .recent import DEFAULT_RECENT_LIMIT, ProjectEntry, ProjectRegistry
from .templates import TemplateEntry, TemplateLibrary

__all__ = [
    "Registry",
    "open_registry",
    "ProjectRegistry",
    "ProjectEntry",
    "DEFAULT_RECENT_LIMIT",
    "TemplateLibrary",
    "TemplateEntry",
    "DataFileCatalog",
    "CatalogEntry",
    "RegistryError",
    "TemplateNotFoundError",
]
