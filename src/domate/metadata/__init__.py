"""Per-project metadata persistence for DoMate."""

from .errors import MetadataError, MetadataWriteError, MissingMetadataError
from .models import DataFileMetadata, ProjectMetadata, ProjectOverview, TagCategory
from .repository import METADATA_FILENAME, MetadataRepository
from .store import ProjectMetadataStore

__all__ = [
    "METADATA_FILENAME",
    "MetadataRepository",
    "ProjectMetadataStore",
    "ProjectMetadata",
    "ProjectOverview",
    "DataFileMetadata",
    "TagCategory",
    "MetadataError",
    "MissingMetadataError",
    "MetadataWriteError",
]
