"""Project metadata errors."""


class MetadataError(Exception):
    """Base exception for project metadata operations."""


class MissingMetadataError(MetadataError):
    """Raised when a project folder has no metadata document."""


class MetadataWriteError(MetadataError):
    """Raised when the metadata document cannot be written to disk."""
