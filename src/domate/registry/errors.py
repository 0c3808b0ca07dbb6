"""Registry errors."""


class RegistryError(Exception):
    """Base exception for registry database operations."""


class TemplateNotFoundError(RegistryError):
    """Raised when a named tag template does not exist."""
