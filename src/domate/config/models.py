"""Configuration models describing DoMate settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DomateBaseModel(BaseModel):
    """Shared configuration for DoMate Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class RegistrySettings(DomateBaseModel):
    """Settings for the application-wide project registry.

    Attributes:
        database_path: SQLite file backing recent projects and tag templates.
        recent_limit: Number of recent projects listed by default.
    """

    database_path: str = "~/.domate/registry.db"
    recent_limit: int = Field(default=10, ge=1)


class MetadataSettings(DomateBaseModel):
    """Settings for per-project metadata documents.

    Attributes:
        pretty: Whether `domate-metadata.json` is written with indentation.
    """

    pretty: bool = True


class TemplateSettings(DomateBaseModel):
    """Built-in tag template seeded into an empty template library.

    Attributes:
        seed_builtin: Whether to create the built-in template on first use.
        builtin_name: Name of the built-in template.
        begin_format: Opening comment; `$label$` is replaced on insertion.
        end_format: Closing comment; `$label$` is replaced on insertion.
    """

    seed_builtin: bool = True
    builtin_name: str = "stata-block"
    begin_format: str = "*** BEGIN $label$ ***"
    end_format: str = "*** END $label$ ***"


class LoggingSettings(DomateBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
        file_path: Location of the rotating log file.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 3
    file_path: str = "~/.domate/domate.log"


class CLIOptions(DomateBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        json_default: Whether read commands emit JSON by default.
    """

    quiet_default: bool = False
    json_default: bool = False


class DomateConfig(DomateBaseModel):
    """Top-level configuration struct for DoMate."""

    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    metadata: MetadataSettings = Field(default_factory=MetadataSettings)
    templates: TemplateSettings = Field(default_factory=TemplateSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DomateBaseModel",
    "RegistrySettings",
    "MetadataSettings",
    "TemplateSettings",
    "LoggingSettings",
    "CLIOptions",
    "DomateConfig",
]
