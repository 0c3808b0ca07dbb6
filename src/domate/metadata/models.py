"""Metadata models stored in each project's `domate-metadata.json`."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, List
from uuid import UUID, uuid4

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _unique(tags: List[str]) -> List[str]:
    return list(dict.fromkeys(tags))


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


TagList = Annotated[List[str], AfterValidator(_unique)]
Timestamp = Annotated[datetime, AfterValidator(_aware)]


class MetadataModel(BaseModel):
    """Base model serializing fields with camelCase JSON keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        validate_assignment=True,
    )

    def to_json_dict(self) -> dict:
        """Return a JSON-ready mapping using the on-disk key names."""
        return self.model_dump(mode="json", by_alias=True)


class DataFileMetadata(MetadataModel):
    """A labeled, tagged reference to a dataset used by the project's scripts."""

    id: UUID = Field(default_factory=uuid4)
    label: str
    path: str
    date_added: Timestamp = Field(default_factory=_utcnow)
    tags: TagList = Field(default_factory=list)


class TagCategory(MetadataModel):
    """A named group of tags used to organize the tag picker."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    tags: TagList = Field(default_factory=list)


class ProjectMetadata(MetadataModel):
    """Root document persisted once per project folder."""

    data_files: List[DataFileMetadata] = Field(default_factory=list)
    tag_categories: List[TagCategory] = Field(default_factory=list)
    last_modified: Timestamp = Field(default_factory=_utcnow)


class ProjectOverview(BaseModel):
    """Summary counts shown when a project is opened."""

    data_file_count: int
    tag_count: int


__all__ = ["DataFileMetadata", "TagCategory", "ProjectMetadata", "ProjectOverview"]
