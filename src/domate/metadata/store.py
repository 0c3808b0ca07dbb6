"""In-memory session over one project's metadata document."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional
from uuid import UUID

from .errors import MetadataError, MetadataWriteError, MissingMetadataError
from .models import DataFileMetadata, ProjectMetadata, ProjectOverview, TagCategory
from .repository import MetadataRepository

LOGGER = logging.getLogger(__name__)


class ProjectMetadataStore:
    """Own the loaded metadata document of an open project.

    Every mutating call updates the in-memory document and then rewrites the
    whole file. A failed write is logged and raised as ``MetadataWriteError``;
    the in-memory change is kept.
    """

    def __init__(
        self,
        root: Path,
        metadata: ProjectMetadata,
        repository: MetadataRepository | None = None,
    ) -> None:
        self._root = root
        self._metadata = metadata
        self._repository = repository or MetadataRepository()

    @classmethod
    def load(
        cls,
        root: Path,
        repository: MetadataRepository | None = None,
    ) -> "ProjectMetadataStore":
        """Load the metadata document of ``root``, creating it when absent.

        An unreadable document is replaced by an empty one in memory only; the
        file on disk is left alone until the next mutation.

        Args:
            root: Project folder.
            repository: Repository used for file access.

        Returns:
            ProjectMetadataStore: Session bound to the loaded document.

        Raises:
            MetadataWriteError: If a missing document cannot be created.
        """
        repository = repository or MetadataRepository()
        try:
            metadata = repository.read(root)
        except MissingMetadataError:
            metadata = ProjectMetadata()
            repository.write(root, metadata)
            LOGGER.info("Created project metadata at %s", repository.path_for(root))
        except MetadataError as exc:
            LOGGER.warning("Falling back to empty project metadata: %s", exc)
            metadata = ProjectMetadata()
        return cls(root, metadata, repository)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def metadata_path(self) -> Path:
        return self._repository.path_for(self._root)

    @property
    def metadata(self) -> ProjectMetadata:
        return self._metadata

    # Data files ---------------------------------------------------------

    def data_files(self) -> list[DataFileMetadata]:
        return list(self._metadata.data_files)

    def get_data_file(self, file_id: UUID) -> Optional[DataFileMetadata]:
        for record in self._metadata.data_files:
            if record.id == file_id:
                return record
        return None

    def add_data_file(
        self,
        label: str,
        path: str,
        tags: Iterable[str] = (),
    ) -> DataFileMetadata:
        """Append a new data file record and persist the document.

        Args:
            label: Display label for the dataset.
            path: Filesystem path of the dataset.
            tags: Initial tags attached to the record.

        Returns:
            DataFileMetadata: The created record.
        """
        record = DataFileMetadata(label=label, path=path, tags=list(tags))
        self._metadata.data_files.append(record)
        self._persist()
        return record

    def update_data_file(
        self,
        file_id: UUID,
        label: str,
        path: str,
        tags: Optional[Iterable[str]] = None,
    ) -> Optional[DataFileMetadata]:
        """Update a data file in place; tags are replaced only when given.

        Returns:
            DataFileMetadata | None: Updated record, or None when ``file_id`` is unknown.
        """
        record = self.get_data_file(file_id)
        if record is None:
            return None
        record.label = label
        record.path = path
        if tags is not None:
            record.tags = list(tags)
        self._persist()
        return record

    def delete_data_file(self, file_id: UUID) -> bool:
        """Remove every record with ``file_id``.

        Returns:
            bool: True if at least one record was removed.
        """
        remaining = [record for record in self._metadata.data_files if record.id != file_id]
        removed = len(remaining) != len(self._metadata.data_files)
        if removed:
            self._metadata.data_files = remaining
            self._persist()
        return removed

    def find_by_tag(self, tag: str) -> list[DataFileMetadata]:
        return [record for record in self._metadata.data_files if tag in record.tags]

    def filter_data_files(self, tags: Iterable[str] = (), text: str = "") -> list[DataFileMetadata]:
        """Return data files carrying any of ``tags`` whose label or path contains ``text``.

        Args:
            tags: Tags to match; an empty selection keeps every record.
            text: Case-insensitive substring matched against label and path.

        Returns:
            list[DataFileMetadata]: Matching records in document order.
        """
        selected = set(tags)
        needle = text.casefold()
        results = []
        for record in self._metadata.data_files:
            if selected and selected.isdisjoint(record.tags):
                continue
            haystacks = (record.label.casefold(), record.path.casefold())
            if needle and not any(needle in value for value in haystacks):
                continue
            results.append(record)
        return results

    def add_tag_to_data_file(self, file_id: UUID, tag: str) -> bool:
        """Attach ``tag`` to a data file unless already present.

        Returns:
            bool: True if the tag was added.
        """
        record = self.get_data_file(file_id)
        if record is None or tag in record.tags:
            return False
        record.tags = [*record.tags, tag]
        self._persist()
        return True

    def remove_tag_from_data_file(self, file_id: UUID, tag: str) -> bool:
        """Detach ``tag`` from a data file if present.

        Returns:
            bool: True if the tag was removed.
        """
        record = self.get_data_file(file_id)
        if record is None or tag not in record.tags:
            return False
        record.tags = [existing for existing in record.tags if existing != tag]
        self._persist()
        return True

    # Tag categories -----------------------------------------------------

    def tag_categories(self) -> list[TagCategory]:
        return list(self._metadata.tag_categories)

    def get_tag_category(self, category_id: UUID) -> Optional[TagCategory]:
        for category in self._metadata.tag_categories:
            if category.id == category_id:
                return category
        return None

    def add_tag_category(self, name: str, tags: Iterable[str] = ()) -> TagCategory:
        category = TagCategory(name=name, tags=list(tags))
        self._metadata.tag_categories.append(category)
        self._persist()
        return category

    def update_tag_category(
        self,
        category_id: UUID,
        name: str,
        tags: Optional[Iterable[str]] = None,
    ) -> Optional[TagCategory]:
        category = self.get_tag_category(category_id)
        if category is None:
            return None
        category.name = name
        if tags is not None:
            category.tags = list(tags)
        self._persist()
        return category

    def delete_tag_category(self, category_id: UUID) -> bool:
        remaining = [
            category
            for category in self._metadata.tag_categories
            if category.id != category_id
        ]
        removed = len(remaining) != len(self._metadata.tag_categories)
        if removed:
            self._metadata.tag_categories = remaining
            self._persist()
        return removed

    def add_tag_to_category(self, category_id: UUID, tag: str) -> bool:
        category = self.get_tag_category(category_id)
        if category is None or tag in category.tags:
            return False
        category.tags = [*category.tags, tag]
        self._persist()
        return True

    # Aggregates ---------------------------------------------------------

    def all_tags(self) -> list[str]:
        """Return every tag used by categories or data files, sorted."""
        tags: set[str] = set()
        for category in self._metadata.tag_categories:
            tags.update(category.tags)
        for record in self._metadata.data_files:
            tags.update(record.tags)
        return sorted(tags)

    def overview(self) -> ProjectOverview:
        return ProjectOverview(
            data_file_count=len(self._metadata.data_files),
            tag_count=len(self.all_tags()),
        )

    def _persist(self) -> None:
        try:
            self._repository.write(self._root, self._metadata)
        except MetadataWriteError as exc:
            LOGGER.error("Project metadata change was not saved: %s", exc)
            raise


__all__ = ["ProjectMetadataStore"]
