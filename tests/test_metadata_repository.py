"""Metadata repository tests."""

from __future__ import annotations

import json
from pathlib import Path
from uuid import UUID

import pytest

from domate.metadata import (
    METADATA_FILENAME,
    DataFileMetadata,
    MetadataError,
    MetadataRepository,
    MetadataWriteError,
    MissingMetadataError,
    ProjectMetadata,
    TagCategory,
)


def _metadata() -> ProjectMetadata:
    """Return a sample metadata document with one data file and one category.

    Returns:
        ProjectMetadata: Sample document.
    """
    return ProjectMetadata(
        data_files=[DataFileMetadata(label="gdp", path="/data/gdp.dta", tags=["macro"])],
        tag_categories=[TagCategory(name="Topics", tags=["macro", "micro"])],
    )


def test_write_and_read_round_trip(tmp_path: Path) -> None:
    """Ensure a written document reads back with identical records.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    repo = MetadataRepository()
    metadata = _metadata()

    repo.write(tmp_path, metadata)
    loaded = repo.read(tmp_path)

    assert [(f.id, f.label, f.path, f.tags) for f in loaded.data_files] == [
        (f.id, f.label, f.path, f.tags) for f in metadata.data_files
    ]
    assert [(c.id, c.name, c.tags) for c in loaded.tag_categories] == [
        (c.id, c.name, c.tags) for c in metadata.tag_categories
    ]
    assert loaded.last_modified == metadata.last_modified


def test_write_uses_camel_case_keys(tmp_path: Path) -> None:
    """The on-disk document uses the camelCase field names."""
    repo = MetadataRepository()

    path = repo.write(tmp_path, _metadata())

    assert path == tmp_path / METADATA_FILENAME
    data = json.loads(path.read_text(encoding="utf-8"))
    assert set(data) == {"dataFiles", "tagCategories", "lastModified"}
    assert set(data["dataFiles"][0]) == {"id", "label", "path", "dateAdded", "tags"}
    assert set(data["tagCategories"][0]) == {"id", "name", "tags"}


def test_write_refreshes_last_modified(tmp_path: Path) -> None:
    repo = MetadataRepository()
    metadata = _metadata()
    before = metadata.last_modified

    repo.write(tmp_path, metadata)

    assert metadata.last_modified >= before


def test_compact_output_when_not_pretty(tmp_path: Path) -> None:
    repo = MetadataRepository(pretty=False)

    path = repo.write(tmp_path, _metadata())

    assert path.read_text(encoding="utf-8").count("\n") == 1


def test_read_accepts_epoch_timestamps(tmp_path: Path) -> None:
    """Documents with epoch-second timestamps and unknown keys still load.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    file_id = "6F9619FF-8B86-D011-B42D-00C04FC964FF"
    payload = {
        "dataFiles": [
            {
                "id": file_id,
                "label": "panel",
                "path": "/data/panel.dta",
                "dateAdded": 1700000000,
                "tags": ["micro", "micro"],
            }
        ],
        "tagCategories": [],
        "lastModified": 1700000000.5,
        "schemaHint": "ignored",
    }
    (tmp_path / METADATA_FILENAME).write_text(json.dumps(payload), encoding="utf-8")

    loaded = MetadataRepository().read(tmp_path)

    record = loaded.data_files[0]
    assert record.id == UUID(file_id)
    assert record.date_added.tzinfo is not None
    assert record.date_added.timestamp() == 1700000000
    assert record.tags == ["micro"]


def test_read_missing_document_raises(tmp_path: Path) -> None:
    with pytest.raises(MissingMetadataError):
        MetadataRepository().read(tmp_path)


@pytest.mark.parametrize("content", ["not json", '{"dataFiles": "nope"}'])
def test_read_invalid_document_raises(tmp_path: Path, content: str) -> None:
    """Unparseable or invalid documents raise MetadataError.

    Args:
        tmp_path: Temporary directory provided by pytest.
        content: Raw file content to write.
    """
    (tmp_path / METADATA_FILENAME).write_text(content, encoding="utf-8")

    with pytest.raises(MetadataError):
        MetadataRepository().read(tmp_path)


def test_write_failure_raises_write_error(tmp_path: Path) -> None:
    with pytest.raises(MetadataWriteError):
        MetadataRepository().write(tmp_path / "missing", _metadata())


def test_failed_write_keeps_last_modified(tmp_path: Path) -> None:
    metadata = _metadata()
    before = metadata.last_modified

    with pytest.raises(MetadataWriteError):
        MetadataRepository().write(tmp_path / "missing", metadata)

    assert metadata.last_modified == before


def test_duplicate_tags_are_collapsed() -> None:
    record = DataFileMetadata(label="gdp", path="/data/gdp.dta", tags=["b", "a", "b"])

    assert record.tags == ["b", "a"]

    record.tags = ["x", "x"]
    assert record.tags == ["x"]
