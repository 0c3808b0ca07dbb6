"""Script editing tests: snippets, insertion, and template resolution."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import pytest

from domate.editor import (
    DocumentError,
    DoDocument,
    data_reference_snippet,
    function_tag_snippet,
    insert_data_reference,
    insert_function_tags,
    resolve_template,
)
from domate.metadata import DataFileMetadata
from domate.registry import (
    TemplateEntry,
    TemplateLibrary,
    TemplateNotFoundError,
    open_registry,
)


@pytest.fixture
def library(tmp_path: Path) -> Iterator[TemplateLibrary]:
    handle = open_registry(tmp_path / "registry.db")
    yield TemplateLibrary(handle)
    handle.close()


def test_function_tags_wrap_label(library: TemplateLibrary) -> None:
    """The default template renders begin and end tags around the label.

    Args:
        library: Template library fixture.
    """
    library.add("block", "* BEGIN $label$", "* END $label$", is_default=True)
    document = DoDocument("sysuse auto\n")

    snippet = insert_function_tags(document, resolve_template(library), "clean")

    assert snippet == "* BEGIN clean\n\n* END clean"
    assert document.text == "sysuse auto\n* BEGIN clean\n\n* END clean"
    assert document.text.index("* BEGIN clean") < document.text.index("* END clean")


def test_function_tags_require_label(library: TemplateLibrary) -> None:
    library.add("block", "* BEGIN $label$", "* END $label$", is_default=True)

    with pytest.raises(ValueError):
        insert_function_tags(DoDocument(), resolve_template(library), "")


def test_label_token_replaced_everywhere() -> None:
    template = TemplateEntry(
        name="inline",
        begin_format="/* $label$ : $label$ */",
        end_format="/* end */",
        is_default=False,
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )

    assert function_tag_snippet(template, "x") == "/* x : x */\n\n/* end */"


def test_data_reference_snippet() -> None:
    record = DataFileMetadata(label="gdp", path="/data/gdp.dta")

    assert data_reference_snippet(record) == '\nuse "/data/gdp.dta"\n'


def test_insert_data_reference_at_position() -> None:
    record = DataFileMetadata(label="gdp", path="/data/gdp.dta")
    document = DoDocument("clear\nsummarize\n")

    insert_data_reference(document, record, position=6)

    assert document.text == 'clear\n\nuse "/data/gdp.dta"\nsummarize\n'


@pytest.mark.parametrize(
    ("position", "expected"),
    [(None, "abcXY"), (0, "XYabc"), (1, "aXYbc"), (-5, "XYabc"), (99, "abcXY")],
)
def test_insert_at_clamps_position(position: int | None, expected: str) -> None:
    document = DoDocument("abc")

    end = document.insert_at("XY", position)

    assert document.text == expected
    assert document.text[end - 2 : end] == "XY"


def test_document_round_trip_utf8(tmp_path: Path) -> None:
    path = tmp_path / "analysis.do"
    DoDocument("* café résumé\n").write(path)

    assert DoDocument.read(path).text == "* café résumé\n"


def test_document_read_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "legacy.do"
    path.write_bytes(b"* caf\xe9\n")

    with pytest.raises(DocumentError):
        DoDocument.read(path)


def test_resolve_template_by_name_and_missing(library: TemplateLibrary) -> None:
    with pytest.raises(TemplateNotFoundError):
        resolve_template(library)

    library.add("comment", "// $label$", "// end $label$")

    assert resolve_template(library, "comment").name == "comment"
    with pytest.raises(TemplateNotFoundError):
        resolve_template(library, "missing")
