"""Script documents and the snippets DoMate inserts into them."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

from domate.metadata import DataFileMetadata
from domate.registry import TemplateNotFoundError

if TYPE_CHECKING:
    from domate.registry import TemplateEntry, TemplateLibrary

LABEL_TOKEN = "$label$"


class DocumentError(Exception):
    """Raised when a script cannot be read as UTF-8 text."""


class TagFormats(Protocol):
    begin_format: str
    end_format: str


class DoDocument:
    """Plain UTF-8 text of a Stata `.do` script."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    @classmethod
    def read(cls, path: Path) -> "DoDocument":
        """Load a script from disk.

        Raises:
            DocumentError: If the file cannot be read or is not valid UTF-8.
        """
        try:
            return cls(path.read_bytes().decode("utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentError(f"Unable to read {path} as UTF-8 text: {exc}") from exc

    def write(self, path: Path) -> None:
        path.write_text(self.text, encoding="utf-8")

    def insert_at(self, text: str, position: Optional[int] = None) -> int:
        """Insert ``text`` at ``position``, appending when no position is given.

        Positions outside the document are clamped to its bounds.

        Returns:
            int: Offset just past the inserted text.
        """
        if position is None:
            offset = len(self.text)
        else:
            offset = min(max(position, 0), len(self.text))
        self.text = self.text[:offset] + text + self.text[offset:]
        return offset + len(text)


def render_tag(fmt: str, label: str) -> str:
    return fmt.replace(LABEL_TOKEN, label)


def data_reference_snippet(record: DataFileMetadata) -> str:
    """Return the `use` statement loading ``record``, padded with newlines."""
    return f'\nuse "{record.path}"\n'


def function_tag_snippet(template: TagFormats, label: str) -> str:
    """Return the begin and end tags of ``template`` for ``label``, one blank line apart."""
    begin = render_tag(template.begin_format, label)
    end = render_tag(template.end_format, label)
    return f"{begin}\n\n{end}"


def insert_data_reference(
    document: DoDocument,
    record: DataFileMetadata,
    position: Optional[int] = None,
) -> str:
    snippet = data_reference_snippet(record)
    document.insert_at(snippet, position)
    return snippet


def insert_function_tags(
    document: DoDocument,
    template: TagFormats,
    label: str,
    position: Optional[int] = None,
) -> str:
    """Insert the rendered tag pair of ``template`` into ``document``.

    Raises:
        ValueError: If ``label`` is empty.
    """
    if not label:
        raise ValueError("A label is required to render function tags.")
    snippet = function_tag_snippet(template, label)
    document.insert_at(snippet, position)
    return snippet


def resolve_template(
    library: "TemplateLibrary",
    name: Optional[str] = None,
) -> "TemplateEntry":
    """Return the named template, or the library default when no name is given.

    Raises:
        TemplateNotFoundError: If the named template is missing or no default exists.
    """
    template = library.get(name) if name else library.default()
    if template is None:
        if name:
            raise TemplateNotFoundError(f"No tag template named '{name}'.")
        raise TemplateNotFoundError("No default tag template is configured.")
    return template


__all__ = [
    "LABEL_TOKEN",
    "DocumentError",
    "DoDocument",
    "render_tag",
    "data_reference_snippet",
    "function_tag_snippet",
    "insert_data_reference",
    "insert_function_tags",
    "resolve_template",
]
