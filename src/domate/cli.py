"""Command line interface for DoMate."""

from __future__ import annotations

import difflib
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional
from uuid import UUID

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from domate.config import (
    ConfigError,
    ConfigManager,
    DomateConfig,
    assign_nested,
    resolve_with_precedence,
)
from domate.editor import (
    DocumentError,
    DoDocument,
    insert_data_reference,
    insert_function_tags,
    resolve_template,
)
from domate.log import configure_logging
from domate.metadata import DataFileMetadata, MetadataError, MetadataRepository, TagCategory
from domate.projects import (
    ProjectError,
    ProjectSession,
    create_project,
    create_script,
    list_scripts,
    open_project,
    validate_project_dir,
)
from domate.registry import (
    DataFileCatalog,
    ProjectRegistry,
    Registry,
    RegistryError,
    TemplateLibrary,
    TemplateNotFoundError,
    open_registry,
)

LOGGER = logging.getLogger(__name__)

console = Console()

_ERROR_CODES: tuple[tuple[type[Exception], str], ...] = (
    (ProjectError, "project_error"),
    (MetadataError, "metadata_error"),
    (TemplateNotFoundError, "template_not_found"),
    (RegistryError, "registry_error"),
    (DocumentError, "document_error"),
    (ConfigError, "config_error"),
    (ValueError, "invalid_value"),
)
_DOMAIN_ERRORS = tuple(error for error, _ in _ERROR_CODES)


@dataclass(slots=True)
class CLIState:
    """Per-invocation settings shared with subcommands."""

    config: DomateConfig
    quiet: bool


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


@contextmanager
def _cli_errors(json_output: bool = False) -> Iterator[None]:
    """Translate domain exceptions raised inside the block into CLI errors."""
    try:
        yield
    except _DOMAIN_ERRORS as exc:
        code = next(code for error, code in _ERROR_CODES if isinstance(exc, error))
        LOGGER.debug("Command failed with %s: %s", code, exc)
        _handle_cli_error(str(exc), code=code, json_output=json_output, original=exc)


def _state() -> CLIState:
    ctx = click.get_current_context()
    state = ctx.find_object(CLIState)
    if state is None:
        state = CLIState(config=DomateConfig(), quiet=False)
        ctx.obj = state
    return state


def _json_enabled(json_output: bool) -> bool:
    return json_output or _state().config.cli.json_default


def _emit_message(message: Any, *, mode: str = "detail") -> None:
    """Print ``message`` unless quiet mode suppresses it.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `warning`, or `error`).
    """

    if _state().quiet and mode != "error":
        return
    console.print(message)


def _open_registry() -> Registry:
    """Open the configured registry; failure here aborts the command."""
    settings = _state().config.registry
    try:
        return open_registry(settings.database_path)
    except RegistryError as exc:
        LOGGER.critical("Registry unavailable: %s", exc)
        raise click.ClickException(str(exc)) from exc


def _template_library(registry: Registry) -> TemplateLibrary:
    library = TemplateLibrary(registry)
    library.ensure_builtin(_state().config.templates)
    return library


def _metadata_repository() -> MetadataRepository:
    return MetadataRepository(pretty=_state().config.metadata.pretty)


def _load_project(project: str) -> ProjectSession:
    """Open a project for editing without touching the recent-project list."""
    return open_project(Path(project).expanduser().resolve(), repository=_metadata_repository())


def _resolve_dir(path: str) -> Path:
    return Path(path).expanduser().resolve()


def _data_file_table(records: list[DataFileMetadata]) -> Table:
    table = Table(title="Data files", show_lines=False)
    table.add_column("ID", style="dim")
    table.add_column("Label", style="bold")
    table.add_column("Path")
    table.add_column("Tags")
    for record in records:
        table.add_row(str(record.id), record.label, record.path, ", ".join(record.tags))
    return table


def _category_table(categories: list[TagCategory]) -> Table:
    table = Table(title="Tag categories")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Tags")
    for category in categories:
        table.add_row(str(category.id), category.name, ", ".join(category.tags))
    return table


def _emit_overview(session: ProjectSession, *, json_output: bool) -> None:
    overview = session.overview()
    scripts = [path.name for path in session.scripts()]
    if json_output:
        console.print_json(
            data={
                "project": {
                    "name": session.name,
                    "path": str(session.root),
                    "location": str(session.root.parent),
                },
                "counts": overview.model_dump(),
                "scripts": scripts,
            }
        )
        return

    _emit_message(f"[bold]Project:[/bold] {session.name}")
    _emit_message(f"  Location: {session.root.parent}")
    _emit_message(f"  Folder: {session.root.name}")
    _emit_message(f"  Data files: {overview.data_file_count}")
    _emit_message(f"  Tags: {overview.tag_count}")
    if scripts:
        _emit_message("  Scripts:")
        for name in scripts:
            _emit_message(f"    - {name}")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="domate")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def cli(ctx: click.Context, quiet: bool) -> None:
    """DoMate organizes Stata projects: do-scripts, data files, and their tags."""
    manager = ConfigManager()
    try:
        config = manager.load()
    except ConfigError as exc:
        console.print(f"[yellow]Ignoring invalid configuration: {exc}[/yellow]")
        config = DomateConfig()

    configure_logging(config.logging)
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    ctx.obj = CLIState(
        config=config,
        quiet=quiet if explicit_quiet else config.cli.quiet_default,
    )


# Projects -------------------------------------------------------------------


@cli.command()
@click.argument("name")
@click.option(
    "--location",
    type=click.Path(exists=True, file_okay=False, path_type=str),
    default=".",
    show_default=True,
    help="Directory in which to create the project folder.",
)
def new(name: str, location: str) -> None:
    """Create a new `.domt` project folder called NAME."""
    with _cli_errors():
        root = create_project(_resolve_dir(location), name)
        registry = _open_registry()
        try:
            ProjectRegistry(registry).record_open(root)
        finally:
            registry.close()
    _emit_message(f"[green]Created project {root}.[/green]")


@cli.command("open")
@click.argument("path", type=click.Path(path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit the overview as JSON.")
def open_command(path: str, json_output: bool) -> None:
    """Open the project at PATH and record it as recently used."""
    json_enabled = _json_enabled(json_output)
    with _cli_errors(json_enabled):
        registry = _open_registry()
        try:
            session = open_project(
                _resolve_dir(path),
                ProjectRegistry(registry),
                repository=_metadata_repository(),
            )
        finally:
            registry.close()
    _emit_overview(session, json_output=json_enabled)


@cli.command()
@click.option("--limit", type=int, default=None, help="Maximum number of projects to list.")
@click.option("--json", "json_output", is_flag=True, help="Emit the list as JSON.")
def recent(limit: Optional[int], json_output: bool) -> None:
    """List recently opened projects, newest first."""
    json_enabled = _json_enabled(json_output)
    effective_limit = limit if limit is not None else _state().config.registry.recent_limit
    with _cli_errors(json_enabled):
        registry = _open_registry()
        try:
            entries = ProjectRegistry(registry).list_recent(effective_limit)
        finally:
            registry.close()

    if json_enabled:
        console.print_json(
            data=[
                {
                    "name": entry.name,
                    "path": entry.path,
                    "created_at": entry.created_at.isoformat(),
                    "last_opened_at": entry.last_opened_at.isoformat(),
                }
                for entry in entries
            ]
        )
        return

    if not entries:
        _emit_message("[yellow]No recent projects.[/yellow]")
        return

    table = Table(title="Recent projects")
    table.add_column("Name", style="bold")
    table.add_column("Path")
    table.add_column("Last opened")
    for entry in entries:
        table.add_row(entry.name, entry.path, entry.last_opened_at.strftime("%Y-%m-%d %H:%M"))
    _emit_message(table)


@cli.command()
@click.argument("path", type=click.Path(path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit the overview as JSON.")
def reopen(path: str, json_output: bool) -> None:
    """Reopen a recent project, forgetting it if the folder has disappeared."""
    json_enabled = _json_enabled(json_output)
    with _cli_errors(json_enabled):
        registry = _open_registry()
        try:
            root = ProjectRegistry(registry).reopen(_resolve_dir(path))
        finally:
            registry.close()
        session = open_project(root, repository=_metadata_repository())
    _emit_overview(session, json_output=json_enabled)


@cli.command()
@click.argument("path", type=click.Path(path_type=str))
def forget(path: str) -> None:
    """Remove PATH from the recent-project list."""
    with _cli_errors():
        registry = _open_registry()
        try:
            removed = ProjectRegistry(registry).forget(_resolve_dir(path))
        finally:
            registry.close()
    if removed:
        _emit_message(f"[green]Forgot {path}.[/green]")
    else:
        _emit_message(f"[yellow]{path} is not in the recent-project list.[/yellow]", mode="warning")


# Scripts --------------------------------------------------------------------


@cli.group()
def scripts() -> None:
    """Browse and create `.do` scripts in a project."""


@scripts.command("list")
@click.argument("project", type=click.Path(path_type=str))
def scripts_list(project: str) -> None:
    """List the do-scripts in PROJECT."""
    with _cli_errors():
        root = validate_project_dir(_resolve_dir(project))
        found = list_scripts(root)
    if not found:
        _emit_message("[yellow]No .do scripts found.[/yellow]")
        return
    for script in found:
        _emit_message(script.name)


@scripts.command("new")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("name")
def scripts_new(project: str, name: str) -> None:
    """Create an empty do-script NAME in PROJECT."""
    with _cli_errors():
        root = validate_project_dir(_resolve_dir(project))
        path = create_script(root, name)
    _emit_message(f"[green]Created {path}.[/green]")


# Data files -----------------------------------------------------------------


@cli.group()
def data() -> None:
    """Label and tag the data files used by a project."""


@data.command("add")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("label")
@click.argument("path")
@click.option("--tag", "tags", multiple=True, help="Tag to attach (repeatable).")
def data_add(project: str, label: str, path: str, tags: tuple[str, ...]) -> None:
    """Add a data file at PATH to PROJECT under LABEL."""
    with _cli_errors():
        session = _load_project(project)
        record = session.store.add_data_file(label, path, tags)
    _emit_message(f"[green]Added {record.label} ({record.id}).[/green]")


@data.command("list")
@click.argument("project", type=click.Path(path_type=str))
@click.option("--tag", "tags", multiple=True, help="Only files carrying any of these tags.")
@click.option("--search", "text", default="", help="Substring matched against label and path.")
@click.option("--json", "json_output", is_flag=True, help="Emit the data files as JSON.")
def data_list(project: str, tags: tuple[str, ...], text: str, json_output: bool) -> None:
    """List the data files of PROJECT."""
    json_enabled = _json_enabled(json_output)
    with _cli_errors(json_enabled):
        session = _load_project(project)
        records = session.store.filter_data_files(tags, text)
    if json_enabled:
        console.print_json(data=[record.to_json_dict() for record in records])
        return
    if not records:
        _emit_message("[yellow]No matching data files.[/yellow]")
        return
    _emit_message(_data_file_table(records))


@data.command("find")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("tag")
@click.option("--json", "json_output", is_flag=True, help="Emit the data files as JSON.")
def data_find(project: str, tag: str, json_output: bool) -> None:
    """List the data files of PROJECT tagged with TAG."""
    json_enabled = _json_enabled(json_output)
    with _cli_errors(json_enabled):
        records = _load_project(project).store.find_by_tag(tag)
    if json_enabled:
        console.print_json(data=[record.to_json_dict() for record in records])
        return
    if not records:
        _emit_message(f"[yellow]No data files tagged '{tag}'.[/yellow]")
        return
    _emit_message(_data_file_table(records))


@data.command("update")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("file_id", type=click.UUID)
@click.option("--label", default=None, help="New label.")
@click.option("--path", "new_path", default=None, help="New data file path.")
@click.option("--tag", "tags", multiple=True, help="Replace tags with these (repeatable).")
@click.option("--clear-tags", is_flag=True, help="Remove every tag from the data file.")
def data_update(
    project: str,
    file_id: UUID,
    label: Optional[str],
    new_path: Optional[str],
    tags: tuple[str, ...],
    clear_tags: bool,
) -> None:
    """Update the label, path, or tags of data file FILE_ID."""
    if tags and clear_tags:
        raise click.UsageError("--tag cannot be combined with --clear-tags.")
    with _cli_errors():
        store = _load_project(project).store
        current = store.get_data_file(file_id)
        if current is None:
            _emit_message(f"[yellow]No data file with id {file_id}.[/yellow]", mode="warning")
            return
        new_tags: Optional[list[str]] = None
        if clear_tags:
            new_tags = []
        elif tags:
            new_tags = list(tags)
        store.update_data_file(
            file_id,
            label if label is not None else current.label,
            new_path if new_path is not None else current.path,
            new_tags,
        )
    _emit_message(f"[green]Updated {file_id}.[/green]")


@data.command("rm")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("file_id", type=click.UUID)
def data_rm(project: str, file_id: UUID) -> None:
    """Remove data file FILE_ID from PROJECT."""
    with _cli_errors():
        removed = _load_project(project).store.delete_data_file(file_id)
    if removed:
        _emit_message(f"[green]Removed {file_id}.[/green]")
    else:
        _emit_message(f"[yellow]No data file with id {file_id}.[/yellow]", mode="warning")


@data.command("tag")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("file_id", type=click.UUID)
@click.argument("tag")
def data_tag(project: str, file_id: UUID, tag: str) -> None:
    """Attach TAG to data file FILE_ID."""
    with _cli_errors():
        store = _load_project(project).store
        if store.get_data_file(file_id) is None:
            _emit_message(f"[yellow]No data file with id {file_id}.[/yellow]", mode="warning")
            return
        added = store.add_tag_to_data_file(file_id, tag)
    if added:
        _emit_message(f"[green]Tagged {file_id} with '{tag}'.[/green]")
    else:
        _emit_message(f"[yellow]{file_id} already has tag '{tag}'.[/yellow]")


@data.command("untag")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("file_id", type=click.UUID)
@click.argument("tag")
def data_untag(project: str, file_id: UUID, tag: str) -> None:
    """Detach TAG from data file FILE_ID."""
    with _cli_errors():
        removed = _load_project(project).store.remove_tag_from_data_file(file_id, tag)
    if removed:
        _emit_message(f"[green]Removed tag '{tag}' from {file_id}.[/green]")
    else:
        _emit_message(f"[yellow]{file_id} does not carry tag '{tag}'.[/yellow]", mode="warning")


@data.command("import")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("entry_id", type=int)
@click.option("--tag", "tags", multiple=True, help="Tag to attach (repeatable).")
def data_import(project: str, entry_id: int, tags: tuple[str, ...]) -> None:
    """Copy catalog entry ENTRY_ID into PROJECT as a data file."""
    with _cli_errors():
        registry = _open_registry()
        try:
            entry = DataFileCatalog(registry).get(entry_id)
        finally:
            registry.close()
        if entry is None:
            raise click.ClickException(f"No catalog entry with id {entry_id}.")
        record = _load_project(project).store.add_data_file(entry.label, entry.path, tags)
    _emit_message(f"[green]Imported {record.label} ({record.id}).[/green]")


@cli.command()
@click.argument("project", type=click.Path(path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit the tags as JSON.")
def tags(project: str, json_output: bool) -> None:
    """List every tag used in PROJECT."""
    json_enabled = _json_enabled(json_output)
    with _cli_errors(json_enabled):
        all_tags = _load_project(project).store.all_tags()
    if json_enabled:
        console.print_json(data=all_tags)
        return
    if not all_tags:
        _emit_message("[yellow]No tags defined.[/yellow]")
        return
    for tag in all_tags:
        _emit_message(tag)


# Tag categories -------------------------------------------------------------


@cli.group()
def category() -> None:
    """Group tags into named categories."""


@category.command("add")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("name")
@click.option("--tag", "tags", multiple=True, help="Tag to include (repeatable).")
def category_add(project: str, name: str, tags: tuple[str, ...]) -> None:
    """Create tag category NAME in PROJECT."""
    with _cli_errors():
        created = _load_project(project).store.add_tag_category(name, tags)
    _emit_message(f"[green]Added category {created.name} ({created.id}).[/green]")


@category.command("list")
@click.argument("project", type=click.Path(path_type=str))
@click.option("--json", "json_output", is_flag=True, help="Emit the categories as JSON.")
def category_list(project: str, json_output: bool) -> None:
    """List the tag categories of PROJECT."""
    json_enabled = _json_enabled(json_output)
    with _cli_errors(json_enabled):
        categories = _load_project(project).store.tag_categories()
    if json_enabled:
        console.print_json(data=[entry.to_json_dict() for entry in categories])
        return
    if not categories:
        _emit_message("[yellow]No tag categories.[/yellow]")
        return
    _emit_message(_category_table(categories))


@category.command("rename")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("category_id", type=click.UUID)
@click.argument("name")
def category_rename(project: str, category_id: UUID, name: str) -> None:
    """Rename tag category CATEGORY_ID to NAME."""
    with _cli_errors():
        updated = _load_project(project).store.update_tag_category(category_id, name)
    if updated is None:
        _emit_message(f"[yellow]No category with id {category_id}.[/yellow]", mode="warning")
    else:
        _emit_message(f"[green]Renamed category to {updated.name}.[/green]")


@category.command("rm")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("category_id", type=click.UUID)
def category_rm(project: str, category_id: UUID) -> None:
    """Delete tag category CATEGORY_ID."""
    with _cli_errors():
        removed = _load_project(project).store.delete_tag_category(category_id)
    if removed:
        _emit_message(f"[green]Removed category {category_id}.[/green]")
    else:
        _emit_message(f"[yellow]No category with id {category_id}.[/yellow]", mode="warning")


@category.command("add-tag")
@click.argument("project", type=click.Path(path_type=str))
@click.argument("category_id", type=click.UUID)
@click.argument("tag")
def category_add_tag(project: str, category_id: UUID, tag: str) -> None:
    """Add TAG to tag category CATEGORY_ID."""
    with _cli_errors():
        store = _load_project(project).store
        if store.get_tag_category(category_id) is None:
            _emit_message(f"[yellow]No category with id {category_id}.[/yellow]", mode="warning")
            return
        added = store.add_tag_to_category(category_id, tag)
    if added:
        _emit_message(f"[green]Added '{tag}' to category.[/green]")
    else:
        _emit_message(f"[yellow]Category already contains '{tag}'.[/yellow]")


# Tag templates --------------------------------------------------------------


@cli.group()
def template() -> None:
    """Manage the tag templates used for function-tag comments."""


@template.command("add")
@click.argument("name")
@click.option("--begin", "begin_format", required=True, help="Opening line; `$label$` is replaced.")
@click.option("--end", "end_format", required=True, help="Closing line; `$label$` is replaced.")
@click.option("--default", "make_default", is_flag=True, help="Make this the default template.")
def template_add(name: str, begin_format: str, end_format: str, make_default: bool) -> None:
    """Create tag template NAME."""
    with _cli_errors():
        registry = _open_registry()
        try:
            library = _template_library(registry)
            library.add(name, begin_format, end_format)
            if make_default:
                library.set_default(name)
        finally:
            registry.close()
    _emit_message(f"[green]Added template {name}.[/green]")


@template.command("list")
@click.option("--json", "json_output", is_flag=True, help="Emit the templates as JSON.")
def template_list(json_output: bool) -> None:
    """List tag templates; the effective default is marked."""
    json_enabled = _json_enabled(json_output)
    with _cli_errors(json_enabled):
        registry = _open_registry()
        try:
            library = _template_library(registry)
            entries = library.list()
            default = library.default()
        finally:
            registry.close()

    default_name = default.name if default is not None else None
    if json_enabled:
        console.print_json(
            data=[
                {
                    "name": entry.name,
                    "begin_format": entry.begin_format,
                    "end_format": entry.end_format,
                    "is_default": entry.name == default_name,
                }
                for entry in entries
            ]
        )
        return
    if not entries:
        _emit_message("[yellow]No tag templates.[/yellow]")
        return
    table = Table(title="Tag templates")
    table.add_column("Name", style="bold")
    table.add_column("Begin")
    table.add_column("End")
    table.add_column("Default")
    for entry in entries:
        marker = "*" if entry.name == default_name else ""
        table.add_row(entry.name, entry.begin_format, entry.end_format, marker)
    _emit_message(table)


@template.command("default")
@click.argument("name")
def template_default(name: str) -> None:
    """Make NAME the default tag template."""
    with _cli_errors():
        registry = _open_registry()
        try:
            _template_library(registry).set_default(name)
        finally:
            registry.close()
    _emit_message(f"[green]{name} is now the default template.[/green]")


@template.command("rm")
@click.argument("name")
def template_rm(name: str) -> None:
    """Delete tag template NAME."""
    with _cli_errors():
        registry = _open_registry()
        try:
            removed = TemplateLibrary(registry).remove(name)
        finally:
            registry.close()
    if removed:
        _emit_message(f"[green]Removed template {name}.[/green]")
    else:
        _emit_message(f"[yellow]No template named {name}.[/yellow]", mode="warning")


# Data file catalog ----------------------------------------------------------


@cli.group()
def catalog() -> None:
    """Keep data files that can be imported into any project."""


@catalog.command("add")
@click.argument("label")
@click.argument("path")
def catalog_add(label: str, path: str) -> None:
    """Add a data file at PATH to the catalog under LABEL."""
    with _cli_errors():
        registry = _open_registry()
        try:
            entry = DataFileCatalog(registry).add(label, path)
        finally:
            registry.close()
    _emit_message(f"[green]Cataloged {entry.label} as #{entry.id}.[/green]")


@catalog.command("list")
def catalog_list() -> None:
    """List cataloged data files."""
    with _cli_errors():
        registry = _open_registry()
        try:
            entries = DataFileCatalog(registry).list()
        finally:
            registry.close()
    if not entries:
        _emit_message("[yellow]The catalog is empty.[/yellow]")
        return
    table = Table(title="Data file catalog")
    table.add_column("#", style="dim")
    table.add_column("Label", style="bold")
    table.add_column("Path")
    for entry in entries:
        table.add_row(str(entry.id), entry.label, entry.path)
    _emit_message(table)


@catalog.command("rm")
@click.argument("entry_id", type=int)
def catalog_rm(entry_id: int) -> None:
    """Remove catalog entry ENTRY_ID."""
    with _cli_errors():
        registry = _open_registry()
        try:
            removed = DataFileCatalog(registry).remove(entry_id)
        finally:
            registry.close()
    if removed:
        _emit_message(f"[green]Removed catalog entry #{entry_id}.[/green]")
    else:
        _emit_message(f"[yellow]No catalog entry #{entry_id}.[/yellow]", mode="warning")


# Script insertion -----------------------------------------------------------


@cli.group()
def insert() -> None:
    """Insert data references and function tags into a do-script."""


@insert.command("data")
@click.argument("script", type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.argument("project", type=click.Path(path_type=str))
@click.argument("file_id", type=click.UUID)
@click.option("--position", type=int, default=None, help="Character offset (default: end).")
def insert_data(script: str, project: str, file_id: UUID, position: Optional[int]) -> None:
    """Insert a `use` statement for data file FILE_ID into SCRIPT."""
    with _cli_errors():
        record = _load_project(project).store.get_data_file(file_id)
        if record is None:
            raise click.ClickException(f"No data file with id {file_id}.")
        script_path = Path(script)
        document = DoDocument.read(script_path)
        snippet = insert_data_reference(document, record, position)
        document.write(script_path)
    _emit_message(f"[green]Inserted:[/green] {snippet.strip()}")


@insert.command("tags")
@click.argument("script", type=click.Path(exists=True, dir_okay=False, path_type=str))
@click.argument("label")
@click.option("--template", "template_name", default=None, help="Template name (default: default).")
@click.option("--position", type=int, default=None, help="Character offset (default: end).")
def insert_tags(
    script: str,
    label: str,
    template_name: Optional[str],
    position: Optional[int],
) -> None:
    """Insert the function-tag pair for LABEL into SCRIPT."""
    with _cli_errors():
        registry = _open_registry()
        try:
            chosen = resolve_template(_template_library(registry), template_name)
        finally:
            registry.close()
        script_path = Path(script)
        document = DoDocument.read(script_path)
        snippet = insert_function_tags(document, chosen, label, position)
        document.write(script_path)
    _emit_message(Syntax(snippet, "text", word_wrap=True))


# Configuration --------------------------------------------------------------


@cli.group()
def config() -> None:
    """Manage DoMate configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must be a dotted path such as 'registry.recent_limit'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=DomateConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if not line.lstrip("+-").startswith("# Last updated:")
    ]

    changed = [line for line in diff if line[:1] in "+-" and not line.startswith(("+++", "---"))]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session."""
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=DomateConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
