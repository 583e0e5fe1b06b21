"""Command line interface for the Dirdeck client."""

from __future__ import annotations

import asyncio
import difflib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, NoReturn, Optional, Sequence, TypeVar

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from dirdeck.app import Session, open_session
from dirdeck.config import (
    STAMP_PREFIX,
    ConfigError,
    ConfigManager,
    DirdeckConfig,
    flatten_for_env,
)
from dirdeck.config.models import LoggingSettings
from dirdeck.controllers import ConfirmGate
from dirdeck.errors import BackendError, DirdeckError, TransportError, ValidationError
from dirdeck.formatting import file_icon, format_entry_size
from dirdeck.models import BreadcrumbSegment, FileEntry, TransferKind, UploadBlob
from dirdeck.notifications import ConsoleSink, NotificationSink, RecordingSink, Severity
from dirdeck.preview import PreviewContent, PreviewKind
from dirdeck.remote.results import Failure, ServiceResult
from dirdeck.state.path import basename, normalize_path, parent_of

console = Console()
err_console = Console(stderr=True)

T = TypeVar("T")


@dataclass(slots=True)
class CLIState:
    """Options collected by the root command group.

    Attributes:
        base_url: Backend URL override from ``--base-url``.
        json_output: Whether commands emit JSON instead of tables.
        quiet: Whether info and success notifications are suppressed.
        config: Lazily loaded effective configuration.
    """

    base_url: Optional[str] = None
    json_output: bool = False
    quiet: Optional[bool] = None
    config: Optional[DirdeckConfig] = field(default=None)

    def load_config(self) -> DirdeckConfig:
        if self.config is None:
            overrides = {"server.base_url": self.base_url} if self.base_url else None
            try:
                self.config = ConfigManager().load(cli_overrides=overrides)
            except ConfigError as exc:
                _handle_cli_error(
                    str(exc), code="config_error", json_output=self.json_output, original=exc
                )
            _configure_logging(self.config.logging)
        return self.config

    @property
    def quiet_enabled(self) -> bool:
        if self.quiet is not None:
            return self.quiet
        return self.load_config().cli.quiet_default


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> NoReturn:
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


def _error_code(error: DirdeckError) -> str:
    if isinstance(error, ValidationError):
        return "validation_error"
    if isinstance(error, BackendError):
        return "backend_error"
    if isinstance(error, TransportError):
        return "transport_error"
    return "client_error"


def _configure_logging(settings: LoggingSettings) -> None:
    """Route log records through rich, plus an optional log file."""
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    handlers: list[logging.Handler] = [
        RichHandler(console=err_console, show_path=False, rich_tracebacks=False)
    ]
    if settings.file:
        log_path = Path(settings.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        handlers.append(file_handler)
    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)


def _run_session(
    state: CLIState,
    workflow: Callable[[Session, NotificationSink], Awaitable[T]],
    *,
    confirm: Optional[ConfirmGate] = None,
) -> tuple[T, NotificationSink]:
    """Open a session, run ``workflow`` to completion, and return its value with the sink."""
    config = state.load_config()
    sink: NotificationSink
    if state.json_output:
        sink = RecordingSink()
    else:
        sink = ConsoleSink(console, quiet=state.quiet_enabled)

    async def _main() -> T:
        async with open_session(config, notifications=sink, confirm=confirm) as session:
            return await workflow(session, sink)

    return asyncio.run(_main()), sink


def _finish(
    state: CLIState,
    result: Optional[ServiceResult[Any]],
    sink: NotificationSink,
    payload: Optional[dict[str, Any]] = None,
) -> None:
    """Emit the JSON payload for ``result`` and exit non-zero on failure."""
    notifications = sink.as_payload() if isinstance(sink, RecordingSink) else []
    if result is not None and not result.ok:
        if state.json_output:
            console.print_json(
                data={
                    "error": {"code": _error_code(result.error), "message": result.message},
                    "notifications": notifications,
                }
            )
        raise SystemExit(1)
    if state.json_output:
        body = dict(payload or {})
        body["notifications"] = notifications
        console.print_json(data=body)


def _entry_payload(entry: FileEntry) -> dict[str, Any]:
    return entry.model_dump(mode="json")


def _breadcrumb_text(breadcrumb: Sequence[BreadcrumbSegment]) -> Text:
    return Text(" / ".join(segment.label for segment in breadcrumb), style="bold")


def _render_entries(entries: Sequence[FileEntry], breadcrumb: Sequence[BreadcrumbSegment]) -> None:
    table = Table(title=_breadcrumb_text(breadcrumb), show_lines=False)
    table.add_column("", no_wrap=True)
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    for entry in entries:
        table.add_row(
            file_icon(entry.name, entry.is_dir),
            Text(entry.name),
            format_entry_size(entry.size, entry.is_dir),
            Text(entry.modified),
        )
    if not entries:
        console.print(_breadcrumb_text(breadcrumb))
        console.print("[dim]Folder is empty.[/dim]")
        return
    console.print(table)


async def _select_sources(
    session: Session, sink: NotificationSink, paths: Sequence[str]
) -> Optional[Failure]:
    """Load the shared parent of ``paths`` and select each of them."""
    normalized = [normalize_path(path) for path in paths]
    parents = {parent_of(path) for path in normalized}
    if len(parents) != 1:
        message = "All paths must share the same parent directory"
        sink.notify(message, Severity.WARNING)
        return Failure(ValidationError(message))

    result = await session.directory.enter(parents.pop())
    if not result.ok:
        return result

    listing = session.directory.listing
    for path in normalized:
        if listing.find(path) is None:
            message = f"{path} was not found"
            sink.notify(message, Severity.WARNING)
            return Failure(ValidationError(message))
        if not session.state.selection.is_selected(path):
            session.state.selection.toggle(path)
    return None


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="dirdeck")
@click.option("--base-url", type=str, help="Override the backend URL for this invocation.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of tables.")
@click.option("--quiet/--no-quiet", default=None, help="Hide info and success notifications.")
@click.pass_context
def cli(
    ctx: click.Context, base_url: Optional[str], json_output: bool, quiet: Optional[bool]
) -> None:
    """Dirdeck browses and manages files on a remote storage server.

    Args:
        ctx: Click context carrying shared options.
        base_url: Optional backend URL override.
        json_output: Whether to emit JSON payloads.
        quiet: Explicit quiet-mode override.
    """
    ctx.obj = CLIState(base_url=base_url, json_output=json_output, quiet=quiet)


@cli.command("ls")
@click.argument("path", default="")
@click.option(
    "--filter", "query", type=str, default="", help="Only show names containing this text."
)
@click.pass_obj
def list_command(state: CLIState, path: str, query: str) -> None:
    """List the contents of PATH (the storage root by default).

    Args:
        state: Shared CLI options.
        path: Directory to list.
        query: Case-insensitive name filter.
    """

    async def _workflow(session: Session, _: NotificationSink):
        result = await session.directory.enter(path)
        return result, session.directory.filter(query), session.directory.breadcrumb

    (result, entries, breadcrumb), sink = _run_session(state, _workflow)
    if result.ok and not state.json_output:
        _render_entries(entries, breadcrumb)
    _finish(
        state,
        result,
        sink,
        {
            "path": normalize_path(path),
            "breadcrumb": [segment.model_dump() for segment in breadcrumb],
            "items": [_entry_payload(entry) for entry in entries],
        },
    )


@cli.command("tree")
@click.pass_obj
def tree_command(state: CLIState) -> None:
    """List every folder that can receive copied or moved items.

    Args:
        state: Shared CLI options.
    """

    async def _workflow(session: Session, sink: NotificationSink):
        result = await session.batch.list_destinations()
        if not result.ok:
            sink.notify(f"Failed to load folders: {result.message}", Severity.ERROR)
        return result

    result, sink = _run_session(state, _workflow)
    choices = result.value if result.ok else []
    if result.ok and not state.json_output:
        for choice in choices:
            console.print(Text(choice.label))
    _finish(state, result, sink, {"folders": [choice.model_dump() for choice in choices]})


@cli.command("mkdir")
@click.argument("name")
@click.option("--in", "parent", default="", help="Directory to create the folder in.")
@click.pass_obj
def mkdir_command(state: CLIState, name: str, parent: str) -> None:
    """Create folder NAME inside a directory.

    Args:
        state: Shared CLI options.
        name: Folder name to create.
        parent: Directory receiving the new folder.
    """

    async def _workflow(session: Session, _: NotificationSink):
        loaded = await session.directory.enter(parent)
        if not loaded.ok:
            return loaded
        return await session.directory.create_folder(name)

    result, sink = _run_session(state, _workflow)
    _finish(state, result, sink, {"parent": normalize_path(parent), "name": name.strip()})


@cli.command("upload")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--to", "destination", default="", help="Directory receiving the files.")
@click.pass_obj
def upload_command(state: CLIState, files: tuple[Path, ...], destination: str) -> None:
    """Upload local FILES into a remote directory.

    Args:
        state: Shared CLI options.
        files: Local files to send.
        destination: Remote directory receiving the files.
    """
    try:
        blobs = [UploadBlob.from_path(path) for path in files]
    except OSError as exc:
        _handle_cli_error(
            f"Unable to read upload source: {exc}",
            code="io_error",
            json_output=state.json_output,
            original=exc,
        )

    async def _workflow(session: Session, _: NotificationSink):
        loaded = await session.directory.enter(destination)
        if not loaded.ok:
            return loaded
        return await session.directory.upload(blobs)

    result, sink = _run_session(state, _workflow)
    _finish(
        state,
        result,
        sink,
        {"destination": normalize_path(destination), "files": [blob.name for blob in blobs]},
    )


@cli.command("rm")
@click.argument("paths", nargs=-1, required=True)
@click.option("-y", "--yes", is_flag=True, help="Delete without asking for confirmation.")
@click.pass_obj
def remove_command(state: CLIState, paths: tuple[str, ...], yes: bool) -> None:
    """Delete PATHS (files or folders sharing one parent directory).

    Args:
        state: Shared CLI options.
        paths: Remote paths to delete.
        yes: Skip the confirmation prompt.
    """
    skip_prompt = yes or not state.load_config().cli.confirm_deletes

    def _gate(count: int) -> bool:
        if skip_prompt:
            return True
        return click.confirm(f"Delete {count} item(s)?", default=False, err=True)

    async def _workflow(session: Session, sink: NotificationSink):
        failure = await _select_sources(session, sink, paths)
        if failure is not None:
            return failure
        return await session.batch.delete_selected()

    result, sink = _run_session(state, _workflow, confirm=_gate)
    if result is None:
        if not state.json_output:
            console.print("[yellow]Deletion cancelled; nothing was removed.[/yellow]")
        _finish(state, None, sink, {"cancelled": True})
        return
    payload = result.value.model_dump(mode="json") if result.ok else None
    _finish(state, result, sink, payload)


def _transfer(
    state: CLIState, action: TransferKind, paths: Sequence[str], destination: str
) -> None:
    target = normalize_path(destination)

    async def _workflow(session: Session, sink: NotificationSink):
        failure = await _select_sources(session, sink, paths)
        if failure is not None:
            return failure
        opened = await session.batch.open_destination_picker(action)
        if opened is None or not opened.ok:
            return opened
        if opened.value.choose(target) is None:
            message = f"{target or '/'} is not an available destination folder"
            sink.notify(message, Severity.WARNING)
            session.batch.cancel_destination()
            return Failure(ValidationError(message))
        return await session.batch.confirm_picker()

    result, sink = _run_session(state, _workflow)
    payload = result.value.model_dump(mode="json") if result is not None and result.ok else None
    _finish(state, result, sink, payload)


@cli.command("cp")
@click.argument("paths", nargs=-1, required=True)
@click.option("--to", "destination", required=True, help="Destination folder ('' for the root).")
@click.pass_obj
def copy_command(state: CLIState, paths: tuple[str, ...], destination: str) -> None:
    """Copy PATHS into a destination folder.

    Args:
        state: Shared CLI options.
        paths: Remote paths sharing one parent directory.
        destination: Folder receiving the copies.
    """
    _transfer(state, "copy", paths, destination)


@cli.command("mv")
@click.argument("paths", nargs=-1, required=True)
@click.option("--to", "destination", required=True, help="Destination folder ('' for the root).")
@click.pass_obj
def move_command(state: CLIState, paths: tuple[str, ...], destination: str) -> None:
    """Move PATHS into a destination folder.

    Args:
        state: Shared CLI options.
        paths: Remote paths sharing one parent directory.
        destination: Folder receiving the items.
    """
    _transfer(state, "move", paths, destination)


def _preview_payload(content: PreviewContent) -> dict[str, Any]:
    return {
        "name": content.name,
        "kind": content.kind.value,
        "media_type": content.media_type,
        "url": content.url,
        "text": content.text,
        "escaped_text": content.escaped_text,
        "message": content.message,
    }


@cli.command("preview")
@click.argument("path")
@click.pass_obj
def preview_command(state: CLIState, path: str) -> None:
    """Show a preview of the file at PATH.

    Args:
        state: Shared CLI options.
        path: Remote file to preview.
    """

    async def _workflow(session: Session, _: NotificationSink):
        return await session.preview.open(path)

    result, sink = _run_session(state, _workflow)
    if result.ok and not state.json_output:
        content = result.value
        console.rule(Text(content.name))
        if content.kind is PreviewKind.TEXT:
            console.print(Text(content.text or ""))
        elif content.kind is PreviewKind.UNSUPPORTED:
            console.print(Text(content.message or "", style="yellow"))
        else:
            label = content.media_type or content.kind.value
            console.print(Text(f"{label}: {content.url}"))
    _finish(state, result, sink, _preview_payload(result.value) if result.ok else None)


@cli.command("get")
@click.argument("path")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Local file to write (defaults to the remote file name).",
)
@click.pass_obj
def get_command(state: CLIState, path: str, output: Optional[Path]) -> None:
    """Download the file at PATH.

    Args:
        state: Shared CLI options.
        path: Remote file to download.
        output: Local destination file.
    """
    target = output or Path(basename(path))

    async def _workflow(session: Session, _: NotificationSink):
        return await session.directory.download(path, target)

    result, sink = _run_session(state, _workflow)
    _finish(state, result, sink, {"path": normalize_path(path), "output": str(target)})


@cli.command("info")
@click.argument("path")
@click.pass_obj
def info_command(state: CLIState, path: str) -> None:
    """Show metadata for the entry at PATH.

    Args:
        state: Shared CLI options.
        path: Remote file or folder.
    """

    async def _workflow(session: Session, _: NotificationSink):
        return await session.directory.info(path)

    result, sink = _run_session(state, _workflow)
    if result.ok and not state.json_output:
        info = result.value
        table = Table(show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Name", Text(info.name))
        table.add_row("Path", Text(info.path))
        table.add_row("Type", "folder" if info.is_dir else (info.mime_type or "file"))
        table.add_row("Size", format_entry_size(info.size, info.is_dir))
        table.add_row("Modified", Text(info.modified))
        table.add_row("Created", Text(info.created or "-"))
        console.print(table)
    _finish(state, result, sink, result.value.model_dump(mode="json") if result.ok else None)


@cli.group()
def config() -> None:
    """Manage Dirdeck configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore DIRDECK__ environment variables.")
@click.option(
    "--env",
    "as_env",
    is_flag=True,
    help="Print the settings as DIRDECK__ environment assignments instead of YAML.",
)
def config_view(no_env: bool, as_env: bool) -> None:
    """Print the effective configuration as YAML, creating the file on first use.

    Args:
        no_env: If True, ignore environment-derived overrides.
        as_env: If True, print one ``KEY=value`` line per setting.
    """
    manager = ConfigManager()
    try:
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_env:
        for key, value in flatten_for_env(loaded).items():
            console.print(Text(f"{key}={value}"), soft_wrap=True)
        return

    console.print(Text(f"# {manager.config_path}", style="dim"))
    rendered = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(rendered, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to store at KEY.")
def config_set(key: str, value: str) -> None:
    """Store VALUE at the dotted KEY (for example ``server.base_url``) and show the diff.

    Raises:
        click.ClickException: If the value cannot be parsed or fails validation.
    """
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must be a dotted path such as 'server.base_url'.")
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text().splitlines()
    try:
        manager.set_value(segments, parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    after = manager.read_text().splitlines()

    changed = [
        line
        for line in difflib.unified_diff(
            before, after, "config.yaml (before)", "config.yaml (after)", lineterm=""
        )
        if not line.startswith((f"-{STAMP_PREFIX}", f"+{STAMP_PREFIX}"))
    ]
    if not any(line[:1] in "+-" and line[:3] not in ("+++", "---") for line in changed):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return
    console.print(Syntax("\n".join(changed), "diff", word_wrap=False))
    console.print(Text(f"Updated {'.'.join(segments)}.", style="green"))


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in $EDITOR and save it if the result is valid.

    Raises:
        click.ClickException: If the edited content is not a valid configuration.
    """
    manager = ConfigManager()
    manager.ensure_exists()
    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None or edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return
    try:
        manager.replace_text(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Entry point for the ``dirdeck`` console script."""
    cli()


__all__ = ["cli", "main"]
