"""CLI for file-handling."""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import FileHandlingSettings, load_settings
from .errors import ConfigError, ContainerNameError
from .paths import (
    build_id_sharded_key,
    build_plain_key,
    build_timestamp_sharded_key,
)
from .results import RepositoryResult
from .storage import FileManager, LinkingFileManager, make_file_manager


app = typer.Typer(help="""\
Store, fetch and delete files on disk, in memory or in Azure blob storage
using the same container/key layout everywhere.""")

key_app = typer.Typer(help="Print the storage key for a file without touching storage")
app.add_typer(key_app, name="key")

link_app = typer.Typer(help="Issue pre-signed upload/download links (azure only)")
app.add_typer(link_app, name="link")

console = Console()

_state = {"config": None}


@app.callback()
def main_callback(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a file-handling YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Global options."""
    _state["config"] = config
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _load_settings() -> FileHandlingSettings:
    try:
        return load_settings(_state["config"])
    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)


def _get_manager() -> FileManager:
    try:
        return make_file_manager(_load_settings())
    except (ConfigError, NotImplementedError) as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        console.print(f"[red]✗[/red] Invalid date '{value}' (expected ISO format, e.g. 2018-07-19T15:05:20)")
        raise typer.Exit(1)


def _check(result: RepositoryResult):
    """Print a failed result and exit, or return the value."""
    if not result.is_success:
        console.print(f"[red]✗[/red] {result.error.kind.value}: {result.error.message}")
        raise typer.Exit(1)
    return result.value


@key_app.command(name="plain")
def key_plain(
    container: str = typer.Argument(..., help="Container name"),
    name: str = typer.Argument(..., help="File name"),
):
    """Key of a file stored directly below its container."""
    try:
        console.print(build_plain_key(container, name), highlight=False, markup=False, soft_wrap=True)
    except ContainerNameError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)


@key_app.command(name="id")
def key_id(
    container: str = typer.Argument(..., help="Container name"),
    file_id: str = typer.Argument(..., help="File UUID"),
    name: Optional[str] = typer.Argument(None, help="File name"),
):
    """Key of a file sharded by its id."""
    try:
        console.print(build_id_sharded_key(container, file_id, name), highlight=False, markup=False, soft_wrap=True)
    except ValueError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)


@key_app.command(name="timestamp")
def key_timestamp(
    date: str = typer.Argument(..., help="File timestamp (ISO format)"),
    name: Optional[str] = typer.Argument(None, help="File name"),
):
    """Date hierarchical key, relative to the container."""
    console.print(build_timestamp_sharded_key(_parse_date(date), name), highlight=False, markup=False, soft_wrap=True)


@app.command()
def put(
    container: str = typer.Argument(..., help="Container name"),
    name: str = typer.Argument(..., help="File name"),
    source: Path = typer.Argument(..., help="Local file to upload"),
    file_id: Optional[str] = typer.Option(None, "--id", help="Store sharded by this file UUID"),
    date: Optional[str] = typer.Option(None, "--date", help="Store below this timestamp (ISO format)"),
    new_id: bool = typer.Option(False, "--new-id", help="Generate a new file UUID"),
):
    """Store a local file."""
    if not source.is_file():
        console.print(f"[red]✗[/red] File not found: {source}")
        raise typer.Exit(1)
    if new_id:
        file_id = str(uuid.uuid4())

    manager = _get_manager()
    with source.open("rb") as f:
        key = _check(manager.save_file(container, name, f, file_id=file_id, file_date=_parse_date(date)))

    console.print(f"[green]✓[/green] Stored {source} as [bold]{key}[/bold]", highlight=False)
    if file_id:
        console.print(f"  file id: {file_id}", highlight=False)


@app.command()
def get(
    container: str = typer.Argument(..., help="Container name"),
    name: str = typer.Argument(..., help="File name"),
    dest: Path = typer.Argument(..., help="Where to write the file"),
    file_id: Optional[str] = typer.Option(None, "--id", help="File UUID"),
    date: Optional[str] = typer.Option(None, "--date", help="File timestamp (ISO format)"),
):
    """Fetch a stored file."""
    manager = _get_manager()
    data = _check(manager.get_file(container, name, file_id=file_id, file_date=_parse_date(date)))
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    console.print(f"[green]✓[/green] Wrote {len(data)} bytes to {dest}", highlight=False)


@app.command()
def delete(
    container: str = typer.Argument(..., help="Container name"),
    name: str = typer.Argument(..., help="File name"),
    file_id: Optional[str] = typer.Option(None, "--id", help="File UUID"),
    date: Optional[str] = typer.Option(None, "--date", help="File timestamp (ISO format)"),
):
    """Delete a stored file."""
    manager = _get_manager()
    _check(manager.delete_file(container, name, file_id=file_id, file_date=_parse_date(date)))
    console.print(f"[green]✓[/green] Deleted {name}", highlight=False)


@app.command()
def exists(
    container: str = typer.Argument(..., help="Container name"),
    name: str = typer.Argument(..., help="File name"),
    file_id: Optional[str] = typer.Option(None, "--id", help="File UUID"),
    date: Optional[str] = typer.Option(None, "--date", help="File timestamp (ISO format)"),
):
    """Check whether a file is stored. Exits with 1 when it is not."""
    manager = _get_manager()
    found = _check(manager.file_exists(container, name, file_id=file_id, file_date=_parse_date(date)))
    if found:
        console.print("[green]exists[/green]")
    else:
        console.print("[yellow]missing[/yellow]")
        raise typer.Exit(1)


def _require_linking(manager: FileManager) -> LinkingFileManager:
    if not isinstance(manager, LinkingFileManager):
        console.print("[red]✗[/red] Signed links require the azure provider")
        raise typer.Exit(1)
    return manager


@link_app.command(name="upload")
def link_upload(
    container: str = typer.Argument(..., help="Container name"),
    name: str = typer.Argument(..., help="File name"),
    file_id: Optional[str] = typer.Option(None, "--id", help="File UUID"),
    date: Optional[str] = typer.Option(None, "--date", help="File timestamp (ISO format)"),
    minutes: Optional[int] = typer.Option(None, "--minutes", help="Link lifetime (default from config)"),
):
    """Pre-signed URL for uploading a file."""
    settings = _load_settings()
    manager = _require_linking(_get_manager())
    link = _check(manager.get_sas_upload_link(
        container, name, file_id=file_id, file_date=_parse_date(date),
        valid_for_minutes=minutes if minutes is not None else settings.link_validity_minutes,
    ))
    _print_link(link.upload_link, link.valid_until)


@link_app.command(name="download")
def link_download(
    container: str = typer.Argument(..., help="Container name"),
    name: str = typer.Argument(..., help="File name"),
    file_id: Optional[str] = typer.Option(None, "--id", help="File UUID"),
    date: Optional[str] = typer.Option(None, "--date", help="File timestamp (ISO format)"),
    minutes: Optional[int] = typer.Option(None, "--minutes", help="Link lifetime (default from config)"),
    friendly_name: Optional[str] = typer.Option(None, "--friendly-name", help="File name offered to browsers"),
):
    """Pre-signed URL for downloading a file."""
    settings = _load_settings()
    manager = _require_linking(_get_manager())
    link = _check(manager.get_sas_download_link(
        container, name, file_id=file_id, file_date=_parse_date(date),
        valid_for_minutes=minutes if minutes is not None else settings.link_validity_minutes,
        friendly_file_name=friendly_name,
    ))
    _print_link(link.download_link, link.valid_until)


def _print_link(url: str, valid_until: datetime) -> None:
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("link", url)
    table.add_row("valid until", valid_until.isoformat())
    console.print(table)


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
