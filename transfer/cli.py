"""CLI for saving and loading Cursor custom modes."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from modeload_core import __version__
from modeload_core.confirmation import Confirmation
from modeload_core.errors import ModeloadError
from modeload_core.schemas import ToolConfig, TransferRequest
from store.locator import discover_store
from transfer.config import resolve_config
from transfer.logging_config import setup_logging
from transfer.pipelines import export_records, import_records, preview_records

app = typer.Typer(help="Modeload - Cursor Custom Modes Save/Load Tool")

logger = logging.getLogger(__name__)


def _fail(message: str) -> typer.Exit:
    typer.secho(f"❌ Error: {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(1)


def _validation_message(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        message = str(item.get("msg", ""))
        parts.append(message.removeprefix("Value error, "))
    return "; ".join(parts)


def _load_settings(config_path: Optional[str]) -> ToolConfig:
    try:
        return resolve_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        raise _fail(str(e))


def _validate_request(command: str, filename: str, db_path: Optional[str], yes: bool = False) -> TransferRequest:
    try:
        return TransferRequest(command=command, filename=filename, db_path=db_path, yes=yes)
    except ValidationError as e:
        raise _fail(_validation_message(e))


def _discover(db_path: Optional[str]) -> Path:
    typer.echo("🔍 Discovering Cursor database...")
    try:
        path = discover_store(db_path)
    except ModeloadError as e:
        raise _fail(str(e))
    typer.secho("✅ Found valid Cursor database\n", fg=typer.colors.GREEN)
    return path


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"🚀 Modeload v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version information",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
) -> None:
    """Save and load Cursor custom modes."""
    if verbose:
        setup_logging(logging.DEBUG)
    elif quiet:
        setup_logging(logging.WARNING)
    else:
        setup_logging()


@app.command()
def save(
    filename: str = typer.Argument(..., help="JSON file to export custom modes to"),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Use custom Cursor database location"),
    config_path: Optional[str] = typer.Option(None, "--config", help="YAML config file"),
) -> None:
    """Export custom modes to a JSON file."""
    config = _load_settings(config_path)
    request = _validate_request("save", filename, db_path or config.db_path)

    typer.echo("🚀 Modeload - Cursor Custom Modes Tool\n")
    path = _discover(request.db_path)
    typer.echo(f"📍 Database: {path}")
    typer.echo(f"📄 File: {request.filename}\n")
    typer.echo(f"💾 Exporting custom modes to {request.filename}...\n")

    try:
        result = export_records(path, request.filename, config)
    except ModeloadError as e:
        raise _fail(f"Save failed: {e}")
    except sqlite3.Error as e:
        raise _fail(f"Save failed: Database error: {e}")

    if result.missing:
        typer.secho("⚠️  No custom modes found in database", fg=typer.colors.YELLOW)
    else:
        typer.echo(f"✨ Found {result.count} mode(s)")
    for entry in result.manifest:
        typer.echo(f"   {entry.describe()}")
    typer.secho(
        f"\n🎉 Successfully saved {result.count} modes to: {result.output_file}",
        fg=typer.colors.GREEN,
    )


@app.command()
def load(
    filename: str = typer.Argument(..., help="JSON file to import custom modes from"),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Use custom Cursor database location"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip load confirmation prompt (auto-confirm)"),
    config_path: Optional[str] = typer.Option(None, "--config", help="YAML config file"),
) -> None:
    """Import custom modes from a JSON file."""
    config = _load_settings(config_path)
    request = _validate_request("load", filename, db_path or config.db_path, yes=yes)
    auto_confirm = request.yes or config.auto_confirm

    typer.echo("🚀 Modeload - Cursor Custom Modes Tool\n")
    path = _discover(request.db_path)
    typer.echo(f"📍 Database: {path}")
    typer.echo(f"📄 File: {request.filename}\n")
    typer.echo(f"📥 Importing custom modes from {request.filename}...\n")

    typer.secho("🚨 IMPORTANT WARNING:", fg=typer.colors.YELLOW)
    typer.echo("   Cursor MUST be completely closed before running this command!")
    typer.echo("   If Cursor is running, it may cache the old modes and ignore changes.")
    typer.echo("   Please close all Cursor windows and processes before continuing.\n")
    if auto_confirm:
        typer.echo("⚡ Skipping confirmation (auto-confirm enabled)\n")

    try:
        result = import_records(path, request.filename, config, auto_confirm=auto_confirm)
    except ModeloadError as e:
        raise _fail(f"Load failed: {e}")
    except sqlite3.Error as e:
        raise _fail(f"Load failed: Database error: {e}")

    if result.outcome is Confirmation.CANCELLED:
        typer.secho("❌ Operation cancelled by user", fg=typer.colors.YELLOW)
        return

    typer.secho(
        f"\n🎉 Successfully loaded {result.count} modes into Cursor database!",
        fg=typer.colors.GREEN,
    )
    typer.echo("\n⚠️  Important: Restart Cursor to see the changes")


@app.command()
def show(
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Use custom Cursor database location"),
    config_path: Optional[str] = typer.Option(None, "--config", help="YAML config file"),
) -> None:
    """List stored custom modes without writing anything."""
    config = _load_settings(config_path)
    path = _discover(db_path or config.db_path)

    try:
        manifest = preview_records(path, config)
    except ModeloadError as e:
        raise _fail(f"Preview failed: {e}")
    except sqlite3.Error as e:
        raise _fail(f"Preview failed: Database error: {e}")

    if not manifest:
        typer.secho("No custom modes found.", fg=typer.colors.YELLOW)
        return
    typer.secho(f"\n📋 {len(manifest)} mode(s):\n", fg=typer.colors.BLUE)
    for entry in manifest:
        typer.echo(f"   {entry.describe()}")


@app.command()
def locate(
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Use custom Cursor database location"),
    config_path: Optional[str] = typer.Option(None, "--config", help="YAML config file"),
) -> None:
    """Find the Cursor database and print its location."""
    config = _load_settings(config_path)
    path = _discover(db_path or config.db_path)
    typer.echo(f"📍 Database location: {path}")


if __name__ == "__main__":
    app()
