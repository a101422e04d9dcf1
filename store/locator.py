"""
Discovery of Cursor's state.vscdb across operating systems.
"""

from __future__ import annotations

import logging
from pathlib import Path

from modeload_core.constants import DB_FILENAME
from modeload_core.errors import FormatMismatchError, StoreNotFoundError

from .database import is_valid_store

logger = logging.getLogger(__name__)

_GLOBAL_STORAGE = f"User/globalStorage/{DB_FILENAME}"

# Checked strictly in this order; the first existing path wins.
CANDIDATE_LAYOUTS: tuple[tuple[str, str], ...] = (
    ("macos", f"Library/Application Support/Cursor/{_GLOBAL_STORAGE}"),
    ("windows", f"AppData/Roaming/Cursor/{_GLOBAL_STORAGE}"),
    ("linux-xdg", f".config/Cursor/{_GLOBAL_STORAGE}"),
    ("linux-dotfile", f".cursor/{_GLOBAL_STORAGE}"),
    ("snap", f"snap/cursor/current/.config/Cursor/{_GLOBAL_STORAGE}"),
    ("local-share", f".local/share/Cursor/{_GLOBAL_STORAGE}"),
)


def candidate_paths(home: str | Path | None = None) -> list[Path]:
    root = Path(home) if home is not None else Path.home()
    return [root / relative for _, relative in CANDIDATE_LAYOUTS]


def _not_found_message(paths: list[Path]) -> str:
    listing = "\n".join(f"   • {path}" for path in paths)
    return f"""Cursor database not found in any of the standard locations:

{listing}

This could mean:
1. Cursor is not installed
2. Cursor is installed in a non-standard location
3. Cursor hasn't been run yet (database not created)

Solutions:
• Make sure Cursor is installed and has been run at least once
• Use --db-path to specify a custom database location
• Check if Cursor is installed in a different location

Example with custom path:
   modeload save modes.json --db-path "/path/to/your/state.vscdb"
"""


def locate_store(custom_path: str | Path | None = None, home: str | Path | None = None) -> Path:
    """Return the database path, either ``custom_path`` or the first existing candidate.

    Raises:
        StoreNotFoundError: If the custom path is missing, or no candidate exists.
    """
    if custom_path is not None and str(custom_path):
        path = Path(custom_path)
        if not path.exists():
            raise StoreNotFoundError(f"Custom database path not found: {custom_path}")
        return path

    paths = candidate_paths(home)
    logger.info("Searching for Cursor database...")
    for path in paths:
        logger.info("   Checking: %s", path)
        if path.exists():
            logger.info("Found Cursor database at: %s", path)
            return path

    raise StoreNotFoundError(_not_found_message(paths))


def discover_store(custom_path: str | Path | None = None, home: str | Path | None = None) -> Path:
    """Locate the database and confirm it is a SQLite file."""
    path = locate_store(custom_path, home=home)
    if not is_valid_store(path):
        raise FormatMismatchError(
            f"Database validation failed - not a valid SQLite file: {path}"
        )
    return path
