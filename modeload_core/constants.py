"""Keys used by Cursor to persist custom modes."""

from __future__ import annotations

# ItemTable key holding the user settings blob (JSON object)
CURSOR_SETTINGS_KEY = (
    "src.vs.platform.reactivestorage.browser."
    "reactiveStorageServiceImpl.persistentStorage.applicationUser"
)

COMPOSER_STATE_KEY = "composerState"

# May change as Cursor versions update.
MODES_KEY = "modes4"

ITEM_TABLE = "ItemTable"

DB_FILENAME = "state.vscdb"

UNKNOWN_NAME = "Unknown"
UNKNOWN_ID = "unknown"
