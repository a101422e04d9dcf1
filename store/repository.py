"""
Read and structural merge of the custom modes array inside the settings blob.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import cast

from modeload_core.constants import COMPOSER_STATE_KEY, CURSOR_SETTINGS_KEY, MODES_KEY
from modeload_core.errors import SettingsParseError, StoreNotFoundError, TypeMismatchError

from .database import KeyValueEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettingsLayout:
    """Where the records live: ``settings[key][composer_state_key][records_key]``."""

    key: str = CURSOR_SETTINGS_KEY
    composer_state_key: str = COMPOSER_STATE_KEY
    records_key: str = MODES_KEY

    @property
    def records_path(self) -> str:
        return f"{self.composer_state_key}.{self.records_key}"


@dataclass
class ExtractResult:
    records: list[object] = field(default_factory=list)
    # True when the nested array was absent; not an error.
    missing: bool = False


def _reject_constant(token: str) -> object:
    raise ValueError(f"{token} is not valid JSON")


def loads_strict(text: str) -> object:
    """Parse JSON the way a browser would: NaN and Infinity are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


def _parse_settings(raw: str) -> object:
    try:
        return loads_strict(raw)
    except (ValueError, RecursionError) as e:
        raise SettingsParseError(f"Failed to parse settings JSON: {e}") from e


def _find_records(settings: object, layout: SettingsLayout) -> list[object] | None:
    if not isinstance(settings, Mapping):
        return None
    composer_state = cast(Mapping[str, object], settings).get(layout.composer_state_key)
    if not isinstance(composer_state, Mapping):
        return None
    records = cast(Mapping[str, object], composer_state).get(layout.records_key)
    if not isinstance(records, list):
        return None
    return cast(list[object], records)


class SettingsRepository:
    """Single-key access to the settings row.

    The repository never opens or closes ``engine``; whoever created the
    engine owns its lifetime.
    """

    def __init__(self, engine: KeyValueEngine, layout: SettingsLayout | None = None) -> None:
        self.engine: KeyValueEngine = engine
        self.layout: SettingsLayout = layout if layout is not None else SettingsLayout()

    def _load(self) -> object:
        raw = self.engine.get(self.layout.key)
        if raw is None:
            raise StoreNotFoundError(f"Settings not found in database. Key: {self.layout.key}")
        return _parse_settings(raw)

    def extract(self) -> ExtractResult:
        settings = self._load()
        records = _find_records(settings, self.layout)
        if records is None:
            logger.debug(
                "No custom modes found in database (%s is absent). "
                "No custom modes may have been created yet, this Cursor version may not "
                "support them, or the database structure has changed.",
                self.layout.records_path,
            )
            return ExtractResult(records=[], missing=True)
        logger.debug("Found %d mode(s)", len(records))
        return ExtractResult(records=list(records), missing=False)

    def merge(self, records: Sequence[object]) -> dict[str, object]:
        """Replace the nested records array, leaving every sibling untouched.

        Returns the updated settings object that was written.
        """
        settings = self._load()
        if not isinstance(settings, dict):
            raise TypeMismatchError(
                f"Stored settings must be a JSON object, got {type(settings).__name__}"
            )
        updated = cast(dict[str, object], settings)

        composer_state = updated.get(self.layout.composer_state_key)
        if not composer_state:
            composer_state = {}
            updated[self.layout.composer_state_key] = composer_state
        if not isinstance(composer_state, dict):
            raise TypeMismatchError(
                f"{self.layout.composer_state_key} must be a JSON object, "
                f"got {type(composer_state).__name__}"
            )
        cast(dict[str, object], composer_state)[self.layout.records_key] = list(records)

        logger.info("Writing updated settings to database...")
        try:
            payload = json.dumps(
                updated, ensure_ascii=False, separators=(",", ":"), allow_nan=False
            )
        except (TypeError, ValueError, RecursionError) as e:
            raise TypeMismatchError(f"Modes cannot be stored as JSON: {e}") from e
        self.engine.set(self.layout.key, payload)
        return updated


def preview(engine: KeyValueEngine, layout: SettingsLayout | None = None) -> list[object]:
    """Return the stored records without failing on a missing row or array."""
    layout = layout if layout is not None else SettingsLayout()
    raw = engine.get(layout.key)
    if raw is None:
        return []
    records = _find_records(_parse_settings(raw), layout)
    return list(records) if records is not None else []
