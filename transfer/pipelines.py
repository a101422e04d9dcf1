"""Save/load pipelines: locate -> validate -> (confirm) -> open -> read/merge -> close."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from modeload_core.confirmation import Confirmation, PromptFn, confirm
from modeload_core.constants import UNKNOWN_ID, UNKNOWN_NAME
from modeload_core.errors import SettingsParseError, StoreIOError, TypeMismatchError
from modeload_core.schemas import ToolConfig
from store.database import EngineFactory, open_engine
from store.repository import SettingsRepository, loads_strict, preview

from .config import settings_layout

logger = logging.getLogger(__name__)

CONFIRM_MESSAGE = "Are you sure Cursor is closed and you want to proceed?"


@dataclass(frozen=True)
class ManifestEntry:
    index: int
    name: str
    id: str

    def describe(self) -> str:
        return f'{self.index}. "{self.name}" ({self.id})'


@dataclass
class ExportResult:
    output_file: Path
    count: int
    manifest: list[ManifestEntry] = field(default_factory=list)
    missing: bool = False


@dataclass
class ImportResult:
    outcome: Confirmation
    count: int
    manifest: list[ManifestEntry] = field(default_factory=list)

    @property
    def written(self) -> bool:
        return self.outcome is Confirmation.CONFIRMED


def _label(record: object, field_name: str, fallback: str) -> str:
    if not isinstance(record, Mapping):
        return fallback
    value = cast(Mapping[str, object], record).get(field_name)
    if not value:
        return fallback
    return str(value)


def manifest_entries(records: Sequence[object]) -> list[ManifestEntry]:
    return [
        ManifestEntry(
            index=position,
            name=_label(record, "name", UNKNOWN_NAME),
            id=_label(record, "id", UNKNOWN_ID),
        )
        for position, record in enumerate(records, start=1)
    ]


def _log_manifest(manifest: list[ManifestEntry], level: int = logging.INFO) -> None:
    for entry in manifest:
        logger.log(level, "   %s", entry.describe())


def write_records(records: Sequence[object], output_file: str | Path, indent: int = 2) -> None:
    """Write records as pretty-printed JSON, replacing any existing file."""
    logger.info("Writing modes to %s...", output_file)
    try:
        content = json.dumps(list(records), indent=indent, ensure_ascii=False, allow_nan=False)
        Path(output_file).write_text(content, encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        raise StoreIOError(f"Failed to write file: {e}") from e


def read_records(input_file: str | Path) -> list[object]:
    """Read and parse the import file; it must hold a top-level JSON array."""
    logger.info("Reading modes from %s...", input_file)
    try:
        content = Path(input_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StoreIOError(f"Failed to read/parse JSON file: {e}") from e
    try:
        data = loads_strict(content)
    except (ValueError, RecursionError) as e:
        raise SettingsParseError(f"Failed to read/parse JSON file: {e}") from e

    if not isinstance(data, list):
        raise TypeMismatchError("JSON file must contain an array of modes")
    return cast(list[object], data)


def export_records(
    db_path: str | Path,
    output_file: str | Path,
    config: ToolConfig | None = None,
    engine_factory: EngineFactory = open_engine,
) -> ExportResult:
    """Copy the stored modes array into ``output_file``.

    The database is opened read-only and closed on every exit path.
    """
    config = config if config is not None else ToolConfig()
    logger.info("Opening Cursor database...")
    engine = engine_factory(str(db_path), True)
    try:
        logger.info("Querying for custom modes...")
        extracted = SettingsRepository(engine, settings_layout(config)).extract()
        manifest = manifest_entries(extracted.records)
        _log_manifest(manifest, logging.DEBUG)
        write_records(extracted.records, output_file, indent=config.indent)
    finally:
        engine.close()

    return ExportResult(
        output_file=Path(output_file),
        count=len(extracted.records),
        manifest=manifest,
        missing=extracted.missing,
    )


def import_records(
    db_path: str | Path,
    input_file: str | Path,
    config: ToolConfig | None = None,
    auto_confirm: bool = False,
    prompt_fn: PromptFn | None = None,
    engine_factory: EngineFactory = open_engine,
) -> ImportResult:
    """Replace the stored modes array with the contents of ``input_file``.

    The input file is parsed before the database is touched. A declined
    confirmation returns with ``Confirmation.CANCELLED`` and the database
    is never opened.
    """
    config = config if config is not None else ToolConfig()
    records = read_records(input_file)
    manifest = manifest_entries(records)
    logger.info("Found %d mode(s) to import", len(records))
    _log_manifest(manifest)

    outcome = confirm(
        CONFIRM_MESSAGE,
        auto_confirm=auto_confirm or config.auto_confirm,
        prompt_fn=prompt_fn,
    )
    if outcome is Confirmation.CANCELLED:
        logger.debug("Operation cancelled by user")
        return ImportResult(outcome=outcome, count=len(records), manifest=manifest)

    logger.info("Opening Cursor database...")
    engine = engine_factory(str(db_path), False)
    try:
        logger.info("Reading current settings...")
        SettingsRepository(engine, settings_layout(config)).merge(records)
    finally:
        engine.close()

    return ImportResult(outcome=outcome, count=len(records), manifest=manifest)


def preview_records(
    db_path: str | Path,
    config: ToolConfig | None = None,
    engine_factory: EngineFactory = open_engine,
) -> list[ManifestEntry]:
    """List stored modes without writing anything."""
    config = config if config is not None else ToolConfig()
    engine = engine_factory(str(db_path), True)
    try:
        records = preview(engine, settings_layout(config))
    finally:
        engine.close()
    return manifest_entries(records)
