"""Error types raised while locating, reading or writing the settings store."""

from __future__ import annotations


class ModeloadError(Exception):
    """Base class for all errors reported to the user."""


class StoreNotFoundError(ModeloadError):
    """Database file or settings row could not be found."""


class FormatMismatchError(ModeloadError):
    """File exists but does not carry the SQLite header."""


class SettingsParseError(ModeloadError):
    """Stored value or input file is not valid JSON."""


class TypeMismatchError(ModeloadError):
    """JSON parsed fine but has the wrong shape."""


class StoreIOError(ModeloadError):
    """Filesystem read or write failed."""
