from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Literal, TypeVar

from pydantic import BaseModel, Field, field_validator

from .constants import COMPOSER_STATE_KEY, CURSOR_SETTINGS_KEY, MODES_KEY


TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


class BaseSchema(BaseModel):
    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class ToolConfig(BaseSchema):
    settings_key: str = Field(default=CURSOR_SETTINGS_KEY, min_length=1)
    composer_state_key: str = Field(default=COMPOSER_STATE_KEY, min_length=1)
    records_key: str = Field(default=MODES_KEY, min_length=1)
    db_path: str | None = None
    auto_confirm: bool = False
    indent: int = Field(default=2, ge=0)


class TransferRequest(BaseSchema):
    """Validated arguments for the save and load commands."""

    command: Literal["save", "load"]
    filename: str = Field(min_length=1)
    db_path: str | None = Field(default=None, min_length=1)
    yes: bool = False

    @field_validator("filename")
    @classmethod
    def filename_is_json(cls, value: str) -> str:
        if Path(value).suffix != ".json":
            raise ValueError(f"filename must have a .json extension: {value}")
        return value
