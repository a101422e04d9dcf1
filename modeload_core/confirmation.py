"""Interactive yes/no gate run before overwriting the settings store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

import typer

logger = logging.getLogger(__name__)

PromptFn = Callable[[str], str]

_AFFIRMATIVE = frozenset({"y", "yes"})


class Confirmation(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


def is_affirmative(answer: str | None) -> bool:
    if answer is None:
        return False
    return answer.strip().lower() in _AFFIRMATIVE


def terminal_prompt(message: str) -> str:
    """Read one line from the terminal; empty input is allowed."""
    return typer.prompt(f"{message} (y/N)", default="", show_default=False)


def confirm(
    message: str,
    auto_confirm: bool = False,
    prompt_fn: PromptFn | None = None,
) -> Confirmation:
    """Resolve the gate to CONFIRMED or CANCELLED.

    With ``auto_confirm`` the prompt is never shown and the result is
    CONFIRMED. Otherwise only "y"/"yes" (any case, surrounding whitespace
    ignored) confirms; anything else, including empty input, cancels.
    """
    if auto_confirm:
        logger.debug("Skipping confirmation (auto-confirm enabled)")
        return Confirmation.CONFIRMED

    reader = prompt_fn if prompt_fn is not None else terminal_prompt
    answer = reader(message)
    if is_affirmative(answer):
        return Confirmation.CONFIRMED
    logger.info("Confirmation declined (answer=%r)", answer)
    return Confirmation.CANCELLED
