"""Length validation for generation source text.

Shared by the request schema on the server and by the client controller,
where it runs on every keystroke to drive live feedback.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass

MIN_SOURCE_TEXT_LENGTH = 1000
MAX_SOURCE_TEXT_LENGTH = 10000


class TextStatus(str, enum.Enum):
    empty = "empty"
    too_short = "too_short"
    too_long = "too_long"
    valid = "valid"


@dataclass(frozen=True)
class TextValidationResult:
    is_valid: bool
    status: TextStatus
    message: str
    length: int


def validate_source_text(text: str | None) -> TextValidationResult:
    """Check that ``text`` is between 1000 and 10000 characters, inclusive."""
    length = len(text or "")

    if length == 0:
        return TextValidationResult(
            False,
            TextStatus.empty,
            f"Paste your text (minimum {MIN_SOURCE_TEXT_LENGTH} characters, "
            f"maximum {MAX_SOURCE_TEXT_LENGTH} characters)",
            length,
        )
    if length < MIN_SOURCE_TEXT_LENGTH:
        return TextValidationResult(
            False,
            TextStatus.too_short,
            f"You need {MIN_SOURCE_TEXT_LENGTH - length} more characters",
            length,
        )
    if length > MAX_SOURCE_TEXT_LENGTH:
        return TextValidationResult(
            False,
            TextStatus.too_long,
            f"Limit exceeded by {length - MAX_SOURCE_TEXT_LENGTH} characters",
            length,
        )
    return TextValidationResult(True, TextStatus.valid, "Text meets the requirements", length)
