from __future__ import annotations

from typing import Optional


class GenerationError(Exception):
    """Base exception for flashcard generation failures.

    ``code`` is stored in the error log table, ``user_message`` is what the
    API returns to the caller.
    """

    code = "GENERATION_ERROR"
    default_message = "Flashcard generation failed."

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None):
        self.user_message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.user_message)


class AIConfigurationError(GenerationError):
    """Raised when the AI service credential is missing."""

    code = "AI_CONFIG_MISSING"
    default_message = "The AI service is not configured (missing API key)."


class AIServiceError(GenerationError):
    """Raised when the AI service responds with a non-2xx status or cannot be reached."""

    code = "AI_SERVICE_ERROR"
    default_message = "The AI service returned an error."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code
        super().__init__(message, code=code)


class AIEmptyResponseError(GenerationError):
    """Raised when the reply carries no message content."""

    code = "AI_EMPTY_RESPONSE"
    default_message = "No response from the AI service."


class AIFormatError(GenerationError):
    """Raised when no parsable JSON array is found in the reply."""

    code = "AI_NO_JSON_FOUND"
    default_message = "No JSON found in the AI response."


class AIEmptyResultError(GenerationError):
    """Raised when the reply parses to zero usable flashcards."""

    code = "AI_EMPTY_RESULT"
    default_message = "The AI did not generate any flashcards."


class GenerationPersistenceError(GenerationError):
    """Raised when the generation record cannot be stored."""

    code = "GENERATION_SAVE_FAILED"
    default_message = "Failed to save the generation record."
