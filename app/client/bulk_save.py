"""Validate and commit reviewed proposals in a single batch."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from app.client.api_client import (
    SERVER_ERROR_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    VALIDATION_ERROR_MESSAGE,
    ApiError,
    FlashcardsApiClient,
    server_message,
)
from app.client.review_session import ProposalViewState
from app.core.limits import BACK_MAX_LENGTH, FRONT_MAX_LENGTH
from app.schemas.flashcards import FlashcardOut

logger = logging.getLogger(__name__)


class BulkSaveError(Exception):
    def __init__(self, message: str, *, invalid_count: int = 0, status_code: Optional[int] = None):
        self.message = message
        self.invalid_count = invalid_count
        self.status_code = status_code
        super().__init__(message)


@dataclass
class BulkSaveResult:
    count: int
    flashcards: List[FlashcardOut] = field(default_factory=list)


def is_saveable(item: ProposalViewState) -> bool:
    front_len = len(item.front.strip())
    back_len = len(item.back.strip())
    return 0 < front_len <= FRONT_MAX_LENGTH and 0 < back_len <= BACK_MAX_LENGTH


def to_payload(item: ProposalViewState, generation_id: int) -> dict[str, Any]:
    return {
        "front": item.front.strip(),
        "back": item.back.strip(),
        "source": item.source.value,
        "generation_id": generation_id,
    }


class BulkSaveCommitter:
    def __init__(self, api_client: FlashcardsApiClient):
        self.api_client = api_client

    async def save(self, items: Sequence[ProposalViewState], generation_id: Optional[int]) -> BulkSaveResult:
        """Save all of ``items`` or none of them.

        Validation happens before any request is sent.
        """
        if not generation_id:
            raise BulkSaveError("Missing generation ID. Generate the flashcards again.")
        if not items:
            raise BulkSaveError("No flashcards to save.")

        invalid_count = sum(1 for item in items if not is_saveable(item))
        if invalid_count:
            raise BulkSaveError(
                f"{invalid_count} flashcard(s) do not meet the requirements "
                f"(front ≤{FRONT_MAX_LENGTH} characters, back ≤{BACK_MAX_LENGTH} characters).",
                invalid_count=invalid_count,
            )

        try:
            response = await self.api_client.save_flashcards([to_payload(i, generation_id) for i in items])
        except ApiError as exc:
            raise BulkSaveError(exc.message) from exc

        if not response.is_success:
            status = response.status_code
            logger.warning("Bulk save rejected with status %s", status)
            if status == 400:
                message = server_message(response) or VALIDATION_ERROR_MESSAGE
            elif status == 401:
                message = "You must be logged in to save flashcards."
            elif status == 500:
                message = SERVER_ERROR_MESSAGE
            else:
                message = UNEXPECTED_ERROR_MESSAGE
            raise BulkSaveError(message, status_code=status)

        saved = [FlashcardOut.model_validate(row) for row in response.json()["flashcards"]]
        return BulkSaveResult(count=len(saved), flashcards=saved)
