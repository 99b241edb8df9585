"""View-model for the generate → review → save flow.

Holds the state a UI binds to and guards against running a generation and a
save at the same time.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from app.client.api_client import ApiError, FlashcardsApiClient
from app.client.bulk_save import BulkSaveCommitter, BulkSaveError, BulkSaveResult
from app.client.review_session import ProposalViewState, ReviewSession
from app.services.generation.text_validator import TextValidationResult, validate_source_text

logger = logging.getLogger(__name__)

DEFAULT_RESET_DELAY_SECONDS = 2.0


class GenerationController:
    def __init__(
        self,
        api_client: FlashcardsApiClient,
        reset_delay: float = DEFAULT_RESET_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api_client = api_client
        self.committer = BulkSaveCommitter(api_client)
        self.session = ReviewSession()
        self.reset_delay = reset_delay
        self._sleep = sleep

        self.source_text = ""
        self.validation: TextValidationResult = validate_source_text("")
        self.is_generating = False
        self.is_saving = False
        self.error_message = ""
        self.save_success = False
        self.saved_count = 0
        self.pending_reset: Optional[asyncio.Task] = None

    def set_source_text(self, text: str) -> TextValidationResult:
        """Called on every keystroke."""
        self.source_text = text
        self.validation = validate_source_text(text)
        return self.validation

    @property
    def can_generate(self) -> bool:
        return self.validation.is_valid and not self.is_generating and not self.is_saving

    @property
    def can_save(self) -> bool:
        return (
            bool(self.session.items)
            and not self.is_generating
            and not self.is_saving
            and not self.save_success
        )

    async def generate(self) -> bool:
        if not self.can_generate:
            return False

        self._cancel_pending_reset()
        self.is_generating = True
        self.error_message = ""
        self.save_success = False
        self.session.reset()
        try:
            response = await self.api_client.generate(self.source_text)
        except ApiError as exc:
            self.error_message = exc.message
            return False
        finally:
            self.is_generating = False

        self.session.load(response, self.source_text)
        logger.info("Loaded %d proposals for generation %s", response.generated_count, response.generation_id)
        return True

    async def save_all(self) -> Optional[BulkSaveResult]:
        return await self._save(list(self.session.items))

    async def save_accepted(self) -> Optional[BulkSaveResult]:
        return await self._save(self.session.accepted())

    async def _save(self, items: Sequence[ProposalViewState]) -> Optional[BulkSaveResult]:
        if self.is_generating or self.is_saving:
            return None
        # the saved batch stays on screen until the delayed reset
        if self.save_success:
            return None

        self.is_saving = True
        self.error_message = ""
        self.save_success = False
        try:
            result = await self.committer.save(items, self.session.generation_id)
        except BulkSaveError as exc:
            self.error_message = exc.message
            return None
        finally:
            self.is_saving = False

        self.save_success = True
        self.saved_count = result.count
        self.pending_reset = asyncio.create_task(self._reset_later())
        return result

    async def _reset_later(self) -> None:
        # leave the confirmation visible before clearing the form
        await self._sleep(self.reset_delay)
        self.pending_reset = None
        self.reset()

    def _cancel_pending_reset(self) -> None:
        if self.pending_reset is not None and not self.pending_reset.done():
            self.pending_reset.cancel()
        self.pending_reset = None

    def clear_error(self) -> None:
        self.error_message = ""

    def reset(self) -> None:
        self._cancel_pending_reset()
        self.session.reset()
        self.set_source_text("")
        self.error_message = ""
        self.save_success = False
        self.saved_count = 0
