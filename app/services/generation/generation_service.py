"""Generation pipeline: AI call, generation record, error audit log."""
from __future__ import annotations

import hashlib
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.generation import Generation
from app.models.generation_error_log import GenerationErrorLog
from app.schemas.generations import GenerationCreateResponse
from app.services.generation.errors import GenerationError, GenerationPersistenceError
from app.services.generation.generator import ProposalGenerator
from app.utils.datetime_utils import elapsed_ms, start_timer

logger = logging.getLogger(__name__)


def hash_source_text(text: str) -> str:
    """SHA-256 hex digest; used for analytics and dedup, never for access control."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class GenerationService:
    def __init__(self, db: AsyncSession, generator: ProposalGenerator):
        self.db = db
        self.generator = generator

    async def generate_flashcards(self, source_text: str, user_id: uuid.UUID) -> GenerationCreateResponse:
        """Generate proposals and record the generation.

        Any failure is written to ``generation_error_logs`` (best effort) and
        re-raised unchanged.
        """
        started = start_timer()
        try:
            proposals = await self.generator.generate(source_text)
            duration_ms = elapsed_ms(started)

            generation = await self.record_generation(
                user_id=user_id,
                source_text=source_text,
                generated_count=len(proposals),
                duration_ms=duration_ms,
            )
        except Exception as exc:
            await self.log_generation_error(exc, source_text=source_text, user_id=user_id)
            raise

        logger.info(
            f"User {user_id} generation {generation.id}: {len(proposals)} proposals in {duration_ms} ms"
        )
        return GenerationCreateResponse(
            generation_id=generation.id,
            flashcards_proposals=proposals,
            generated_count=len(proposals),
        )

    async def record_generation(
        self,
        *,
        user_id: uuid.UUID,
        source_text: str,
        generated_count: int,
        duration_ms: int,
    ) -> Generation:
        """Insert one ``generations`` row and return it."""
        generation = Generation(
            user_id=user_id,
            model=self.generator.model,
            generated_count=generated_count,
            source_text_hash=hash_source_text(source_text),
            source_text_length=len(source_text),
            generation_duration=duration_ms,
        )
        try:
            self.db.add(generation)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error(f"Failed to store generation for user {user_id}: {exc}")
            raise GenerationPersistenceError() from exc
        return generation

    async def log_generation_error(self, error: Exception, *, source_text: str, user_id: uuid.UUID) -> None:
        """Write a ``generation_error_logs`` row; never raises."""
        if isinstance(error, GenerationError):
            code, message = error.code, error.user_message
        else:
            code, message = "UNKNOWN", str(error) or type(error).__name__

        try:
            await self.db.rollback()
            self.db.add(
                GenerationErrorLog(
                    user_id=user_id,
                    model=self.generator.model,
                    error_code=code,
                    error_message=message,
                    source_text_hash=hash_source_text(source_text),
                    source_text_length=len(source_text),
                )
            )
            await self.db.commit()
        except Exception:
            logger.exception(f"Could not write generation error log for user {user_id}")
            try:
                await self.db.rollback()
            except Exception:
                logger.exception("Rollback after failed error log write also failed")
