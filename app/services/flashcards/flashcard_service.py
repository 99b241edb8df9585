"""Per-user flashcard persistence.

Every query is scoped by ``user_id``; rows owned by someone else behave as
if they do not exist.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.flashcard import Flashcard
from app.models.generation import Generation
from app.schemas.flashcards import FlashcardCreateItem
from app.utils.datetime_utils import get_current_utc_datetime
from app.utils.enums import FlashcardSource

logger = logging.getLogger(__name__)


class FlashcardServiceError(Exception):
    """Base exception for flashcard persistence issues."""


class FlashcardValidationError(FlashcardServiceError):
    """Raised when a batch references data the caller may not use."""

    def __init__(self, message: str, details: Optional[list[dict]] = None):
        self.message = message
        self.details = details or []
        super().__init__(message)


class FlashcardPersistenceError(FlashcardServiceError):
    """Raised when the database write fails; nothing is committed."""


async def _commit(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(f"Failed to {action}: {exc}")
        raise FlashcardPersistenceError(f"Failed to {action}") from exc


async def list_flashcards(db: AsyncSession, user_id: uuid.UUID) -> List[Flashcard]:
    stmt = (
        select(Flashcard)
        .where(Flashcard.user_id == user_id)
        .order_by(Flashcard.created_at.desc(), Flashcard.id.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def get_owned_flashcard(db: AsyncSession, user_id: uuid.UUID, flashcard_id: int) -> Optional[Flashcard]:
    res = await db.execute(
        select(Flashcard).where(Flashcard.id == flashcard_id, Flashcard.user_id == user_id)
    )
    return res.scalars().first()


async def _ensure_generations_owned(
    db: AsyncSession, user_id: uuid.UUID, items: Sequence[FlashcardCreateItem]
) -> None:
    wanted = {item.generation_id for item in items if item.generation_id is not None}
    if not wanted:
        return
    res = await db.execute(
        select(Generation.id).where(Generation.id.in_(wanted), Generation.user_id == user_id)
    )
    missing = wanted - set(res.scalars().all())
    if missing:
        logger.warning(f"User {user_id} referenced unknown generations {sorted(missing)}")
        raise FlashcardValidationError(
            "Generation not found",
            details=[
                {"field": "generation_id", "message": f"Generation {gid} not found"}
                for gid in sorted(missing)
            ],
        )


async def bulk_create_flashcards(
    db: AsyncSession, user_id: uuid.UUID, items: Sequence[FlashcardCreateItem]
) -> List[Flashcard]:
    """Insert the whole batch in one transaction or nothing at all."""
    await _ensure_generations_owned(db, user_id, items)

    rows = [
        Flashcard(
            user_id=user_id,
            front=item.front,
            back=item.back,
            source=item.source,
            generation_id=item.generation_id,
        )
        for item in items
    ]
    db.add_all(rows)
    await _commit(db, "save flashcards")
    logger.info(f"User {user_id} saved {len(rows)} flashcards")
    return rows


async def create_manual_flashcard(db: AsyncSession, user_id: uuid.UUID, front: str, back: str) -> Flashcard:
    row = Flashcard(user_id=user_id, front=front, back=back, source=FlashcardSource.manual)
    db.add(row)
    await _commit(db, "create flashcard")
    return row


async def update_flashcard(
    db: AsyncSession, user_id: uuid.UUID, flashcard_id: int, front: str, back: str
) -> Optional[Flashcard]:
    """Apply an edit; unedited AI cards become ``ai-edited``."""
    row = await get_owned_flashcard(db, user_id, flashcard_id)
    if row is None:
        return None

    row.front = front
    row.back = back
    if row.source == FlashcardSource.ai_full:
        row.source = FlashcardSource.ai_edited
    row.updated_at = get_current_utc_datetime()
    await _commit(db, "update flashcard")
    return row


async def delete_flashcard(db: AsyncSession, user_id: uuid.UUID, flashcard_id: int) -> bool:
    row = await get_owned_flashcard(db, user_id, flashcard_id)
    if row is None:
        return False
    await db.delete(row)
    await _commit(db, "delete flashcard")
    return True
