import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.routes.auth.auth import get_current_user
from app.core.response import error_response, json_response
from app.db.deps import get_db
from app.models.user import User
from app.schemas.flashcards import (
    FlashcardListResponse,
    FlashcardManualCreate,
    FlashcardOut,
    FlashcardResponse,
    FlashcardsBulkCreateRequest,
    FlashcardUpdate,
)
from app.services.flashcards import flashcard_service
from app.services.flashcards.flashcard_service import (
    FlashcardPersistenceError,
    FlashcardValidationError,
)


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/flashcards", tags=["flashcards"])


def _out(rows) -> list[FlashcardOut]:
    return [FlashcardOut.model_validate(row) for row in rows]


@router.get("", response_model=FlashcardListResponse)
async def list_flashcards(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's flashcards, newest first.

    Method/Path: GET /api/v1/flashcards
    """
    rows = await flashcard_service.list_flashcards(db, current_user.id)
    logger.info(f"User {current_user.id} fetched {len(rows)} flashcards")
    return json_response(FlashcardListResponse(flashcards=_out(rows)))


@router.post("", status_code=201, response_model=FlashcardListResponse)
async def bulk_create_flashcards(
    payload: FlashcardsBulkCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Save a batch of reviewed proposals in one transaction.

    Method/Path: POST /api/v1/flashcards
    Body: { flashcards: [{ front, back, source, generation_id }] }
    Notes:
      - AI-sourced cards must reference a generation owned by the caller.
      - Either every card is stored or none is.
    """
    try:
        rows = await flashcard_service.bulk_create_flashcards(db, current_user.id, payload.flashcards)
    except FlashcardValidationError as exc:
        return error_response(exc.message, status_code=400, details=exc.details)
    except FlashcardPersistenceError:
        return error_response("Error saving flashcards", status_code=500)

    return json_response(FlashcardListResponse(flashcards=_out(rows)), status_code=201)


@router.post("/manual", status_code=201, response_model=FlashcardResponse)
async def create_manual_flashcard(
    payload: FlashcardManualCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a single hand-written flashcard (source "manual").

    Method/Path: POST /api/v1/flashcards/manual
    """
    try:
        row = await flashcard_service.create_manual_flashcard(db, current_user.id, payload.front, payload.back)
    except FlashcardPersistenceError:
        return error_response("Error creating flashcard", status_code=500)

    return json_response(FlashcardResponse(flashcard=FlashcardOut.model_validate(row)), status_code=201)


@router.put("/{flashcard_id}", response_model=FlashcardResponse)
async def update_flashcard(
    flashcard_id: int,
    payload: FlashcardUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Edit a flashcard you own; "ai-full" cards become "ai-edited".

    Method/Path: PUT /api/v1/flashcards/{flashcard_id}
    """
    try:
        row = await flashcard_service.update_flashcard(
            db, current_user.id, flashcard_id, payload.front, payload.back
        )
    except FlashcardPersistenceError:
        return error_response("Error updating flashcard", status_code=500)

    if row is None:
        logger.warning(f"Update denied: flashcard {flashcard_id} not found for user {current_user.id}")
        return error_response("Flashcard not found", status_code=404)
    return json_response(FlashcardResponse(flashcard=FlashcardOut.model_validate(row)))


@router.delete("/{flashcard_id}")
async def delete_flashcard(
    flashcard_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a flashcard you own.

    Method/Path: DELETE /api/v1/flashcards/{flashcard_id}
    """
    try:
        deleted = await flashcard_service.delete_flashcard(db, current_user.id, flashcard_id)
    except FlashcardPersistenceError:
        return error_response("Error deleting flashcard", status_code=500)

    if not deleted:
        logger.warning(f"Delete denied: flashcard {flashcard_id} not found for user {current_user.id}")
        return error_response("Flashcard not found", status_code=404)
    logger.info(f"User {current_user.id} deleted flashcard {flashcard_id}")
    return json_response({"success": True})
