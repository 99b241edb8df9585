import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.routes.auth.auth import get_current_user
from app.core.config import settings
from app.core.response import error_response, json_response
from app.db.deps import get_db
from app.models.user import User
from app.schemas.generations import GenerationCreateRequest, GenerationCreateResponse
from app.services.generation.errors import GenerationError
from app.services.generation.generation_service import GenerationService
from app.services.generation.generator import GeneratorConfig, ProposalGenerator


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/generations", tags=["generations"])

GENERATION_FAILED_MESSAGE = "Internal server error while generating flashcards"


def get_proposal_generator() -> ProposalGenerator:
    """Build a generator from the current settings (overridable in tests)."""
    return ProposalGenerator(GeneratorConfig.from_settings(settings))


@router.post("", status_code=201, response_model=GenerationCreateResponse)
async def create_generation(
    payload: GenerationCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    generator: ProposalGenerator = Depends(get_proposal_generator),
):
    """Generate flashcard proposals from source text.

    Method/Path: POST /api/v1/generations
    Body: { source_text } (1000-10000 characters)
    Returns: 201 { generation_id, flashcards_proposals[], generated_count }
    Errors: 400 validation, 401 unauthenticated, 500 generation failure
    """
    # error logging rolls the session back, which expires current_user
    user_id = current_user.id
    service = GenerationService(db, generator)
    try:
        result = await service.generate_flashcards(payload.source_text, user_id)
    except GenerationError as exc:
        logger.warning(f"Generation failed for user {user_id}: [{exc.code}] {exc.user_message}")
        return error_response(GENERATION_FAILED_MESSAGE, status_code=500, details=exc.user_message)
    except Exception:
        logger.exception(f"Unexpected generation failure for user {user_id}")
        return error_response(GENERATION_FAILED_MESSAGE, status_code=500, details="Unknown error", include_debug=True)

    return json_response(result, status_code=201)
