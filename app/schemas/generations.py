from typing import List
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from app.services.generation.text_validator import validate_source_text
from app.utils.enums import FlashcardSource


class GenerationCreateRequest(BaseModel):
    source_text: str = Field(..., description="Text to generate flashcards from (1000-10000 characters)")

    @field_validator("source_text")
    def check_length(cls, value: str) -> str:
        result = validate_source_text(value)
        if not result.is_valid:
            raise PydanticCustomError("source_text_length", result.message)
        return value


class FlashcardProposal(BaseModel):
    front: str
    back: str
    source: FlashcardSource = FlashcardSource.ai_full


class GenerationCreateResponse(BaseModel):
    generation_id: int
    flashcards_proposals: List[FlashcardProposal]
    generated_count: int
