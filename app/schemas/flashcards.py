from datetime import datetime
from typing import Annotated, List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator
from pydantic_core import PydanticCustomError

from app.core.limits import BACK_MAX_LENGTH, FRONT_MAX_LENGTH
from app.utils.enums import AI_SOURCES, FlashcardSource

MAX_BULK_FLASHCARDS = 100

FrontStr = Annotated[
    str, StringConstraints(min_length=1, max_length=FRONT_MAX_LENGTH, strip_whitespace=True)
]
BackStr = Annotated[
    str, StringConstraints(min_length=1, max_length=BACK_MAX_LENGTH, strip_whitespace=True)
]


class FlashcardCreateItem(BaseModel):
    front: FrontStr = Field(..., description="Front side text/question")
    back: BackStr = Field(..., description="Back side answer")
    source: FlashcardSource
    generation_id: Optional[int] = None

    @model_validator(mode="after")
    def check_generation_link(self):
        if self.source in AI_SOURCES and self.generation_id is None:
            raise PydanticCustomError(
                "generation_id_required",
                "generation_id is required for AI generated flashcards",
            )
        if self.source == FlashcardSource.manual and self.generation_id is not None:
            raise PydanticCustomError(
                "generation_id_forbidden",
                "generation_id must be empty for manual flashcards",
            )
        return self


class FlashcardsBulkCreateRequest(BaseModel):
    flashcards: List[FlashcardCreateItem] = Field(..., min_length=1, max_length=MAX_BULK_FLASHCARDS)


class FlashcardManualCreate(BaseModel):
    front: FrontStr
    back: BackStr


class FlashcardUpdate(BaseModel):
    front: FrontStr
    back: BackStr


class FlashcardOut(BaseModel):
    id: int
    user_id: UUID
    front: str
    back: str
    source: FlashcardSource
    generation_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FlashcardListResponse(BaseModel):
    flashcards: List[FlashcardOut]


class FlashcardResponse(BaseModel):
    flashcard: FlashcardOut
