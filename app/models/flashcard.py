from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from app.core.limits import BACK_MAX_LENGTH, FRONT_MAX_LENGTH
from app.db.deps import Base
from app.utils.datetime_utils import get_current_utc_datetime
from app.utils.enums import FlashcardSource


class Flashcard(Base):
    __tablename__ = "flashcards"
    __table_args__ = (
        CheckConstraint(
            f"length(front) BETWEEN 1 AND {FRONT_MAX_LENGTH}", name="ck_flashcards_front_length"
        ),
        CheckConstraint(
            f"length(back) BETWEEN 1 AND {BACK_MAX_LENGTH}", name="ck_flashcards_back_length"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    front = Column(String(FRONT_MAX_LENGTH), nullable=False)
    back = Column(String(BACK_MAX_LENGTH), nullable=False)
    # Store enum values ("ai-full"), not member names
    source = Column(
        Enum(
            FlashcardSource,
            name="flashcard_source",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=FlashcardSource.manual,
    )
    generation_id = Column(Integer, ForeignKey("generations.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, server_default=func.now())

    user = relationship("User", back_populates="flashcards")
    generation = relationship("Generation", back_populates="flashcards")
