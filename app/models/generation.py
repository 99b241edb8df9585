from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from app.db.deps import Base
from app.utils.datetime_utils import get_current_utc_datetime


class Generation(Base):
    """Metadata for one successful AI generation; immutable once written."""

    __tablename__ = "generations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    model = Column(String, nullable=False)
    generated_count = Column(Integer, nullable=False)
    # sha256 hex of the source text, analytics/dedup only
    source_text_hash = Column(String(64), nullable=False)
    source_text_length = Column(Integer, nullable=False)
    # milliseconds
    generation_duration = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, server_default=func.now())

    user = relationship("User", back_populates="generations")
    flashcards = relationship("Flashcard", back_populates="generation")
