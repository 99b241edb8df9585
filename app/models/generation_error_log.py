from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from app.db.deps import Base
from app.utils.datetime_utils import get_current_utc_datetime


class GenerationErrorLog(Base):
    __tablename__ = "generation_error_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    model = Column(String, nullable=False)
    error_code = Column(String(100), nullable=False)
    error_message = Column(Text, nullable=False)
    source_text_hash = Column(String(64), nullable=False)
    source_text_length = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, server_default=func.now())
