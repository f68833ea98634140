# app/models/prompts.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, JSON, ForeignKey, Index, func
from app.db.base import Base, BigIntId

PROMPT_KINDS = ("mcq", "short_text", "long_text", "slide")

class Prompt(Base):
    __tablename__ = "prompts"

    prompt_id = Column(BigIntId, primary_key=True, autoincrement=True)
    session_id = Column(BigIntId, ForeignKey("sessions.session_id"), nullable=False, index=True)
    slide_index = Column(Integer, nullable=False)  # 0-based, contiguous per session
    kind = Column(Enum(*PROMPT_KINDS, name="prompt_kind", native_enum=False), nullable=False)
    content = Column(JSON, nullable=False)  # shape depends on kind, see app.schemas.prompt_content
    is_open = Column(Boolean, nullable=False, default=False)
    released = Column(Boolean, nullable=False, default=False)
    created_by = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_prompts_session_id_slide_index", "session_id", "slide_index"),
    )
