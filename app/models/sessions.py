# app/models/sessions.py
from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey, Index, func
from app.db.base import Base, BigIntId

SESSION_STATUSES = ("draft", "live", "ended")

class ClassSession(Base):
    __tablename__ = "sessions"

    session_id = Column(BigIntId, primary_key=True, autoincrement=True)
    owner_id = Column(String(36), nullable=False, index=True)
    title = Column(String(200), nullable=False, default="Untitled session")
    description = Column(Text, nullable=False, default="")
    status = Column(
        Enum(*SESSION_STATUSES, name="session_status", native_enum=False),
        nullable=False,
        default="draft",
    )
    join_code = Column(String(6), nullable=False, unique=True)
    # prompts also point back at sessions, so this FK is added after both tables exist
    current_prompt = Column(
        BigIntId,
        ForeignKey("prompts.prompt_id", use_alter=True, name="fk_sessions_current_prompt"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    __table_args__ = (
        Index("ix_sessions_owner_id_created_at", "owner_id", "created_at"),
    )
