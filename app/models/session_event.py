# app/models/session_event.py
# Append-only log of teacher-driven state changes. Clients subscribe to
# inserts on this table and replay it after a reconnect.
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Index, func
from app.db.base import Base, BigIntId

class SessionEvent(Base):
    __tablename__ = "session_events"

    event_id = Column(BigIntId, primary_key=True, autoincrement=True)
    session_id = Column(BigIntId, ForeignKey("sessions.session_id"), nullable=False)
    event = Column(String(40), nullable=False)  # session_status|prompt_changed|prompt_open_state|prompts_reordered
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_session_events_session_id_event_id", "session_id", "event_id"),
    )
