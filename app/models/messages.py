# app/models/messages.py
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, func
from app.db.base import Base, BigIntId

class Message(Base):
    __tablename__ = "messages"

    message_id = Column(BigIntId, primary_key=True, autoincrement=True)
    session_id = Column(BigIntId, ForeignKey("sessions.session_id"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_messages_session_id_created_at", "session_id", "created_at"),
    )
