# app/models/session_member.py
from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from app.db.base import Base, BigIntId

class SessionMember(Base):
    __tablename__ = "session_members"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    session_id = Column(BigIntId, ForeignKey("sessions.session_id"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    joined_at = Column(DateTime(timezone=True), nullable=False)
    left_at = Column(DateTime(timezone=True), nullable=True)  # null while the member is in the room

    __table_args__ = (
        Index("ix_session_members_session_id_user_id", "session_id", "user_id"),
    )
