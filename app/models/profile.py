# app/models/profile.py
# Profile row that sits beside Supabase auth.users (one per user).
from sqlalchemy import Column, String, DateTime, Enum, func
from app.db.base import Base

PROFILE_ROLES = ("pending", "teacher", "student")

class Profile(Base):
    __tablename__ = "profiles"

    user_id = Column(String(36), primary_key=True)  # = auth.users.id (uuid)
    display_name = Column(String(100), nullable=True)
    role = Column(
        Enum(*PROFILE_ROLES, name="profile_role", native_enum=False),
        nullable=False,
        default="pending",
    )
    avatar = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())
