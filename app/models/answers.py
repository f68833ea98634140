# app/models/answers.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from app.db.base import Base, BigIntId

class Answer(Base):
    __tablename__ = "answers"

    answer_id = Column(BigIntId, primary_key=True, autoincrement=True)
    prompt_id = Column(BigIntId, ForeignKey("prompts.prompt_id"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    choice_index = Column(Integer, nullable=True)  # mcq
    text_answer = Column(Text, nullable=True)      # short_text|long_text
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        # one answer per student per prompt; duplicates fail at insert
        UniqueConstraint("prompt_id", "user_id", name="uq_answers_prompt_id_user_id"),
    )
