# app/services/answer_service.py
from collections import Counter
from typing import Any, Dict, List
import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.errors import is_unique_violation
from app.deps import CurrentUser
from app.models.answers import Answer
from app.models.profile import Profile
from app.models.prompts import Prompt
from app.models.sessions import ClassSession
from app.schemas.prompt_content import parse_content

logger = logging.getLogger(__name__)


def submit_answer(db: Session, user: CurrentUser, prompt_id: int, payload: Dict[str, Any]) -> Answer:
    """
    Gate order: prompt exists -> session exists and is live -> prompt is
    the current one -> prompt is open. The caller's role is checked before
    this is called. At most one answer per (prompt, user) is enforced by
    the unique constraint, not by a read-before-write.
    """
    prompt = db.get(Prompt, prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="That prompt was not found.")

    session = db.get(ClassSession, prompt.session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    if session.status != "live":
        raise HTTPException(status_code=403, detail="That session is not live.")
    if session.current_prompt != prompt.prompt_id:
        raise HTTPException(status_code=403, detail="That prompt is not currently active.")
    if not prompt.is_open:
        raise HTTPException(status_code=403, detail="Responses are closed for this prompt.")

    choice_index = None
    text_answer = None
    content = parse_content(prompt.kind, prompt.content)

    if prompt.kind == "mcq":
        value = payload.get("choice_index")
        if isinstance(value, bool) or not isinstance(value, int) or not (0 <= value < len(content.options)):
            raise HTTPException(status_code=400, detail="Select an option before submitting.")
        choice_index = value
    elif prompt.kind in ("short_text", "long_text"):
        value = payload.get("text_answer")
        if not isinstance(value, str) or not value.strip():
            raise HTTPException(status_code=400, detail="Enter a response before submitting.")
        text_answer = value.strip()
    elif prompt.kind == "slide":
        raise HTTPException(status_code=400, detail="Slides do not take answers.")
    else:
        raise HTTPException(status_code=400, detail="Unknown prompt kind")

    answer = Answer(
        prompt_id=prompt.prompt_id,
        user_id=user.id,
        choice_index=choice_index,
        text_answer=text_answer,
    )
    try:
        with db.begin_nested():
            db.add(answer)
    except IntegrityError as e:
        if is_unique_violation(e):
            raise HTTPException(status_code=409, detail="You have already submitted an answer for this prompt.")
        logger.exception("answer insert failed for prompt %s", prompt.prompt_id)
        raise HTTPException(status_code=500, detail="Could not save your answer.")

    db.refresh(answer)
    return answer


def answers_for_prompt(db: Session, prompt: Prompt) -> Dict[str, Any]:
    """Answers newest first with display names; mcq prompts also get per-option counts."""
    rows = (
        db.query(Answer, Profile.display_name)
        .outerjoin(Profile, Profile.user_id == Answer.user_id)
        .filter(Answer.prompt_id == prompt.prompt_id)
        .order_by(Answer.created_at.desc(), Answer.answer_id.desc())
        .all()
    )
    answers: List[Dict[str, Any]] = [
        {
            "answer_id": a.answer_id,
            "prompt_id": a.prompt_id,
            "user_id": a.user_id,
            "display_name": name or "Student",
            "choice_index": a.choice_index,
            "text_answer": a.text_answer,
            "created_at": a.created_at.isoformat() if a.created_at else None,
        }
        for a, name in rows
    ]

    result: Dict[str, Any] = {"prompt_id": prompt.prompt_id, "total": len(answers), "answers": answers}
    if prompt.kind == "mcq":
        options = parse_content(prompt.kind, prompt.content).options
        counts = Counter(a["choice_index"] for a in answers)
        result["counts"] = [counts.get(i, 0) for i in range(len(options))]
    return result
