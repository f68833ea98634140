from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.deps import CurrentUser, ensure_role, get_current_user, get_db
from app.models.answers import Answer
from app.models.prompts import Prompt
from app.services import answer_service

router = APIRouter(prefix="/api/answers", tags=["answers"])


@router.post("", status_code=201)
def submit_answer(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    ensure_role(user, "student", "Only students can submit answers.")

    prompt_id = payload.get("prompt_id")
    if isinstance(prompt_id, bool) or not isinstance(prompt_id, int):
        raise HTTPException(status_code=400, detail="prompt_id is required.")

    answer = answer_service.submit_answer(db, user, prompt_id, payload)
    return {
        "answer_id": answer.answer_id,
        "created_at": answer.created_at.isoformat() if answer.created_at else None,
    }


# a student's own answers in one session (reload / reconnect)
@router.get("/mine")
def my_answers(
    session_id: int = Query(..., alias="sessionId"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> List[dict]:
    rows = (
        db.query(Answer)
        .join(Prompt, Prompt.prompt_id == Answer.prompt_id)
        .filter(Prompt.session_id == session_id, Answer.user_id == user.id)
        .order_by(Answer.created_at, Answer.answer_id)
        .all()
    )
    return [
        {
            "answer_id": a.answer_id,
            "prompt_id": a.prompt_id,
            "choice_index": a.choice_index,
            "text_answer": a.text_answer,
            "created_at": a.created_at.isoformat() if a.created_at else None,
        }
        for a in rows
    ]
