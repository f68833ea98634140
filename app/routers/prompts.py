from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.deps import CurrentUser, ensure_role, get_current_user, get_db
from app.models.prompts import Prompt
from app.models.sessions import ClassSession
from app.schemas.prompt import PromptCreateIn, PromptOut, ReorderIn
from app.services import answer_service
from app.services import prompt_service
from app.services import session_service

router = APIRouter(prefix="/api", tags=["prompts"])


def _teacher_session(db: Session, session_id: int, user: CurrentUser) -> ClassSession:
    ensure_role(user, "teacher", "Only teachers can update prompts.")
    session = session_service.get_session_or_404(db, session_id)
    session_service.ensure_owner(session, user, "Only the session owner can update prompts.")
    return session


def _flag_fields(payload: Dict[str, Any]) -> Dict[str, bool]:
    """is_open / released, each optional but at least one, both strictly boolean"""
    fields = {k: payload[k] for k in ("is_open", "released") if k in payload}
    if not fields:
        raise HTTPException(status_code=400, detail="Provide a field to update.")
    for key, value in fields.items():
        if not isinstance(value, bool):
            raise HTTPException(status_code=400, detail=f"{key} must be a boolean.")
    return fields


@router.get("/prompts", response_model=List[PromptOut])
def list_prompts(
    session_id: int = Query(..., alias="sessionId"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = session_service.get_session_or_404(db, session_id)
    session_service.ensure_owner(session, user)
    return prompt_service.ordered_prompts(db, session.session_id)


@router.post("/prompts", response_model=PromptOut, status_code=201)
def create_prompt(
    payload: PromptCreateIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = _teacher_session(db, payload.session_id, user)

    meta = payload.model_dump(
        by_alias=True,
        exclude={"session_id", "kind", "slide_index", "create_new_slide"},
        exclude_none=True,
    )
    position = None if payload.create_new_slide else payload.slide_index
    return prompt_service.create_prompt(db, session, user.id, payload.kind, meta, position)


@router.patch("/prompts/{prompt_id}", response_model=PromptOut)
def update_prompt(
    prompt_id: int,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    fields = _flag_fields(payload)
    prompt = prompt_service.get_prompt_or_404(db, prompt_id)
    _teacher_session(db, prompt.session_id, user)
    return prompt_service.set_flags(db, prompt, fields)


@router.patch("/sessions/{session_id}/prompts/{prompt_id}", response_model=PromptOut)
def update_session_prompt(
    session_id: int,
    prompt_id: int,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    fields = _flag_fields(payload)
    session = _teacher_session(db, session_id, user)
    prompt = db.get(Prompt, prompt_id)
    if prompt is None or prompt.session_id != session.session_id:
        raise HTTPException(status_code=404, detail="That prompt does not belong to this session.")
    return prompt_service.set_flags(db, prompt, fields)


@router.put("/prompts/{prompt_id}/content", response_model=PromptOut)
def update_prompt_content(
    prompt_id: int,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    prompt = prompt_service.get_prompt_or_404(db, prompt_id)
    _teacher_session(db, prompt.session_id, user)
    meta = {k: v for k, v in payload.items() if k != "kind"}
    return prompt_service.update_content(db, prompt, meta)


@router.delete("/prompts/{prompt_id}")
def delete_prompt(
    prompt_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    prompt = prompt_service.get_prompt_or_404(db, prompt_id)
    session = _teacher_session(db, prompt.session_id, user)
    prompt_service.delete_prompt(db, session, prompt)
    return {"success": True}


@router.post("/prompts/reorder", response_model=List[PromptOut])
def reorder_prompts(
    payload: ReorderIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = _teacher_session(db, payload.session_id, user)
    return prompt_service.reorder(db, session, payload.prompt_ids)


# answers for the teacher's live view
@router.get("/prompts/{prompt_id}/answers")
def prompt_answers(
    prompt_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    prompt = prompt_service.get_prompt_or_404(db, prompt_id)
    session = session_service.get_session_or_404(db, prompt.session_id)
    session_service.ensure_owner(session, user)
    return answer_service.answers_for_prompt(db, prompt)
