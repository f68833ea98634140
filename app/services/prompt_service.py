# app/services/prompt_service.py
"""
Prompt ordering and mutations.

slide_index is 0-based and contiguous within a session. Every operation
that adds, removes or moves prompts ends with `renumber`.
"""
from typing import Any, Dict, List, Optional, Sequence
import logging

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.models.answers import Answer
from app.models.prompts import Prompt, PROMPT_KINDS
from app.models.sessions import ClassSession
from app.schemas.prompt_content import build_content, dump_content, parse_content
from app.services import realtime

logger = logging.getLogger(__name__)


def ordered_prompts(db: Session, session_id: int) -> List[Prompt]:
    return (
        db.query(Prompt)
        .filter(Prompt.session_id == session_id)
        .order_by(Prompt.slide_index, Prompt.prompt_id)
        .all()
    )


def renumber(prompts: Sequence[Prompt]) -> None:
    for idx, prompt in enumerate(prompts):
        if prompt.slide_index != idx:
            prompt.slide_index = idx


def get_prompt_or_404(db: Session, prompt_id: int) -> Prompt:
    prompt = db.get(Prompt, prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="That prompt was not found.")
    return prompt


def _build_or_400(kind: str, meta: Dict[str, Any]):
    try:
        return build_content(kind, meta)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid prompt content: {e.errors()[0]['msg']}")


def create_prompt(db: Session, session: ClassSession, user_id: str, kind: str,
                  meta: Dict[str, Any], position: Optional[int] = None) -> Prompt:
    """Append (position None) or insert at `position`, then renumber."""
    if kind not in PROMPT_KINDS:
        raise HTTPException(status_code=400, detail="Unknown prompt kind")

    content = _build_or_400(kind, meta)
    existing = ordered_prompts(db, session.session_id)

    prompt = Prompt(
        session_id=session.session_id,
        slide_index=len(existing),
        kind=kind,
        content=dump_content(content),
        is_open=False,
        released=False,
        created_by=user_id,
    )
    db.add(prompt)

    if position is None:
        position = len(existing)
    position = max(0, min(position, len(existing)))
    renumber(existing[:position] + [prompt] + existing[position:])
    db.flush()
    db.refresh(prompt)
    return prompt


def update_content(db: Session, prompt: Prompt, meta: Dict[str, Any]) -> Prompt:
    # unspecified fields keep their stored values; the kind never changes
    current = parse_content(prompt.kind, prompt.content)
    merged = {**dump_content(current), **meta}
    prompt.content = dump_content(_build_or_400(prompt.kind, merged))
    db.flush()
    return prompt


def set_flags(db: Session, prompt: Prompt, fields: Dict[str, bool]) -> Prompt:
    was_open = prompt.is_open
    if "is_open" in fields:
        prompt.is_open = fields["is_open"]
    if "released" in fields:
        prompt.released = fields["released"]
    db.flush()

    if prompt.is_open != was_open or "released" in fields:
        realtime.record_event(db, prompt.session_id, realtime.PROMPT_OPEN_STATE, {
            "prompt_id": prompt.prompt_id,
            "is_open": prompt.is_open,
            "released": prompt.released,
        })
    return prompt


def delete_prompt(db: Session, session: ClassSession, prompt: Prompt) -> None:
    if session.current_prompt == prompt.prompt_id:
        session.current_prompt = None
        db.flush()
        realtime.record_event(db, session.session_id, realtime.PROMPT_CHANGED, realtime.prompt_changed_payload(None))

    db.query(Answer).filter(Answer.prompt_id == prompt.prompt_id).delete(synchronize_session=False)
    db.delete(prompt)
    db.flush()
    renumber(ordered_prompts(db, session.session_id))
    db.flush()


def reorder(db: Session, session: ClassSession, prompt_ids: List[int]) -> List[Prompt]:
    """
    Listed prompts take positions 0..n-1 in the given order; prompts left
    out keep their relative order after them. Runs in the request
    transaction, so a failure leaves the old order intact.
    """
    prompts = ordered_prompts(db, session.session_id)
    by_id = {p.prompt_id: p for p in prompts}

    if not prompt_ids:
        raise HTTPException(status_code=400, detail="Missing sessionId or promptIds")
    if len(set(prompt_ids)) != len(prompt_ids):
        raise HTTPException(status_code=400, detail="promptIds contains duplicates")
    unknown = [pid for pid in prompt_ids if pid not in by_id]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Prompts {unknown} do not belong to this session")

    wanted = set(prompt_ids)
    listed = [by_id[pid] for pid in prompt_ids]
    rest = [p for p in prompts if p.prompt_id not in wanted]
    new_order = listed + rest
    renumber(new_order)
    db.flush()

    realtime.record_event(db, session.session_id, realtime.PROMPTS_REORDERED, {
        "prompt_ids": [p.prompt_id for p in new_order],
    })
    return new_order
