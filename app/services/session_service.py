# app/services/session_service.py
"""
Session lifecycle: creation with a random join code, status / current
prompt changes, membership checks and cascading delete.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging
import random

from fastapi import HTTPException
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.db.errors import is_unique_violation
from app.deps import CurrentUser
from app.models.answers import Answer
from app.models.messages import Message
from app.models.prompts import Prompt
from app.models.session_event import SessionEvent
from app.models.session_member import SessionMember
from app.models.sessions import ClassSession, SESSION_STATUSES
from app.services import realtime
from app.services.storage_service import SlideStorage

logger = logging.getLogger(__name__)

_rng = random.SystemRandom()


def generate_join_code() -> str:
    # 6 digits, never a leading zero
    return str(_rng.randint(100000, 999999))


def now_utc() -> datetime:
    return datetime.now(timezone.utc)

# ---------- lookups ----------

def get_session_or_404(db: Session, session_id: int) -> ClassSession:
    session = db.get(ClassSession, session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="We couldn't find that session.")
    return session


def ensure_owner(session: ClassSession, user: CurrentUser, message: str = "Forbidden") -> None:
    if session.owner_id != user.id:
        raise HTTPException(status_code=403, detail=message)


def open_membership(db: Session, session_id: int, user_id: str) -> Optional[SessionMember]:
    return (
        db.query(SessionMember)
        .filter(
            SessionMember.session_id == session_id,
            SessionMember.user_id == user_id,
            SessionMember.left_at.is_(None),
        )
        .first()
    )


def ensure_participant(db: Session, session: ClassSession, user: CurrentUser) -> None:
    """The owner, or a student currently in the room."""
    if session.owner_id == user.id:
        return
    if open_membership(db, session.session_id, user.id) is None:
        raise HTTPException(status_code=403, detail="You're not currently in that session.")

# ---------- create ----------

def create_session(db: Session, owner: CurrentUser, title: Optional[str] = None,
                   description: Optional[str] = None) -> ClassSession:
    """
    Insert a draft session, drawing a fresh join code whenever the store
    reports a join_code collision. Any other store error aborts at once.
    """
    for attempt in range(settings.join_code_attempts):
        session = ClassSession(
            owner_id=owner.id,
            status="draft",
            title=(title or "").strip() or "Untitled session",
            description=(description or "").strip(),
            join_code=generate_join_code(),
            current_prompt=None,
        )
        try:
            with db.begin_nested():
                db.add(session)
        except IntegrityError as e:
            if not is_unique_violation(e):
                logger.exception("session insert failed")
                raise HTTPException(status_code=500, detail="Could not create that session.")
            logger.info("join code collision on attempt %d, retrying", attempt + 1)
            continue
        db.refresh(session)
        return session

    raise HTTPException(status_code=500, detail="Could not generate unique join code")

# ---------- status / current prompt ----------

def update_status(db: Session, session: ClassSession, fields: Dict[str, Any]) -> ClassSession:
    """
    Apply a status and/or current_prompt change.

    `fields` only contains the keys the caller actually sent, so an
    explicit `current_prompt: null` differs from leaving it out.
    """
    if "status" not in fields and "current_prompt" not in fields:
        raise HTTPException(status_code=400, detail="Provide a status or current_prompt to update.")

    next_status = fields.get("status", session.status)
    if next_status not in SESSION_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    if session.status == "ended":
        raise HTTPException(status_code=400, detail="That session has already ended.")

    if "current_prompt" in fields:
        next_prompt_id = fields["current_prompt"]
    else:
        next_prompt_id = session.current_prompt

    next_prompt = None
    if next_prompt_id is not None:
        if isinstance(next_prompt_id, bool) or not isinstance(next_prompt_id, int):
            raise HTTPException(status_code=400, detail="current_prompt must be a prompt id.")
        next_prompt = db.get(Prompt, next_prompt_id)
        if next_prompt is None or next_prompt.session_id != session.session_id:
            raise HTTPException(status_code=400, detail="That prompt does not belong to this session.")

    if next_status == "live" and next_prompt is None:
        raise HTTPException(status_code=400, detail="Pick a prompt before going live")

    status_changed = next_status != session.status
    prompt_changed = next_prompt_id != session.current_prompt

    if next_status == "ended":
        # nothing is current or accepting answers once the session is over
        next_prompt = None
        prompt_changed = session.current_prompt is not None
        db.execute(
            update(Prompt)
            .where(Prompt.session_id == session.session_id)
            .values(is_open=False)
        )

    session.status = next_status
    session.current_prompt = next_prompt.prompt_id if next_prompt is not None else None
    if next_prompt is not None and next_status == "live":
        next_prompt.released = True
    db.flush()

    if status_changed:
        realtime.record_event(db, session.session_id, realtime.SESSION_STATUS, {
            "status": session.status,
            "current_prompt": session.current_prompt,
        })
    if prompt_changed:
        realtime.record_event(
            db, session.session_id, realtime.PROMPT_CHANGED,
            realtime.prompt_changed_payload(next_prompt),
        )

    logger.info(
        "session %s status=%s current_prompt=%s",
        session.session_id, session.status, session.current_prompt,
    )
    return session

# ---------- join / leave ----------

def join_session(db: Session, session: ClassSession, user: CurrentUser) -> SessionMember:
    """Close any open membership for this user, then open a fresh one."""
    now = now_utc()
    db.execute(
        update(SessionMember)
        .where(
            SessionMember.session_id == session.session_id,
            SessionMember.user_id == user.id,
            SessionMember.left_at.is_(None),
        )
        .values(left_at=now)
        .execution_options(synchronize_session="fetch")
    )
    member = SessionMember(session_id=session.session_id, user_id=user.id, joined_at=now, left_at=None)
    db.add(member)
    db.flush()
    return member


def leave_session(db: Session, session: ClassSession, user: CurrentUser) -> SessionMember:
    member = open_membership(db, session.session_id, user.id)
    if member is None:
        raise HTTPException(status_code=404, detail="You're not currently in that session.")
    member.left_at = now_utc()
    db.flush()
    return member

# ---------- delete ----------

def _slide_storage_path(storage: SlideStorage, content: Dict[str, Any] | None) -> Optional[str]:
    if not isinstance(content, dict):
        return None
    for key in ("assetPath", "storagePath"):
        value = content.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return storage.path_from_url(content.get("assetUrl") or content.get("imageUrl"))


def delete_session(db: Session, session: ClassSession, storage: SlideStorage) -> int:
    """
    Remove the session and everything hanging off it. Rows go first (same
    transaction), blobs last; a storage failure rolls the rows back.
    Returns the number of storage objects removed.
    """
    session_id = session.session_id
    prompts = db.query(Prompt).filter(Prompt.session_id == session_id).all()
    prompt_ids = [p.prompt_id for p in prompts]

    slide_paths = []
    for p in prompts:
        if p.kind != "slide":
            continue
        path = _slide_storage_path(storage, p.content)
        if path:
            slide_paths.append(path)

    session.current_prompt = None
    db.flush()

    if prompt_ids:
        db.query(Answer).filter(Answer.prompt_id.in_(prompt_ids)).delete(synchronize_session=False)
    db.query(Message).filter(Message.session_id == session_id).delete(synchronize_session=False)
    db.query(SessionEvent).filter(SessionEvent.session_id == session_id).delete(synchronize_session=False)
    db.query(Prompt).filter(Prompt.session_id == session_id).delete(synchronize_session=False)
    db.query(SessionMember).filter(SessionMember.session_id == session_id).delete(synchronize_session=False)
    db.delete(session)
    db.flush()

    targets = set(slide_paths)
    try:
        targets.update(storage.list(str(session_id)))
        storage.remove(targets)
    except Exception:
        logger.exception("removing slide assets for session %s failed", session_id)
        raise HTTPException(status_code=500, detail="Could not remove session media.")

    logger.info("session %s deleted (%d prompts, %d assets)", session_id, len(prompt_ids), len(targets))
    return len(targets)
