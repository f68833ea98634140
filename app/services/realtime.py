# app/services/realtime.py
"""
Durable per-session event log.

Every teacher-driven change (status, current prompt, open/close, reorder)
is written to `session_events` in the same transaction as the change
itself. Clients listen for row inserts on that table and, after a
reconnect, replay `/events?after=<last seen id>` or load `/state`, so a
missed notification never leaves them on stale state.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.prompts import Prompt
from app.models.session_event import SessionEvent

SESSION_STATUS = "session_status"
PROMPT_CHANGED = "prompt_changed"
PROMPT_OPEN_STATE = "prompt_open_state"
PROMPTS_REORDERED = "prompts_reordered"


def record_event(db: Session, session_id: int, event: str, payload: Dict[str, Any]) -> SessionEvent:
    ev = SessionEvent(session_id=session_id, event=event, payload=payload)
    db.add(ev)
    db.flush()
    return ev


def prompt_changed_payload(prompt: Optional[Prompt]) -> Dict[str, Any]:
    if prompt is None:
        return {"prompt_id": None}
    return {
        "prompt_id": prompt.prompt_id,
        "is_open": prompt.is_open,
        "slide_index": prompt.slide_index,
        "kind": prompt.kind,
        "content": prompt.content,
    }


def list_events(db: Session, session_id: int, after: int = 0, limit: int = 200) -> List[SessionEvent]:
    return (
        db.query(SessionEvent)
        .filter(SessionEvent.session_id == session_id, SessionEvent.event_id > after)
        .order_by(SessionEvent.event_id)
        .limit(limit)
        .all()
    )


def latest_event_id(db: Session, session_id: int) -> int:
    value = (
        db.query(func.max(SessionEvent.event_id))
        .filter(SessionEvent.session_id == session_id)
        .scalar()
    )
    return value or 0


def serialize_event(ev: SessionEvent) -> Dict[str, Any]:
    return {
        "event_id": ev.event_id,
        "event": ev.event,
        "payload": ev.payload,
        "created_at": ev.created_at.isoformat() if ev.created_at else None,
    }
