from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.deps import CurrentUser, ensure_role, get_current_user, get_db, get_storage
from app.models.messages import Message
from app.models.profile import Profile
from app.models.prompts import Prompt
from app.models.session_member import SessionMember
from app.models.sessions import ClassSession
from app.schemas.session import (
    EventsOut,
    MemberOut,
    MembershipOut,
    MessageIn,
    MessageOut,
    SessionCreateIn,
    SessionOut,
    SessionStateOut,
    SessionUpdateIn,
)
from app.services import realtime
from app.services import session_service as svc
from app.services.storage_service import SlideStorage

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _owned_session(db: Session, session_id: int, user: CurrentUser, action: str) -> ClassSession:
    """teacher role + ownership, the guard for every session mutation"""
    ensure_role(user, "teacher", f"Only teachers can {action} sessions.")
    session = svc.get_session_or_404(db, session_id)
    svc.ensure_owner(session, user, f"Only the session owner can {action} it.")
    return session


# create (draft, random join code)
@router.post("", response_model=SessionOut, status_code=201)
def create_session(
    payload: SessionCreateIn | None = Body(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    payload = payload or SessionCreateIn()
    return svc.create_session(db, user, payload.title, payload.description)


# caller's sessions, newest first
@router.get("", response_model=List[SessionOut])
def list_sessions(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return (
        db.query(ClassSession)
        .filter(ClassSession.owner_id == user.id)
        .order_by(ClassSession.created_at.desc(), ClassSession.session_id.desc())
        .all()
    )


@router.get("/{session_id}", response_model=SessionOut)
def get_session(
    session_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = svc.get_session_or_404(db, session_id)
    svc.ensure_owner(session, user)
    return session


@router.patch("/{session_id}", response_model=SessionOut)
def update_session(
    session_id: int,
    payload: SessionUpdateIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = _owned_session(db, session_id, user, "edit")

    if payload.title is not None:
        title = payload.title.strip()
        if not title:
            raise HTTPException(status_code=400, detail="Title cannot be empty.")
        session.title = title
    if payload.description is not None:
        session.description = payload.description.strip()

    db.flush()
    db.refresh(session)
    return session


# status and/or current prompt
@router.patch("/{session_id}/status", response_model=SessionOut)
def update_session_status(
    session_id: int,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = _owned_session(db, session_id, user, "update")
    fields = {k: payload[k] for k in ("status", "current_prompt") if k in payload}
    svc.update_status(db, session, fields)
    db.refresh(session)
    return session


@router.delete("/{session_id}")
def delete_session(
    session_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    storage: SlideStorage = Depends(get_storage),
):
    session = _owned_session(db, session_id, user, "delete")
    removed = svc.delete_session(db, session, storage)
    return {"success": True, "removed_assets": removed}


@router.post("/{session_id}/leave", response_model=MembershipOut)
def leave_session(
    session_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    ensure_role(user, "student", "Only students can leave sessions.")
    session = svc.get_session_or_404(db, session_id)
    member = svc.leave_session(db, session, user)
    return MembershipOut(member_id=member.id, joined_at=member.joined_at, left_at=member.left_at)


# ---------- live state (reconnect) ----------

@router.get("/{session_id}/state", response_model=SessionStateOut)
def session_state(
    session_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = svc.get_session_or_404(db, session_id)
    svc.ensure_participant(db, session, user)

    current = None
    if session.current_prompt is not None:
        prompt = db.get(Prompt, session.current_prompt)
        if prompt is not None:
            current = realtime.prompt_changed_payload(prompt)
            current["released"] = prompt.released

    return SessionStateOut(
        session_id=session.session_id,
        title=session.title,
        status=session.status,
        current_prompt=current,
        last_event_id=realtime.latest_event_id(db, session.session_id),
    )


@router.get("/{session_id}/events", response_model=EventsOut)
def session_events(
    session_id: int,
    after: int = Query(0, ge=0, description="last event_id the client has seen"),
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = svc.get_session_or_404(db, session_id)
    svc.ensure_participant(db, session, user)

    events = realtime.list_events(db, session.session_id, after=after, limit=limit)
    return EventsOut(
        session_id=session.session_id,
        events=[realtime.serialize_event(ev) for ev in events],
        last_event_id=events[-1].event_id if events else after,
    )


@router.get("/{session_id}/members", response_model=List[MemberOut])
def list_members(
    session_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = svc.get_session_or_404(db, session_id)
    svc.ensure_owner(session, user)

    rows = (
        db.query(SessionMember, Profile)
        .outerjoin(Profile, Profile.user_id == SessionMember.user_id)
        .filter(SessionMember.session_id == session_id, SessionMember.left_at.is_(None))
        .order_by(SessionMember.joined_at)
        .all()
    )
    return [
        MemberOut(
            member_id=m.id,
            user_id=m.user_id,
            display_name=p.display_name if p else None,
            avatar=p.avatar if p else None,
            joined_at=m.joined_at,
        )
        for m, p in rows
    ]

# ---------- chat ----------

def _serialize_message(m: Message, display_name: str | None) -> MessageOut:
    return MessageOut(
        message_id=m.message_id,
        session_id=m.session_id,
        user_id=m.user_id,
        display_name=display_name,
        body=m.body,
        created_at=m.created_at,
    )


@router.get("/{session_id}/messages", response_model=List[MessageOut])
def list_messages(
    session_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = svc.get_session_or_404(db, session_id)
    svc.ensure_participant(db, session, user)

    rows = (
        db.query(Message, Profile.display_name)
        .outerjoin(Profile, Profile.user_id == Message.user_id)
        .filter(Message.session_id == session_id)
        .order_by(Message.created_at, Message.message_id)
        .all()
    )
    return [_serialize_message(m, name) for m, name in rows]


@router.post("/{session_id}/messages", response_model=MessageOut, status_code=201)
def post_message(
    session_id: int,
    payload: MessageIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    session = svc.get_session_or_404(db, session_id)
    svc.ensure_participant(db, session, user)

    body = payload.body.strip()
    if not body:
        raise HTTPException(status_code=400, detail="Message cannot be empty.")

    message = Message(session_id=session.session_id, user_id=user.id, body=body)
    db.add(message)
    db.flush()
    db.refresh(message)
    return _serialize_message(message, user.profile.display_name)
