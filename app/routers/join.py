import re

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.deps import CurrentUser, ensure_role, get_current_user, get_db
from app.models.sessions import ClassSession
from app.schemas.session import JoinOut
from app.services import session_service as svc

router = APIRouter(prefix="/api/join", tags=["join"])

JOIN_CODE_PATTERN = re.compile(r"^[0-9]{6}$")  # ASCII digits only


@router.post("/{join_code}", response_model=JoinOut, status_code=201)
def join_session(
    join_code: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    join_code = join_code.strip()
    if not JOIN_CODE_PATTERN.match(join_code):
        raise HTTPException(status_code=400, detail="That code format looks off.")

    ensure_role(user, "student", "Only students can join sessions.")

    session = db.query(ClassSession).filter(ClassSession.join_code == join_code).first()
    if session is None:
        raise HTTPException(status_code=404, detail="We couldn't find a session with that code.")
    if session.status != "live":
        raise HTTPException(status_code=403, detail="That session isn't live right now.")

    member = svc.join_session(db, session, user)
    return JoinOut(
        session_id=session.session_id,
        title=session.title,
        status=session.status,
        join_code=session.join_code,
        current_prompt=session.current_prompt,
        member_id=member.id,
        joined_at=member.joined_at,
    )
