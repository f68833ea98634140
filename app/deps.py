# app/deps.py
from dataclasses import dataclass
import logging

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.db.base import SessionLocal
from app.models.profile import Profile
from app.services.pdf_render import PdfRenderer, get_pdf_renderer
from app.services.storage_service import SlideStorage, get_slide_storage
from app.services.supa_auth import default_display_name, verify_bearer

logger = logging.getLogger(__name__)

# ----------------------------
# DB session
# ----------------------------
def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

# ----------------------------
# Caller context
# ----------------------------
@dataclass
class CurrentUser:
    id: str
    email: str | None
    profile: Profile

    @property
    def role(self) -> str:
        return self.profile.role


async def get_current_user(
    authorization: str | None = Header(None),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """
    Verify the bearer token and load the caller's profile.
    The first request of a new user creates a `pending` profile.
    """
    try:
        claims = await verify_bearer(authorization)
    except ValueError as e:
        logger.warning("verify_bearer failed: %s", e)
        raise HTTPException(status_code=401, detail="Unauthorized")

    prof = db.get(Profile, claims["user_id"])
    if prof is None:
        prof = Profile(
            user_id=claims["user_id"],
            display_name=default_display_name(claims),
            role="pending",
            avatar="",
        )
        db.add(prof)
        db.flush()

    return CurrentUser(id=claims["user_id"], email=claims.get("email"), profile=prof)


def ensure_role(user: CurrentUser, role: str, message: str) -> None:
    # pending profiles (onboarding not finished) fail every role check
    if user.role != role:
        raise HTTPException(status_code=403, detail=message)

# ----------------------------
# External collaborators
# ----------------------------
def get_storage() -> SlideStorage:
    return get_slide_storage()


def get_renderer() -> PdfRenderer:
    return get_pdf_renderer()
