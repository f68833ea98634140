# app/routers/user_profile.py

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.deps import CurrentUser, get_current_user, get_db
from app.models.profile import Profile

router = APIRouter(prefix="/api/me", tags=["me"])

# ---- Pydantic schemas ----

class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    user_id: str
    display_name: Optional[str] = None
    role: str
    avatar: str = ""


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    role: Optional[Literal["teacher", "student"]] = None
    avatar: Optional[str] = Field(None, max_length=255)


# ---- my profile ----

@router.get("/profile", response_model=ProfileOut)
def get_my_profile(
    current: CurrentUser = Depends(get_current_user),
):
    return current.profile


# ---- onboarding: role once, then avatar / display name ----

@router.patch("/profile", response_model=ProfileOut)
def update_my_profile(
    payload: ProfileUpdate,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    prof: Profile = current.profile

    if payload.role is not None and payload.role != prof.role:
        if prof.role != "pending":
            raise HTTPException(status_code=403, detail="Your role has already been chosen.")
        prof.role = payload.role

    if payload.display_name is not None:
        prof.display_name = payload.display_name.strip() or prof.display_name

    if payload.avatar is not None:
        prof.avatar = payload.avatar.strip()

    db.add(prof)  # get_db commits after the handler returns
    db.flush()
    return prof
