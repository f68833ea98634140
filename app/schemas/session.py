from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

# -- Request --

class SessionCreateIn(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None

class SessionUpdateIn(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None

class MessageIn(BaseModel):
    body: str = Field(..., max_length=1000)

# -- Response --

class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: int
    owner_id: str
    title: str
    description: str
    status: str
    join_code: str
    current_prompt: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class JoinOut(BaseModel):
    session_id: int
    title: str
    status: str
    join_code: str
    current_prompt: Optional[int] = None
    member_id: int
    joined_at: datetime

class MembershipOut(BaseModel):
    member_id: int
    joined_at: datetime
    left_at: Optional[datetime] = None

class MemberOut(BaseModel):
    member_id: int
    user_id: str
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    joined_at: datetime

class MessageOut(BaseModel):
    message_id: int
    session_id: int
    user_id: str
    display_name: Optional[str] = None
    body: str
    created_at: Optional[datetime] = None

class SessionStateOut(BaseModel):
    """What a (re)connecting client needs to render the live view."""
    session_id: int
    title: str
    status: str
    current_prompt: Optional[Dict[str, Any]] = None
    last_event_id: int

class EventsOut(BaseModel):
    session_id: int
    events: List[Dict[str, Any]]
    last_event_id: int
