from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LoginSession(BaseModel):
    """Representation of a login session to the Scratch website."""

    username: str
    session_id: str
    csrf_token: str
    api_token: Optional[str] = None

    model_config = {"extra": "ignore"}


class UserHistory(BaseModel):
    joined: datetime

    model_config = {"extra": "ignore"}


class UserProfile(BaseModel):
    id: Optional[int] = None
    status: Optional[str] = ""  # "What I'm working on"
    bio: Optional[str] = ""  # "About me"
    country: Optional[str] = ""

    model_config = {"extra": "ignore"}


class ProjectAuthor(BaseModel):
    id: Optional[int] = None
    username: str
    scratchteam: bool = False

    # Allow extra fields for forward compatibility
    model_config = {"extra": "ignore"}
