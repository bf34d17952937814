from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SessionStatus(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


# Registration: untrusted body, fields only checked for type
class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: str


class RegisterResponse(BaseModel):
    success: bool
    message: str


class SessionUser(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None


class SessionOut(BaseModel):
    user: SessionUser
    expires: str


class SessionStatusOut(BaseModel):
    status: SessionStatus
    session: Optional[SessionOut] = None


class ActionError(BaseModel):
    error: str
