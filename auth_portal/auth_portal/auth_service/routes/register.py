"""
Registration endpoint.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import hash_password
from ..config import Settings
from ..db import get_db
from ..dependencies import get_app_settings, read_json_body
from ..models import User
from ..schemas import RegisterRequest, RegisterResponse
from ..utils.event_logger import log_auth_event

router = APIRouter(prefix="/api/auth", tags=["register"])
logger = logging.getLogger(__name__)


def _reply(success: bool, message: str, status_code: int) -> JSONResponse:
    body = RegisterResponse(success=success, message=message)
    return JSONResponse(body.model_dump(), status_code=status_code)


@router.post("/register", response_model=RegisterResponse)
def register(
    body: Any = Depends(read_json_body),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Create a user from ``{name, email, password}``.

    The unique index on email is the only existence check: a conflicting
    insert is rolled back and reported as a duplicate (401), leaving the
    existing row untouched. Anything else is a generic 500.
    """
    try:
        payload = RegisterRequest.model_validate(body)
        hashed_pw = hash_password(payload.password, settings.PASSWORD_HASH_ROUNDS)

        new_user = User(name=payload.name, email=payload.email, password=hashed_pw)
        db.add(new_user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info("Registration rejected, email already exists: %s", payload.email)
            log_auth_event("register_duplicate", email=payload.email, provider="credentials")
            return _reply(False, "Email already exists", 401)

        log_auth_event("register", user_id=new_user.id, email=payload.email, provider="credentials")
        return _reply(True, "User created successfully", 200)

    except Exception as e:
        db.rollback()
        logger.error("Registration error: %s", e)
        return _reply(False, "Something went wrong", 500)
