"""
Form action endpoints for the sign-in page.
"""
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..actions import do_credential_login, do_sign_out, do_social_login
from ..config import Settings
from ..db import get_db
from ..dependencies import (
    clear_session_cookie,
    get_app_settings,
    get_orchestrator,
    get_session_cookie,
    read_credentials,
    set_session_cookie,
    set_state_cookie,
)
from ..errors import AuthError, CREDENTIALS_SIGNIN, OAUTH_SIGNIN, STORE_UNAVAILABLE
from ..orchestrator import AuthOrchestrator
from ..schemas import ActionError

router = APIRouter(prefix="/actions", tags=["actions"])

ERROR_STATUS = {
    CREDENTIALS_SIGNIN: 401,
    STORE_UNAVAILABLE: 503,
}


@router.post("/credential-login", responses={401: {"model": ActionError}})
def credential_login(
    data: dict = Depends(read_credentials),
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
):
    result = do_credential_login(data, orchestrator, db)
    if result.error:
        return JSONResponse({"error": result.error}, status_code=ERROR_STATUS.get(result.error_type, 400))

    response = RedirectResponse(url=result.redirect_to, status_code=303)
    set_session_cookie(response, settings, result.sign_in.session_token)
    return response


@router.post("/social-login/{provider}")
def social_login(
    provider: str,
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
):
    state = secrets.token_urlsafe(24)
    try:
        result = do_social_login(provider, state, orchestrator)
    except AuthError as error:
        status_code = 404 if error.type == OAUTH_SIGNIN else 503
        raise HTTPException(status_code=status_code, detail=str(error)) from error

    response = RedirectResponse(url=result.redirect_to, status_code=303)
    set_state_cookie(response, settings, state)
    return response


@router.post("/sign-out")
def sign_out(
    session_token: Optional[str] = Depends(get_session_cookie),
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
):
    result = do_sign_out(session_token, orchestrator, db)
    response = RedirectResponse(url=result.redirect_to, status_code=303)
    clear_session_cookie(response, settings)
    return response
