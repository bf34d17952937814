"""
Auth routes mounted under /api/auth: providers, session, credential and
OAuth callbacks, sign-in redirects and sign-out.
"""
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..config import Settings
from ..db import get_db
from ..dependencies import (
    STATE_COOKIE_NAME,
    clear_session_cookie,
    get_app_settings,
    get_orchestrator,
    get_session_cookie,
    read_credentials,
    safe_redirect_target,
    set_session_cookie,
    set_state_cookie,
)
from ..errors import AuthError, OAUTH_CALLBACK_ERROR, OAUTH_SIGNIN
from ..orchestrator import AuthOrchestrator
from ..providers import CREDENTIALS
from ..schemas import SessionOut

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _error_redirect(settings: Settings, error_type: str) -> RedirectResponse:
    return RedirectResponse(url=f"{settings.SIGNIN_PAGE}?error={error_type}", status_code=302)


@router.get("/providers")
def list_providers(
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
):
    base_url = settings.AUTH_URL.rstrip("/")
    return {provider_id: provider.to_dict(base_url) for provider_id, provider in orchestrator.providers.items()}


@router.get("/session", response_model=Optional[SessionOut])
def read_session(
    response: Response,
    session_token: Optional[str] = Depends(get_session_cookie),
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
):
    """
    Return the session object for the current cookie, or null.

    Each read re-issues the cookie with a fresh expiry.
    """
    resolved = orchestrator.get_session(session_token, db)
    if resolved is None:
        if session_token:
            clear_session_cookie(response, settings)
        return None
    session, refreshed_token = resolved
    set_session_cookie(response, settings, refreshed_token)
    return session


@router.post("/callback/credentials")
def credentials_callback(
    credentials: dict = Depends(read_credentials),
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
):
    try:
        result = orchestrator.sign_in(CREDENTIALS, db, credentials)
    except AuthError as error:
        return _error_redirect(settings, error.type)

    target = safe_redirect_target(credentials.get("redirectTo"), settings.DASHBOARD_PAGE)
    response = RedirectResponse(url=target, status_code=302)
    set_session_cookie(response, settings, result.session_token)
    return response


@router.get("/signin/{provider}")
def oauth_signin(
    provider: str,
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
):
    state = secrets.token_urlsafe(24)
    try:
        url = orchestrator.authorization_url(provider, state)
    except AuthError as error:
        if error.type == OAUTH_SIGNIN:
            raise HTTPException(status_code=404, detail=str(error)) from error
        logger.warning("Sign-in with %s unavailable: %s", provider, error)
        return _error_redirect(settings, error.type)

    response = RedirectResponse(url=url, status_code=302)
    set_state_cookie(response, settings, state)
    return response


@router.get("/callback/{provider}")
def oauth_callback(
    provider: str,
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
):
    expected_state = request.cookies.get(STATE_COOKIE_NAME)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("OAuth callback for %s rejected: missing code or state mismatch", provider)
        return _error_redirect(settings, OAUTH_CALLBACK_ERROR)

    try:
        result = orchestrator.complete_oauth_sign_in(provider, code, db)
    except AuthError as error:
        if error.type == OAUTH_SIGNIN:
            raise HTTPException(status_code=404, detail=str(error)) from error
        return _error_redirect(settings, error.type)

    response = RedirectResponse(url=settings.DASHBOARD_PAGE, status_code=302)
    set_session_cookie(response, settings, result.session_token)
    response.delete_cookie(STATE_COOKIE_NAME, path="/")
    return response


@router.post("/signout")
def signout(
    session_token: Optional[str] = Depends(get_session_cookie),
    orchestrator: AuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
):
    orchestrator.sign_out(session_token, db)
    response = RedirectResponse(url=settings.SIGNOUT_REDIRECT, status_code=302)
    clear_session_cookie(response, settings)
    return response
