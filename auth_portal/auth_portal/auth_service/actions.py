"""
Form actions wrapping the orchestrator's sign-in and sign-out.

Authentication failures come back as a structured ``error`` instead of an
exception; anything else propagates.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from .errors import AuthError, CREDENTIALS_SIGNIN
from .orchestrator import AuthOrchestrator, SignInResult
from .providers import CREDENTIALS

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials."
GENERIC_ERROR_MESSAGE = "Something went wrong."


@dataclass
class ActionResult:
    redirect_to: Optional[str] = None
    sign_in: Optional[SignInResult] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


def do_credential_login(data: Mapping[str, Any], orchestrator: AuthOrchestrator, db: Session) -> ActionResult:
    """Login with email and password, from a form post or a JSON object."""
    credentials = {"email": data.get("email"), "password": data.get("password")}
    try:
        result = orchestrator.sign_in(CREDENTIALS, db, credentials)
    except AuthError as error:
        if error.type == CREDENTIALS_SIGNIN:
            return ActionResult(error=INVALID_CREDENTIALS_MESSAGE, error_type=error.type)
        return ActionResult(error=GENERIC_ERROR_MESSAGE, error_type=error.type)
    return ActionResult(redirect_to=orchestrator.settings.DASHBOARD_PAGE, sign_in=result)


def do_social_login(provider: str, state: str, orchestrator: AuthOrchestrator) -> ActionResult:
    return ActionResult(redirect_to=orchestrator.authorization_url(provider, state))


def do_sign_out(session_token: Optional[str], orchestrator: AuthOrchestrator, db: Session) -> ActionResult:
    orchestrator.sign_out(session_token, db)
    return ActionResult(redirect_to=orchestrator.settings.SIGNOUT_REDIRECT)
