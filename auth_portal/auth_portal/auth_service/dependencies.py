"""
Request-scoped accessors for process-wide state and cookie helpers.
"""
from typing import Any, Dict, Optional

from fastapi import Request, Response

from .config import Settings
from .orchestrator import AuthOrchestrator

STATE_COOKIE_NAME = "authjs.state"
STATE_COOKIE_MAX_AGE = 15 * 60


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_orchestrator(request: Request) -> AuthOrchestrator:
    return request.app.state.orchestrator


def get_session_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(get_app_settings(request).SESSION_COOKIE_NAME)


async def read_json_body(request: Request) -> Any:
    """Parsed JSON body, or None when it is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


async def read_credentials(request: Request) -> Dict[str, Any]:
    """Credentials from a JSON object body or a form post."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
    form = await request.form()
    return {key: value for key, value in form.items()}


def safe_redirect_target(target: Optional[str], default: str) -> str:
    """Only same-site absolute paths are followed."""
    if isinstance(target, str) and target.startswith("/") and not target.startswith("//"):
        return target
    return default


def set_session_cookie(response: Response, settings: Settings, value: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=value,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


def set_state_cookie(response: Response, settings: Settings, state: str) -> None:
    response.set_cookie(
        key=STATE_COOKIE_NAME,
        value=state,
        max_age=STATE_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )
