"""
Edge gate: per-request redirect rule evaluated before any route runs.
"""
import logging
import re
from typing import Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

API_AUTH_PREFIX = "/api/auth"
PUBLIC_ROUTES = ("/signin", "/signup")
PROTECTED_PREFIX = "/dashboard"
SIGNIN_PATH = "/signin"
DASHBOARD_PATH = "/dashboard"

API_AUTH = "api_auth"
PUBLIC = "public"
PROTECTED = "protected"
OTHER = "other"

# Static files and framework assets are never gated
_EXCLUDED = re.compile(r"^(?:.+\.\w+$|/_next)")


def is_gated_path(path: str) -> bool:
    return _EXCLUDED.match(path) is None


def classify_path(path: str) -> str:
    if path.startswith(API_AUTH_PREFIX):
        return API_AUTH
    if path in PUBLIC_ROUTES:
        return PUBLIC
    if path.startswith(PROTECTED_PREFIX):
        return PROTECTED
    return OTHER


def gate_decision(path: str, is_logged_in: bool) -> Optional[str]:
    """Return the path to redirect to, or None to let the request through."""
    path_class = classify_path(path)
    if path_class == PUBLIC and is_logged_in:
        return DASHBOARD_PATH
    if path_class == PROTECTED and not is_logged_in:
        return SIGNIN_PATH
    return None


class EdgeGateMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or not is_gated_path(scope["path"]):
            await self.app(scope, receive, send)
            return

        path = scope["path"]
        if classify_path(path) in (API_AUTH, OTHER):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        target = gate_decision(path, await self._is_logged_in(request))
        if target is None:
            await self.app(scope, receive, send)
            return

        logger.debug("Edge gate redirecting %s to %s", path, target)
        response = RedirectResponse(url=str(request.url.replace(path=target, query="")), status_code=302)
        await response(scope, receive, send)

    async def _is_logged_in(self, request: Request) -> bool:
        state = request.app.state
        session_token = request.cookies.get(state.settings.SESSION_COOKIE_NAME)
        if not session_token:
            return False
        if state.orchestrator.strategy == "database":
            return await run_in_threadpool(self._has_session_row, state, session_token)
        return state.orchestrator.is_logged_in(session_token)

    @staticmethod
    def _has_session_row(state, session_token: str) -> bool:
        with state.database.session() as db:
            return state.orchestrator.is_logged_in(session_token, db)
