"""
Logging setup and event logger utility for authentication events.
"""
from datetime import datetime
from typing import Optional
import sys
import logging
import os

logger = logging.getLogger("auth_portal.auth_events")


ALLOWED_EVENT_TYPES = {
    "signin_success",
    "signin_failure",
    "signout",
    "register",
    "register_duplicate",
    "account_linked",
}


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Configure stdout logging, plus a file handler under ``log_dir`` when it
    can be created.
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(log_dir, "auth_events.log")))
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )


def log_auth_event(
    event_type: str,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    provider: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> None:
    """
    Emit one log line for an authentication event.

    Args:
        event_type: One of ALLOWED_EVENT_TYPES
        user_id: Id of the user involved, if known
        email: Email submitted or stored for the user, if any
        provider: Provider id (credentials, github, google)
        metadata: Optional dictionary of additional context

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    logger.info(
        "AUTH %s user_id=%s email=%s provider=%s metadata=%s timestamp=%s",
        event_type, user_id, email, provider, metadata or {}, datetime.utcnow().isoformat()
    )
