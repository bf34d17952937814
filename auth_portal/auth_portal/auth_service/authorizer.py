"""
Credentials authorizer: email/password check against the user store.
"""
import logging
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import verify_password
from .errors import StoreUnavailable
from .models import User

logger = logging.getLogger(__name__)


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).one_or_none()


def authorize_credentials(credentials: Optional[Mapping[str, Any]], db: Session) -> Optional[User]:
    """
    Return the user matching ``credentials`` or None.

    Fails closed: absent or malformed credentials, unknown email, a user with
    no stored hash, or a hash that cannot be verified all yield None.

    Raises:
        StoreUnavailable: the user lookup itself failed
    """
    if credentials is None:
        return None

    email = credentials.get("email")
    password = credentials.get("password")
    if not isinstance(email, str) or not isinstance(password, str):
        return None

    try:
        user = find_user_by_email(db, email)
    except SQLAlchemyError as e:
        logger.error("Authorize error: user lookup failed: %s", e)
        raise StoreUnavailable("User store unavailable") from e

    if user is None or not user.password:
        return None

    try:
        is_password_correct = verify_password(password, user.password)
    except (ValueError, TypeError) as e:
        logger.error("Authorize error: stored hash for user_id=%s could not be verified: %s", user.id, e)
        return None

    return user if is_password_correct else None
