from passlib.context import CryptContext
from datetime import datetime, timedelta
from typing import Optional
import jwt

from .config import get_settings

ALGORITHM = "HS256"

_contexts = {}


def get_pwd_context(rounds: Optional[int] = None) -> CryptContext:
    """Hashing context with a fixed cost factor, one per distinct rounds value."""
    if rounds is None:
        rounds = get_settings().PASSWORD_HASH_ROUNDS
    if rounds not in _contexts:
        # Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
        _contexts[rounds] = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__rounds=rounds,
        )
    return _contexts[rounds]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    if not isinstance(password, str):
        raise TypeError("password must be a string")
    return get_pwd_context(rounds).hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return get_pwd_context().verify(plain_password, hashed_password)


def encode_session_token(claims: dict, secret: str, max_age_seconds: int) -> str:
    """Sign ``claims`` with a fresh issued-at and expiry."""
    now = datetime.utcnow()
    payload = {k: v for k, v in claims.items() if k not in ("iat", "exp")}
    payload["iat"] = now
    payload["exp"] = now + timedelta(seconds=max_age_seconds)
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_session_token(token: str, secret: str) -> Optional[dict]:
    """Return the claims of a valid token, or None if it is invalid or expired."""
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None
