"""
Auth orchestrator: provider dispatch, session issuance and the two
enrichment callbacks (token and session).
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .adapter import SQLAlchemyAdapter
from .auth import decode_session_token, encode_session_token
from .authorizer import authorize_credentials
from .config import Settings
from .errors import AuthError, CredentialsSignin, OAuthCallbackError, OAuthSignin, StoreUnavailable
from .models import User
from .oauth import exchange_code_for_token, get_oauth_authorize_url, get_profile
from .providers import CREDENTIALS, OAuthProvider, Provider, build_providers
from .utils.event_logger import log_auth_event

logger = logging.getLogger(__name__)

OAUTH_ACCOUNT_NOT_LINKED = "OAuthAccountNotLinked"


@dataclass
class SignInResult:
    session_token: str
    expires: datetime
    user: User


class AuthOrchestrator:
    def __init__(self, settings: Settings, providers: Optional[Dict[str, Provider]] = None):
        self.settings = settings
        self.providers = providers if providers is not None else build_providers(settings)

    @property
    def strategy(self) -> str:
        return self.settings.SESSION_STRATEGY

    @property
    def max_age(self) -> timedelta:
        return timedelta(seconds=self.settings.SESSION_MAX_AGE_SECONDS)

    def get_provider(self, provider_id: str) -> Provider:
        try:
            return self.providers[provider_id]
        except KeyError:
            raise OAuthSignin(f"Unknown provider: {provider_id}") from None

    def get_oauth_provider(self, provider_id: str) -> OAuthProvider:
        provider = self.get_provider(provider_id)
        if not isinstance(provider, OAuthProvider):
            raise OAuthSignin(f"Provider {provider_id} does not support redirects")
        if not provider.is_configured:
            raise AuthError(f"Provider {provider_id} is missing client credentials")
        return provider

    def callback_url(self, provider_id: str) -> str:
        return f"{self.settings.AUTH_URL.rstrip('/')}/api/auth/callback/{provider_id}"

    # Callbacks

    def jwt_callback(self, token: Dict[str, Any], user: Optional[User] = None) -> Dict[str, Any]:
        """Copy the user id into the token on initial sign-in only."""
        if user is not None:
            token["id"] = user.id
        return token

    def session_callback(self, session: Dict[str, Any], token: Mapping[str, Any]) -> Dict[str, Any]:
        """Copy the token's id claim onto the session user."""
        if session.get("user") is not None:
            session["user"]["id"] = token.get("id")
        return session

    # Sign-in

    def sign_in(self, provider_id: str, db: Session, credentials: Optional[Mapping[str, Any]] = None) -> SignInResult:
        """
        Sign in with the credentials provider.

        Raises:
            CredentialsSignin: credentials did not match a user
            StoreUnavailable: the user store could not be queried
            OAuthSignin: provider is unknown or not a credentials provider
        """
        provider = self.get_provider(provider_id)
        if provider.id != CREDENTIALS:
            raise OAuthSignin(f"Provider {provider_id} signs in through a redirect")

        user = authorize_credentials(credentials, db)
        if user is None:
            email = credentials.get("email") if credentials else None
            log_auth_event("signin_failure", email=email if isinstance(email, str) else None, provider=provider_id)
            raise CredentialsSignin("Invalid credentials")

        result = self._issue_session(db, user)
        log_auth_event("signin_success", user_id=user.id, email=user.email, provider=provider_id)
        return result

    def authorization_url(self, provider_id: str, state: str) -> str:
        provider = self.get_oauth_provider(provider_id)
        return get_oauth_authorize_url(provider, self.callback_url(provider_id), state)

    def complete_oauth_sign_in(self, provider_id: str, code: str, db: Session) -> SignInResult:
        """
        Finish an OAuth sign-in: exchange the code, find or create the user,
        link the account on first sign-in and issue a session.

        Raises:
            OAuthCallbackError: the provider rejected the code or profile fetch
            AuthError: the email belongs to a user without this account linked
        """
        provider = self.get_oauth_provider(provider_id)
        timeout = self.settings.OAUTH_TIMEOUT_SECONDS
        try:
            tokens = exchange_code_for_token(provider, code, self.callback_url(provider_id), timeout=timeout)
            profile = get_profile(provider, tokens["access_token"], timeout=timeout)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("OAuth callback for %s failed: %s", provider_id, e)
            raise OAuthCallbackError(f"{provider.name} callback failed") from e

        adapter = SQLAlchemyAdapter(db)
        try:
            user = adapter.get_user_by_account(provider_id, profile["id"])
            if user is None:
                if profile.get("email") and adapter.get_user_by_email(profile["email"]):
                    raise AuthError(
                        "Email is already registered with a different sign-in method",
                        type=OAUTH_ACCOUNT_NOT_LINKED,
                    )
                user = adapter.create_user(
                    name=profile.get("name"),
                    email=profile.get("email"),
                    image=profile.get("image"),
                    email_verified=datetime.utcnow() if profile.get("email") else None,
                )
                expires_in = tokens.get("expires_in")
                adapter.link_account(
                    user,
                    type=provider.type,
                    provider=provider_id,
                    provider_account_id=profile["id"],
                    access_token=tokens.get("access_token"),
                    refresh_token=tokens.get("refresh_token"),
                    expires_at=int(datetime.utcnow().timestamp()) + int(expires_in) if expires_in else None,
                    token_type=tokens.get("token_type"),
                    scope=tokens.get("scope"),
                    id_token=tokens.get("id_token"),
                )
                log_auth_event("account_linked", user_id=user.id, email=user.email, provider=provider_id)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("OAuth callback for %s could not persist user: %s", provider_id, e)
            raise StoreUnavailable("User store unavailable") from e

        result = self._issue_session(db, user)
        log_auth_event("signin_success", user_id=user.id, email=user.email, provider=provider_id)
        return result

    def _issue_session(self, db: Session, user: User) -> SignInResult:
        expires = datetime.utcnow() + self.max_age
        if self.strategy == "database":
            session_token = secrets.token_urlsafe(32)
            SQLAlchemyAdapter(db).create_session(user, session_token, expires)
            return SignInResult(session_token=session_token, expires=expires, user=user)

        token = {"sub": user.id, "name": user.name, "email": user.email, "picture": user.image}
        token = self.jwt_callback(token, user)
        return SignInResult(session_token=self._encode(token), expires=expires, user=user)

    def _encode(self, token: Mapping[str, Any]) -> str:
        return encode_session_token(dict(token), self.settings.AUTH_SECRET, self.settings.SESSION_MAX_AGE_SECONDS)

    # Session reads

    def get_session(self, session_token: Optional[str], db: Optional[Session] = None) -> Optional[Tuple[Dict[str, Any], str]]:
        """
        Resolve a session cookie into the public session object.

        Returns the session and the refreshed cookie value, or None when the
        cookie is absent, invalid or expired.
        """
        if not session_token:
            return None

        expires = datetime.utcnow() + self.max_age
        if self.strategy == "database":
            if db is None:
                raise AuthError("Database session strategy needs a database session")
            adapter = SQLAlchemyAdapter(db)
            found = adapter.get_session_and_user(session_token)
            if found is None:
                return None
            record, user = found
            adapter.update_session_expiry(record, expires)
            session = {"user": {"name": user.name, "email": user.email, "image": user.image},
                       "expires": expires.isoformat() + "Z"}
            return self.session_callback(session, {"id": user.id}), session_token

        claims = decode_session_token(session_token, self.settings.AUTH_SECRET)
        if claims is None:
            return None
        token = self.jwt_callback(claims)
        session = {
            "user": {"name": token.get("name"), "email": token.get("email"), "image": token.get("picture")},
            "expires": expires.isoformat() + "Z",
        }
        return self.session_callback(session, token), self._encode(token)

    def is_logged_in(self, session_token: Optional[str], db: Optional[Session] = None) -> bool:
        if not session_token:
            return False
        if self.strategy == "database":
            return db is not None and SQLAlchemyAdapter(db).get_session_and_user(session_token) is not None
        return decode_session_token(session_token, self.settings.AUTH_SECRET) is not None

    def sign_out(self, session_token: Optional[str], db: Optional[Session] = None) -> None:
        if not session_token:
            return
        user_id = None
        if self.strategy == "database" and db is not None:
            found = SQLAlchemyAdapter(db).get_session_and_user(session_token)
            if found is not None:
                user_id = found[1].id
            SQLAlchemyAdapter(db).delete_session(session_token)
        else:
            claims = decode_session_token(session_token, self.settings.AUTH_SECRET)
            user_id = claims.get("id") if claims else None
        log_auth_event("signout", user_id=user_id)
