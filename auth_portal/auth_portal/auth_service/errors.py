"""
Authentication error taxonomy.
"""
from typing import Optional

CREDENTIALS_SIGNIN = "CredentialsSignin"
OAUTH_SIGNIN = "OAuthSignin"
OAUTH_CALLBACK_ERROR = "OAuthCallbackError"
CONFIGURATION = "Configuration"
STORE_UNAVAILABLE = "StoreUnavailable"


class AuthError(Exception):
    """Raised by the orchestrator when a sign-in cannot be completed."""

    type = CONFIGURATION

    def __init__(self, message: Optional[str] = None, type: Optional[str] = None):
        if type is not None:
            self.type = type
        super().__init__(message or self.type)


class CredentialsSignin(AuthError):
    type = CREDENTIALS_SIGNIN


class OAuthSignin(AuthError):
    type = OAUTH_SIGNIN


class OAuthCallbackError(AuthError):
    type = OAUTH_CALLBACK_ERROR


class StoreUnavailable(AuthError):
    """The user store could not be queried; distinct from bad credentials."""

    type = STORE_UNAVAILABLE
