"""
Provider registry: credentials, GitHub and Google.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from .config import Settings

CREDENTIALS = "credentials"
GITHUB = "github"
GOOGLE = "google"


@dataclass(frozen=True)
class Provider:
    id: str
    name: str
    type: str

    def to_dict(self, base_url: str) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "signinUrl": f"{base_url}/api/auth/signin/{self.id}",
            "callbackUrl": f"{base_url}/api/auth/callback/{self.id}",
        }


@dataclass(frozen=True)
class CredentialsProvider(Provider):
    id: str = CREDENTIALS
    name: str = "Credentials"
    type: str = "credentials"


@dataclass(frozen=True)
class OAuthProvider(Provider):
    client_id: Optional[str] = None
    client_secret: Optional[str] = field(default=None, repr=False)
    authorize_url: str = ""
    token_url: str = ""
    userinfo_url: str = ""
    scope: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


def github_provider(client_id: Optional[str], client_secret: Optional[str]) -> OAuthProvider:
    return OAuthProvider(
        id=GITHUB,
        name="GitHub",
        type="oauth",
        client_id=client_id,
        client_secret=client_secret,
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        userinfo_url="https://api.github.com/user",
        scope="read:user user:email",
    )


def google_provider(client_id: Optional[str], client_secret: Optional[str]) -> OAuthProvider:
    return OAuthProvider(
        id=GOOGLE,
        name="Google",
        type="oidc",
        client_id=client_id,
        client_secret=client_secret,
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        userinfo_url="https://openidconnect.googleapis.com/v1/userinfo",
        scope="openid email profile",
    )


def build_providers(settings: Settings) -> Dict[str, Provider]:
    """Providers keyed by id, in sign-in page order."""
    providers = [
        github_provider(settings.GITHUB_ID, settings.GITHUB_SECRET),
        google_provider(settings.GOOGLE_CLIENT_ID, settings.GOOGLE_CLIENT_SECRET),
        CredentialsProvider(),
    ]
    return {provider.id: provider for provider in providers}
