"""
Utility functions for the OAuth flow. The handshake itself is the provider's;
these only build URLs and call its HTTP endpoints.
"""
from typing import Dict, Optional

import httpx

from .errors import OAuthCallbackError
from .providers import GITHUB, OAuthProvider

GITHUB_API_URL = "https://api.github.com"


def _account_id(provider: OAuthProvider, value) -> str:
    if value is None or value == "":
        raise OAuthCallbackError(f"{provider.name} profile has no account id")
    return str(value)


def get_oauth_authorize_url(provider: OAuthProvider, redirect_uri: str, state: str) -> str:
    """Build the provider authorize URL with client settings and state."""
    params = {
        "client_id": provider.client_id,
        "redirect_uri": redirect_uri,
        "scope": provider.scope,
        "state": state,
        "response_type": "code",
    }
    query = httpx.QueryParams({key: value for key, value in params.items() if value})
    return f"{provider.authorize_url}?{query}"


def exchange_code_for_token(provider: OAuthProvider, code: str, redirect_uri: str, timeout: float = 30) -> Dict:
    """
    Exchange an OAuth code for the provider's token response.

    Raises:
        OAuthCallbackError when the access token is missing in the response.
    """
    payload = {
        "client_id": provider.client_id,
        "client_secret": provider.client_secret,
        "code": code,
        "redirect_uri": redirect_uri,
        "grant_type": "authorization_code",
    }
    headers = {"Accept": "application/json"}
    response = httpx.post(provider.token_url, data=payload, headers=headers, timeout=timeout)
    response.raise_for_status()
    tokens = response.json()
    if not tokens.get("access_token"):
        raise OAuthCallbackError(f"{provider.name} token exchange failed")
    return tokens


def get_profile(provider: OAuthProvider, access_token: str, timeout: float = 30) -> Dict[str, Optional[str]]:
    """Fetch the user profile and normalize it to id/name/email/image."""
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/json",
    }
    with httpx.Client(timeout=timeout) as client:
        user_resp = client.get(provider.userinfo_url, headers=headers)
        user_resp.raise_for_status()
        data = user_resp.json()

        if provider.id == GITHUB:
            email = data.get("email")
            if not email:
                emails_resp = client.get(f"{GITHUB_API_URL}/user/emails", headers=headers)
                if emails_resp.status_code == 200:
                    for entry in emails_resp.json():
                        if entry.get("primary"):
                            email = entry.get("email")
                            break
            return {
                "id": _account_id(provider, data.get("id")),
                "name": data.get("name") or data.get("login"),
                "email": email,
                "image": data.get("avatar_url"),
            }

    return {
        "id": _account_id(provider, data.get("sub")),
        "name": data.get("name"),
        "email": data.get("email"),
        "image": data.get("picture"),
    }
