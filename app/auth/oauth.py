"""Google OAuth2 client: authorization URL, code exchange, refresh, identity."""
import logging
from datetime import UTC, datetime
from urllib.parse import urlencode

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from app.core.exceptions import IdentityFetchError, RefreshError, TokenExchangeError
from app.models import Identity, Tokens

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
]


def build_authorization_url(client_id: str, redirect_uri: str, state: str) -> str:
    """
    Build the Google consent URL for the calendar scope.

    ``access_type=offline`` asks for a refresh token and ``prompt=consent``
    forces Google to issue a new one even for returning users.
    """
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(SCOPES),
        "access_type": "offline",
        "include_granted_scopes": "true",
        "prompt": "consent",
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def exchange_code(
    client: httpx.AsyncClient,
    code: str,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
) -> Tokens:
    """
    Exchange an authorization code for tokens.

    Raises:
        TokenExchangeError: On a non-2xx response or a network failure.
    """
    payload = {
        "code": code,
        "client_id": client_id,
        "client_secret": client_secret,
        "redirect_uri": redirect_uri,
        "grant_type": "authorization_code",
    }
    try:
        response = await client.post(GOOGLE_TOKEN_URL, data=payload)
    except httpx.TransportError as e:
        raise TokenExchangeError(message=f"Network error during token exchange: {e}") from e

    if not response.is_success:
        # Status only; the body may echo credentials
        logger.warning(f"Token exchange failed with HTTP {response.status_code}")
        raise TokenExchangeError(response.status_code)

    try:
        return Tokens.model_validate(response.json())
    except ValueError as e:
        raise TokenExchangeError(response.status_code, "Token endpoint returned an unusable body") from e


def refresh_access_token(refresh_token: str, client_id: str, client_secret: str) -> Tokens:
    """
    Mint a new access token from a refresh token.

    Blocking: google-auth performs the request with ``requests``.

    Raises:
        RefreshError: If Google rejects the refresh token or is unreachable.
    """
    credentials = Credentials(
        token=None,
        refresh_token=refresh_token,
        token_uri=GOOGLE_TOKEN_URL,
        client_id=client_id,
        client_secret=client_secret,
    )
    try:
        credentials.refresh(Request())
    except GoogleAuthError as e:
        logger.error(f"Failed to refresh credentials: {e}")
        raise RefreshError(message=f"Refresh failed: {e}") from e

    expires_in = None
    if credentials.expiry is not None:
        # google-auth reports expiry as a naive UTC datetime
        expiry = credentials.expiry.replace(tzinfo=UTC)
        expires_in = max(int((expiry - datetime.now(UTC)).total_seconds()), 0)

    logger.info("Refreshed Google access token")
    return Tokens(access_token=credentials.token, expires_in=expires_in)


async def fetch_identity(client: httpx.AsyncClient, access_token: str) -> Identity:
    """
    Fetch the email and account id behind an access token.

    Raises:
        IdentityFetchError: On a non-2xx response or a network failure.
    """
    try:
        response = await client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
    except httpx.TransportError as e:
        raise IdentityFetchError(message=f"Network error fetching user info: {e}") from e

    if not response.is_success:
        raise IdentityFetchError(response.status_code)

    try:
        data = response.json()
    except ValueError as e:
        raise IdentityFetchError(response.status_code, "User info response is not JSON") from e
    if not isinstance(data, dict) or not isinstance(data.get("email"), str) or not data["email"]:
        raise IdentityFetchError(response.status_code, "User info response has no email")
    account_id = data.get("id")
    return Identity(email=data["email"], id=str(account_id) if account_id is not None else None)
