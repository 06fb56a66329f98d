"""Access-token freshness: reuse the cached token or refresh it."""
import logging
import time

from sqlmodel import Session

from app.auth.oauth import refresh_access_token
from app.auth.store import get_user_by_email, upsert_user
from app.core.config import settings

logger = logging.getLogger(__name__)

# Tokens expiring within this window are refreshed early to absorb clock
# skew and request latency.
EXPIRY_MARGIN_SECONDS = 60


def get_valid_access_token(session: Session, email: str, now: int | None = None) -> str | None:
    """
    Return a usable access token for ``email``.

    Returns None when no credentials are stored, meaning the user has to go
    through the OAuth flow again. A refresh failure raises ``RefreshError``;
    there is no retry.
    """
    user = get_user_by_email(session, email)
    if user is None:
        return None

    now = int(time.time()) if now is None else now
    if (
        user.google_access_token
        and user.google_access_token_expires_at
        and user.google_access_token_expires_at - EXPIRY_MARGIN_SECONDS > now
    ):
        return user.google_access_token

    logger.info(f"Access token for {email} missing or expiring, refreshing")
    refresh_token = user.google_refresh_token
    tokens = refresh_access_token(
        refresh_token,
        settings.google_client_id,
        settings.google_client_secret,
    )
    upsert_user(
        session,
        email,
        refresh_token=refresh_token,
        access_token=tokens.access_token,
        expires_in=tokens.expires_in,
        now=now,
    )
    return tokens.access_token
