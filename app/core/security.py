"""Session and anti-forgery cookies.

The session cookie (``uid``) carries the user's email signed with
itsdangerous, so the value is an HMAC over the email and its issue time.
It is verified, including its age, on every protected request.
"""
import logging
import secrets

from fastapi.responses import Response
from itsdangerous import BadSignature, URLSafeTimedSerializer

from app.core.config import settings

logger = logging.getLogger(__name__)

SESSION_COOKIE = "uid"
SESSION_MAX_AGE = 60 * 60 * 24 * 30  # 30 days

STATE_COOKIE = "oauth_state"
STATE_MAX_AGE = 60 * 10  # 10 minutes


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.secret_key, salt="calendar-assistant-session")


def sign_session(email: str) -> str:
    """Produce the signed cookie value identifying ``email``."""
    return _serializer().dumps(email)


def read_session(value: str | None) -> str | None:
    """Return the email held by a session cookie, or None if it is not trusted.

    Missing, tampered and expired cookies are all treated the same way.
    """
    if not value:
        return None
    try:
        return _serializer().loads(value, max_age=SESSION_MAX_AGE)
    except BadSignature as e:
        logger.info(f"Rejected session cookie: {e.__class__.__name__}")
        return None


def new_state() -> str:
    """Generate a one-time anti-forgery token for the OAuth redirect."""
    return secrets.token_urlsafe(16)


def states_match(expected: str | None, received: str | None) -> bool:
    if not expected or not received:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))


def set_cookie(response: Response, name: str, value: str, max_age: int) -> None:
    response.set_cookie(
        name,
        value,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_cookie(response: Response, name: str) -> None:
    response.delete_cookie(
        name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
