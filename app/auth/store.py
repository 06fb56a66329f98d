"""Token store: one row of Google credentials per user email."""
import logging
import time
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert
from sqlmodel import Session, select

from app.models import User

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600  # seconds, when Google does not say


def get_user_by_email(session: Session, email: str) -> User | None:
    """Look up a user by email. Returns None when no row exists."""
    statement = select(User).where(User.email == email)
    return session.exec(statement).first()


def upsert_user(
    session: Session,
    email: str,
    *,
    refresh_token: str | None,
    access_token: str,
    expires_in: int | None = None,
    now: int | None = None,
) -> None:
    """
    Insert or update the credentials for ``email`` in one statement.

    The access token and its expiry (``now + expires_in``, one hour by
    default) are always overwritten together. An empty ``refresh_token``
    keeps whatever refresh token is already stored, because Google omits it
    when the user has consented before.
    """
    now = int(time.time()) if now is None else now
    expires_at = now + (expires_in or DEFAULT_EXPIRES_IN)

    statement = insert(User).values(
        id=uuid4(),
        email=email,
        google_refresh_token=refresh_token or "",
        google_access_token=access_token,
        google_access_token_expires_at=expires_at,
    )
    statement = statement.on_conflict_do_update(
        index_elements=["email"],
        set_={
            "google_refresh_token": func.coalesce(
                func.nullif(statement.excluded.google_refresh_token, ""),
                User.google_refresh_token,
            ),
            "google_access_token": statement.excluded.google_access_token,
            "google_access_token_expires_at": statement.excluded.google_access_token_expires_at,
        },
    )
    session.exec(statement)
    session.commit()
    logger.debug(f"Stored credentials for {email}, access token expires at {expires_at}")
