"""Request dependencies for identifying the signed-in user."""
from fastapi import Cookie, Depends
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from app.auth.tokens import get_valid_access_token
from app.core.database import get_session
from app.core.exceptions import SessionMissingError
from app.core.security import read_session


def get_current_email(uid: str | None = Cookie(default=None)) -> str:
    """Resolve the email from the signed session cookie, or fail with 401."""
    email = read_session(uid)
    if not email:
        raise SessionMissingError()
    return email


async def get_access_token(
    email: str = Depends(get_current_email),
    session: Session = Depends(get_session),
) -> str:
    """Fresh Google access token for the signed-in user, refreshing if needed."""
    access_token = await run_in_threadpool(get_valid_access_token, session, email)
    if not access_token:
        raise SessionMissingError("No tokens. Re-auth at /auth/google")
    return access_token
