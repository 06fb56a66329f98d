"""Authentication routes: Google OAuth redirect and callback, session endpoints."""
import logging

import httpx
from fastapi import APIRouter, Cookie, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, RedirectResponse
from sqlmodel import Session

from app.auth.dependencies import get_current_email
from app.auth.oauth import build_authorization_url, exchange_code, fetch_identity
from app.auth.store import get_user_by_email, upsert_user
from app.core.config import settings
from app.core.database import get_session
from app.core.exceptions import AuthStateError, NoRefreshTokenError
from app.core.http import get_http_client
from app.core.security import (
    SESSION_COOKIE,
    SESSION_MAX_AGE,
    STATE_COOKIE,
    STATE_MAX_AGE,
    clear_cookie,
    new_state,
    set_cookie,
    sign_session,
    states_match,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def redirect_uri_for(request: Request) -> str:
    """Callback URL on the same origin the request came in on."""
    origin = str(request.base_url).rstrip("/")
    return f"{origin}{settings.oauth_redirect_path}"


@router.get("/auth/google")
async def start_authorization(request: Request):
    """
    Start the Google OAuth flow.

    Issues a fresh anti-forgery state, remembers it in a short-lived cookie
    and redirects the browser to Google's consent screen.
    """
    state = new_state()
    url = build_authorization_url(settings.google_client_id, redirect_uri_for(request), state)
    response = RedirectResponse(url, status_code=302)
    set_cookie(response, STATE_COOKIE, state, STATE_MAX_AGE)
    return response


@router.get(settings.oauth_redirect_path)
async def oauth_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    oauth_state: str | None = Cookie(default=None),
    session: Session = Depends(get_session),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Complete the Google OAuth flow.

    Verifies the state, exchanges the code, looks up who signed in and
    stores their credentials. When Google does not return a refresh token
    (the user consented before) the stored one is kept; if there is none,
    the sign-in is refused and no session is created.
    """
    if not code or not states_match(oauth_state, state):
        raise AuthStateError()

    tokens = await exchange_code(
        client,
        code,
        settings.google_client_id,
        settings.google_client_secret,
        redirect_uri_for(request),
    )
    identity = await fetch_identity(client, tokens.access_token)

    existing = await run_in_threadpool(get_user_by_email, session, identity.email)
    refresh_token = tokens.refresh_token or (existing.google_refresh_token if existing else None)
    if not refresh_token:
        logger.warning(f"No refresh token available for {identity.email}")
        raise NoRefreshTokenError()

    await run_in_threadpool(
        upsert_user,
        session,
        identity.email,
        refresh_token=refresh_token,
        access_token=tokens.access_token,
        expires_in=tokens.expires_in,
    )
    logger.info(f"User {identity.email} authenticated")

    response = PlainTextResponse("Authenticated. You can now call /api/calendar endpoints.")
    set_cookie(response, SESSION_COOKIE, sign_session(identity.email), SESSION_MAX_AGE)
    clear_cookie(response, STATE_COOKIE)
    return response


@router.get("/api/me")
async def me(email: str = Depends(get_current_email)):
    """Return the signed-in user's email."""
    return {"email": email}


@router.get("/logout")
async def logout():
    """Clear the session cookie and go back to the front page."""
    response = RedirectResponse("/", status_code=302)
    clear_cookie(response, SESSION_COOKIE)
    return response
