"""User model holding each account's Google credentials.

This module defines the User model, the single table of the application.
One row exists per Google account that has completed the OAuth flow; the
email address is the natural key and is what the session cookie identifies.
"""

from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """A signed-in user and their Google OAuth credentials.

    The refresh token is long-lived and never replaced by an empty value.
    The access token is a short-lived cache of the last bearer token minted
    from it; it and its expiry are always written together.

    Attributes:
        id: Unique identifier (UUID), generated at first insert.
        email: Google account email. Unique.
        google_refresh_token: Credential used to mint new access tokens.
        google_access_token: Last-issued bearer token, may be stale or absent.
        google_access_token_expires_at: Expiry of the access token in epoch
            seconds.
    """
    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(index=True, unique=True)
    google_refresh_token: str
    google_access_token: str | None = None
    google_access_token_expires_at: int | None = None
