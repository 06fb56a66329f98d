"""OAuth response models for Google authentication.

These are plain (non-table) models describing what Google's token and
userinfo endpoints return. They are validated on receipt and handed to the
token store, never persisted as-is.
"""

from sqlmodel import SQLModel


class Tokens(SQLModel):
    """Token endpoint response.

    Google omits ``refresh_token`` when the user has already consented and
    the authorization did not force a new one.

    Attributes:
        access_token: Short-lived bearer token for API requests.
        expires_in: Lifetime of the access token in seconds.
        refresh_token: Long-lived token, only present on (re-)consent.
        scope: Space-separated list of granted scopes.
        token_type: Normally "Bearer".
    """
    access_token: str
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None
    token_type: str | None = None


class Identity(SQLModel):
    """The authenticated account as reported by the userinfo endpoint."""
    email: str
    id: str | None = None
