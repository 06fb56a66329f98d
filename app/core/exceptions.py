"""Error taxonomy for the calendar assistant.

Every error carries the HTTP status it should be surfaced with. Nothing is
retried or recovered internally: handlers registered in ``app.main`` turn
these exceptions straight into responses.
"""


class CalendarAssistantError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthStateError(CalendarAssistantError):
    """The anti-forgery ``state`` is missing or does not match its cookie."""

    status_code = 400
    default_message = "Invalid OAuth state"


class NoRefreshTokenError(CalendarAssistantError):
    """Google withheld a refresh token and none was stored previously."""

    status_code = 400
    default_message = (
        "No refresh token. Remove app access at "
        "myaccount.google.com/permissions and retry."
    )


class SessionMissingError(CalendarAssistantError):
    """No session cookie, an invalid signature, or no stored credentials."""

    status_code = 401
    default_message = "Unauthorized"


class UpstreamApiError(CalendarAssistantError):
    """A non-2xx response (or transport failure) from an external service.

    Attributes:
        service: Which upstream failed ("oauth", "userinfo", "calendar", "llm").
        status: The upstream HTTP status, or None when no response was received.
    """

    status_code = 502
    service: str = "upstream"
    label: str = "Upstream request failed"

    def __init__(self, status: int | None = None, message: str | None = None):
        self.status = status
        if message is None:
            message = f"{self.label}: {status}" if status is not None else self.label
        super().__init__(message)


class TokenExchangeError(UpstreamApiError):
    service = "oauth"
    label = "Token exchange failed"


class RefreshError(UpstreamApiError):
    """Refreshing the access token failed; the user must re-authorize."""

    status_code = 401
    service = "oauth"
    label = "Refresh failed"


class IdentityFetchError(UpstreamApiError):
    service = "userinfo"
    label = "Failed to fetch user info"


class CalendarApiError(UpstreamApiError):
    service = "calendar"
    label = "Calendar API error"


class LlmTransportError(UpstreamApiError):
    service = "llm"
    label = "LLM API error"


class LlmResponseError(CalendarAssistantError):
    """The model answered, but its output cannot be used as an event.

    Attributes:
        reason: Short machine-readable reason ("empty", "malformed_json",
            "incomplete_event").
    """

    status_code = 502
    reason: str = "invalid"


class LlmEmptyResponseError(LlmResponseError):
    reason = "empty"
    default_message = "No content from model"


class LlmMalformedJsonError(LlmResponseError):
    reason = "malformed_json"
    default_message = "Model did not return JSON"


class LlmIncompleteEventError(LlmResponseError):
    reason = "incomplete_event"
    default_message = "Incomplete event data from model"

