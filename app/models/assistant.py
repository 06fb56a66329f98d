"""Request model for natural-language scheduling."""

from sqlmodel import Field, SQLModel


class ScheduleRequest(SQLModel):
    """Body of ``POST /api/assistant/schedule``.

    Attributes:
        query: Free-text description of the event to create.
        timeZone: IANA time zone used to resolve relative dates.
        defaultDurationMinutes: Event length when the text gives no end time.
    """
    query: str | None = None
    timeZone: str | None = None
    defaultDurationMinutes: int | None = Field(default=None, gt=0)
