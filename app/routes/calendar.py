"""Calendar routes forwarding to the Google Calendar API."""
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.concurrency import run_in_threadpool

from app.auth.dependencies import get_access_token
from app.calendar.client import create_event, list_events

router = APIRouter(prefix="/api/calendar", tags=["calendar"])

DEFAULT_WINDOW = timedelta(days=7)


def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("/events")
async def get_events(
    timeMin: str | None = None,
    timeMax: str | None = None,
    access_token: str = Depends(get_access_token),
):
    """
    List events on the primary calendar.

    The window defaults to the next seven days. The Calendar API response
    is returned unchanged.
    """
    now = datetime.now(UTC)
    time_min = timeMin or _iso(now)
    time_max = timeMax or _iso(now + DEFAULT_WINDOW)
    return await run_in_threadpool(list_events, access_token, time_min, time_max)


@router.post("/events")
async def post_event(
    payload: dict[str, Any] = Body(...),
    access_token: str = Depends(get_access_token),
):
    """Create an event from the request body and return the created event."""
    return await run_in_threadpool(create_event, access_token, payload)
