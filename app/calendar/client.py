"""Google Calendar API client authenticated with a user's bearer token."""
import logging

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.core.exceptions import CalendarApiError

logger = logging.getLogger(__name__)

CALENDAR_ID = "primary"


def get_calendar_service(access_token: str):
    """Build a Calendar API service for one access token.

    A new service is built per call; nothing is cached between requests.
    """
    credentials = Credentials(token=access_token)
    return build("calendar", "v3", credentials=credentials, cache_discovery=False)


def list_events(access_token: str, time_min: str, time_max: str) -> dict:
    """
    List events on the primary calendar between two ISO instants.

    Recurring events are expanded into single instances and ordered by
    start time. Returns the API response unchanged.
    """
    service = get_calendar_service(access_token)
    try:
        return (
            service.events()
            .list(
                calendarId=CALENDAR_ID,
                timeMin=time_min,
                timeMax=time_max,
                singleEvents=True,
                orderBy="startTime",
            )
            .execute()
        )
    except HttpError as e:
        logger.error(f"Failed to list events: {e}")
        raise CalendarApiError(e.resp.status) from e


def create_event(access_token: str, payload: dict) -> dict:
    """Create an event on the primary calendar and return it as created."""
    service = get_calendar_service(access_token)
    try:
        created = service.events().insert(calendarId=CALENDAR_ID, body=payload).execute()
    except HttpError as e:
        logger.error(f"Failed to create event: {e}")
        raise CalendarApiError(e.resp.status) from e

    logger.info(f"Created event {created.get('id')}")
    return created
