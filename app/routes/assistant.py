"""Assistant routes: create calendar events from natural language."""
import logging
from datetime import UTC, datetime

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from app.assistant.translator import translate
from app.auth.dependencies import get_access_token
from app.calendar.client import create_event
from app.core.config import settings
from app.core.http import get_http_client
from app.models import ScheduleRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


@router.post("/schedule")
async def schedule(
    body: ScheduleRequest,
    access_token: str = Depends(get_access_token),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Create an event described in free text.

    The text is translated into an event payload by the LLM, then created
    on the primary calendar. Translator and Calendar API failures are
    returned as-is; nothing is created when translation fails.
    """
    query = (body.query or "").strip()
    if not query:
        raise HTTPException(status_code=400, detail="Missing query")

    event = await translate(
        client,
        settings.openai_api_key,
        settings.openai_model,
        query,
        datetime.now(UTC),
        timezone=body.timeZone,
        default_duration_minutes=body.defaultDurationMinutes,
        base_url=settings.openai_base_url,
    )
    return await run_in_threadpool(create_event, access_token, event)
