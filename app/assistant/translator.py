"""Natural-language to calendar-event translation through an LLM.

The model is used purely as a text-to-JSON translator: it receives a fixed
system prompt describing the Google Calendar event shape plus the current
time, time zone and default duration, and must answer with a single JSON
object. The answer is checked for the four fields an event cannot do
without and otherwise passed through untouched; timestamp formats are
trusted to the model's adherence to the prompt.
"""
import json
import logging
from datetime import UTC, datetime

import httpx

from app.core.exceptions import (
    LlmEmptyResponseError,
    LlmIncompleteEventError,
    LlmMalformedJsonError,
    LlmTransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_DURATION_MINUTES = 60
TEMPERATURE = 0.2

SYSTEM_PROMPT = """You convert natural language into a Google Calendar event JSON.
- Assume the user's locale and calendar semantics.
- Resolve relative dates/times based on NOW and TIMEZONE.
- If end time missing, set it to start + DEFAULT_DURATION minutes.
- Output ONLY strict JSON matching this shape (no markdown):
{
  "summary": string,
  "location"?: string,
  "description"?: string,
  "start": { "dateTime": string, "timeZone"?: string },
  "end": { "dateTime": string, "timeZone"?: string },
  "attendees"?: { "email": string }[],
  "reminders"?: { "useDefault"?: boolean, "overrides"?: { "method": "email" | "popup", "minutes": number }[] }
}
Rules: dateTime must be ISO 8601 with timezone offset or Z. If TIMEZONE provided, prefer it in start/end.timeZone."""


def format_now(now: datetime) -> str:
    """ISO 8601 UTC instant with a ``Z`` suffix."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_messages(
    text: str,
    now: datetime,
    timezone: str | None = None,
    default_duration_minutes: int | None = None,
) -> list[dict]:
    user = (
        f"NOW={format_now(now)}\n"
        f"TIMEZONE={timezone or ''}\n"
        f"DEFAULT_DURATION={default_duration_minutes or DEFAULT_DURATION_MINUTES}\n"
        f"REQUEST={text}"
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def parse_event(content) -> dict:
    """
    Parse and minimally validate the model's answer.

    Raises:
        LlmEmptyResponseError: No content at all.
        LlmMalformedJsonError: Content is not a JSON object.
        LlmIncompleteEventError: ``summary``, ``start.dateTime`` or
            ``end.dateTime`` is missing.
    """
    if not content:
        raise LlmEmptyResponseError()
    if not isinstance(content, str):
        raise LlmMalformedJsonError()

    try:
        event = json.loads(content)
    except json.JSONDecodeError as e:
        raise LlmMalformedJsonError() from e
    if not isinstance(event, dict):
        raise LlmMalformedJsonError()

    start = event.get("start")
    end = event.get("end")
    if (
        not event.get("summary")
        or not isinstance(start, dict)
        or not start.get("dateTime")
        or not isinstance(end, dict)
        or not end.get("dateTime")
    ):
        raise LlmIncompleteEventError()

    return event


def _first_message_content(data: dict):
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")


async def translate(
    client: httpx.AsyncClient,
    api_key: str,
    model: str,
    text: str,
    now: datetime,
    timezone: str | None = None,
    default_duration_minutes: int | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> dict:
    """
    Turn a free-text scheduling request into a calendar event payload.

    Makes exactly one chat-completion request; failures are not retried.

    Raises:
        LlmTransportError: On a non-2xx response or a network failure.
        LlmResponseError: Subclasses from ``parse_event``.
    """
    payload = {
        "model": model,
        "messages": build_messages(text, now, timezone, default_duration_minutes),
        "temperature": TEMPERATURE,
        "response_format": {"type": "json_object"},
    }
    headers = {"Authorization": f"Bearer {api_key}"}

    try:
        response = await client.post(
            f"{base_url.rstrip('/')}/chat/completions",
            json=payload,
            headers=headers,
        )
    except httpx.TransportError as e:
        raise LlmTransportError(message=f"Network error calling LLM: {e}") from e

    if not response.is_success:
        logger.warning(f"LLM request failed with HTTP {response.status_code}")
        raise LlmTransportError(response.status_code)

    try:
        data = response.json()
    except ValueError as e:
        raise LlmTransportError(response.status_code, "LLM returned a non-JSON body") from e
    if not isinstance(data, dict):
        raise LlmTransportError(response.status_code, "LLM returned an unexpected body")

    event = parse_event(_first_message_content(data))
    logger.info(f"Translated request into event {event['summary']!r}")
    return event
