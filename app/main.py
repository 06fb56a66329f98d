"""Calendar Assistant Web Application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.exceptions import CalendarAssistantError, LlmResponseError, UpstreamApiError
from app.core.security import SESSION_COOKIE, read_session
from app.routes import assistant, auth, calendar

# Configure logging
log_dir = Path.home() / ".logs" / "calendar-assistant"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    logger.info("Starting Calendar Assistant application")
    create_db_and_tables()
    yield
    logger.info("Calendar Assistant application shut down")


app = FastAPI(
    title=settings.app_name,
    description="View and create Google Calendar events, including from natural-language requests",
    version="0.1.0",
    lifespan=lifespan,
)

origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


@app.exception_handler(CalendarAssistantError)
async def assistant_error_handler(request: Request, exc: CalendarAssistantError):
    """Auth and session failures are answered in plain text."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.exception_handler(UpstreamApiError)
async def upstream_error_handler(request: Request, exc: UpstreamApiError):
    """Upstream failures carry the service and its HTTP status."""
    logger.warning(f"{request.method} {request.url.path} -> {exc.service} failed: {exc.message}")
    return JSONResponse(
        {"detail": exc.message, "service": exc.service, "status": exc.status},
        status_code=exc.status_code,
    )


@app.exception_handler(LlmResponseError)
async def llm_response_error_handler(request: Request, exc: LlmResponseError):
    logger.warning(f"{request.method} {request.url.path} -> unusable model output: {exc.reason}")
    return JSONResponse(
        {"detail": exc.message, "service": "llm", "reason": exc.reason},
        status_code=exc.status_code,
    )


app.include_router(auth.router)
app.include_router(calendar.router)
app.include_router(assistant.router)


@app.get("/")
async def root(request: Request):
    """Single-page front-end for scheduling and browsing events."""
    email = read_session(request.cookies.get(SESSION_COOKIE))
    return templates.TemplateResponse(request, "index.html", {"email": email})


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


@app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def fallback(path: str):
    """Unknown paths go back to the front page."""
    return RedirectResponse("/", status_code=302)
