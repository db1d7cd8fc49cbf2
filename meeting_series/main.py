"""Meeting Series Web API."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meeting_series.core.config import settings
from meeting_series.core.database import create_db_and_tables
from meeting_series.core.exceptions import MeetingSeriesError
from meeting_series.routes import groups, meetings, series

# Configure logging
settings.log_dir.mkdir(parents=True, exist_ok=True)
log_file = settings.log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    logger.info("Starting Meeting Series application")
    create_db_and_tables()
    yield
    logger.info("Meeting Series application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Recurring meeting series with series-aware RSVP reconciliation",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
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

# Include routers
app.include_router(groups.router)
app.include_router(meetings.router)
app.include_router(series.router)


@app.exception_handler(MeetingSeriesError)
async def meeting_series_error_handler(request: Request, exc: MeetingSeriesError):
    """Render operation errors as JSON with the error's status code."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__, **exc.details},
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
