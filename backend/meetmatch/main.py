"""
FastAPI app entrypoint.

Availability matching and meeting scheduling. Suggestions are refreshed in the background
(APScheduler tick + rescoring queue).
"""
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from meetmatch.api.routes import availability, matching, meetings
from meetmatch.config import settings
from meetmatch.core.constants import SUGGESTION_REFRESH_JOB_ID
from meetmatch.core.errors import EngineError, error_body, status_for
from meetmatch.scheduler.suggestion_job import run_suggestion_refresh_job
from meetmatch.services.rescoring_queue import shutdown_rescore_queue

if settings.openai_api_key:
    os.environ["OPENAI_API_KEY"] = settings.openai_api_key

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.suggestion_refresh_enabled:
        _scheduler.add_job(
            run_suggestion_refresh_job,
            "interval",
            minutes=settings.suggestion_refresh_minutes,
            id=SUGGESTION_REFRESH_JOB_ID,
            replace_existing=True,
        )
        _scheduler.start()
        logger.info("Suggestion refresh every %s min", settings.suggestion_refresh_minutes)
    app.state.scheduler = _scheduler
    yield
    if _scheduler.running:
        _scheduler.shutdown(wait=False)
    shutdown_rescore_queue(wait=False)


app = FastAPI(title="MeetMatch", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated)
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_cors_extra = os.getenv("CORS_ORIGINS", "")
if _cors_extra:
    _cors_origins.extend(o.strip() for o in _cors_extra.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=error_body(exc))


app.include_router(availability.router, prefix="/availability", tags=["availability"])
app.include_router(matching.router, prefix="/matching", tags=["matching"])
app.include_router(meetings.router, prefix="/meetings", tags=["meetings"])


@app.get("/", include_in_schema=False)
def root():
    return {"message": "MeetMatch API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
