"""
InterviewGuard Service - FastAPI Application
"""
import logging
import time

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.deps import get_report_store
from .api.routes.reports import router as reports_router
from .config import settings
from .proctor.api import router as interview_router, shutdown_session
from .proctor.storage import ReportStore
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.APP_NAME,
    description="AI proctoring for remote video interviews",
    version=__version__,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)


# ============================================================================
# Request Logging Middleware
# ============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    start = time.time()
    path = request.url.path

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Request {request.method} {path} failed: {e}")
        raise

    # Detector pushes arrive several times a second
    if path not in ["/health", "/favicon.ico", "/api/interview/faces", "/api/interview/objects"]:
        duration_ms = int((time.time() - start) * 1000)
        logger.info(f"{request.method} {path} -> {response.status_code} in {duration_ms}ms")

    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when using wildcard origin
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(interview_router)
app.include_router(reports_router)


@app.on_event("startup")
async def startup_event():
    """Configure logging and log the active thresholds."""
    setup_logging(
        service_name="interview-guard",
        level=settings.LOG_LEVEL,
        log_to_file=settings.LOG_TO_FILE,
        log_dir=settings.LOG_DIR
    )
    logger.info(
        f"Gaze thresholds: distance={settings.GAZE_DISTANCE_THRESHOLD} "
        f"ratio={settings.GAZE_RATIO_THRESHOLD} window={settings.GAZE_HISTORY_LENGTH}"
    )
    logger.info(
        f"Polling: faces every {settings.FACE_POLL_INTERVAL}s, "
        f"objects every {settings.OBJECT_POLL_INTERVAL}s"
    )


@app.on_event("shutdown")
async def shutdown_event():
    await shutdown_session()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": __version__
    }


@app.get("/api/health")
async def api_health(store: ReportStore = Depends(get_report_store)):
    """Health check with report count."""
    return {
        "status": "OK",
        "message": "Server is running",
        "reportsCount": len(store)
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.APP_NAME,
        "docs": "/docs" if settings.DEBUG else "Disabled in production"
    }


if __name__ == "__main__":
    uvicorn.run(
        "interview_guard.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
