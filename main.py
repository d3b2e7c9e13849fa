"""Main application entry point."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from app.config import settings
from app.database import init_db
from app.api.reminders import router as reminders_router
from app.exceptions import (
    ConcurrentModificationError,
    NotFoundError,
    ReminderError,
    ValidationError,
    format_error_for_api
)
from app.scheduler import start_scheduler, stop_scheduler


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Care Reminder Service",
    description="Recurring pet-care reminders with due-occurrence polling",
    version="1.0.0",
    debug=settings.debug
)

app.include_router(reminders_router)


@app.exception_handler(ReminderError)
async def reminder_error_handler(request: Request, exc: ReminderError):
    """Render engine errors as JSON with a matching status code."""
    if isinstance(exc, ValidationError):
        status_code = 400
    elif isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, ConcurrentModificationError):
        status_code = 409
    else:
        status_code = 500
    return JSONResponse(status_code=status_code, content=format_error_for_api(exc))


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("Application starting up...")
    init_db()

    if settings.poller_enabled:
        start_scheduler()
    else:
        logger.info("Due reminder poller disabled")


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up on application shutdown."""
    stop_scheduler()


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Care Reminder Service"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    import os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=settings.debug
    )
