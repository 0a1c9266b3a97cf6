"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from practice_scheduler.api.sessions import router as sessions_router
from practice_scheduler.app_logging import configure_logging
from practice_scheduler.containers import AppContainer
from practice_scheduler.domain.errors import (
    Forbidden,
    LimitExceeded,
    NotFound,
    PersistenceError,
    SchedulingError,
    SlotOccupiedError,
    ValidationError,
)

_STATUS_BY_ERROR: list[tuple[type[SchedulingError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (LimitExceeded, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (SlotOccupiedError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_502_BAD_GATEWAY),
]


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    app.include_router(sessions_router)

    @app.exception_handler(SchedulingError)
    async def scheduling_error_handler(
        request: Request, exc: SchedulingError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Session store failure on %s %s: %s",
                request.method,
                request.url.path,
                exc,
            )
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _status_for(exc: SchedulingError) -> int:
    """Map a scheduling error to an HTTP status."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR
