"""Map purchasing errors onto HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from purchasing.errors import AuthorizationError, ConflictError, DatabaseError

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES = {
    ValidationError: 400,
    AuthorizationError: 403,
    ObjectNotFoundError: 404,
    ConflictError: 409,
    ExpectedVersionError: 409,
    DatabaseError: 503,
}


def _detail(exc: Exception):
    messages = getattr(exc, "messages", None)
    if messages:
        return messages
    return getattr(exc, "message", None) or str(exc)


def _handler_for(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error("Request failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=status_code, content={"error": _detail(exc)})

    return handler


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then the purchasing error mapping on top."""
    register_exception_handlers(app)
    for error_type, status_code in ERROR_STATUS_CODES.items():
        app.add_exception_handler(error_type, _handler_for(status_code))
