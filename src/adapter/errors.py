"""Adapter error types and their HTTP mapping.

Lifecycle errors (BindError, IllegalStateError) propagate to the caller of
start/stop. Per-request errors are turned into a JSON error response for
that request only by the handlers registered here.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.logging.access import get_logger

logger = get_logger("errors")


class AdapterError(Exception):
    """Base class for all adapter errors."""


class BindError(AdapterError):
    """The listening socket could not be bound or the server failed to start."""


class IllegalStateError(AdapterError):
    """A lifecycle method was called in a state that does not allow it."""


class TransportReadError(AdapterError):
    """Reading the request body failed (client disconnect, stream error)."""


class PayloadTooLargeError(AdapterError):
    """The request body exceeded the configured ceiling."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Request body exceeds the maximum size of {limit} bytes")


class EngineError(AdapterError):
    """The handler engine raised, or returned something that is not a response event."""


async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError) -> JSONResponse:
    logger.warning(
        "Request body too large",
        extra={"audit_data": {"method": request.method, "path": request.url.path, "limit": exc.limit}},
    )
    return JSONResponse(status_code=413, content={"error": str(exc)})


async def transport_read_handler(request: Request, exc: TransportReadError) -> JSONResponse:
    logger.warning(
        "Failed to read request body",
        extra={"audit_data": {"method": request.method, "path": request.url.path, "reason": str(exc)}},
    )
    return JSONResponse(status_code=500, content={"error": "Failed to read request body"})


async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    cause = exc.__cause__ or exc
    logger.error(
        "Engine failed to process event",
        exc_info=(type(cause), cause, cause.__traceback__),
        extra={"audit_data": {"method": request.method, "path": request.url.path, "reason": str(exc)}},
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PayloadTooLargeError, payload_too_large_handler)
    app.add_exception_handler(TransportReadError, transport_read_handler)
    app.add_exception_handler(EngineError, engine_error_handler)
