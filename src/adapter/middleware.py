"""Request id propagation and structured access logging."""

from fastapi import Request

from src.logging.access import (
    RequestTimer,
    generate_request_id,
    get_access_logger,
    request_id_var,
)

REQUEST_ID_HEADER = "X-Request-Id"


async def access_log_middleware(request: Request, call_next):
    """Tag the request with an id, time it and log one line when it completes."""
    logger = get_access_logger()
    rid = generate_request_id()
    token = request_id_var.set(rid)

    try:
        with RequestTimer() as timer:
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid

        logger.info(
            "Request handled",
            extra={"audit_data": {
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": timer.elapsed_ms,
                "client_ip": request.client.host if request.client else "unknown",
            }},
        )
        return response
    finally:
        request_id_var.reset(token)
