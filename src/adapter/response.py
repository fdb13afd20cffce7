"""ResponseEvent -> HTTP response."""

import base64
from typing import Optional

from fastapi.responses import JSONResponse, Response

from src.adapter.errors import EngineError
from src.events.models import ResponseEvent

DEFAULT_BINARY_CONTENT_TYPE = "application/octet-stream"


def _header_value(headers: dict[str, str], name: str) -> Optional[str]:
    """Case-insensitive lookup; the last matching header wins."""
    found = None
    for key, value in headers.items():
        if key.lower() == name:
            found = value
    return found


def build_http_response(event: ResponseEvent) -> Response:
    """Build the single HTTP response for an engine's ResponseEvent.

    The event is only read, never modified. A body that cannot be written
    (bad base64, a value JSON cannot encode) raises EngineError.
    """
    headers = event.string_headers()

    try:
        if event.isBase64Encoded:
            content = base64.b64decode(event.body or "", validate=True)
            media_type = None
            if _header_value(headers, "content-type") is None:
                media_type = DEFAULT_BINARY_CONTENT_TYPE
            return Response(
                content=content,
                status_code=event.statusCode,
                headers=headers,
                media_type=media_type,
            )

        if event.body is None or isinstance(event.body, str):
            return Response(content=event.body or "", status_code=event.statusCode, headers=headers)

        # Structured body: the engine handed back a value instead of serialized JSON
        return JSONResponse(content=event.body, status_code=event.statusCode, headers=headers)
    except (ValueError, TypeError) as exc:
        raise EngineError("Engine returned a response body that cannot be written") from exc
