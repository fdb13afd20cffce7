"""Inbound HTTP request -> RequestEvent."""

import base64
from typing import Optional

from fastapi import Request

from src.events.models import RequestContext, RequestEvent, RequestIdentity
from src.logging.access import generate_request_id, request_id_var


def flatten_headers(request: Request) -> dict[str, str]:
    """Header map in arrival order; a repeated name keeps its last value."""
    headers: dict[str, str] = {}
    for name, value in request.headers.items():
        headers[name] = value
    return headers


def flatten_query(request: Request) -> dict[str, str]:
    """Query map in arrival order; a repeated key keeps its last value."""
    params: dict[str, str] = {}
    for key, value in request.query_params.multi_items():
        params[key] = value
    return params


def build_request_event(request: Request, body: Optional[bytes]) -> RequestEvent:
    """Map a live request plus its captured body to a RequestEvent.

    `body` is None for methods without an entity; otherwise the bytes are
    always base64 encoded, whatever the content type.
    """
    headers = flatten_headers(request)
    request_id = request_id_var.get() or generate_request_id()

    context = RequestContext(
        requestId=request_id,
        identity=RequestIdentity(
            sourceIp=request.client.host if request.client else "unknown",
            userAgent=headers.get("user-agent"),
        ),
        path=request.url.path,
        httpMethod=request.method,
    )

    event_body = None
    is_base64 = False
    if body is not None:
        event_body = base64.b64encode(body).decode("ascii")
        is_base64 = True

    return RequestEvent(
        httpMethod=request.method,
        path=request.url.path,
        headers=headers,
        queryStringParameters=flatten_query(request),
        body=event_body,
        isBase64Encoded=is_base64,
        requestContext=context,
    )
