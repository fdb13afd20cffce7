"""Bounded request body capture.

Emulates the payload ceiling of a managed API gateway: bodies over the
configured size are rejected before an event is ever built.
"""

from typing import Optional

from fastapi import Request
from starlette.requests import ClientDisconnect

from src.adapter.errors import PayloadTooLargeError, TransportReadError

# Methods whose semantics include a request entity
ENTITY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def carries_entity(method: str) -> bool:
    return method.upper() in ENTITY_METHODS


async def capture_body(request: Request) -> Optional[bytes]:
    """FastAPI dependency returning the full request body, or None.

    Only entity-bearing methods are read; a GET without a body must not wait
    for data that never arrives.
    """
    if not carries_entity(request.method):
        return None

    limit = request.app.state.options.max_body_size

    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError(limit)

    chunks: list[bytes] = []
    received = 0
    try:
        async for chunk in request.stream():
            received += len(chunk)
            if received > limit:
                raise PayloadTooLargeError(limit)
            chunks.append(chunk)
    except ClientDisconnect as exc:
        raise TransportReadError("Client disconnected while sending the request body") from exc

    return b"".join(chunks)
