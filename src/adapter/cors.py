"""Single-origin CORS policy applied to every response."""

from fastapi import Request

ALLOW_ORIGIN_HEADER = "Access-Control-Allow-Origin"


class CorsPolicy:
    """HTTP middleware stamping one allow-origin value on all responses.

    There is no per-route override: engine responses, adapter error
    responses, docs routes and preflight requests all get the same header.
    """

    def __init__(self, origin: str = "*"):
        self.origin = origin

    async def __call__(self, request: Request, call_next):
        response = await call_next(request)
        response.headers[ALLOW_ORIGIN_HEADER] = self.origin
        return response
