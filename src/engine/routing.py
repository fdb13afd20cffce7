"""Reference engine backed by an explicit route table.

Routes are registered up front with `add_route(method, path, handler)`;
nothing is discovered by reflection. Handlers take a RouteRequest, which
offers typed access to the body, query string, headers and path
parameters, and return either a ResponseEvent or any JSON-serializable
value (sent as 200).
"""

import base64
import inspect
import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from src.engine.base import HandlerEngine
from src.events.models import RequestEvent, ResponseEvent

_PATH_PARAM_RE = re.compile(r"{(\w+)}")
_BODY_METHODS = {"POST", "PUT", "PATCH"}

Handler = Callable[["RouteRequest"], Any]


def json_response(value: Any, status_code: int = 200, headers: Optional[dict] = None) -> ResponseEvent:
    return ResponseEvent(
        statusCode=status_code,
        headers={"Content-Type": "application/json", **(headers or {})},
        body=json.dumps(value),
    )


def binary_response(
    data: bytes,
    content_type: str = "application/octet-stream",
    status_code: int = 200,
) -> ResponseEvent:
    return ResponseEvent(
        statusCode=status_code,
        headers={"Content-Type": content_type},
        body=base64.b64encode(data).decode("ascii"),
        isBase64Encoded=True,
    )


@dataclass
class RouteRequest:
    event: RequestEvent
    context: Any = None
    path_params: dict[str, str] = field(default_factory=dict)

    def body(self) -> bytes:
        return self.event.decoded_body()

    def json(self) -> Any:
        raw = self.body()
        return json.loads(raw) if raw else None

    def query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.event.queryStringParameters.get(name, default)

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        wanted = name.lower()
        for key, value in self.event.headers.items():
            if key.lower() == wanted:
                return value
        return default


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    handler: Handler
    pattern: re.Pattern
    summary: str = ""

    def match(self, path: str) -> Optional[dict[str, str]]:
        m = self.pattern.fullmatch(path)
        return m.groupdict() if m else None


def _compile_path(path: str) -> re.Pattern:
    regex = ""
    pos = 0
    for m in _PATH_PARAM_RE.finditer(path):
        regex += re.escape(path[pos:m.start()]) + f"(?P<{m.group(1)}>[^/]+)"
        pos = m.end()
    regex += re.escape(path[pos:])
    return re.compile(regex)


class RouteTableEngine(HandlerEngine):
    """Dispatches events to handlers by (method, path pattern)."""

    def __init__(self, title: str = "Local API", version: str = "1.0.0"):
        self.title = title
        self.version = version
        self._routes: list[Route] = []

    @property
    def routes(self) -> list[Route]:
        return list(self._routes)

    def add_route(self, method: str, path: str, handler: Handler, summary: str = "") -> None:
        self._routes.append(Route(
            method=method.upper(),
            path=path,
            handler=handler,
            pattern=_compile_path(path),
            summary=summary,
        ))

    async def process_event(self, event: RequestEvent, context: Any) -> ResponseEvent:
        path_matched = False
        for route in self._routes:
            params = route.match(event.path)
            if params is None:
                continue
            path_matched = True
            if route.method != event.httpMethod.upper():
                continue

            result = route.handler(RouteRequest(event=event, context=context, path_params=params))
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, ResponseEvent):
                return result
            return json_response(result)

        if path_matched:
            return json_response({"error": "Method Not Allowed"}, status_code=405)
        return json_response({"error": "Not Found"}, status_code=404)

    def openapi_spec(self) -> dict:
        paths: dict[str, dict] = {}
        for route in self._routes:
            operation: dict[str, Any] = {
                "summary": route.summary or f"{route.method} {route.path}",
                "responses": {"200": {"description": "Successful response"}},
            }
            params = [
                {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
                for name in _PATH_PARAM_RE.findall(route.path)
            ]
            if params:
                operation["parameters"] = params
            if route.method in _BODY_METHODS:
                operation["requestBody"] = {
                    "required": False,
                    "content": {"application/json": {"schema": {}}},
                }
            paths.setdefault(route.path, {})[route.method.lower()] = operation

        return {
            "openapi": "3.0.3",
            "info": {"title": self.title, "version": self.version},
            "paths": paths,
        }
