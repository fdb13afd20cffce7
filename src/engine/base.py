"""Abstract base for handler-processing engines.

An engine is the sole collaborator of the adapter: it receives a
RequestEvent plus an opaque context and returns a ResponseEvent. Anything
honouring that shape can be plugged in, including a bare handler function.
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Union

from pydantic import ValidationError

from src.adapter.errors import EngineError
from src.events.models import RequestEvent, ResponseEvent

EngineResult = Union[ResponseEvent, Mapping[str, Any]]


class HandlerEngine(ABC):
    """Base class for engine implementations."""

    @abstractmethod
    async def process_event(self, event: RequestEvent, context: Any) -> EngineResult:
        """Process one request event.

        Args:
            event: The request event built by the adapter.
            context: Opaque execution context (ExecutionContext locally,
                the platform's context object on Lambda).

        Returns:
            A ResponseEvent, or a mapping with the same fields.
        """
        ...

    def openapi_spec(self) -> dict:
        """OpenAPI document describing the engine's routes. Override to publish one."""
        return {
            "openapi": "3.0.3",
            "info": {"title": type(self).__name__, "version": "0.0.0"},
            "paths": {},
        }

    async def close(self) -> None:
        """Cleanup resources. Override if the engine holds connections."""
        pass


class CallableEngine(HandlerEngine):
    """Wraps a plain `handler(event, context)` function.

    Coroutine functions are awaited; regular functions run in a worker
    thread so a blocking handler does not stall the event loop.
    """

    def __init__(self, handler: Callable[..., Any]):
        self._handler = handler

    async def process_event(self, event: RequestEvent, context: Any) -> EngineResult:
        if inspect.iscoroutinefunction(self._handler):
            return await self._handler(event, context)
        result = await asyncio.to_thread(self._handler, event, context)
        if inspect.isawaitable(result):
            result = await result
        return result


def as_engine(obj: Any) -> HandlerEngine:
    """Coerce an engine or handler function into a HandlerEngine."""
    if isinstance(obj, HandlerEngine):
        return obj
    if callable(obj):
        return CallableEngine(obj)
    raise TypeError(f"Not a handler engine or handler function: {obj!r}")


async def invoke_engine(engine: HandlerEngine, event: RequestEvent, context: Any) -> ResponseEvent:
    """Run the engine, converting any failure into EngineError."""
    try:
        result = await engine.process_event(event, context)
    except Exception as exc:
        raise EngineError(f"Engine raised {type(exc).__name__}: {exc}") from exc

    if isinstance(result, ResponseEvent):
        return result
    try:
        return ResponseEvent.model_validate(result)
    except ValidationError as exc:
        raise EngineError("Engine returned an invalid response event") from exc
