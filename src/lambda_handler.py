"""AWS Lambda entry point.

The engine that serves HTTP locally runs unchanged on Lambda: the platform
already delivers proxy-integration events, so they go straight to the
engine with no HTTP layer in between.

    from src.lambda_handler import create_handler
    handler = create_handler(engine)
"""

import asyncio
from typing import Any, Callable

from src.engine.base import as_engine, invoke_engine
from src.events.models import RequestEvent


def create_handler(engine: Any) -> Callable[[dict, Any], dict]:
    engine = as_engine(engine)

    def handler(event: dict, context: Any) -> dict:
        request_event = RequestEvent.model_validate(event)
        response_event = asyncio.run(invoke_engine(engine, request_event, context))
        return response_event.to_lambda_dict()

    return handler
