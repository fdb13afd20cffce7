"""Local HTTP adapter — FastAPI application factory.

Runs handlers written for a serverless proxy-integration event contract as
a plain HTTP server. Every request is mapped to a RequestEvent, processed
by the engine, and the engine's ResponseEvent is written back.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, Response

from src.adapter.body import capture_body
from src.adapter.cors import CorsPolicy
from src.adapter.docs import configure_docs, docs_urls
from src.adapter.errors import register_exception_handlers
from src.adapter.middleware import access_log_middleware
from src.adapter.request import build_request_event
from src.adapter.response import build_http_response
from src.config.options import ServerOptions
from src.config.settings import Settings, get_settings
from src.engine.base import HandlerEngine, invoke_engine
from src.events.models import ExecutionContext
from src.logging.access import RequestTimer, generate_request_id, get_logger, request_id_var

VERSION = "0.1.0"

HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

logger = get_logger("app")


async def handle_request(request: Request, body: Optional[bytes] = Depends(capture_body)) -> Response:
    """Catch-all route.

    Pipeline: Body capture -> RequestEvent -> Engine -> ResponseEvent -> HTTP response
    """
    engine: HandlerEngine = request.app.state.engine

    logger.debug("Mapping HTTP request to event model")
    event = build_request_event(request, body)
    context = ExecutionContext(request_id=request_id_var.get() or generate_request_id())

    with RequestTimer() as timer:
        response_event = await invoke_engine(engine, event, context)

    logger.debug(
        "Mapping event response model to HTTP response",
        extra={"audit_data": {"engine_ms": timer.elapsed_ms, "status": response_event.statusCode}},
    )
    return build_http_response(response_event)


def create_app(
    engine: HandlerEngine,
    options: ServerOptions,
    settings: Optional[Settings] = None,
    base_url: str = "",
) -> FastAPI:
    """Assemble the adapter application for one server instance."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown lifecycle hooks."""
        logger.info("Adapter started")
        yield
        await engine.close()
        logger.info("Adapter stopped")

    app = FastAPI(
        title="Local Lambda API",
        description="HTTP adapter for proxy-integration event handlers",
        version=VERSION,
        lifespan=lifespan,
        **docs_urls(settings),
    )
    app.state.engine = engine
    app.state.options = options

    logger.debug("CORS origin set to: %s", options.cors_origin)

    if settings.openapi_enabled:
        configure_docs(app, engine, base_url)

    register_exception_handlers(app)

    # Last registered runs outermost: CORS also covers error responses
    app.middleware("http")(access_log_middleware)
    app.middleware("http")(CorsPolicy(options.cors_origin))

    app.add_api_route(
        "/{proxy:path}",
        handle_request,
        methods=HTTP_METHODS,
        include_in_schema=False,
    )
    return app
