"""Optional documentation mount.

Serves the engine's OpenAPI document at `{base}/open-api.json` and a Swagger
UI pointing at it at `{base}/swagger`. The document itself comes from the
engine; this module only wires the two routes.
"""

from typing import Any, Optional

from fastapi import FastAPI

from src.config.settings import Settings
from src.logging.access import get_logger

SPEC_PATH = "/open-api.json"
SWAGGER_PATH = "/swagger"

logger = get_logger("docs")


def docs_urls(settings: Settings) -> dict[str, Optional[str]]:
    """FastAPI constructor kwargs for the docs routes (all None when disabled)."""
    if not settings.openapi_enabled:
        return {"openapi_url": None, "docs_url": None, "redoc_url": None}

    base = settings.normalized_docs_base_path
    return {
        "openapi_url": f"{base}{SPEC_PATH}",
        "docs_url": f"{base}{SWAGGER_PATH}",
        "redoc_url": None,
    }


def configure_docs(app: FastAPI, engine, base_url: str) -> None:
    """Serve the engine's OpenAPI document instead of FastAPI's generated one."""
    logger.info(
        "OpenAPI enabled, configuring SwaggerUI to be available @ %s%s",
        base_url, app.docs_url,
    )

    # FastAPI's docs route calls `app.openapi()`; an instance attribute
    # override must be a zero-argument callable.
    def engine_openapi() -> dict[str, Any]:
        return engine.openapi_spec()

    app.openapi = engine_openapi  # type: ignore[method-assign]
