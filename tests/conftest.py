"""Shared fixtures for the HTTP adapter test suite."""

import hashlib
import random

import httpx
import pytest

from src.config.options import ServerOptions
from src.config.settings import Settings, get_settings
from src.engine.routing import RouteTableEngine, binary_response, json_response
from src.main import create_app

BINARY_FILE_SIZE = 19605


def make_binary_payload(size: int = BINARY_FILE_SIZE, seed: int = 1234) -> bytes:
    """Deterministic pseudo-PDF bytes covering the full byte range."""
    rng = random.Random(seed)
    header = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"
    return header + bytes(rng.getrandbits(8) for _ in range(size - len(header)))


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@pytest.fixture
def binary_payload() -> bytes:
    return make_binary_payload()


def _echo_event(request):
    return request.event.model_dump()


def _boom(request):
    raise RuntimeError("handler exploded")


@pytest.fixture
def echo_engine(binary_payload) -> RouteTableEngine:
    """The engine used by the acceptance scenarios."""
    engine = RouteTableEngine(title="Echo API", version="1.2.3")
    engine.add_route("GET", "/", lambda request: {"text": "hello"}, summary="Say hello")
    engine.add_route("POST", "/echo", lambda request: json_response(request.json(), status_code=201))
    engine.add_route(
        "POST",
        "/echo-binary-body",
        lambda request: binary_response(request.body(), request.header("content-type")),
    )
    engine.add_route("GET", "/binary", lambda request: binary_response(binary_payload, "application/pdf"))
    engine.add_route("GET", "/boom", _boom)
    for method in ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"):
        engine.add_route(method, "/event", _echo_event)
    return engine


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(OPENAPI_ENABLED="true", MAX_BODY_SIZE="16")
    """
    def _override(**kwargs) -> Settings:
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()
        return get_settings()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()


@pytest.fixture
def make_client(override_settings):
    """Factory fixture: httpx AsyncClient wired to an adapter app via ASGI transport."""
    clients: list[httpx.AsyncClient] = []

    def _make(engine, options: ServerOptions | None = None, **settings) -> httpx.AsyncClient:
        resolved = override_settings(**settings)
        app = create_app(engine, options or ServerOptions(), resolved)
        transport = httpx.ASGITransport(app=app)
        client = httpx.AsyncClient(transport=transport, base_url="http://test")
        clients.append(client)
        return client

    yield _make


@pytest.fixture
def app_client(make_client, echo_engine) -> httpx.AsyncClient:
    """Client for the echo engine with default options."""
    return make_client(echo_engine)
