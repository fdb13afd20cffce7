"""
Server lifecycle: owns the listening socket and the uvicorn server.

States: NOT_STARTED -> LISTENING -> STOPPED. STOPPED is terminal; a stopped
instance cannot be started again.
"""

import asyncio
import socket
from enum import Enum
from typing import Any, Optional

import uvicorn

from src.adapter.errors import BindError, IllegalStateError
from src.config.options import ServerOptions
from src.config.settings import Settings, get_settings
from src.engine.base import HandlerEngine, as_engine
from src.logging.access import get_logger
from src.main import create_app

logger = get_logger("lifecycle")

STARTUP_POLL_SECONDS = 0.01


class ServerState(str, Enum):
    NOT_STARTED = "not_started"
    LISTENING = "listening"
    STOPPED = "stopped"


def bind_socket(options: ServerOptions) -> socket.socket:
    """Bind the listening socket, raising BindError on failure.

    The wildcard host binds every interface (dual-stack where the platform
    supports it); any other host is bound explicitly.
    """
    try:
        if options.listen_on_all_hosts:
            logger.debug("Listening on all hosts")
            if socket.has_dualstack_ipv6():
                return socket.create_server(
                    ("", options.port), family=socket.AF_INET6, dualstack_ipv6=True
                )
            return socket.create_server(("", options.port))

        logger.debug("Listening on host: %s", options.host)
        family = socket.AF_INET6 if ":" in options.host else socket.AF_INET
        return socket.create_server((options.host, options.port), family=family)
    except OSError as exc:
        raise BindError(f"Cannot listen on {options.host}:{options.port}: {exc}") from exc


class ServerLifecycle:
    """Starts and stops the HTTP adapter for one engine."""

    def __init__(self, engine: Any, settings: Optional[Settings] = None):
        self._engine: HandlerEngine = as_engine(engine)
        self._settings = settings or get_settings()
        self._state = ServerState.NOT_STARTED
        self._options: Optional[ServerOptions] = None
        self._socket: Optional[socket.socket] = None
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._port: Optional[int] = None

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def options(self) -> Optional[ServerOptions]:
        return self._options

    @property
    def port(self) -> Optional[int]:
        """Port actually bound (differs from options.port when that is 0)."""
        return self._port

    @property
    def base_url(self) -> str:
        if self._options is None:
            raise IllegalStateError("base_url is only known after start has completed")
        host = "localhost" if self._options.listen_on_all_hosts else self._options.host
        if ":" in host:
            host = f"[{host}]"
        port = self._port if self._port is not None else self._options.port
        return f"http://{host}:{port}"

    async def start(self, options: ServerOptions) -> None:
        """Bind and begin listening; returns once connections are being accepted."""
        if self._state is not ServerState.NOT_STARTED:
            raise IllegalStateError(f"start can only be called once, server is {self._state.value}")

        sock = bind_socket(options)
        port = sock.getsockname()[1]
        display_host = "localhost" if options.listen_on_all_hosts else options.host
        base_url = f"http://{display_host}:{port}"
        logger.debug("Server base URL: %s", base_url)

        app = create_app(self._engine, options, self._settings, base_url=base_url)
        config = uvicorn.Config(
            app,
            lifespan="on",
            log_config=None,
            access_log=False,
            timeout_graceful_shutdown=self._settings.shutdown_timeout,
        )
        server = uvicorn.Server(config)
        task = asyncio.create_task(server.serve(sockets=[sock]))

        while not server.started:
            if task.done():
                sock.close()
                cause = None if task.cancelled() else task.exception()
                raise BindError(f"Server failed to start on {options.host}:{port}") from cause
            await asyncio.sleep(STARTUP_POLL_SECONDS)

        self._options = options
        self._socket = sock
        self._server = server
        self._serve_task = task
        self._port = port
        self._state = ServerState.LISTENING

        logger.info("Listening for HTTP requests on %s ...", self.base_url)

    async def stop(self) -> None:
        """Close the listener; returns after the close completes.

        Calling stop again once stopped is a no-op.
        """
        if self._state is ServerState.NOT_STARTED:
            raise IllegalStateError("stop can only be called after start has completed")
        if self._state is ServerState.STOPPED:
            logger.debug("Server already stopped")
            return

        logger.info("Server shutting down")
        self._server.should_exit = True
        await self.wait_closed()

    async def wait_closed(self) -> None:
        """Wait until the server stops (via stop() or a captured signal)."""
        if self._serve_task is None:
            raise IllegalStateError("wait_closed can only be called after start has completed")
        try:
            await self._serve_task
        finally:
            self._socket.close()
            self._state = ServerState.STOPPED

    async def run(self, options: ServerOptions) -> None:
        """Start, then serve until shut down."""
        await self.start(options)
        await self.wait_closed()
