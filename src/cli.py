"""Command-line entry point.

    lambda-api-local myapp.handlers:engine --port 3000 --cors-origin https://example.com

ENGINE is a `module:attribute` import string naming a HandlerEngine, a
`handler(event, context)` function, or a zero-argument factory returning
either.
"""

import argparse
import asyncio
import inspect
import sys
from typing import Any, Optional, Sequence

from uvicorn.importer import ImportFromStringError, import_from_string

from src.adapter.errors import BindError
from src.config.options import ServerOptions, get_profile
from src.config.settings import Settings, get_settings
from src.engine.base import HandlerEngine, as_engine
from src.logging.access import get_logger, setup_logging
from src.server.lifecycle import ServerLifecycle

EXIT_OK = 0
EXIT_BIND_FAILED = 1
EXIT_USAGE = 2

logger = get_logger("cli")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    profile = get_profile(settings.server_profile)

    # -h is taken by --host, so help is long-form only
    parser = argparse.ArgumentParser(
        prog="lambda-api-local",
        description="Serve a proxy-integration event handler over plain HTTP.",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="show this help message and exit")
    parser.add_argument("engine", help="engine import string, e.g. 'package.module:engine'")
    parser.add_argument("-p", "--port", type=int, default=profile.port,
                        help=f"port to listen on (default: {profile.port})")
    parser.add_argument("-h", "--host", default=profile.host,
                        help=f"host to bind, '*' for all interfaces (default: {profile.host})")
    parser.add_argument("-c", "--cors-origin", default="*",
                        help="value of the Access-Control-Allow-Origin header (default: *)")
    parser.add_argument("--max-body-size", type=int, default=settings.max_body_size,
                        help=f"maximum request body size in bytes (default: {settings.max_body_size})")
    return parser


def parse_arguments(argv: Optional[Sequence[str]], settings: Settings) -> argparse.Namespace:
    logger.debug("Command line arguments: %s", argv)
    return build_parser(settings).parse_args(argv)


def build_options(args: argparse.Namespace) -> ServerOptions:
    return ServerOptions(
        port=args.port,
        host=args.host,
        cors_origin=args.cors_origin,
        max_body_size=args.max_body_size,
    )


def load_engine(import_str: str) -> HandlerEngine:
    """Resolve an engine import string, calling zero-argument factories."""
    target: Any = import_from_string(import_str)
    if inspect.isclass(target) and issubclass(target, HandlerEngine):
        target = target()
    elif (
        not isinstance(target, HandlerEngine)
        and callable(target)
        and not inspect.signature(target).parameters
    ):
        target = target()
    return as_engine(target)


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    setup_logging()

    args = parse_arguments(argv, settings)
    try:
        options = build_options(args)
        engine = load_engine(args.engine)
    except (ImportFromStringError, TypeError, ValueError) as exc:
        logger.error("Invalid arguments: %s", exc)
        return EXIT_USAGE

    lifecycle = ServerLifecycle(engine, settings)
    try:
        asyncio.run(lifecycle.run(options))
    except BindError as exc:
        logger.error("Server failed to start: %s", exc)
        return EXIT_BIND_FAILED
    except KeyboardInterrupt:
        pass
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
