"""Server options: the parsed, immutable listen configuration.

Options are built once per process entry point (see src/cli.py) and handed
to ServerLifecycle.start(); nothing mutates them afterwards.
"""

from dataclasses import dataclass

ALL_INTERFACES = "*"
LOOPBACK_HOST = "127.0.0.1"

DEFAULT_CORS_ORIGIN = "*"
DEFAULT_MAX_BODY_SIZE = 10_000 * 1024


@dataclass(frozen=True)
class Profile:
    host: str
    port: int


PROFILES: dict[str, Profile] = {
    "public": Profile(host=ALL_INTERFACES, port=8080),
    "local": Profile(host=LOOPBACK_HOST, port=5555),
}


def get_profile(name: str) -> Profile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown server profile: {name}") from None


@dataclass(frozen=True)
class ServerOptions:
    port: int = 8080
    host: str = ALL_INTERFACES
    cors_origin: str = DEFAULT_CORS_ORIGIN
    max_body_size: int = DEFAULT_MAX_BODY_SIZE

    def __post_init__(self):
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Port out of range: {self.port}")
        if self.max_body_size < 0:
            raise ValueError(f"Max body size must not be negative: {self.max_body_size}")
        if not self.host:
            raise ValueError("Host must not be empty")

    @property
    def listen_on_all_hosts(self) -> bool:
        return self.host == ALL_INTERFACES

    @classmethod
    def for_profile(cls, name: str, **overrides) -> "ServerOptions":
        """Options using a profile's host/port defaults, with explicit overrides."""
        profile = get_profile(name)
        values = {"host": profile.host, "port": profile.port}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
