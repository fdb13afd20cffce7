"""Application settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server defaults
    server_profile: str = "public"  # public | local
    shutdown_timeout: float = 5.0  # Seconds in-flight requests get on stop

    # Request handling
    max_body_size: int = 10_000 * 1024  # Mirrors the API gateway payload ceiling

    # Documentation mount
    openapi_enabled: bool = False
    docs_base_path: str = ""

    # Logging
    log_level: str = "INFO"
    access_log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def normalized_docs_base_path(self) -> str:
        """Docs base path with a leading slash and no trailing slash ("" for root)."""
        base = self.docs_base_path.strip().strip("/")
        return f"/{base}" if base else ""


@lru_cache
def get_settings() -> Settings:
    return Settings()
