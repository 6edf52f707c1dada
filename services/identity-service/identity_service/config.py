from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import os


class ConfigurationError(RuntimeError):
    """Raised when a required runtime setting is missing or unusable."""


def _database_url_from_parts() -> str:
    return "postgresql://{user}:{password}@{host}:{port}/{name}".format(
        user=os.getenv("DATABASE_USER", "postgres"),
        password=os.getenv("DATABASE_PASSWORD", "postgres"),
        host=os.getenv("DATABASE_HOST", "localhost"),
        port=os.getenv("DATABASE_PORT", "5432"),
        name=os.getenv("DATABASE_NAME", "identity"),
    )


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values exposed to FastAPI components."""

    app_name: str = "identity-service"
    version: str = "0.1.0"
    database_url: str = os.getenv("POSTGRES_URL") or _database_url_from_parts()
    create_schema: bool = os.getenv("CREATE_SCHEMA", "true").lower() == "true"
    http_host: str = os.getenv("HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("SERVER_DEFAULT_PORT", "3000"))
    token_secret: str = os.getenv("TOKEN_SECRET_KEY", "")
    token_ttl_seconds: int = int(os.getenv("TOKEN_TTL_SECONDS", "3600"))
    password_hash_rounds: int = int(os.getenv("PASSWORD_HASH_ROUNDS", "12"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", "*"))
    )

    def require_token_secret(self) -> str:
        """Return the token signing secret, refusing to hand out an empty one."""
        if not self.token_secret:
            raise ConfigurationError("TOKEN_SECRET_KEY must be set to sign login tokens")
        return self.token_secret


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()
