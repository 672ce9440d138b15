import os
from dataclasses import dataclass, field
from typing import List, Optional

# Optional: load a local .env file if present.
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    # python-dotenv is optional at runtime; plain environment variables still work.
    pass


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or malformed."""


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _env_str(*names: str, default: str = "") -> str:
    """Return the first non-blank value among `names`."""
    for name in names:
        v = (os.environ.get(name) or "").strip()
        if v:
            return v
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Secrets (JWT secret, database password) come from the environment
    or a .env file only. There is no built-in fallback secret.
    """

    # -----------------
    # Database
    # -----------------
    # Preferred: set TREASURER_DATABASE_URL (or DATABASE_URL) to use Postgres.
    # Fallback: TREASURER_DB_PATH for SQLite.
    DB_DSN: str = field(
        default_factory=lambda: _env_str(
            "TREASURER_DATABASE_URL",
            "DATABASE_URL",
            "TREASURER_DB_PATH",
            default="./treasurer_dashboard.sqlite",
        )
    )

    # -----------------
    # Auth (JWT)
    # -----------------
    # Required. The API refuses to start without it.
    AUTH_JWT_SECRET: str = field(default_factory=lambda: _env_str("TREASURER_JWT_SECRET"))

    # Bootstrap first admin user if users table is empty.
    # Both must be set; nothing is created otherwise.
    AUTH_BOOTSTRAP_ADMIN_USERNAME: Optional[str] = field(
        default_factory=lambda: _env_str("AUTH_BOOTSTRAP_ADMIN_USERNAME") or None
    )
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: Optional[str] = field(
        default_factory=lambda: _env_str("AUTH_BOOTSTRAP_ADMIN_PASSWORD") or None
    )

    # -----------------
    # HTTP
    # -----------------
    API_HOST: str = field(default_factory=lambda: _env_str("API_HOST", default="0.0.0.0"))
    API_PORT: int = field(
        default_factory=lambda: _env_int("API_PORT", _env_int("PORT", 3000))
    )

    # Comma separated. "*" allows any origin (no credentials).
    CORS_ALLOW_ORIGINS: str = field(
        default_factory=lambda: _env_str("CORS_ALLOW_ORIGINS", default="*")
    )

    def cors_origins(self) -> List[str]:
        return [o.strip() for o in (self.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]

    def validate(self) -> "Config":
        if not (self.AUTH_JWT_SECRET or "").strip():
            raise ConfigError("TREASURER_JWT_SECRET is not set")
        if not (self.DB_DSN or "").strip():
            raise ConfigError("database DSN is blank")
        if not 0 < int(self.API_PORT) < 65536:
            raise ConfigError(f"API_PORT out of range: {self.API_PORT}")
        return self


def load_config() -> Config:
    return Config()
