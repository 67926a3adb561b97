"""
Visit Counter Backend: Application Configuration
=================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a module-level `settings` object.
Who:   Passed into create_app(); the module-level instance is only the default.
When:  Loaded once at import time; required values are checked in the
       application lifespan, before any storage backend is built.

Environment:
    ALLOWED_ORIGINS        comma-separated origin allow-list (required)
    APP_ENV                "prod" enables the origin check middleware
    STORAGE_BACKEND        "sqlite" (embedded file) or "postgres" (networked)
    SQLITE_PATH            embedded database file
    DB_HOST/DB_PORT/DB_USER/DB_PASSWORD/DB_NAME
                           networked backend connection parameters
"""

from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

from visitcount.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults suit local development against the embedded SQLite backend.
    Production deployments set ALLOWED_ORIGINS and APP_ENV=prod, and the
    DB_* values when STORAGE_BACKEND=postgres.
    """

    # ── Origin Policy ─────────────────────────────────────────────────────
    # Format: comma-separated URLs, e.g. "https://a.example,https://b.example"
    allowed_origins: str = Field(default="")

    # "prod" switches on OriginCheckMiddleware and the strict CORS policy
    app_env: str = Field(default="dev")

    # ── Storage ───────────────────────────────────────────────────────────
    storage_backend: Literal["sqlite", "postgres"] = Field(default="sqlite")

    sqlite_path: str = Field(default="visits.db")

    db_host: str = Field(default="")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_user: str = Field(default="")
    db_password: str = Field(default="")
    db_name: str = Field(default="")

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1, le=65535)

    # Seconds in-flight requests get to finish after SIGTERM/SIGINT
    shutdown_grace_period: int = Field(default=5, ge=0, le=300)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def allowed_origins_list(self) -> List[str]:
        """Splits the comma-separated allow-list, dropping blanks."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "prod"

    @property
    def postgres_url(self) -> URL:
        """
        Async PostgreSQL URL for the networked backend.

        URL.create escapes credentials, so passwords containing '@' or '/'
        survive intact.
        """
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )

    def validate_required(self) -> None:
        """
        What:  Validates that settings needed at runtime are present.
        When:  Called during app startup (lifespan), before storage is built.
        How:   Collects every problem, then raises one ConfigurationError.
        """
        errors = []
        if not self.allowed_origins_list:
            errors.append("ALLOWED_ORIGINS is not set")
        if self.storage_backend == "postgres":
            required = {
                "DB_HOST": self.db_host,
                "DB_USER": self.db_user,
                "DB_PASSWORD": self.db_password,
                "DB_NAME": self.db_name,
            }
            for name, value in required.items():
                if not value:
                    errors.append(f"{name} is not set (required for STORAGE_BACKEND=postgres)")
        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors),
                context={"missing": errors},
            )


settings = Settings()
