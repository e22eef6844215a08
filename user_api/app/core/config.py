"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables when it is instantiated.  Defaults are provided
for all fields so the service starts against a local PostgreSQL
instance without any configuration.  Tests and embedding code can
override individual fields by passing keyword arguments.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.engine import URL


def _env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = field(default_factory=lambda: _env("PROJECT_NAME", "User API"))
    api_version: str = field(default_factory=lambda: _env("API_VERSION", "1.0.0"))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE") or None)

    # PostgreSQL connection parameters.  The port has no environment
    # override and always uses the PostgreSQL default.
    db_host: str = field(default_factory=lambda: _env("DB_HOST", "localhost"))
    db_port: int = 5432
    db_user: str = field(default_factory=lambda: _env("DB_USER", "postgres"))
    db_password: str = field(default_factory=lambda: _env("DB_PASSWORD", "postgres"))
    db_name: str = field(default_factory=lambda: _env("DB_NAME", "userdb"))
    db_sslmode: str = field(default_factory=lambda: _env("DB_SSLMODE", "disable"))

    # Full SQLAlchemy URL.  When set it takes precedence over the DB_*
    # parameters above, e.g. ``sqlite:///users.db`` for local runs.
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", ""))

    # Connection pool limits
    pool_size: int = 25
    pool_recycle: int = 300
    pool_timeout: int = 30

    host: str = field(default_factory=lambda: _env("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(_env("PORT", "8080")))

    # Seconds to wait for in-flight requests after a termination signal.
    shutdown_timeout: int = field(default_factory=lambda: int(_env("SHUTDOWN_TIMEOUT", "10")))

    def sqlalchemy_url(self) -> "str | URL":
        """Return the URL the database engine should connect to."""
        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql+psycopg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            query={"sslmode": self.db_sslmode},
        )
