"""
Database integration and schema bootstrap.

This module declares the ``users`` table, builds the SQLAlchemy
engine (which owns the bounded connection pool) and provides the two
startup steps run before the application serves traffic: ``ping`` to
verify connectivity and ``init_db`` to create the schema if it does
not exist yet.  There is no migration system; the table definition
below is the whole schema.

PostgreSQL is the production backend.  Any other SQLAlchemy URL works
as well, which is how the test suite runs against SQLite files.
"""

import logging

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    create_engine,
    func,
    text,
)
from sqlalchemy.engine import Engine, make_url

from .config import Settings

logger = logging.getLogger(__name__)

metadata = MetaData()

EMAIL_UNIQUE_CONSTRAINT = "uq_users_email"

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(100), nullable=False),
    Column("age", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("email", name=EMAIL_UNIQUE_CONSTRAINT),
    Index("idx_users_email", "email"),
    # Never hand out the id of a deleted row again
    sqlite_autoincrement=True,
)


def create_database_engine(settings: Settings) -> Engine:
    """Create the engine described by ``settings``.

    No connection is opened here.  For server databases the pool is
    capped at ``settings.pool_size`` connections with no overflow, so
    callers wait up to ``settings.pool_timeout`` seconds for a free
    connection once the pool is exhausted.
    """
    url = make_url(settings.sqlalchemy_url())
    if url.get_backend_name() == "sqlite":
        # Requests are served from a thread pool
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=settings.pool_size,
        max_overflow=0,
        pool_recycle=settings.pool_recycle,
        pool_timeout=settings.pool_timeout,
        pool_pre_ping=True,
    )


def ping(engine: Engine) -> None:
    """Open one connection and run a trivial query.

    Raises the underlying SQLAlchemy error if the database cannot be
    reached.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection established (%s)", engine.url.render_as_string(hide_password=True))


def init_db(engine: Engine) -> None:
    """Create the ``users`` table and its index if they are missing.

    Safe to call on every start; existing tables are left untouched.
    """
    metadata.create_all(engine, checkfirst=True)
    logger.info("Database schema initialized")


def close_db(engine: Engine) -> None:
    """Close every pooled connection."""
    logger.info("Closing database connection pool")
    engine.dispose()
