from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from user_api.app.core.config import Settings
from user_api.app.core.db import create_database_engine, init_db, ping
from user_api.app.main import create_app


def test_init_db_creates_users_table_with_email_index(engine: Engine) -> None:
    inspector = inspect(engine)

    columns = {column["name"] for column in inspector.get_columns("users")}
    assert columns == {"id", "name", "email", "age", "created_at", "updated_at"}

    indexes = {index["name"]: index for index in inspector.get_indexes("users")}
    assert indexes["idx_users_email"]["column_names"] == ["email"]


def test_init_db_is_idempotent(engine: Engine) -> None:
    init_db(engine)
    init_db(engine)

    assert inspect(engine).has_table("users")


def test_ping_succeeds_against_reachable_database(engine: Engine) -> None:
    ping(engine)


def test_postgres_engine_uses_bounded_pool() -> None:
    engine = create_database_engine(Settings(database_url=""))
    try:
        assert engine.dialect.name == "postgresql"
        assert engine.pool.size() == 25
        assert engine.pool.timeout() == 30
    finally:
        engine.dispose()


def test_app_refuses_to_start_when_database_unreachable(tmp_path: Path) -> None:
    settings = Settings(database_url=f"sqlite:///{tmp_path / 'missing' / 'users.sqlite3'}")
    app = create_app(settings)

    # The driver error may arrive wrapped by the test client's task group
    with pytest.raises(Exception):
        with TestClient(app):
            pass
