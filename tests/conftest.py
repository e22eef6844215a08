from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from user_api.app.core.config import Settings
from user_api.app.core.db import create_database_engine, init_db
from user_api.app.main import create_app
from user_api.app.repositories.user_repository import UserRepository
from user_api.app.services.user_service import UserService


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(database_url=f"sqlite:///{tmp_path / 'users.sqlite3'}")


@pytest.fixture()
def engine(settings: Settings) -> Iterator[Engine]:
    engine = create_database_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def repository(engine: Engine) -> UserRepository:
    return UserRepository(engine)


@pytest.fixture()
def service(repository: UserRepository) -> UserService:
    return UserService(repository)


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings)
    with TestClient(app) as client:
        yield client
