import pytest
from fastapi.testclient import TestClient

from todo_api.db import Database
from todo_api.main import create_app
from todo_api.service import TodoService
from todo_api.settings import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(db_path=str(tmp_path / "todo.db"), log_level="WARNING")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Entering the client runs the lifespan, which builds the TodoService.
    with TestClient(app) as c:
        yield c


@pytest.fixture
def service(settings):
    return TodoService(Database(settings.db_path))
