import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from todo_api.main import create_app
from todo_api.storage import Database


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    database = Database(engine)
    database.create_schema()
    yield database
    database.close()


@pytest.fixture
def c(db):
    return TestClient(create_app(database=db))
