import itertools

import mongomock
import pytest

from server import create_app
from setup_db import create_indexes

TOKEN = "test-token"


@pytest.fixture(scope="function")
def db():
    """
    Fresh in-memory database per test, with the real unique indexes.
    """
    database = mongomock.MongoClient()["effortee_test"]
    create_indexes(database)
    return database


@pytest.fixture(scope="function")
def id_factory():
    counter = itertools.count(1)
    return lambda: f"quest_test{next(counter):03d}"


@pytest.fixture(scope="function")
def app(db, id_factory):
    app = create_app(db=db, api_token=TOKEN, id_factory=id_factory)
    app.config["TESTING"] = True
    return app


@pytest.fixture(scope="function")
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def quest_data():
    return {
        "title": "Just get started",
        "subject": "Math",
        "suggested_minutes": 20,
        "deadline": "2025-02-20",
    }
