import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import main


@pytest.fixture
def db():
    return mongomock.MongoClient()["assistant_test"]


@pytest.fixture
def client(db, monkeypatch):
    monkeypatch.setattr(database, "db", db)
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()
