"""Shared fixtures: an in-memory database, the API app and two users."""

import pytest
from fastapi.testclient import TestClient

from eventhub.api import create_application
from eventhub.config.auth import AuthConfig
from eventhub.db import Database, DatabaseConfig

from helpers import register


@pytest.fixture
def auth_config() -> AuthConfig:
    # Minimum bcrypt cost keeps the suite fast
    return AuthConfig(jwt_secret='test-secret', bcrypt_rounds=4)


@pytest.fixture
def database():
    db = Database(DatabaseConfig(url='sqlite://'))
    db.init_db()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def app(database, auth_config):
    return create_application(database=database, auth_config=auth_config)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def alice(client):
    return register(client, 'Alice Organizer', 'alice@example.com')


@pytest.fixture
def bob(client):
    return register(client, 'Bob Attendee', 'bob@example.com')
