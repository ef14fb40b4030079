import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from notifications import OrderNotifier
from seed import seed_products
from tests.helpers import SECRET, RecordingMailer


@pytest.fixture
def settings():
    return Settings(signing_secret=SECRET, database_name="shop_test", db_uri="mongodb://localhost:27017")


@pytest.fixture
def db():
    return mongomock.MongoClient()["shop_test"]


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(settings, db, mailer):
    return create_app(settings, db=db, notifier=OrderNotifier(mailer))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seeded(db):
    seed_products(db)
    return db


@pytest.fixture
def lenient_client(app):
    """Client that returns 500 responses instead of re-raising server errors."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
