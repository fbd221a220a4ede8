import pytest
from unittest.mock import MagicMock

from causeconnect.auth_service.utils import hash_password
from causeconnect.database.stores import InMemoryEventStore, InMemorySessionStore, InMemoryUserStore
from causeconnect.gateway.server import create_app

TEST_EMAIL = "organizer@example.com"
TEST_PASSWORD = "abcde"


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def event_store():
    return InMemoryEventStore()


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def app(user_store, event_store, session_store):
    app = create_app(
        config={"TESTING": True, "SECRET_KEY": "test_secret", "STORE_BACKEND": "memory"},
        user_store=user_store,
        event_store=event_store,
        session_store=session_store,
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def registered_user(user_store):
    return user_store.create_user(TEST_EMAIL, hash_password(TEST_PASSWORD))


@pytest.fixture
def logged_in_client(client, registered_user):
    response = client.post("/login", data={"email": TEST_EMAIL, "password": TEST_PASSWORD})
    assert response.headers["Location"] == "/dashboard"
    return client


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the database connection and cursor used by the Postgres stores.
    """
    mock_conn = MagicMock()
    mock_cursor = MagicMock()

    # Context managers must not swallow exceptions raised inside them
    mock_conn.__enter__.return_value = mock_conn
    mock_conn.__exit__.return_value = False
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = False

    mock_conn.cursor.return_value = mock_cursor

    mocker.patch("causeconnect.database.stores.get_db", return_value=mock_conn)

    return mock_conn, mock_cursor


def flashes(client):
    """Pending flash messages as (category, message) pairs."""
    with client.session_transaction() as sess:
        return [tuple(f) for f in sess.get("_flashes", [])]
