import pytest
from fastapi.testclient import TestClient

from guestbook.config import Settings
from guestbook.database import SchemaState
from guestbook.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url_override=f"sqlite+aiosqlite:///{tmp_path / 'guestbook.db'}",
        retry_delay=0.05,
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    # entering the client runs the startup hook, which schedules schema creation
    with TestClient(app) as client:
        assert client.portal.call(app.state.schema.wait) is SchemaState.READY
        yield client


@pytest.fixture
def broken_client(tmp_path):
    # sqlite cannot create a file inside a directory that does not exist
    missing = tmp_path / "missing" / "guestbook.db"
    settings = Settings(
        database_url_override=f"sqlite+aiosqlite:///{missing}",
        retry_delay=0.05,
    )
    with TestClient(create_app(settings)) as client:
        yield client


def stored_count(client) -> int:
    return client.portal.call(client.app.state.store.count)
