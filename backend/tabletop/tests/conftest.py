
import pytest

from tabletop.messaging.router import MessageRouter
from tabletop.session.manager import SessionManager
from tabletop.session.room_manager import RoomManager
from tabletop.tests.helpers import seeded_engine_factory
from tabletop.tests.mocks import MockConnection


@pytest.fixture
def room_manager():
    return RoomManager(engine_factory=seeded_engine_factory())


@pytest.fixture
def session_manager(room_manager):
    return SessionManager(room_manager)


@pytest.fixture
def router(session_manager):
    return MessageRouter(session_manager)


@pytest.fixture
def connect(router):
    """Register a new mock connection with the router and return it."""

    async def _connect(connection_id: str | None = None) -> MockConnection:
        connection = MockConnection(connection_id)
        await router.handle_connect(connection)
        return connection

    return _connect


@pytest.fixture
def login(router, connect):
    """Connect and log in a user, clearing the login-success from its outbox."""

    async def _login(name: str, connection_id: str | None = None) -> MockConnection:
        connection = await connect(connection_id)
        await router.handle_message(connection, {"type": "login", "name": name})
        connection.clear()
        return connection

    return _login
