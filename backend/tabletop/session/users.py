"""Connection-scoped user identities."""

import structlog

from tabletop.session.models import User

logger = structlog.get_logger()


class UserRegistry:
    """Map live connection ids to logged-in users.

    A user's id is the id of the connection that logged in, so an identity
    lives exactly as long as its connection.
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}  # connection_id -> User

    def login(self, connection_id: str, name: str) -> User:
        """Bind a connection to a user. Logging in again replaces the display name."""
        user = User(id=connection_id, name=name)
        self._users[connection_id] = user
        logger.info("user logged in", user_id=user.id, name=name)
        return user

    def get(self, connection_id: str) -> User | None:
        return self._users.get(connection_id)

    def logout(self, connection_id: str) -> User | None:
        return self._users.pop(connection_id, None)
