"""Fan-out of one message to a group of connections."""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tabletop.messaging.protocol import ConnectionProtocol


async def broadcast_to_connections(
    connections: Iterable[ConnectionProtocol],
    message: dict[str, Any],
) -> None:
    """Send a message to every connection, ignoring ones that have gone away.

    The iterable is snapshotted first so a disconnect during a send cannot
    mutate it mid-iteration. A failed send never blocks the remaining
    recipients.
    """
    for connection in list(connections):
        with contextlib.suppress(RuntimeError, OSError):
            await connection.send_message(message)
