import asyncio
import logging

from tabletop.messaging.types import ServerMessageType, SessionErrorCode
from tabletop.session.manager import SessionManager
from tabletop.session.models import RoomStatus
from tabletop.session.room_manager import RoomManager
from tabletop.tests.mocks import MockConnection


async def _connect(manager: SessionManager, name: str | None = None, connection_id: str | None = None):
    connection = MockConnection(connection_id)
    manager.register_connection(connection)
    if name is not None:
        await manager.login(connection, name)
        connection.clear()
    return connection


async def _room_with(manager: SessionManager, game_id: str, *names: str):
    """Create a room hosted by the first name and join the rest. Returns (room_id, connections)."""
    host = await _connect(manager, names[0])
    await manager.create_room(host, game_id)
    room_id = host.sent_messages[-1]["room"]["id"]
    connections = [host]
    for name in names[1:]:
        connection = await _connect(manager, name)
        await manager.join_room(connection, room_id)
        connections.append(connection)
    for connection in connections:
        connection.clear()
    return room_id, connections


class TestLogin:
    async def test_login_success_carries_user(self, session_manager):
        connection = await _connect(session_manager, connection_id="conn-1")
        await session_manager.login(connection, "Alice")
        [message] = connection.sent_messages
        assert message == {"type": "login-success", "user": {"id": "conn-1", "name": "Alice"}}
        assert session_manager.get_user("conn-1").name == "Alice"

    async def test_relogin_renames_player_in_joined_rooms(self, session_manager):
        room_id, [alice, bob] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")

        await session_manager.login(alice, "Alicia")

        assert alice.sent_messages[0]["type"] == ServerMessageType.LOGIN_SUCCESS
        for connection in (alice, bob):
            update = connection.messages_of_type(ServerMessageType.ROOM_UPDATED)[-1]
            assert [p["name"] for p in update["room"]["players"]] == ["Alicia", "Bob"]
        room = session_manager.room_manager.get_room(room_id)
        assert room.players[0].name == "Alicia"

    async def test_create_room_requires_login(self, session_manager):
        connection = await _connect(session_manager)
        await session_manager.create_room(connection, "tictactoe")
        [message] = connection.sent_messages
        assert message["type"] == ServerMessageType.ERROR
        assert message["code"] == SessionErrorCode.AUTH_REQUIRED
        assert message["message"] == "Please login first"
        assert session_manager.room_manager.room_count == 0


class TestCreateAndJoin:
    async def test_create_room_emits_room_created_to_creator(self, session_manager):
        host = await _connect(session_manager, "Alice", connection_id="c1")
        await session_manager.create_room(host, "tictactoe")
        [message] = host.sent_messages
        assert message["type"] == ServerMessageType.ROOM_CREATED
        room = message["room"]
        assert room["hostId"] == "c1"
        assert room["players"] == [{"id": "c1", "name": "Alice"}]
        assert room["gameType"] == "tictactoe"
        assert room["status"] == "waiting"
        assert room["gameState"] is None

    async def test_unknown_game(self, session_manager):
        host = await _connect(session_manager, "Alice")
        await session_manager.create_room(host, "chess")
        [message] = host.sent_messages
        assert message["code"] == SessionErrorCode.UNKNOWN_GAME

    async def test_join_emits_joined_to_joiner_and_updated_to_all(self, session_manager):
        room_id, [host] = await _room_with(session_manager, "tictactoe", "Alice")
        guest = await _connect(session_manager, "Bob")

        await session_manager.join_room(guest, room_id)

        assert [m["type"] for m in host.sent_messages] == [ServerMessageType.ROOM_UPDATED]
        assert [m["type"] for m in guest.sent_messages] == [
            ServerMessageType.ROOM_UPDATED,
            ServerMessageType.ROOM_JOINED,
        ]
        assert guest.sent_messages[-1]["room"]["players"][1]["name"] == "Bob"

    async def test_join_unknown_room(self, session_manager):
        guest = await _connect(session_manager, "Bob")
        await session_manager.join_room(guest, "deadbeef")
        [message] = guest.sent_messages
        assert message["code"] == SessionErrorCode.ROOM_NOT_FOUND

    async def test_join_full_room_errors_only_to_joiner(self, session_manager):
        room_id, [host, guest] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        late = await _connect(session_manager, "Carol")

        await session_manager.join_room(late, room_id)

        [message] = late.sent_messages
        assert message["code"] == SessionErrorCode.ROOM_FULL
        assert host.sent_messages == []
        assert guest.sent_messages == []


class TestStartGame:
    async def test_non_host_cannot_start(self, session_manager):
        room_id, [host, guest] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        await session_manager.start_game(guest, room_id)
        [message] = guest.sent_messages
        assert message["code"] == SessionErrorCode.NOT_HOST
        assert host.sent_messages == []

    async def test_insufficient_players(self, session_manager):
        room_id, [host] = await _room_with(session_manager, "tictactoe", "Alice")
        await session_manager.start_game(host, room_id)
        [message] = host.sent_messages
        assert message["code"] == SessionErrorCode.INSUFFICIENT_PLAYERS
        assert message["message"] == "Need at least 2 players to start"

    async def test_start_broadcasts_playing_room(self, session_manager):
        room_id, connections = await _room_with(session_manager, "mahjong", "Alice", "Bob", "Carol")
        await session_manager.start_game(connections[0], room_id)
        for connection in connections:
            [message] = connection.sent_messages
            assert message["type"] == ServerMessageType.ROOM_UPDATED
            assert message["room"]["status"] == "playing"
            assert len(message["room"]["gameState"]["hands"]) == 3


class TestMakeMove:
    async def test_end_to_end_tictactoe_win(self, session_manager):
        room_id, [alice, bob] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        await session_manager.start_game(alice, room_id)
        moves = [(alice, 0), (bob, 3), (alice, 1), (bob, 4), (alice, 2)]
        for connection, index in moves:
            await session_manager.make_move(connection, room_id, {"index": index})

        for connection in (alice, bob):
            game_over = connection.messages_of_type(ServerMessageType.GAME_OVER)
            assert game_over == [{"type": "game-over", "result": {"isGameOver": True, "winnerId": "X"}}]
            last = connection.sent_messages[-1]
            assert last["type"] == ServerMessageType.ROOM_UPDATED
            assert last["room"]["status"] == "finished"
            assert last["room"]["gameState"]["board"][:3] == ["X", "X", "X"]

    async def test_rejected_move_reported_to_sender_only(self, session_manager):
        room_id, [alice, bob] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        await session_manager.start_game(alice, room_id)
        alice.clear()
        bob.clear()

        await session_manager.make_move(bob, room_id, {"index": 0})

        [message] = bob.sent_messages
        assert message == {"type": "error", "code": "not_your_turn", "message": "Not your turn"}
        assert alice.sent_messages == []
        room = session_manager.room_manager.get_room(room_id)
        assert room.game_state.board == (None,) * 9

    async def test_move_before_start(self, session_manager):
        room_id, [alice, _bob] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        await session_manager.make_move(alice, room_id, {"index": 0})
        [message] = alice.sent_messages
        assert message["code"] == SessionErrorCode.GAME_NOT_STARTED

    async def test_move_in_unknown_room_is_silently_ignored(self, session_manager):
        alice = await _connect(session_manager, "Alice")
        await session_manager.make_move(alice, "missing", {"index": 0})
        assert alice.sent_messages == []

    async def test_move_from_unknown_user_is_silently_ignored(self, session_manager):
        room_id, [alice, bob] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        await session_manager.start_game(alice, room_id)
        alice.clear()
        stranger = await _connect(session_manager)
        await session_manager.make_move(stranger, room_id, {"index": 0})
        assert stranger.sent_messages == []
        assert alice.sent_messages == []

    async def test_concurrent_moves_are_seen_in_the_same_order(self, session_manager):
        room_id, connections = await _room_with(session_manager, "mahjong", "Alice", "Bob")
        alice, bob = connections
        await session_manager.start_game(alice, room_id)
        alice.clear()
        bob.clear()

        hand = session_manager.room_manager.get_room(room_id).game_state.hands[bob.connection_id]
        await asyncio.gather(
            session_manager.make_move(alice, room_id, {"action": "draw"}),
            session_manager.make_move(bob, room_id, {"action": "reorder", "newHand": list(reversed(hand))}),
            session_manager.make_move(alice, room_id, {"action": "discard", "tileIndex": 0}),
        )

        def updates(connection):
            return [m["room"]["gameState"] for m in connection.messages_of_type(ServerMessageType.ROOM_UPDATED)]

        assert updates(alice) == updates(bob)
        assert len(updates(alice)) == 3


class TestDisconnect:
    async def test_guest_leaving_waiting_room_is_removed(self, session_manager):
        room_id, [host, guest] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        await session_manager.handle_disconnect(guest)

        [message] = host.sent_messages
        assert message["type"] == ServerMessageType.ROOM_UPDATED
        assert [p["name"] for p in message["room"]["players"]] == ["Alice"]
        assert session_manager.get_user(guest.connection_id) is None

    async def test_host_leaving_transfers_host(self, session_manager):
        room_id, [host, guest] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        await session_manager.handle_disconnect(host)
        [message] = guest.sent_messages
        assert message["room"]["hostId"] == guest.connection_id

    async def test_last_member_leaving_removes_room(self, session_manager):
        room_id, [host] = await _room_with(session_manager, "tictactoe", "Alice")
        await session_manager.handle_disconnect(host)
        assert session_manager.room_manager.get_room(room_id) is None
        assert session_manager.connection_count == 0

    async def test_started_game_keeps_disconnected_player_seated(self, session_manager):
        room_id, [alice, bob] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        await session_manager.start_game(alice, room_id)
        alice.clear()

        await session_manager.handle_disconnect(bob)

        room = session_manager.room_manager.get_room(room_id)
        assert room.status is RoomStatus.PLAYING
        assert room.player_count == 2
        assert alice.sent_messages == []

    async def test_broadcast_skips_broken_connections(self, session_manager):
        room_id, [alice, bob] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")
        bob.fail_sends = True
        await session_manager.start_game(alice, room_id)
        [message] = alice.sent_messages
        assert message["room"]["status"] == "playing"


async def test_capacity_reported_to_creator():
    manager = SessionManager(RoomManager(max_rooms=1))
    first = await _connect(manager, "Alice")
    second = await _connect(manager, "Bob")
    await manager.create_room(first, "tictactoe")
    await manager.create_room(second, "tictactoe")
    [message] = second.sent_messages
    assert message["code"] == SessionErrorCode.SERVER_AT_CAPACITY


async def test_ping_answers_pong(session_manager):
    connection = await _connect(session_manager)
    await session_manager.handle_ping(connection)
    assert connection.sent_messages == [{"type": "pong"}]


async def test_rejected_action_logs_warning_with_code(session_manager, caplog):
    room_id, [alice, bob] = await _room_with(session_manager, "tictactoe", "Alice", "Bob")

    with caplog.at_level(logging.WARNING):
        await session_manager.start_game(bob, room_id)

    warning_records = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warning_records) == 1
    msg = warning_records[0].msg
    assert msg["event"] == "error sent to client"
    assert msg["error_code"] == "not_host"
