import random

from conftest import drain
from roomrelay.api.ws.connection.connection_manager import ConnectionManager


def test_join_announces_to_others_then_confirms(manager):
    alice = manager.connect()
    alice.username = "alice"
    manager.join(alice, "general")
    assert drain(alice) == [
        {"type": "system", "content": "Joined room: general"},
        {"type": "presence", "room": "general", "users": ["alice"]},
    ]

    bob = manager.connect()
    bob.username = "bob"
    manager.join(bob, "general")
    assert drain(alice) == [
        {"type": "user_joined", "room": "general", "sender": "bob"},
        {"type": "presence", "room": "general", "users": ["alice", "bob"]},
    ]
    assert drain(bob) == [
        {"type": "system", "content": "Joined room: general"},
        {"type": "presence", "room": "general", "users": ["alice", "bob"]},
    ]


def test_leave_sequence(manager):
    alice, bob = manager.connect(), manager.connect()
    alice.username, bob.username = "alice", "bob"
    manager.join(alice, "general")
    manager.join(bob, "general")
    manager.set_typing(alice, "general", True)
    manager.set_typing(bob, "general", True)
    drain(alice), drain(bob)

    manager.leave(alice, "general")

    assert drain(bob) == [
        {"type": "typing", "room": "general", "typingUsers": ["bob"]},
        {"type": "user_left", "room": "general", "sender": "alice"},
        {"type": "presence", "room": "general", "users": ["bob"]},
    ]
    assert drain(alice) == [{"type": "system", "content": "Left room: general"}]
    assert not alice.in_room("general")


def test_leave_last_member_removes_room_and_typing(manager):
    alice = manager.connect()
    alice.username = "alice"
    manager.join(alice, "general")
    manager.set_typing(alice, "general", True)
    drain(alice)

    manager.leave(alice, "general")

    assert "general" not in manager.directory
    assert "general" not in manager.typing
    assert drain(alice) == [{"type": "system", "content": "Left room: general"}]


def test_leave_when_not_member_is_noop(manager):
    alice, bob = manager.connect(), manager.connect()
    alice.username, bob.username = "alice", "bob"
    manager.join(alice, "general")
    drain(alice)

    manager.leave(bob, "general")
    manager.leave(bob, "nowhere")

    assert drain(alice) == []
    assert drain(bob) == []


def test_typing_set_to_empty_is_deleted_silently_on_leave(manager):
    alice, bob = manager.connect(), manager.connect()
    alice.username, bob.username = "alice", "bob"
    manager.join(alice, "general")
    manager.join(bob, "general")
    manager.set_typing(alice, "general", True)
    drain(alice), drain(bob)

    manager.leave(alice, "general")

    assert [e["type"] for e in drain(bob)] == ["user_left", "presence"]
    assert "general" not in manager.typing


def test_set_typing_requires_identity_and_membership(manager):
    anonymous = manager.connect()
    manager.directory.add("general", anonymous)
    anonymous.add_room("general")
    assert manager.set_typing(anonymous, "general", True) is False

    alice = manager.connect()
    alice.username = "alice"
    assert manager.set_typing(alice, "general", True) is False
    assert "general" not in manager.typing
    assert drain(anonymous) == []


def test_set_typing_always_broadcasts(manager):
    alice = manager.connect()
    alice.username = "alice"
    manager.join(alice, "general")
    drain(alice)

    manager.set_typing(alice, "general", True)
    manager.set_typing(alice, "general", True)
    manager.set_typing(alice, "general", False)
    manager.set_typing(alice, "general", False)

    assert [e["typingUsers"] for e in drain(alice)] == [["alice"], ["alice"], [], []]
    assert "general" not in manager.typing


def test_disconnect_leaves_every_room_and_is_idempotent(manager):
    alice, bob = manager.connect(), manager.connect()
    alice.username, bob.username = "alice", "bob"
    for room in ("one", "two"):
        manager.join(alice, room)
        manager.join(bob, room)
    manager.set_typing(alice, "one", True)
    drain(alice), drain(bob)

    manager.disconnect(alice)
    manager.disconnect(alice)

    events = drain(bob)
    one = [e for e in events if e.get("room") == "one"]
    two = [e for e in events if e.get("room") == "two"]
    assert one == [
        {"type": "user_left", "room": "one", "sender": "alice"},
        {"type": "presence", "room": "one", "users": ["bob"]},
    ]
    assert two == [
        {"type": "user_left", "room": "two", "sender": "alice"},
        {"type": "presence", "room": "two", "users": ["bob"]},
    ]
    assert alice.rooms == set()
    assert manager.get_total_connections() == 1
    # closed, so the leave confirmations went nowhere
    assert drain(alice) == []


def test_rename_drops_old_name_from_typing(manager):
    alice, bob = manager.connect(), manager.connect()
    alice.username, bob.username = "alice", "bob"
    manager.join(alice, "general")
    manager.join(bob, "general")
    manager.set_typing(alice, "general", True)
    drain(bob)

    manager.identify(alice, "alicia")

    assert drain(bob) == [{"type": "typing", "room": "general", "typingUsers": []}]
    assert "general" not in manager.typing


def test_max_connections():
    manager = ConnectionManager(max_connections=2)
    assert manager.connect() is not None
    assert manager.connect() is not None
    assert manager.connect() is None


def test_invariants_hold_for_random_sequences():
    rng = random.Random(7)
    manager = ConnectionManager()
    connections = []
    for name in ("alice", "bob", "carol", "dave"):
        connection = manager.connect()
        connection.username = name
        connections.append(connection)
    rooms = ["a", "b"]

    for _ in range(1000):
        connection = rng.choice(connections)
        room = rng.choice(rooms)
        action = rng.random()
        if action < 0.3:
            manager.join(connection, room)
        elif action < 0.55:
            manager.leave(connection, room)
        else:
            manager.set_typing(connection, room, rng.random() < 0.6)

        for name in rooms:
            members = manager.directory.members(name)
            assert (name in manager.directory) == bool(members)
            member_names = {c.username for c in members}
            assert set(manager.typing.users(name)) <= member_names
            if name in manager.typing:
                assert manager.typing.users(name)
            assert manager.directory.presence(name) == [c.username for c in members]
        for connection in connections:
            drain(connection)


def test_rename_drops_shared_name_from_typing(manager):
    # Display names are not unique, so typing state is tracked per name.
    first, second, bob = manager.connect(), manager.connect(), manager.connect()
    first.username, second.username, bob.username = "alice", "alice", "bob"
    for connection in (first, second, bob):
        manager.join(connection, "general")
    manager.set_typing(second, "general", True)
    drain(bob)

    manager.identify(first, "alicia")

    assert drain(bob) == [{"type": "typing", "room": "general", "typingUsers": []}]
    assert manager.typing.users("general") == []
