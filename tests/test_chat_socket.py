import asyncio
from unittest.mock import AsyncMock, patch

from app.exceptions import StorageReadError
from app.prompts import ERROR_REPLY, WELCOME_BACK, WELCOME_NEW


def _connect_frames(ws) -> tuple[dict, dict]:
    return ws.receive_json(), ws.receive_json()


def test_connect_sends_history_and_welcome(client):
    with client.websocket_connect("/ws?userId=alice") as ws:
        history, connected = _connect_frames(ws)

    assert history == {"type": "history", "history": []}
    assert connected["type"] == "connected"
    assert connected["content"] == WELCOME_NEW
    assert "timestamp" in connected


def test_message_round_trip(client):
    with client.websocket_connect("/ws?userId=alice") as ws:
        _connect_frames(ws)
        ws.send_json({"type": "message", "content": "I quit my job to paint"})

        assert ws.receive_json() == {"type": "typing"}
        reply = ws.receive_json()

    assert reply["type"] == "message"
    assert reply["content"] == "Mock reply"

    memory = asyncio.run(client.app.state.memory_registry.get("alice"))
    state = asyncio.run(memory.get_state())
    assert [m.role for m in state.conversation_history] == ["user", "assistant"]
    assert state.decisions[0].description == "I quit my job to paint"


def test_reconnect_replays_history(client):
    with client.websocket_connect("/ws?userId=bob") as ws:
        _connect_frames(ws)
        ws.send_json({"type": "message", "content": "hello"})
        ws.receive_json()
        ws.receive_json()

    with client.websocket_connect("/ws?userId=bob") as ws:
        history, _ = _connect_frames(ws)

    assert history["history"] == [
        {"role": "user", "content": "hello"},
        {"role": "assistant", "content": "Mock reply"},
    ]


def test_welcome_back_with_life_summary(client):
    registry = client.app.state.memory_registry
    memory = asyncio.run(registry.get("carol"))
    asyncio.run(memory.set_life_summary("Grew up in Ohio."))

    with client.websocket_connect("/ws?userId=carol") as ws:
        _, connected = _connect_frames(ws)

    assert connected["content"] == WELCOME_BACK


def test_missing_user_id_is_generated(client):
    with client.websocket_connect("/ws") as ws:
        _connect_frames(ws)

    user_ids = list(client.app.state.memory_registry._memories)
    assert len(user_ids) == 1
    assert user_ids[0].startswith("user_")


def test_malformed_json_gets_error_frame(client):
    with client.websocket_connect("/ws?userId=dave") as ws:
        _connect_frames(ws)
        ws.send_text("{not json")
        frame = ws.receive_json()

    assert frame == {"type": "error", "content": ERROR_REPLY}


def test_other_frame_types_ignored(client):
    with client.websocket_connect("/ws?userId=erin") as ws:
        _connect_frames(ws)
        ws.send_json({"type": "typing"})
        ws.send_json({"type": "message", "content": "hello"})

        assert ws.receive_json() == {"type": "typing"}
        assert ws.receive_json()["content"] == "Mock reply"


def test_storage_failure_on_connect(client):
    registry = client.app.state.memory_registry
    registry.get = AsyncMock(side_effect=StorageReadError("frank", "disk gone"))

    with client.websocket_connect("/ws?userId=frank") as ws:
        frame = ws.receive_json()

    assert frame == {"type": "error", "content": ERROR_REPLY}


def test_binary_frame_gets_error_and_connection_stays_open(client):
    with client.websocket_connect("/ws?userId=gina") as ws:
        _connect_frames(ws)
        ws.send_bytes(b"\x00\x01")
        assert ws.receive_json() == {"type": "error", "content": ERROR_REPLY}

        ws.send_json({"type": "message", "content": "hello"})
        assert ws.receive_json() == {"type": "typing"}
        assert ws.receive_json()["content"] == "Mock reply"


def test_unexpected_error_gets_error_frame(client):
    with client.websocket_connect("/ws?userId=hank") as ws:
        _connect_frames(ws)
        with patch(
            "app.chat.router.handle_user_message",
            new=AsyncMock(side_effect=RuntimeError("boom")),
        ):
            ws.send_json({"type": "message", "content": "hello"})
            assert ws.receive_json() == {"type": "typing"}
            assert ws.receive_json() == {"type": "error", "content": ERROR_REPLY}

        ws.send_json({"type": "message", "content": "again"})
        assert ws.receive_json() == {"type": "typing"}
        assert ws.receive_json()["content"] == "Mock reply"
