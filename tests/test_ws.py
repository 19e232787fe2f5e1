import pytest
from fastapi.testclient import TestClient

from xo_relay.main import create_app


@pytest.fixture
def client():
    with TestClient(create_app()) as c:
        yield c


def _seat(a, b, room="r1"):
    a.send_json({"type": "joinRoom", "room": room, "name": "Ann"})
    assert a.receive_json()["symbol"] == "X"
    b.send_json({"type": "joinRoom", "room": room, "name": "Bob"})
    assert b.receive_json()["symbol"] == "O"
    starts = [a.receive_json(), b.receive_json()]
    assert [s["type"] for s in starts] == ["startGame", "startGame"]
    return starts[0]


def test_root_is_plain_text(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert "running" in r.text


def test_health(client):
    r = client.get("/health")
    assert r.json() == {"status": "ok", "rooms": 0, "players": 0, "connections": 0}


def test_join_move_and_occupied_cell(client):
    with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
        a.send_json({"type": "joinRoom", "room": "r1"})
        assert a.receive_json() == {"type": "assignSymbol", "room": "r1", "symbol": "X"}
        b.send_json({"type": "joinRoom", "room": "r1"})
        assert b.receive_json() == {"type": "assignSymbol", "room": "r1", "symbol": "O"}
        for ws in (a, b):
            start = ws.receive_json()
            assert start["type"] == "startGame"
            assert start["board"] == [None] * 9
            assert start["turn"] == "X"
            assert start["players"] == {"X": "Player X", "O": "Player O"}

        a.send_json({"type": "makeMove", "room": "r1", "index": 0})
        for ws in (a, b):
            upd = ws.receive_json()
            assert upd["type"] == "updateGame"
            assert upd["board"][0] == "X"
            assert upd["turn"] == "O"
            assert upd["gameOver"] is False
            assert "winner" not in upd

        # занятая клетка игнорируется, следующий валидный ход проходит
        b.send_json({"type": "makeMove", "room": "r1", "index": 0})
        b.send_json({"type": "makeMove", "room": "r1", "index": 4})
        upd = a.receive_json()
        assert upd["board"][4] == "O"
        assert upd["board"][0] == "X"
        assert upd["turn"] == "X"
        assert b.receive_json() == upd


def test_win_and_restart(client):
    with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
        start = _seat(a, b)
        assert start["players"] == {"X": "Ann", "O": "Bob"}
        for ws, idx in ((a, 0), (b, 3), (a, 1), (b, 4), (a, 2)):
            ws.send_json({"type": "makeMove", "room": "r1", "index": idx})
            last = a.receive_json()
            assert b.receive_json() == last
        assert last["winner"] == "X"
        assert last["gameOver"] is True

        b.send_json({"type": "restartGame", "room": "r1"})
        for ws in (a, b):
            start = ws.receive_json()
            assert start["type"] == "startGame"
            assert start["board"] == [None] * 9
            assert start["turn"] == "X"


def test_room_full(client):
    with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
        _seat(a, b)
        with client.websocket_connect("/ws") as c:
            c.send_json({"type": "joinRoom", "room": "r1"})
            assert c.receive_json() == {"type": "roomFull", "room": "r1"}
        assert client.app.state.relay.rooms.get("r1").player_count == 2


def test_malformed_frames_keep_connection_open(client):
    with client.websocket_connect("/ws") as a:
        a.send_text("not json")
        a.send_json({"type": "fly", "room": "r1"})
        a.send_json({"type": "makeMove", "room": "r1", "index": 42})
        a.send_json({"type": "joinRoom", "room": "r1"})
        assert a.receive_json()["type"] == "assignSymbol"


def test_disconnect_notifies_and_cleans_up(client):
    rooms = client.app.state.relay.rooms
    with client.websocket_connect("/ws") as b:
        with client.websocket_connect("/ws") as a:
            _seat(a, b)
        assert b.receive_json() == {"type": "opponentLeft", "room": "r1"}
        assert rooms.get("r1").players.keys() == {"O"}
    assert "r1" not in rooms

    with client.websocket_connect("/ws") as c:
        c.send_json({"type": "joinRoom", "room": "r1"})
        assert c.receive_json()["symbol"] == "X"
        assert rooms.get("r1").board == [None] * 9


def test_binary_frame_keeps_seat(client):
    rooms = client.app.state.relay.rooms
    with client.websocket_connect("/ws") as a:
        a.send_json({"type": "joinRoom", "room": "r1"})
        assert a.receive_json()["symbol"] == "X"
        a.send_bytes(b"\x00\x01")
        a.send_json({"type": "joinRoom", "room": "r1"})
        assert a.receive_json() == {"type": "assignSymbol", "room": "r1", "symbol": "X"}
        assert rooms.get("r1").player_count == 1
        assert rooms.snapshot() == {"rooms": 1, "players": 1}
