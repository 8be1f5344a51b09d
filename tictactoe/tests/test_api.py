"""
Tests for API layer.

Tests:
- Game service methods
- HTTP routes and error bodies
- Websocket play end to end
"""

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.service import GameService, GameFull
from ..api.schemas import ErrorCode
from ..session import SessionNotFound
from .conftest import X_WINS_TOP_ROW, move_frame


EMPTY_SNAPSHOT = {"type": "MOVE", "board": [""] * 9, "nextPlayer": "X"}


class TestGameService:
    """Tests for GameService."""

    @pytest.fixture
    def service(self):
        """Create a fresh game service."""
        return GameService()

    def test_create_game(self, service):
        """Creating a game returns a usable id."""
        response = service.create_game()

        assert response.game_id
        assert response.game_id in service.list_games()

    def test_join_game(self, service):
        """Joining an existing game succeeds."""
        game_id = service.create_game().game_id

        response = service.join_game(game_id)

        assert response.game_id == game_id
        assert response.participants == 0

    def test_join_unknown_game(self, service):
        """Joining an unknown game raises SessionNotFound."""
        with pytest.raises(SessionNotFound):
            service.join_game("nonexistent-id")

    def test_join_full_game(self, service):
        """Two attached players fill a game."""
        game_id = service.create_game().game_id
        session = service.get_session(game_id)
        session.attach(object())
        session.attach(object())

        with pytest.raises(GameFull):
            service.join_game(game_id)

    def test_get_game(self, service):
        """Game state reflects accepted moves."""
        game_id = service.create_game().game_id
        service.get_session(game_id).apply_move(4, "X")

        response = service.get_game(game_id)

        assert response.board[4] == "X"
        assert response.next_player == "O"
        assert response.status.value == "in_progress"
        assert response.winner is None

    def test_get_finished_game(self, service):
        """A won game reports its winner."""
        game_id = service.create_game().game_id
        session = service.get_session(game_id)
        for position, mark in X_WINS_TOP_ROW:
            session.apply_move(position, mark)

        response = service.get_game(game_id)

        assert response.status.value == "won"
        assert response.winner == "X"


class TestHTTPRoutes:
    """Tests for the HTTP endpoints."""

    @pytest.fixture
    def client(self):
        with TestClient(create_app(GameService())) as client:
            yield client

    def test_create(self, client):
        """POST /game/create returns a gameId."""
        response = client.post("/game/create")

        assert response.status_code == 200
        assert set(response.json()) == {"gameId"}

    def test_join(self, client):
        """POST /game/join/{id} is 200 for a known game."""
        game_id = client.post("/game/create").json()["gameId"]

        response = client.post(f"/game/join/{game_id}")

        assert response.status_code == 200
        assert response.json() == {"gameId": game_id, "participants": 0}

    def test_join_unknown(self, client):
        """Unknown games are 404 with a structured error."""
        response = client.post("/game/join/nope")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == ErrorCode.GAME_NOT_FOUND.value
        assert body["details"] == {"gameId": "nope"}

    def test_get_game(self, client):
        """GET /game/{id} returns the board."""
        game_id = client.post("/game/create").json()["gameId"]

        body = client.get(f"/game/{game_id}").json()

        assert body["gameId"] == game_id
        assert body["board"] == [""] * 9
        assert body["nextPlayer"] == "X"
        assert body["status"] == "in_progress"

    def test_get_unknown_game(self, client):
        assert client.get("/game/nope").status_code == 404

    def test_list_games(self, client):
        """GET /games lists created games."""
        ids = {client.post("/game/create").json()["gameId"] for _ in range(3)}

        body = client.get("/games").json()

        assert set(body["games"]) == ids
        assert body["count"] == 3

    def test_health(self, client):
        """Health check reports healthy."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/health"


class TestWebSocket:
    """End-to-end play over websockets."""

    @pytest.fixture
    def client(self):
        with TestClient(create_app(GameService())) as client:
            yield client

    @pytest.fixture
    def game_id(self, client):
        return client.post("/game/create").json()["gameId"]

    def test_unknown_game_refused(self, client):
        """Connecting to an unknown game is refused."""
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws/nope"):
                pass

        assert exc_info.value.code == 1008

    def test_initial_snapshot(self, client, game_id):
        """The first message is the empty board."""
        with client.websocket_connect(f"/ws/{game_id}") as ws:
            assert ws.receive_json() == EMPTY_SNAPSHOT

    def test_winning_game(self, client, game_id):
        """Both players see every move and the final GAME_OVER."""
        with client.websocket_connect(f"/ws/{game_id}") as ws_x:
            assert ws_x.receive_json() == EMPTY_SNAPSHOT
            with client.websocket_connect(f"/ws/{game_id}") as ws_o:
                assert ws_o.receive_json() == EMPTY_SNAPSHOT

                for position, mark in X_WINS_TOP_ROW:
                    sender = ws_x if mark == "X" else ws_o
                    sender.send_json(move_frame(position, mark, game_id))
                    x_view = ws_x.receive_json()
                    o_view = ws_o.receive_json()
                    assert x_view == o_view
                    assert x_view["board"][position] == mark

                assert x_view == {
                    "type": "GAME_OVER",
                    "board": ["X", "X", "X", "O", "O", "", "", "", ""],
                    "nextPlayer": "O",
                    "winner": "X",
                }

    def test_join_full_after_two_connect(self, client, game_id):
        """Join reports GAME_FULL once two players are connected."""
        with client.websocket_connect(f"/ws/{game_id}") as ws_x:
            ws_x.receive_json()
            with client.websocket_connect(f"/ws/{game_id}") as ws_o:
                ws_o.receive_json()

                response = client.post(f"/game/join/{game_id}")

                assert response.status_code == 400
                assert response.json()["error_code"] == ErrorCode.GAME_FULL.value

    def test_illegal_move_gets_no_reply(self, client, game_id):
        """An out-of-turn move is dropped; the next legal one is answered."""
        with client.websocket_connect(f"/ws/{game_id}") as ws:
            ws.receive_json()
            ws.send_json(move_frame(0, "O", game_id))
            ws.send_json({"type": "CHAT", "text": "hi"})
            ws.send_json(move_frame(4, "X", game_id))

            message = ws.receive_json()

            assert message["board"] == ["", "", "", "", "X", "", "", "", ""]
            assert message["nextPlayer"] == "O"

    def test_malformed_message_closes(self, client, game_id):
        """Invalid JSON closes the connection with 1003."""
        with client.websocket_connect(f"/ws/{game_id}") as ws:
            ws.receive_json()
            ws.send_text("not json")

            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()

            assert exc_info.value.code == 1003

    def test_late_joiner_sees_game_over(self, client, game_id):
        """Connecting to a finished game sends GAME_OVER first."""
        session = client.app.state.game_service.get_session(game_id)
        for position, mark in X_WINS_TOP_ROW:
            session.apply_move(position, mark)

        with client.websocket_connect(f"/ws/{game_id}") as ws:
            message = ws.receive_json()

        assert message["type"] == "GAME_OVER"
        assert message["winner"] == "X"
