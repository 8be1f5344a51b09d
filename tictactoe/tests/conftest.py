"""
Pytest fixtures for tic-tac-toe tests.
"""

import asyncio
import json

import pytest
from fastapi import WebSocketDisconnect

from ..engine_core.state import GameState
from ..session import SessionRegistry, Session


# X@0, O@4, X@2, O@1, X@7, O@6, X@3, O@8, X@5 ends as
#   X O X
#   X O X
#   O X O
DRAW_MOVES = [
    (0, "X"), (4, "O"), (2, "X"), (1, "O"), (7, "X"),
    (6, "O"), (3, "X"), (8, "O"), (5, "X"),
]

X_WINS_TOP_ROW = [(0, "X"), (3, "O"), (1, "X"), (4, "O"), (2, "X")]


class FakeConnection:
    """
    Stand-in for a Starlette WebSocket.

    `incoming` frames are returned by receive_text in order; once they run
    out the peer disconnects.
    """

    def __init__(self, incoming=None, fail_send=False, send_delay=0.0):
        self.incoming = list(incoming or [])
        self.fail_send = fail_send
        self.send_delay = send_delay
        self.sent = []
        self.closed_with = None

    async def send_json(self, data):
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.fail_send:
            raise RuntimeError("peer went away")
        self.sent.append(data)

    async def receive_text(self):
        if not self.incoming:
            raise WebSocketDisconnect(code=1000)
        frame = self.incoming.pop(0)
        if isinstance(frame, dict):
            return json.dumps(frame)
        return frame

    async def close(self, code=1000):
        self.closed_with = code


def move_frame(position, symbol, game_id="game"):
    """Inbound MOVE frame as the browser client sends it."""
    return {"type": "MOVE", "position": position, "symbol": symbol, "gameId": game_id}


@pytest.fixture
def fresh_state() -> GameState:
    """Empty board, X to move."""
    return GameState()


@pytest.fixture
def registry() -> SessionRegistry:
    """Empty registry."""
    return SessionRegistry()


@pytest.fixture
def session(registry: SessionRegistry) -> Session:
    """A fresh session registered in `registry`."""
    return registry.get_session(registry.create_session())


@pytest.fixture
def make_connection():
    """Factory for FakeConnection."""
    return FakeConnection
