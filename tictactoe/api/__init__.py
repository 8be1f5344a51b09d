"""
API Module - Browser client interface.

Exposes live games over HTTP and websockets.
The client:
1. Creates a game, or joins one by id
2. Opens a websocket for that game
3. Sends moves and receives the authoritative board

All state is in-memory. No user accounts.
"""

from .schemas import (
    # Responses
    CreateGameResponse,
    JoinGameResponse,
    GameSnapshotResponse,
    GameListResponse,
    HealthResponse,
    ErrorResponse,
    # Websocket messages
    MoveMessage,
    InboundMessage,
    GameStateMessage,
    MalformedMessage,
    parse_inbound,
    build_state_message,
    # Enums
    ErrorCode,
    MessageType,
)
from .connection import ConnectionHandler, FanoutResult, broadcast, deliver
from .service import GameService, GameFull
from .app import create_app

__all__ = [
    # Responses
    "CreateGameResponse",
    "JoinGameResponse",
    "GameSnapshotResponse",
    "GameListResponse",
    "HealthResponse",
    "ErrorResponse",
    # Websocket messages
    "MoveMessage",
    "InboundMessage",
    "GameStateMessage",
    "MalformedMessage",
    "parse_inbound",
    "build_state_message",
    # Enums
    "ErrorCode",
    "MessageType",
    # Connections
    "ConnectionHandler",
    "FanoutResult",
    "broadcast",
    "deliver",
    # Service
    "GameService",
    "GameFull",
    "create_app",
]
