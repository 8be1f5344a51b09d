"""
Pydantic Schemas for API - Request/response models and websocket messages.

These models define the exact contract between the browser client and the
server. Websocket messages use the camelCase keys the client expects.

Error Codes:
- GAME_NOT_FOUND: Game id does not exist
- GAME_FULL: Two players are already attached
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Any, Union
import json

from pydantic import BaseModel, Field, ValidationError

from ..session import Outcome


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    GAME_FULL = "GAME_FULL"


class MessageType(str, Enum):
    """Websocket message types."""
    MOVE = "MOVE"
    GAME_OVER = "GAME_OVER"


class GameStatusValue(str, Enum):
    """Game status values."""
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAWN = "drawn"


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")


class CreateGameResponse(BaseModel):
    """Response after creating a game."""
    game_id: str = Field(..., alias="gameId", description="Id used to join and connect")

    model_config = {"populate_by_name": True}


class JoinGameResponse(BaseModel):
    """Response after joining a game."""
    game_id: str = Field(..., alias="gameId")
    participants: int = Field(0, description="Connections currently attached")

    model_config = {"populate_by_name": True}


class GameSnapshotResponse(BaseModel):
    """Current state of one game."""
    game_id: str = Field(..., alias="gameId")
    board: list[str]
    next_player: str = Field(..., alias="nextPlayer")
    status: GameStatusValue
    winner: Optional[str] = None
    participants: int = 0

    model_config = {"populate_by_name": True}


class GameListResponse(BaseModel):
    """Response listing known games."""
    games: list[str]
    count: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str


# =============================================================================
# Websocket Messages
# =============================================================================

class MalformedMessage(ValueError):
    """Inbound websocket payload could not be parsed."""


class InboundMessage(BaseModel):
    """Any client message. Types other than MOVE are ignored."""
    type: Optional[str] = None


class MoveMessage(BaseModel):
    """
    A client's move.

    `position` must be a real integer; range and turn are checked by the
    rules, and an unknown `symbol` is simply never the player to move.
    """
    type: MessageType = MessageType.MOVE
    position: int = Field(..., strict=True)
    symbol: str = Field(..., strict=True)
    game_id: Optional[str] = Field(None, alias="gameId")

    model_config = {"populate_by_name": True}


class GameStateMessage(BaseModel):
    """State pushed to every attached client."""
    type: MessageType
    board: list[str] = Field(..., min_length=9, max_length=9)
    next_player: str = Field(..., alias="nextPlayer")
    winner: Optional[str] = None

    model_config = {"populate_by_name": True}

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with the client's key names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_inbound(raw: Union[str, bytes]) -> Union[MoveMessage, InboundMessage]:
    """
    Parse one inbound websocket frame.

    Raises MalformedMessage for invalid JSON, non-object payloads, or a
    MOVE with missing or mistyped fields.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedMessage(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedMessage(f"Expected a JSON object, got {type(data).__name__}")

    if data.get("type") != MessageType.MOVE.value:
        msg_type = data.get("type")
        return InboundMessage(type=msg_type if isinstance(msg_type, str) else None)

    try:
        return MoveMessage.model_validate(data)
    except ValidationError as e:
        raise MalformedMessage(f"Invalid MOVE message: {e.error_count()} error(s)") from e


def build_state_message(outcome: Outcome) -> GameStateMessage:
    """
    Shape an Outcome for the wire.

    Terminal states are sent as GAME_OVER with `winner` ("" for a draw),
    including the snapshot sent to a connection attaching after the end.
    """
    if outcome.is_terminal:
        return GameStateMessage(
            type=MessageType.GAME_OVER,
            board=outcome.board,
            next_player=outcome.next_mark.value,
            winner=outcome.winner.value if outcome.winner else "",
        )
    return GameStateMessage(
        type=MessageType.MOVE,
        board=outcome.board,
        next_player=outcome.next_mark.value,
    )


def build_snapshot_response(outcome: Outcome, participants: int) -> GameSnapshotResponse:
    """Shape an Outcome for GET /game/{id}."""
    return GameSnapshotResponse(
        game_id=outcome.session_id,
        board=outcome.board,
        next_player=outcome.next_mark.value,
        status=GameStatusValue(outcome.state.status.value),
        winner=outcome.winner.value if outcome.winner else None,
        participants=participants,
    )
