"""
FastAPI Application - HTTP and websocket API for the browser client.

Endpoints:
    POST   /game/create           Create a game
    POST   /game/join/{id}        Check a game can be joined
    GET    /game/{id}             Get game state
    GET    /games                 List games
    WS     /ws/{id}               Play: moves in, state out
    GET    /health                Liveness probe

Websocket flow:
    1. Connect to /ws/{id}; unknown ids are refused before the upgrade
    2. The first message is always the current state
    3. Send {"type": "MOVE", "position": 0-8, "symbol": "X"|"O", "gameId": id}
    4. Every accepted move is pushed to all players as MOVE or GAME_OVER
    5. Illegal moves are dropped without a reply
"""

from typing import Optional, Union
import os

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..session import SessionRegistry, SessionNotFound
from .connection import ConnectionHandler, CLOSE_POLICY_VIOLATION
from .service import GameService, GameFull
from .schemas import (
    CreateGameResponse,
    JoinGameResponse,
    GameSnapshotResponse,
    GameListResponse,
    HealthResponse,
    ErrorResponse,
    ErrorCode,
)


# Environment configuration
TICTACTOE_ENV = os.getenv("TICTACTOE_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
TICTACTOE_SEND_TIMEOUT = float(os.getenv("TICTACTOE_SEND_TIMEOUT", "5.0"))
TICTACTOE_SESSION_TTL = (
    float(os.environ["TICTACTOE_SESSION_TTL"])
    if os.getenv("TICTACTOE_SESSION_TTL") else None
)


def create_app(service: Optional[GameService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional GameService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Tic-Tac-Toe API",
        description="""
Live two-player tic-tac-toe.

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | Game does not exist |
| `GAME_FULL` | Two players are already connected |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        debug=TICTACTOE_ENV == "development",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    game_service = service or GameService(
        registry=SessionRegistry(session_ttl=TICTACTOE_SESSION_TTL),
    )
    app.state.game_service = game_service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def not_found(e: SessionNotFound) -> JSONResponse:
        return make_error_response(
            ErrorCode.GAME_NOT_FOUND,
            "Game not found",
            status_code=404,
            details={"gameId": e.session_id},
        )

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/game/create",
        response_model=CreateGameResponse,
        tags=["Games"],
        summary="Create a new game",
    )
    async def create_game() -> CreateGameResponse:
        """Create a game and return its `gameId`. Always succeeds."""
        return game_service.create_game()

    @app.post(
        "/game/join/{game_id}",
        response_model=JoinGameResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Game is full"},
            404: {"model": ErrorResponse, "description": "Game not found"},
        },
        tags=["Games"],
        summary="Join an existing game",
    )
    async def join_game(game_id: str) -> Union[JoinGameResponse, JSONResponse]:
        """
        Check that a game exists and has room.

        The player is attached when they open `/ws/{game_id}`.
        """
        try:
            return game_service.join_game(game_id)
        except SessionNotFound as e:
            return not_found(e)
        except GameFull:
            return make_error_response(
                ErrorCode.GAME_FULL,
                "Game is full",
                details={"gameId": game_id, "maxPlayers": game_service.max_players},
            )

    @app.get(
        "/game/{game_id}",
        response_model=GameSnapshotResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game state",
    )
    async def get_game(game_id: str) -> Union[GameSnapshotResponse, JSONResponse]:
        """Get the current board, turn and outcome of a game."""
        try:
            return game_service.get_game(game_id)
        except SessionNotFound as e:
            return not_found(e)

    @app.get(
        "/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List games",
    )
    async def list_games() -> GameListResponse:
        """List all game ids."""
        games = game_service.list_games()
        return GameListResponse(games=games, count=len(games))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/ws/{game_id}")
    async def websocket_endpoint(websocket: WebSocket, game_id: str):
        """
        Persistent connection for one player.

        Messages from server:
        - MOVE: board, nextPlayer
        - GAME_OVER: board, nextPlayer, winner ("" for a draw)

        Messages from client:
        - MOVE: position, symbol, gameId
        - anything else is ignored
        """
        try:
            session = game_service.get_session(game_id)
        except SessionNotFound:
            await websocket.close(code=CLOSE_POLICY_VIOLATION)
            return

        await websocket.accept()
        handler = ConnectionHandler(session, websocket, send_timeout=TICTACTOE_SEND_TIMEOUT)
        await handler.run()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="tictactoe",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Tic-Tac-Toe API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn tictactoe.api.app:app
app = create_app()
