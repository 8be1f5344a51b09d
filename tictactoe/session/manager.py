"""
Session Manager - Creates and tracks live games.

LIFECYCLE:
1. A client asks for a new game -> registry creates a Session (in-memory only)
2. Each player opens a websocket for that game id -> Session.attach
3. During the game:
   - A player sends a move
   - Session validates and applies it under its own lock
   - The caller fans the Outcome out to every attached player
4. A socket errors or closes -> Session.detach
5. Sessions are never destroyed explicitly; idle ones can be evicted
   with cleanup_stale_sessions when a TTL is configured

LOCKING:
- The registry lock guards only the id -> Session map
- Each Session has its own lock; games never contend with each other
- No lock is ever held across network I/O
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import asyncio
import logging
import threading
import time
import uuid

from ..engine_core import GameState, Mark, Move, apply_move


logger = logging.getLogger(__name__)


class SessionNotFound(LookupError):
    """Raised when a game id is not in the registry."""

    def __init__(self, session_id: str):
        super().__init__(f"Game not found: {session_id}")
        self.session_id = session_id


@dataclass(eq=False)
class Participant:
    """
    One attached connection.

    The session only references the connection for fan-out; the
    transport itself belongs to the network layer.
    """
    connection: Any
    mark: Mark
    participant_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    # Serializes sends to this connection
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    # Sequence number of the last state delivered
    last_sequence: int = -1


@dataclass(frozen=True)
class Outcome:
    """
    A game state as of one accepted move.

    `sequence` counts accepted moves (0 is the fresh board) and gives the
    order in which participants must observe outcomes. `game_over` is
    True only for the move that ended the game.
    """
    session_id: str
    state: GameState
    sequence: int
    game_over: bool = False

    @property
    def board(self) -> list[str]:
        return list(self.state.board)

    @property
    def next_mark(self) -> Mark:
        return self.state.next_mark

    @property
    def winner(self) -> Mark | None:
        return self.state.winner

    @property
    def is_terminal(self) -> bool:
        return self.state.is_over


@dataclass(frozen=True)
class Attachment:
    """What a connection gets back from attach: its mark and the current state."""
    participant: Participant
    snapshot: Outcome

    @property
    def mark(self) -> Mark:
        return self.participant.mark


class Session:
    """
    One game's authoritative state plus its attached connections.

    All state changes happen under `_lock`. The lock is a plain
    threading.Lock: critical sections are short and never await.
    """

    def __init__(
        self,
        session_id: str,
        clock: Callable[[], float] = time.time,
    ):
        self.session_id = session_id
        self._clock = clock
        self._lock = threading.Lock()

        self._state = GameState()
        self._sequence = 0
        self._participants: dict[str, Participant] = {}
        self._attach_count = 0

        self.created_at = clock()
        self.last_activity = self.created_at

    # =========================================================================
    # Participants
    # =========================================================================

    def attach(self, connection: Any) -> Attachment:
        """
        Add a connection to the game.

        The first connection the session ever sees plays X, every later
        one plays O. A third connection is not rejected.
        """
        with self._lock:
            mark = Mark.X if self._attach_count == 0 else Mark.O
            self._attach_count += 1

            participant = Participant(connection=connection, mark=mark)
            self._participants[participant.participant_id] = participant
            self.last_activity = self._clock()
            snapshot = self._outcome(game_over=False)
            count = len(self._participants)

        logger.info(
            "Attached %s as %s to game %s (%d attached)",
            participant.participant_id, mark.value, self.session_id, count,
        )
        return Attachment(participant=participant, snapshot=snapshot)

    def detach(self, participant: Participant) -> None:
        """Remove a participant. Safe to call more than once."""
        with self._lock:
            removed = self._participants.pop(participant.participant_id, None)
            if removed is not None:
                self.last_activity = self._clock()
            count = len(self._participants)

        if removed is not None:
            logger.info(
                "Detached %s from game %s (%d attached)",
                participant.participant_id, self.session_id, count,
            )

    def is_attached(self, participant: Participant) -> bool:
        with self._lock:
            return participant.participant_id in self._participants

    def participants(self) -> list[Participant]:
        """Copy of the participant list, safe to iterate while others attach or detach."""
        with self._lock:
            return list(self._participants.values())

    @property
    def participant_count(self) -> int:
        with self._lock:
            return len(self._participants)

    # =========================================================================
    # Game state
    # =========================================================================

    def apply_move(self, position: int, mark: Mark | str) -> Outcome | None:
        """
        Apply a move if it is legal.

        Returns the new Outcome, or None when the move was dropped. Dropped
        moves change nothing and must not be broadcast.
        """
        with self._lock:
            result = apply_move(self._state, Move(position=position, mark=mark))
            if not result.success:
                error = result.error
                outcome = None
            else:
                self._state = result.new_state
                self._sequence += 1
                self.last_activity = self._clock()
                outcome = self._outcome(game_over=result.game_over)

        if outcome is None:
            logger.debug(
                "Dropped move %r@%r in game %s: %s",
                mark, position, self.session_id, error,
            )
        elif outcome.game_over:
            logger.info(
                "Game %s over: %s",
                self.session_id,
                f"{outcome.winner.value} wins" if outcome.winner else "draw",
            )
        return outcome

    def snapshot(self) -> Outcome:
        """Current state as an Outcome."""
        with self._lock:
            return self._outcome(game_over=False)

    def is_idle_since(self, cutoff: float) -> bool:
        """True if nobody is attached and nothing happened after `cutoff`."""
        with self._lock:
            return not self._participants and self.last_activity < cutoff

    def _outcome(self, game_over: bool) -> Outcome:
        # Caller holds self._lock
        return Outcome(
            session_id=self.session_id,
            state=self._state.copy(),
            sequence=self._sequence,
            game_over=game_over,
        )


class SessionRegistry:
    """
    Owns every live Session, keyed by game id.

    Responsibilities:
    - Create sessions with fresh, unique ids
    - Look sessions up
    - Optionally evict idle sessions

    No persistence - sessions are in-memory only. The registry never
    touches a session's board or turn.
    """

    def __init__(
        self,
        session_ttl: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.session_ttl = session_ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}

    def create_session(self) -> str:
        """Create a fresh game and return its id."""
        if self.session_ttl is not None:
            self.cleanup_stale_sessions(self.session_ttl)

        with self._lock:
            session_id = uuid.uuid4().hex
            while session_id in self._sessions:
                session_id = uuid.uuid4().hex
            self._sessions[session_id] = Session(session_id, clock=self._clock)

        logger.info("Created game %s", session_id)
        return session_id

    def get_session(self, session_id: str) -> Session:
        """Get a session by id; raises SessionNotFound if unknown."""
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def list_sessions(self) -> list[str]:
        """List ids of all known sessions."""
        with self._lock:
            return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: float) -> list[str]:
        """
        Evict sessions with nobody attached and no activity for max_age_seconds.

        Returns the evicted ids.
        """
        cutoff = self._clock() - max_age_seconds
        with self._lock:
            stale = [
                session_id for session_id, session in self._sessions.items()
                if session.is_idle_since(cutoff)
            ]
            for session_id in stale:
                del self._sessions[session_id]

        if stale:
            logger.info("Evicted %d idle game(s)", len(stale))
        return stale
