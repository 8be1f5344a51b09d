"""
Session Module - Live games shared by their players.

A session represents one game:
- Created on an explicit create request
- Holds the authoritative board, turn and outcome
- Tracks the connections attached to it
- Serializes moves so every player sees the same order

Sessions are EPHEMERAL:
- No persistence to database
- Live for the process lifetime unless evicted as idle
"""

from .manager import (
    SessionRegistry,
    Session,
    SessionNotFound,
    Participant,
    Outcome,
    Attachment,
)

__all__ = [
    "SessionRegistry",
    "Session",
    "SessionNotFound",
    "Participant",
    "Outcome",
    "Attachment",
]
