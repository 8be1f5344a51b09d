"""
Connection Handling - Per-connection receive loop and broadcast fan-out.

A connection is anything with the Starlette WebSocket surface used here:
    await connection.send_json(data)
    await connection.receive_text()
    await connection.close(code)

Failure policy:
- A failed or timed-out send detaches and closes that one participant only
- A receive error, a close, or a malformed message ends that one loop
- Nothing here ever touches another game
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import asyncio
import logging

from fastapi import WebSocketDisconnect

from ..session import Session, Participant, Outcome
from .schemas import (
    MoveMessage,
    MalformedMessage,
    parse_inbound,
    build_state_message,
)


logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT = 5.0

# Websocket close codes
CLOSE_UNSUPPORTED_DATA = 1003
CLOSE_POLICY_VIOLATION = 1008
CLOSE_INTERNAL_ERROR = 1011


@dataclass
class FanoutResult:
    """Per-participant delivery report for one broadcast."""
    delivered: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def all_delivered(self) -> bool:
        return not self.failed


async def deliver(
    participant: Participant,
    message: dict[str, Any],
    sequence: int,
    timeout: float | None = DEFAULT_SEND_TIMEOUT,
) -> bool:
    """
    Send one state message to one participant.

    Sends to a participant are serialized, and a state no newer than the
    last one delivered is skipped. Returns False if the message was
    skipped; send errors and timeouts propagate.
    """
    async with participant.send_lock:
        if sequence <= participant.last_sequence:
            return False
        await asyncio.wait_for(participant.connection.send_json(message), timeout)
        participant.last_sequence = sequence
        return True


async def close_connection(participant: Participant, code: int) -> None:
    """Close a participant's connection; a peer that is already gone is fine."""
    try:
        await participant.connection.close(code=code)
    except Exception as e:
        logger.debug("Close of %s failed: %r", participant.participant_id, e)


async def broadcast(
    session: Session,
    outcome: Outcome,
    timeout: float | None = DEFAULT_SEND_TIMEOUT,
) -> FanoutResult:
    """
    Deliver an Outcome to every participant attached right now.

    Each delivery is independent: a participant whose send fails or times
    out is detached and closed, and the others still get the message.
    """
    message = build_state_message(outcome).to_wire()
    participants = session.participants()

    results = await asyncio.gather(
        *(deliver(p, message, outcome.sequence, timeout) for p in participants),
        return_exceptions=True,
    )

    report = FanoutResult()
    for participant, result in zip(participants, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning(
                "Delivery to %s in game %s failed: %r",
                participant.participant_id, session.session_id, result,
            )
            session.detach(participant)
            await close_connection(participant, CLOSE_INTERNAL_ERROR)
            report.failed.append(participant.participant_id)
        elif result:
            report.delivered.append(participant.participant_id)
        else:
            report.skipped.append(participant.participant_id)
    return report


class ConnectionHandler:
    """
    Runs one participant's connection for its whole lifetime.

    Usage:
        handler = ConnectionHandler(session, websocket)
        await handler.run()

    The connection must already be accepted. run() attaches, pushes the
    current state, then forwards MOVE messages to the session until the
    connection goes away. Detach happens in exactly one place: the
    finally block of run().
    """

    def __init__(
        self,
        session: Session,
        connection: Any,
        send_timeout: float | None = DEFAULT_SEND_TIMEOUT,
    ):
        self.session = session
        self.connection = connection
        self.send_timeout = send_timeout
        self.participant: Participant | None = None

    async def run(self) -> None:
        attachment = self.session.attach(self.connection)
        self.participant = attachment.participant

        try:
            await deliver(
                self.participant,
                build_state_message(attachment.snapshot).to_wire(),
                attachment.snapshot.sequence,
                self.send_timeout,
            )
            await self._receive_loop()
        except WebSocketDisconnect:
            pass
        except MalformedMessage as e:
            logger.warning(
                "Malformed message from %s in game %s: %s",
                self.participant.participant_id, self.session.session_id, e,
            )
            await close_connection(self.participant, CLOSE_UNSUPPORTED_DATA)
        except Exception:
            logger.exception(
                "Connection %s in game %s failed",
                self.participant.participant_id, self.session.session_id,
            )
        finally:
            self.session.detach(self.participant)

    async def _receive_loop(self) -> None:
        while self.session.is_attached(self.participant):
            raw = await self.connection.receive_text()
            if not self.session.is_attached(self.participant):
                # Dropped by a failed broadcast while waiting
                return
            message = parse_inbound(raw)

            if not isinstance(message, MoveMessage):
                logger.debug("Ignoring %r message in game %s", message.type, self.session.session_id)
                continue

            outcome = self.session.apply_move(message.position, message.symbol)
            if outcome is None:
                continue

            await broadcast(self.session, outcome, self.send_timeout)
