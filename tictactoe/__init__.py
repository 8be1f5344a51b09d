"""
Tictactoe - Live multiplayer tic-tac-toe service

A small real-time game server. The service:
- Creates game sessions on request
- Accepts two players per session over a websocket
- Validates moves against the rules
- Broadcasts authoritative state to every attached player
"""

__version__ = "0.1.0"
