"""
Tic-tac-toe CLI - Command-line interface for the server.

Usage:
    tictactoe serve [--host H] [--port P]   Run the HTTP/websocket server
    tictactoe play                          Two players, one terminal
"""

import argparse
import logging
import os
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Tic-tac-toe - Live multiplayer game server",
        prog="tictactoe",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("TICTACTOE_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the game server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8080, help="Bind port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Play command
    subparsers.add_parser("play", help="Play a local game in the terminal")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "play":
        cmd_play(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "tictactoe.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


def cmd_play(args):
    """Play a hot-seat game."""
    outcome = play_game()
    sys.exit(0 if outcome is not None else 1)


def render_board(board):
    """Board as three text rows, empty cells shown by position."""
    cells = [cell or str(i) for i, cell in enumerate(board)]
    rows = [" | ".join(cells[i:i + 3]) for i in (0, 3, 6)]
    return "\n---------\n".join(rows)


def play_game(read=None, write=None):
    """
    Run one local game through a Session.

    Returns the final Outcome, or None if input ran out first.
    """
    from .engine_core import illegal_move_reason
    from .session import SessionRegistry

    read = read or input
    write = write or print

    registry = SessionRegistry()
    session = registry.get_session(registry.create_session())
    outcome = session.snapshot()

    while not outcome.is_terminal:
        write(render_board(outcome.board))
        mark = outcome.next_mark.value
        try:
            raw = read(f"{mark} to move (0-8): ")
        except EOFError:
            write("")
            return None

        try:
            position = int(raw.strip())
        except ValueError:
            write(f"Not a position: {raw!r}")
            continue

        error = illegal_move_reason(outcome.state, position, mark)
        if error:
            write(f"Illegal move: {error}")
            continue

        outcome = session.apply_move(position, mark)

    write(render_board(outcome.board))
    if outcome.winner:
        write(f"{outcome.winner.value} wins!")
    else:
        write("Draw.")
    return outcome


if __name__ == "__main__":
    main()
