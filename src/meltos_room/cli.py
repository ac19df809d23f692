"""
Command-line interface for the meltos room client.

Each command issues one request against the server. ``open`` and ``join``
store the session they receive in the session file; every other command
reads it back.

Usage:
    meltos-room open [--lifetime-secs N] [--user-limits N]
    meltos-room join ROOM_ID [--user-id ID]
    meltos-room sync
    meltos-room create TITLE
    meltos-room speak DISCUSSION_ID TEXT
    meltos-room reply DISCUSSION_ID TO TEXT
    meltos-room close DISCUSSION_ID
    meltos-room leave

Environment Variables:
    MELTOS_SERVER_URL: Server URL (default: https://room.meltos.net)
    MELTOS_REQUEST_TIMEOUT: Request timeout in seconds (default: none)
    MELTOS_SESSION_FILE: Session file path (default: ./.room_configs)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from meltos_room.api.client import APIError, RoomClient
from meltos_room.api.models import OpenRequest
from meltos_room.config import Config, add_config_arguments
from meltos_room.session_store import (
    SessionStoreError,
    clear_session,
    load_session,
    save_session,
)

logger = logging.getLogger(__name__)


def print_json(data: Any) -> None:
    """Pretty-print a response body to stdout."""
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _run_in_session(
    args: argparse.Namespace,
    operation: Callable[[RoomClient], Awaitable[Any]],
) -> int:
    """
    Load the stored session, run one client operation and print its result.

    Returns:
        0 on success, 1 if there is no session or the request failed
    """
    config = Config.from_namespace(args)
    try:
        session = load_session(config.session_file)
    except SessionStoreError as e:
        print(
            f"Error: {e}. Run 'meltos-room open' or 'meltos-room join' first.",
            file=sys.stderr,
        )
        return 1

    async def _call() -> Any:
        async with RoomClient(config=config, session=session) as client:
            return await operation(client)

    try:
        result = asyncio.run(_call())
    except APIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if result is not None:
        print_json(result)
    return 0


# ============================================================================
# SESSION COMMANDS
# ============================================================================


def _store_session(client: RoomClient, config: Config) -> int:
    """
    Save a freshly assigned session and print its identifiers.

    The identifiers are printed even when saving fails, since the room
    already exists on the server.
    """
    print_json(client.session.to_dict())
    try:
        save_session(client.session, config.session_file)
    except SessionStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_open(args: argparse.Namespace) -> int:
    """
    Open a new room and store the owner session.

    Returns:
        0 on success, 1 on error
    """
    config = Config.from_namespace(args)
    body = OpenRequest(lifetime_secs=args.lifetime_secs, user_limits=args.user_limits)
    try:
        client = asyncio.run(RoomClient.open(config, body))
    except APIError as e:
        print(f"Error opening room: {e}", file=sys.stderr)
        return 1

    return _store_session(client, config)


def cmd_join(args: argparse.Namespace) -> int:
    """
    Join an existing room and store the new session.

    Returns:
        0 on success, 1 on error
    """
    config = Config.from_namespace(args)
    try:
        client = asyncio.run(RoomClient.join(config, args.room_id, user_id=args.user_id))
    except APIError as e:
        print(f"Error joining room '{args.room_id}': {e}", file=sys.stderr)
        return 1

    return _store_session(client, config)


def cmd_leave(args: argparse.Namespace) -> int:
    """
    Leave the room and forget the stored session.

    The session file is only removed when the server accepted the request.
    """
    exit_code = _run_in_session(args, lambda client: client.leave())
    if exit_code == 0:
        clear_session(Config.from_namespace(args).session_file)
        print("Left room.")
    return exit_code


# ============================================================================
# ROOM COMMANDS
# ============================================================================


def cmd_sync(args: argparse.Namespace) -> int:
    """Print the current room state."""
    return _run_in_session(args, lambda client: client.sync())


def cmd_create(args: argparse.Namespace) -> int:
    """Create a discussion."""
    return _run_in_session(args, lambda client: client.create(args.title))


def cmd_speak(args: argparse.Namespace) -> int:
    """Post a message to a discussion."""
    return _run_in_session(args, lambda client: client.speak(args.discussion_id, args.text))


def cmd_reply(args: argparse.Namespace) -> int:
    """Reply to a message."""
    return _run_in_session(
        args, lambda client: client.reply(args.discussion_id, args.to, args.text)
    )


def cmd_close(args: argparse.Namespace) -> int:
    """Close a discussion."""
    return _run_in_session(args, lambda client: client.close(args.discussion_id))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all sub-commands."""
    parser = argparse.ArgumentParser(
        prog="meltos-room",
        description="Talk to a meltos room from the command line",
    )
    add_config_arguments(parser)
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every request (DEBUG level)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    open_parser = subparsers.add_parser(
        "open",
        help="Open a new room",
        description="Open a new room and store the owner session in the session file.",
    )
    open_parser.add_argument("--lifetime-secs", type=int, help="Requested room lifetime")
    open_parser.add_argument("--user-limits", type=int, help="Requested room capacity")
    open_parser.set_defaults(func=cmd_open)

    join_parser = subparsers.add_parser(
        "join",
        help="Join an existing room",
        description="Join a room and store the new session in the session file.",
    )
    join_parser.add_argument("room_id", help="Room to join")
    join_parser.add_argument("--user-id", help="Requested user id (server assigns one if omitted)")
    join_parser.set_defaults(func=cmd_join)

    sync_parser = subparsers.add_parser("sync", help="Print the current room state")
    sync_parser.set_defaults(func=cmd_sync)

    create_parser = subparsers.add_parser("create", help="Create a discussion")
    create_parser.add_argument("title", help="Discussion title")
    create_parser.set_defaults(func=cmd_create)

    speak_parser = subparsers.add_parser("speak", help="Post a message to a discussion")
    speak_parser.add_argument("discussion_id", help="Target discussion")
    speak_parser.add_argument("text", help="Message text")
    speak_parser.set_defaults(func=cmd_speak)

    reply_parser = subparsers.add_parser("reply", help="Reply to a message")
    reply_parser.add_argument("discussion_id", help="Discussion holding the message")
    reply_parser.add_argument("to", help="Id of the message to reply to")
    reply_parser.add_argument("text", help="Reply text")
    reply_parser.set_defaults(func=cmd_reply)

    close_parser = subparsers.add_parser("close", help="Close a discussion")
    close_parser.add_argument("discussion_id", help="Discussion to close")
    close_parser.set_defaults(func=cmd_close)

    leave_parser = subparsers.add_parser("leave", help="Leave the room")
    leave_parser.set_defaults(func=cmd_leave)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return int(args.func(args))
    except ValueError as e:
        # Invalid configuration (empty server URL, non-positive timeout)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
