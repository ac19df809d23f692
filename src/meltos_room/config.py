"""
Configuration management for the meltos room client.

This module handles configuration from multiple sources with the following
precedence (highest to lowest):

1. Command-line arguments (--server, --timeout, --session-file)
2. Environment variables (MELTOS_SERVER_URL, MELTOS_REQUEST_TIMEOUT,
   MELTOS_SESSION_FILE)
3. Default values

The configuration is immutable once created, so every request issued by a
client sees the same server and timeout.

Example:
    # Create config from CLI args
    config = Config.from_args(["--server", "http://localhost:3000"])

    # Access configuration
    print(config.server_url)  # "http://localhost:3000"
    print(config.timeout)     # None (wait indefinitely)
"""

from __future__ import annotations

import argparse
import math
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

# =============================================================================
# DEFAULT CONFIGURATION VALUES
# =============================================================================

# Public meltos deployment.
DEFAULT_SERVER_URL = "https://room.meltos.net"

# No timeout: requests wait until the transport settles.
DEFAULT_TIMEOUT: float | None = None

# Where the CLI keeps the identifiers of the current session between runs.
DEFAULT_SESSION_FILE = Path(".room_configs")

ENV_SERVER_URL = "MELTOS_SERVER_URL"
ENV_TIMEOUT = "MELTOS_REQUEST_TIMEOUT"
ENV_SESSION_FILE = "MELTOS_SESSION_FILE"


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for the room client.

    Attributes:
        server_url: Base origin of the meltos server (e.g., "https://room.meltos.net").
                    Stored without a trailing slash.
        timeout: HTTP request timeout in seconds, or None to wait indefinitely.
        session_file: Path of the JSON file the CLI uses to persist a session.

    Example:
        config = Config(server_url="http://localhost:3000", timeout=10.0)
    """

    server_url: str = DEFAULT_SERVER_URL
    timeout: float | None = DEFAULT_TIMEOUT
    session_file: Path = DEFAULT_SESSION_FILE

    def __post_init__(self) -> None:
        """
        Validate configuration values after initialization.

        Raises:
            ValueError: If server_url is empty or timeout is not positive.
        """
        if not self.server_url:
            raise ValueError("server_url cannot be empty")

        # Frozen dataclass, so normalise through object.__setattr__
        object.__setattr__(self, "server_url", self.server_url.rstrip("/"))
        object.__setattr__(self, "session_file", Path(self.session_file))

        if self.timeout is not None and (not math.isfinite(self.timeout) or self.timeout <= 0):
            raise ValueError("timeout must be a positive number")

    @classmethod
    def from_env(cls) -> Config:
        """
        Create a Config instance from environment variables only.

        Unset variables fall back to the module defaults.
        """
        return cls.from_namespace(argparse.Namespace())

    @classmethod
    def from_namespace(cls, parsed: argparse.Namespace) -> Config:
        """
        Resolve a Config from already-parsed arguments.

        Attributes missing from ``parsed`` (or set to None) fall back to the
        environment, then to the defaults. The CLI uses this after parsing its
        own sub-commands.
        """
        server_url = (
            getattr(parsed, "server_url", None)
            or os.environ.get(ENV_SERVER_URL)
            or DEFAULT_SERVER_URL
        )

        timeout: float | None
        cli_timeout = getattr(parsed, "timeout", None)
        if cli_timeout is not None:
            timeout = cli_timeout
        elif os.environ.get(ENV_TIMEOUT):
            timeout = float(os.environ[ENV_TIMEOUT])
        else:
            timeout = DEFAULT_TIMEOUT

        session_file = (
            getattr(parsed, "session_file", None)
            or os.environ.get(ENV_SESSION_FILE)
            or DEFAULT_SESSION_FILE
        )

        return cls(server_url=server_url, timeout=timeout, session_file=Path(session_file))

    @classmethod
    def from_args(cls, args: Sequence[str] | None = None) -> Config:
        """
        Create a Config instance from command-line arguments.

        Args:
            args: Command-line arguments to parse. If None, uses sys.argv[1:].

        Returns:
            Config: A fully populated configuration object.

        Example:
            config = Config.from_args(["--server", "http://localhost:3000", "-t", "5"])
        """
        parser = argparse.ArgumentParser(add_help=False)
        add_config_arguments(parser)
        parsed, _ = parser.parse_known_args(args)
        return cls.from_namespace(parsed)


def add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the connection options shared by every entry point."""
    # None defaults mean "check env var, then use default"
    parser.add_argument(
        "--server",
        "-s",
        dest="server_url",
        default=None,
        help=f"meltos server URL (default: {DEFAULT_SERVER_URL})",
    )
    parser.add_argument(
        "--timeout",
        "-t",
        type=float,
        default=None,
        help="Request timeout in seconds (default: no timeout)",
    )
    parser.add_argument(
        "--session-file",
        dest="session_file",
        default=None,
        help=f"Where to store the current session (default: {DEFAULT_SESSION_FILE})",
    )
