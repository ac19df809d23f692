"""meltos room client.

An async client for the room/discussion HTTP API of a meltos server: open or
join a room, create discussions, speak, reply, close discussions and leave.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("meltos-room-client")
except PackageNotFoundError:
    __version__ = "0.1.0"
