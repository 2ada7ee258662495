"""
WebSocket Gateway Constants.
"""

from enum import IntEnum
from typing import Final

__all__ = [
    "WSCloseCode",
    "WSConstants",
    "ClientEvent",
    "ServerEvent",
]


class WSCloseCode(IntEnum):
    """
    WebSocket close codes used by the gateway.

    Standard codes (1000-1999) from RFC 6455.
    Custom codes (4000-4999) for application-specific errors.
    """

    # Standard codes (RFC 6455)
    NORMAL = 1000  # Normal closure
    GOING_AWAY = 1001  # Server shutting down or client navigating away
    MESSAGE_TOO_BIG = 1009  # Message too large to process
    SERVER_ERROR = 1011  # Unexpected server error

    # Custom application codes (4000-4999)
    AUTH_FAILED = 4001  # Staff JWT or table credential missing, invalid or expired
    FORBIDDEN = 4003  # Valid credential but not allowed here


class WSConstants:
    """WebSocket Gateway operational constants."""

    # Longer than the clients' 30s ping interval so one missed ping is tolerated
    WS_RECEIVE_TIMEOUT: Final[float] = 90.0


class ClientEvent:
    """Events a client may send in the {"event", "data"} envelope."""

    JOIN_TABLE: Final[str] = "join-table"
    JOIN_KITCHEN: Final[str] = "join-kitchen"
    JOIN_RESTAURANT: Final[str] = "join-restaurant"
    LEAVE: Final[str] = "leave"
    PING: Final[str] = "ping"


class ServerEvent:
    """Control replies sent by the gateway (domain events use their own names)."""

    JOINED: Final[str] = "joined"
    LEFT: Final[str] = "left"
    PONG: Final[str] = "pong"
    ERROR: Final[str] = "error"
