"""Shared type definitions for taildrop_host.

This module contains enums shared across subpackages to avoid circular
imports.
"""

from enum import Enum, IntEnum
from typing import Any


class Action(str, Enum):
    """Actions a native-messaging request can ask for."""

    GET_DEVICES = "get_devices"
    SEND_FILE = "send_file"


class HostState(str, Enum):
    """Lifecycle state of a native host run."""

    STARTING = "starting"
    AWAITING_REQUEST = "awaiting_request"
    DISPATCHING = "dispatching"
    TERMINATED = "terminated"


class OSFamily(str, Enum):
    """Normalized operating system of a peer, used for icon mapping."""

    IOS = "ios"
    MACOS = "macos"
    WINDOWS = "windows"
    LINUX = "linux"


class TaildropTargetStatus(IntEnum):
    """Taildrop eligibility of a peer, as reported by ``tailscale status``.

    Values 0-9 mirror tailscale's own codes. ``UNMAPPED`` stands in for any
    code this host does not know about, so new codes are never mistaken
    for ``AVAILABLE``.
    """

    UNMAPPED = -1
    UNKNOWN = 0
    AVAILABLE = 1
    NO_NETMAP_AVAILABLE = 2
    IPN_STATE_NOT_RUNNING = 3
    MISSING_CAP = 4
    OFFLINE = 5
    NO_PEER_INFO = 6
    UNSUPPORTED_OS = 7
    NO_PEER_API = 8
    OWNED_BY_OTHER_USER = 9

    @classmethod
    def parse(cls, value: Any) -> "TaildropTargetStatus":
        """Map a raw integer or name onto a status.

        Args:
            value: Integer code, numeric string, or status name
                (e.g. ``"available"``).

        Returns:
            Matching status, or ``UNMAPPED`` when the value is not recognized.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.UNMAPPED
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return cls.UNMAPPED
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return cls.parse(int(text))
            name = text.upper().replace("-", "_")
            if name in cls.__members__ and name != "UNMAPPED":
                return cls[name]
        return cls.UNMAPPED


__all__ = [
    "Action",
    "HostState",
    "OSFamily",
    "TaildropTargetStatus",
]
