"""Device listing service.

This module turns ``tailscale status`` output into the device list shown
in the extension popup:
- Keep only peers that can receive a Taildrop file right now
- Derive a short display name from the MagicDNS name
- Normalize the OS for icon mapping
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from taildrop_host.errors import ParseError
from taildrop_host.tailscale.models import TailscalePeer, TailscaleStatus
from taildrop_host.types import OSFamily, TaildropTargetStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from taildrop_host.tailscale.runner import TailscaleClient

_OS_ALIASES = {
    "ios": OSFamily.IOS,
    "macos": OSFamily.MACOS,
    "darwin": OSFamily.MACOS,
    "windows": OSFamily.WINDOWS,
    "linux": OSFamily.LINUX,
}


class Device(BaseModel):
    """A peer the extension can send files to."""

    model_config = ConfigDict(extra="forbid")

    name: str
    id: str
    online: bool
    os: OSFamily


def display_name(peer: TailscalePeer) -> str:
    """Short name for a peer.

    The first label of the DNS name (``fetch`` for
    ``fetch.example.ts.net.``), or the host name when the DNS name is
    empty, has no dot, or starts with one.
    """
    label, dot, _ = peer.dns_name.partition(".")
    if dot and label:
        return label
    return peer.host_name


def normalize_os(os_name: str, logger: logging.Logger) -> OSFamily:
    """Map tailscale's OS string onto an OSFamily, defaulting to linux."""
    family = _OS_ALIASES.get(os_name.strip().lower())
    if family is None:
        logger.warning("Unknown OS: %s, defaulting to linux", os_name)
        return OSFamily.LINUX
    return family


def is_taildrop_target(peer: TailscalePeer) -> bool:
    """Whether a file can be sent to the peer now."""
    return (
        peer.online
        and not peer.exit_node_option
        and peer.taildrop_target is TaildropTargetStatus.AVAILABLE
    )


def filter_devices(
    peers: Iterable[TailscalePeer], logger: logging.Logger
) -> list[Device]:
    """Project eligible peers into devices.

    Args:
        peers: Peers from the status document.
        logger: Logger for OS normalization warnings.

    Returns:
        Devices for the eligible peers, possibly empty.
    """
    devices: list[Device] = []
    for peer in peers:
        if not is_taildrop_target(peer):
            logger.debug(
                "Skipping peer %s (online=%s, exit_node=%s, taildrop=%s)",
                peer.host_name,
                peer.online,
                peer.exit_node_option,
                peer.taildrop_target.name.lower(),
            )
            continue
        devices.append(
            Device(
                name=display_name(peer),
                id=peer.id,
                online=peer.online,
                os=normalize_os(peer.os, logger),
            )
        )
    return devices


def parse_status(output: bytes) -> TailscaleStatus:
    """Parse ``tailscale status --json`` output.

    Raises:
        ParseError: If the output is not JSON or not a status document.
    """
    try:
        raw = json.loads(output)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"invalid status JSON: {e}") from e

    try:
        return TailscaleStatus.model_validate(raw)
    except PydanticValidationError as e:
        raise ParseError(
            f"unexpected status shape: {e.error_count()} validation error(s)"
        ) from e


class DeviceService:
    """Lists devices that can receive Taildrop files.

    Args:
        client: Tailscale CLI client.
        logger: Logger for diagnostics.
    """

    def __init__(self, client: TailscaleClient, logger: logging.Logger) -> None:
        self._client = client
        self._logger = logger

    def list_devices(self) -> list[Device]:
        """Query tailscale and return the eligible devices.

        Raises:
            ExternalToolError: If ``tailscale status`` fails.
            ParseError: If its output cannot be parsed.
        """
        self._logger.info("Getting Tailscale devices")
        status = parse_status(self._client.status())
        devices = filter_devices(status.peers.values(), self._logger)
        self._logger.info("Found %d online devices", len(devices))
        return devices


__all__ = [
    "Device",
    "DeviceService",
    "display_name",
    "filter_devices",
    "is_taildrop_target",
    "normalize_os",
    "parse_status",
]
