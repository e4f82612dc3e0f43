"""Pydantic models for ``tailscale status --json`` output.

Only the fields the host reads are declared; everything else in the
status document is ignored.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taildrop_host.types import TaildropTargetStatus


class TailscalePeer(BaseModel):
    """One peer entry from the status ``Peer`` map."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(default="", alias="ID")
    host_name: str = Field(default="", alias="HostName")
    dns_name: str = Field(default="", alias="DNSName")
    os: str = Field(default="", alias="OS")
    online: bool = Field(default=False, alias="Online")
    exit_node_option: bool = Field(default=False, alias="ExitNodeOption")
    taildrop_target: TaildropTargetStatus = Field(
        default=TaildropTargetStatus.UNKNOWN, alias="TaildropTarget"
    )

    @field_validator("id", "host_name", "dns_name", "os", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        """tailscale writes null for some unset strings."""
        return "" if v is None else v

    @field_validator("taildrop_target", mode="before")
    @classmethod
    def parse_taildrop_target(cls, v: Any) -> TaildropTargetStatus:
        """Map unknown codes to UNMAPPED instead of failing."""
        return TaildropTargetStatus.parse(v)


class TailscaleStatus(BaseModel):
    """Subset of the ``tailscale status --json`` document."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    peers: dict[str, TailscalePeer] = Field(default_factory=dict, alias="Peer")

    @field_validator("peers", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        """A tailnet with no peers reports ``"Peer": null``."""
        return {} if v is None else v


__all__ = ["TailscalePeer", "TailscaleStatus"]
