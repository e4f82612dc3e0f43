"""Pydantic schemas for native-messaging requests and responses.

These define the JSON exchanged with the browser extension, one request
and one response per host process.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from taildrop_host.types import Action


class NativeRequest(BaseModel):
    """Request sent by the extension.

    ``action`` selects the operation; the remaining fields only matter for
    ``send_file``. ``image_data`` is a data URL and ``image_type`` the MIME
    type of the blob it was read from.
    """

    model_config = ConfigDict(extra="ignore")

    action: str
    device_name: str = ""
    image_data: str = ""
    file_name: str = ""
    image_type: str = ""

    @field_validator("device_name", "image_data", "file_name", "image_type", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        """Treat an explicit JSON null like an absent field."""
        return "" if v is None else v

    @property
    def known_action(self) -> Action | None:
        """The action as an ``Action`` member, or None if unsupported."""
        try:
            return Action(self.action)
        except ValueError:
            return None


class NativeResponse(BaseModel):
    """Response written back to the extension.

    Absent ``data`` and ``error`` are left out of the wire form.
    """

    model_config = ConfigDict(extra="forbid")

    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "NativeResponse":
        """Build a successful response."""
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "NativeResponse":
        """Build a failed response; ``error`` must not be empty."""
        if not error:
            error = "unknown error"
        return cls(success=False, error=error)

    def to_wire(self) -> bytes:
        """Serialize to compact UTF-8 JSON."""
        return self.model_dump_json(exclude_none=True).encode("utf-8")


__all__ = ["NativeRequest", "NativeResponse"]
