"""Native messaging host manifest.

Browsers find the host through a JSON manifest naming the executable and
the extensions allowed to start it. Chromium-based browsers list
``allowed_origins``; Firefox lists ``allowed_extensions``.
"""

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Chrome extension IDs are 32 characters in the a-p range.
CHROME_EXTENSION_ID_PATTERN = re.compile(r"^[a-p]{32}$")
HOST_NAME_PATTERN = re.compile(r"^[a-z0-9_]+(\.[a-z0-9_]+)*$")


class HostManifest(BaseModel):
    """Native messaging host manifest document."""

    model_config = ConfigDict(extra="forbid")

    name: str
    description: str
    path: str
    type: Literal["stdio"] = "stdio"
    allowed_origins: list[str] | None = Field(default=None)
    allowed_extensions: list[str] | None = Field(default=None)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Host names are lowercase dotted identifiers."""
        if not HOST_NAME_PATTERN.match(v):
            raise ValueError(
                f"host name must be lowercase alphanumerics, '_' and '.', got '{v}'"
            )
        return v


def chrome_origin(extension_id: str) -> str:
    """Return the ``allowed_origins`` entry for a Chrome extension ID.

    Raises:
        ValueError: If ``extension_id`` is not a Chrome extension ID.
    """
    if not CHROME_EXTENSION_ID_PATTERN.match(extension_id):
        raise ValueError(f"Invalid Chrome extension ID: {extension_id}")
    return f"chrome-extension://{extension_id}/"


def build_manifest(
    name: str,
    description: str,
    host_path: Path,
    chrome_ids: list[str] | None = None,
    firefox_ids: list[str] | None = None,
) -> HostManifest:
    """Build a host manifest.

    Args:
        name: Registered host name.
        description: Human-readable description.
        host_path: Path to the host executable; made absolute.
        chrome_ids: Chrome extension IDs allowed to connect.
        firefox_ids: Firefox add-on IDs allowed to connect.

    Returns:
        HostManifest ready to be dumped as JSON.

    Raises:
        ValueError: If no extension is given or an ID is malformed.
    """
    if not chrome_ids and not firefox_ids:
        raise ValueError("At least one extension ID is required")

    return HostManifest(
        name=name,
        description=description,
        path=str(host_path.expanduser().resolve()),
        allowed_origins=[chrome_origin(i) for i in chrome_ids] if chrome_ids else None,
        allowed_extensions=list(firefox_ids) if firefox_ids else None,
    )


def render_manifest(manifest: HostManifest) -> str:
    """Render a manifest as indented JSON."""
    return manifest.model_dump_json(indent=2, exclude_none=True)


__all__ = [
    "CHROME_EXTENSION_ID_PATTERN",
    "HostManifest",
    "build_manifest",
    "chrome_origin",
    "render_manifest",
]
