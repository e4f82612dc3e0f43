"""File transfer service.

This module handles a ``send_file`` request:
- Validate the request fields
- Decode the base64 body of the data URL
- Stage the bytes in a temporary file with a sensible extension
- Hand the file to ``tailscale file cp`` and remove it afterwards
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from taildrop_host.errors import DecodeError, HostIOError, ValidationError

if TYPE_CHECKING:
    from taildrop_host.tailscale.runner import TailscaleClient

DATA_URL_SEPARATOR = ","
DEFAULT_EXTENSION = ".jpg"
DEFAULT_TEMP_PREFIX = "tailscale-sender-"
# Not allowed in a suffix taken from a MIME subtype.
UNSAFE_SUFFIX_CHARS = frozenset("/\\:") | frozenset(map(chr, range(0x20))) | {"\x7f"}


@dataclass
class SendFileRequest:
    """Fields of a ``send_file`` request.

    Attributes:
        device_name: Target peer name.
        data_url: File contents as a ``<metadata>,<base64>`` data URL.
        file_name: Original file name, used for its extension.
        mime_type: MIME type of the contents (may be empty).
    """

    device_name: str
    data_url: str
    file_name: str
    mime_type: str = ""


def validate_send_file_request(request: SendFileRequest) -> None:
    """Check required fields.

    Raises:
        ValidationError: On the first missing or malformed field.
    """
    if not request.device_name:
        raise ValidationError("device name is required")
    if not request.data_url:
        raise ValidationError("image data is required")
    if not request.file_name:
        raise ValidationError("file name is required")
    if DATA_URL_SEPARATOR not in request.data_url:
        raise ValidationError("invalid image data format")


def decode_data_url(data_url: str) -> bytes:
    """Decode the base64 part of a data URL.

    Raises:
        DecodeError: If there is no separator or the payload is not
            valid standard base64.
    """
    _, sep, encoded = data_url.partition(DATA_URL_SEPARATOR)
    if not sep:
        raise DecodeError("invalid data URL format")
    # Line breaks are tolerated, as in MIME base64.
    encoded = encoded.replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"failed to decode base64: {e}") from e


def resolve_extension(
    file_name: str, mime_type: str, default: str = DEFAULT_EXTENSION
) -> str:
    """Pick the extension for the staged file.

    The file name's own extension wins. Otherwise the MIME subtype is
    used (``image/png`` gives ``.png``), then ``default``. A subtype with
    path separators, ``:`` or control characters is ignored.
    """
    _, ext = os.path.splitext(os.path.basename(file_name))
    if ext:
        return ext

    # Blob.type may carry parameters, e.g. "image/svg+xml; charset=utf-8"
    essence = mime_type.split(";", 1)[0].strip()
    _, _, subtype = essence.partition("/")
    if subtype and not UNSAFE_SUFFIX_CHARS.intersection(subtype):
        return f".{subtype}"
    return default


@contextmanager
def staged_file(
    data: bytes,
    suffix: str,
    logger: logging.Logger,
    prefix: str = DEFAULT_TEMP_PREFIX,
    directory: Path | None = None,
) -> Iterator[Path]:
    """Write ``data`` to a uniquely named temp file and remove it on exit.

    Yields:
        Path of the staged file.

    Raises:
        HostIOError: If the file cannot be created or written.
    """
    try:
        tmp = tempfile.NamedTemporaryFile(
            mode="wb",
            prefix=prefix,
            suffix=suffix,
            dir=directory,
            delete=False,
        )
    except (OSError, ValueError) as e:
        # ValueError: the suffix holds a NUL byte.
        raise HostIOError(f"failed to create temp file: {e}") from e

    path = Path(tmp.name)
    try:
        try:
            with tmp:
                tmp.write(data)
        except (OSError, ValueError) as e:
            raise HostIOError(f"failed to write temp file: {e}") from e
        logger.debug("Staged %d bytes in %s", len(data), path)
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove temp file: %s", e)


class FileTransferService:
    """Sends files to peers with Taildrop.

    Args:
        client: Tailscale CLI client.
        logger: Logger for diagnostics.
        temp_prefix: Prefix for staged file names.
        temp_dir: Directory for staged files (system default if None).
        default_extension: Fallback extension for staged files.
    """

    def __init__(
        self,
        client: TailscaleClient,
        logger: logging.Logger,
        temp_prefix: str = DEFAULT_TEMP_PREFIX,
        temp_dir: Path | None = None,
        default_extension: str = DEFAULT_EXTENSION,
    ) -> None:
        self._client = client
        self._logger = logger
        self._temp_prefix = temp_prefix
        self._temp_dir = temp_dir
        self._default_extension = default_extension

    def send_bytes(self, device_name: str, data: bytes, suffix: str) -> None:
        """Stage ``data`` and send it to ``device_name``.

        Raises:
            HostIOError: If staging fails.
            ExternalToolError: If ``tailscale file cp`` fails.
        """
        with staged_file(
            data,
            suffix,
            self._logger,
            prefix=self._temp_prefix,
            directory=self._temp_dir,
        ) as path:
            self._client.file_cp(path, device_name)
        self._logger.info("File sent successfully to %s", device_name)

    def send_file(self, request: SendFileRequest) -> None:
        """Validate, decode and send a data-URL file.

        Raises:
            ValidationError: If a field is missing or malformed.
            DecodeError: If the payload is not valid base64.
            HostIOError: If staging fails.
            ExternalToolError: If ``tailscale file cp`` fails.
        """
        self._logger.info(
            "Sending file %s to device %s", request.file_name, request.device_name
        )
        validate_send_file_request(request)
        data = decode_data_url(request.data_url)
        suffix = resolve_extension(
            request.file_name, request.mime_type, self._default_extension
        )
        self.send_bytes(request.device_name, data, suffix)


__all__ = [
    "DATA_URL_SEPARATOR",
    "DEFAULT_EXTENSION",
    "DEFAULT_TEMP_PREFIX",
    "FileTransferService",
    "SendFileRequest",
    "decode_data_url",
    "resolve_extension",
    "staged_file",
    "validate_send_file_request",
]
