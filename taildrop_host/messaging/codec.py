"""Native messaging framing.

Wire format, both directions: a 4-byte unsigned little-endian length
followed by that many bytes of UTF-8 JSON. stdout is reserved for frames;
all diagnostics go to the log.
"""

import json
import logging
import struct
from typing import BinaryIO

from pydantic import ValidationError as PydanticValidationError

from taildrop_host.errors import FramingError, HostIOError, ParseError, StreamClosed
from taildrop_host.messaging.schemas import NativeRequest, NativeResponse

LENGTH_PREFIX = struct.Struct("<I")


class NativeMessagingCodec:
    """Reads requests from and writes responses to a pair of binary streams.

    Args:
        stdin: Stream the browser writes requests to.
        stdout: Stream the browser reads responses from.
        logger: Logger for diagnostics.
    """

    def __init__(
        self, stdin: BinaryIO, stdout: BinaryIO, logger: logging.Logger
    ) -> None:
        self._stdin = stdin
        self._stdout = stdout
        self._logger = logger

    def _read_exact(self, size: int) -> bytes:
        """Read up to ``size`` bytes, stopping early only at end of input."""
        chunks: list[bytes] = []
        remaining = size
        while remaining > 0:
            chunk = self._stdin.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def read_message(self) -> NativeRequest:
        """Read one framed request.

        Returns:
            Parsed request.

        Raises:
            StreamClosed: If input ended before any prefix byte arrived.
            FramingError: If the prefix or body is truncated.
            ParseError: If the body is not a JSON request object.
        """
        try:
            prefix = self._read_exact(LENGTH_PREFIX.size)
        except OSError as e:
            raise FramingError(f"failed to read length: {e}") from e

        if not prefix:
            self._logger.info("Connection closed by extension")
            raise StreamClosed()
        if len(prefix) < LENGTH_PREFIX.size:
            raise FramingError(
                f"failed to read length: got {len(prefix)} of "
                f"{LENGTH_PREFIX.size} bytes"
            )

        (length,) = LENGTH_PREFIX.unpack(prefix)
        try:
            body = self._read_exact(length)
        except OSError as e:
            raise FramingError(f"failed to read message data: {e}") from e
        if len(body) < length:
            raise FramingError(
                f"failed to read message data: got {len(body)} of {length} bytes"
            )

        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseError(f"failed to unmarshal JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ParseError(
                f"failed to unmarshal JSON: expected an object, got {type(payload).__name__}"
            )

        try:
            request = NativeRequest.model_validate(payload)
        except PydanticValidationError as e:
            fields = ", ".join(
                ".".join(str(part) for part in err["loc"]) or "request"
                for err in e.errors()
            )
            raise ParseError(f"invalid request: {fields}") from e

        self._logger.info("Received action: %s", request.action)
        return request

    def write_message(self, response: NativeResponse) -> None:
        """Write one framed response and flush.

        Raises:
            HostIOError: If serialization, writing or flushing fails. The
                caller must not try to send another response after this.
        """
        try:
            payload = response.to_wire()
        except (TypeError, ValueError) as e:
            self._logger.error(
                "Failed to marshal response (success=%s): %s", response.success, e
            )
            raise HostIOError(f"failed to marshal response: {e}") from e

        try:
            self._stdout.write(LENGTH_PREFIX.pack(len(payload)))
            self._stdout.write(payload)
            self._stdout.flush()
        except (OSError, ValueError) as e:
            self._logger.error(
                "Failed to write response (success=%s): %s", response.success, e
            )
            raise HostIOError(f"failed to write response: {e}") from e

        self._logger.info("Response sent: success=%s", response.success)


__all__ = ["LENGTH_PREFIX", "NativeMessagingCodec"]
