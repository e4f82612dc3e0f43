"""Error definitions for the native host.

Every failure the host can report back to the extension is a HostError
subclass with a stable code. The message is what ends up in the
response's ``error`` field, so it stays short; detail such as subprocess
stderr goes to the log instead.
"""

# Error code constants
HOST_ERROR = "host_error"
FRAMING_ERROR = "framing_error"
PARSE_ERROR = "parse_error"
VALIDATION_ERROR = "validation"
DECODE_ERROR = "decode_error"
EXTERNAL_TOOL_ERROR = "external_tool_error"
IO_ERROR = "io_error"
UNKNOWN_ACTION = "unknown_action"
INTERNAL_ERROR = "internal_error"


class StreamClosed(Exception):
    """The extension closed stdin before sending a length prefix.

    Not an error: the browser does this when it no longer needs the host.
    """


class HostError(Exception):
    """Base exception for errors reported back to the extension."""

    def __init__(self, message: str, error_code: str = HOST_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class FramingError(HostError):
    """Incomplete or malformed length-prefixed frame."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code=FRAMING_ERROR)


class ParseError(HostError):
    """Malformed JSON, in a request or in tailscale's output."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code=PARSE_ERROR)


class ValidationError(HostError):
    """Missing or malformed request fields."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code=VALIDATION_ERROR)


class DecodeError(HostError):
    """Payload is not valid base64."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code=DECODE_ERROR)


class ExternalToolError(HostError):
    """External command could not be started or exited non-zero."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message, error_code=EXTERNAL_TOOL_ERROR)
        self.exit_code = exit_code


class HostIOError(HostError):
    """Filesystem or stream write failure."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code=IO_ERROR)


class UnknownActionError(HostError):
    """Request named an action this host does not implement."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Unknown action: {action}", error_code=UNKNOWN_ACTION)
        self.action = action


class InternalFault(HostError):
    """Unexpected exception caught at the top level."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"{type(cause).__name__}: {cause}", error_code=INTERNAL_ERROR)
        self.cause = cause


__all__ = [
    "DECODE_ERROR",
    "EXTERNAL_TOOL_ERROR",
    "FRAMING_ERROR",
    "HOST_ERROR",
    "INTERNAL_ERROR",
    "IO_ERROR",
    "PARSE_ERROR",
    "UNKNOWN_ACTION",
    "VALIDATION_ERROR",
    "DecodeError",
    "ExternalToolError",
    "FramingError",
    "HostError",
    "HostIOError",
    "InternalFault",
    "ParseError",
    "StreamClosed",
    "UnknownActionError",
    "ValidationError",
]
