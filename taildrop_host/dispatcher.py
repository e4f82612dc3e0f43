"""Request dispatcher.

Routes a parsed request to its operation and turns the outcome into a
single response. Errors the host expects (HostError) become failure
responses here; anything else comes back as a Faulted result for the
lifecycle guard to report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from taildrop_host.errors import (
    DecodeError,
    ExternalToolError,
    HostError,
    HostIOError,
    InternalFault,
    ParseError,
    UnknownActionError,
    ValidationError,
)
from taildrop_host.messaging.schemas import NativeRequest, NativeResponse
from taildrop_host.transfer.service import SendFileRequest
from taildrop_host.types import Action

if TYPE_CHECKING:
    from taildrop_host.devices.service import DeviceService
    from taildrop_host.transfer.service import FileTransferService


@dataclass(frozen=True)
class Completed:
    """The request was handled; ``response`` may still report a failure."""

    response: NativeResponse


@dataclass(frozen=True)
class Faulted:
    """An unexpected exception escaped the operation."""

    fault: InternalFault


DispatchResult = Completed | Faulted


def failure_response(
    logger: logging.Logger, context: str | None, error: HostError
) -> NativeResponse:
    """Log ``error`` and build the failure response reporting it."""
    message = f"{context}: {error.message}" if context else error.message
    logger.error("ERROR [%s]: %s", error.error_code, message)
    return NativeResponse.failure(message)


class Dispatcher:
    """Routes requests to the device and transfer services.

    Args:
        devices: Service answering ``get_devices``.
        transfers: Service answering ``send_file``.
        logger: Logger for diagnostics.
    """

    def __init__(
        self,
        devices: DeviceService,
        transfers: FileTransferService,
        logger: logging.Logger,
    ) -> None:
        self._devices = devices
        self._transfers = transfers
        self._logger = logger

    def dispatch(self, request: NativeRequest) -> DispatchResult:
        """Handle one request.

        Returns:
            Completed with the response to send, or Faulted if an
            unexpected exception was raised.
        """
        try:
            action = request.known_action
            if action is Action.GET_DEVICES:
                response = self.get_devices()
            elif action is Action.SEND_FILE:
                response = self.send_file(request)
            else:
                response = failure_response(
                    self._logger, None, UnknownActionError(request.action)
                )
        except Exception as e:
            self._logger.exception("Unhandled error while dispatching %r", request.action)
            return Faulted(InternalFault(e))
        return Completed(response)

    def get_devices(self) -> NativeResponse:
        """List Taildrop-eligible devices."""
        try:
            devices = self._devices.list_devices()
        except ExternalToolError as e:
            return failure_response(self._logger, "Failed to get Tailscale status", e)
        except ParseError as e:
            return failure_response(self._logger, "Failed to parse Tailscale status", e)
        return NativeResponse.ok([device.model_dump(mode="json") for device in devices])

    def send_file(self, request: NativeRequest) -> NativeResponse:
        """Send the request's file to its device."""
        send_request = SendFileRequest(
            device_name=request.device_name,
            data_url=request.image_data,
            file_name=request.file_name,
            mime_type=request.image_type,
        )
        try:
            self._transfers.send_file(send_request)
        except ValidationError as e:
            return failure_response(self._logger, "Invalid send file request", e)
        except DecodeError as e:
            return failure_response(self._logger, "Failed to decode image data", e)
        except HostIOError as e:
            return failure_response(self._logger, "Failed to create temporary file", e)
        except ExternalToolError as e:
            return failure_response(self._logger, "Failed to send file via Tailscale", e)
        return NativeResponse.ok()


__all__ = [
    "Completed",
    "DispatchResult",
    "Dispatcher",
    "Faulted",
    "failure_response",
]
