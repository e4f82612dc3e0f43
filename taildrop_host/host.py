"""Native host lifecycle.

One process handles one request:

    starting -> awaiting_request -> dispatching -> terminated

``main`` is the executable the browser launches. It ignores its
arguments; Chrome passes the caller origin there and Firefox the
manifest path.
"""

from __future__ import annotations

import logging
import sys
from typing import BinaryIO

from pydantic import ValidationError as SettingsError

from taildrop_host.config import Settings, get_settings
from taildrop_host.devices.service import DeviceService
from taildrop_host.dispatcher import Completed, Dispatcher, Faulted
from taildrop_host.errors import HostError, HostIOError, InternalFault, StreamClosed
from taildrop_host.logs import open_log_sink
from taildrop_host.messaging.codec import NativeMessagingCodec
from taildrop_host.messaging.schemas import NativeResponse
from taildrop_host.tailscale.runner import TailscaleClient, ToolRunner
from taildrop_host.transfer.service import FileTransferService
from taildrop_host.types import HostState

EXIT_OK = 0
EXIT_FAILURE = 1


def build_dispatcher(settings: Settings, logger: logging.Logger) -> Dispatcher:
    """Wire the services for a run."""
    client = TailscaleClient(ToolRunner(logger), binary=settings.tailscale_bin)
    return Dispatcher(
        devices=DeviceService(client, logger),
        transfers=FileTransferService(
            client,
            logger,
            temp_prefix=settings.temp_prefix,
            temp_dir=settings.temp_dir,
            default_extension=settings.default_extension,
        ),
        logger=logger,
    )


class NativeHost:
    """Runs a single request/response exchange.

    Args:
        codec: Framing codec bound to the browser's streams.
        dispatcher: Dispatcher for the request.
        logger: Logger for diagnostics.
    """

    def __init__(
        self,
        codec: NativeMessagingCodec,
        dispatcher: Dispatcher,
        logger: logging.Logger,
    ) -> None:
        self.codec = codec
        self.dispatcher = dispatcher
        self.logger = logger
        self.state = HostState.STARTING

    def _transition(self, state: HostState) -> None:
        self.logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state

    def _respond(self, response: NativeResponse) -> bool:
        """Write the run's response. Returns False if the channel is broken."""
        try:
            self.codec.write_message(response)
        except HostIOError as e:
            self.logger.error("Giving up on response: %s", e.message)
            return False
        except Exception:
            self.logger.exception("Unexpected error while writing response")
            return False
        return True

    def run(self) -> int:
        """Read, dispatch and answer one request.

        Returns:
            Process exit code.
        """
        self.logger.info("=== Tailscale Image Sender Native Host Started ===")
        self._transition(HostState.AWAITING_REQUEST)
        try:
            request = self.codec.read_message()
        except StreamClosed:
            self._transition(HostState.TERMINATED)
            return EXIT_OK
        except HostError as e:
            self.logger.error("ERROR [%s]: Failed to read message: %s", e.error_code, e.message)
            self._respond(NativeResponse.failure(f"Failed to read message: {e.message}"))
            self._transition(HostState.TERMINATED)
            return EXIT_FAILURE
        except Exception as e:
            fault = InternalFault(e)
            self.logger.exception("PANIC while reading request")
            self._respond(NativeResponse.failure(f"Host crashed: {fault.message}"))
            self._transition(HostState.TERMINATED)
            return EXIT_FAILURE

        self._transition(HostState.DISPATCHING)
        result = self.dispatcher.dispatch(request)

        exit_code = EXIT_OK
        if isinstance(result, Completed):
            if not self._respond(result.response):
                exit_code = EXIT_FAILURE
        elif isinstance(result, Faulted):
            self.logger.error("PANIC: %s", result.fault.message)
            self._respond(NativeResponse.failure(f"Host crashed: {result.fault.message}"))
            exit_code = EXIT_FAILURE

        self._transition(HostState.TERMINATED)
        self.logger.info("=== Host execution completed ===")
        return exit_code


def run_host(
    settings: Settings | None = None,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> int:
    """Acquire the log sink and run one exchange.

    Args:
        settings: Settings to use; loaded from the environment if None.
        stdin: Request stream; the process's binary stdin if None.
        stdout: Response stream; the process's binary stdout if None.

    Returns:
        Process exit code.
    """
    if settings is None:
        try:
            settings = get_settings()
        except SettingsError as e:
            fields = ", ".join(".".join(map(str, err["loc"])) for err in e.errors())
            print(f"Failed to create native host: invalid settings: {fields}", file=sys.stderr)
            return EXIT_FAILURE
    try:
        logger = open_log_sink(settings)
    except OSError as e:
        # Nothing can be reported to the extension before the sink exists.
        print(f"Failed to create native host: failed to open log file: {e}", file=sys.stderr)
        return EXIT_FAILURE

    codec = NativeMessagingCodec(
        stdin if stdin is not None else sys.stdin.buffer,
        stdout if stdout is not None else sys.stdout.buffer,
        logger,
    )
    host = NativeHost(codec, build_dispatcher(settings, logger), logger)
    return host.run()


def main() -> None:
    """Console entry point for the native host executable."""
    sys.exit(run_host())


__all__ = [
    "EXIT_FAILURE",
    "EXIT_OK",
    "NativeHost",
    "build_dispatcher",
    "main",
    "run_host",
]
