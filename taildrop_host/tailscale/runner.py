"""Runner for the tailscale command-line tool.

This module handles:
- Executing external commands with subprocess
- Capturing stdout for the caller and stderr for the log
- Mapping start failures and non-zero exits to ExternalToolError

There are no retries and no timeout: a hung tailscale hangs the host.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from taildrop_host.errors import ExternalToolError


class ToolRunner:
    """Runs external commands and returns their stdout.

    Args:
        logger: Logger for command lines and captured stderr.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def execute(self, command: str, *args: str) -> bytes:
        """Run a command to completion.

        Args:
            command: Executable name or path.
            *args: Command arguments.

        Returns:
            Captured standard output.

        Raises:
            ExternalToolError: If the command cannot be started or exits
                non-zero. Its stderr is logged, not included in the error.
        """
        cmd = [command, *args]
        self._logger.info("Executing: %s", shlex.join(cmd))

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            self._logger.error("Command stderr: %s", stderr)
            raise ExternalToolError(
                f"command failed: exit status {e.returncode}",
                exit_code=e.returncode,
            ) from e
        except OSError as e:
            self._logger.error("Failed to start %s: %s", command, e)
            raise ExternalToolError(f"command failed: {e}") from e

        return result.stdout


class TailscaleClient:
    """The two tailscale subcommands the host needs.

    Args:
        runner: Runner used to invoke the CLI.
        binary: Name or path of the tailscale executable.
    """

    def __init__(self, runner: ToolRunner, binary: str = "tailscale") -> None:
        self._runner = runner
        self._binary = binary

    def status(self) -> bytes:
        """Return the raw output of ``tailscale status --json``."""
        return self._runner.execute(self._binary, "status", "--json")

    def file_cp(self, path: Path, target: str) -> None:
        """Send a file to a peer with ``tailscale file cp``.

        Args:
            path: Local file to send.
            target: Peer name or address, without the trailing colon.
        """
        self._runner.execute(self._binary, "file", "cp", str(path), f"{target}:")


__all__ = ["TailscaleClient", "ToolRunner"]
