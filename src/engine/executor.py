# src/engine/executor.py — v1
"""Child process execution.

Launches the call's command in its working directory and waits for it
with no timeout. Standard streams are inherited unless capture is asked
for.
"""

from __future__ import annotations

import asyncio
import logging
import time

from binboh.core.errors import BinbohError
from binboh.core.models import Call, ExecutionResult

logger = logging.getLogger(__name__)

EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


class CommandLaunchError(BinbohError):
    """The command could not be started at all."""

    def __init__(self, command_line: str, exit_code: int, reason: str) -> None:
        super().__init__(f"Failed to run command {command_line}: {reason}")
        self.command_line = command_line
        self.exit_code = exit_code


class CommandExecutor:
    """Run a call's command and report how it ended.

    Args:
        capture_output: Collect stdout/stderr instead of inheriting them.
    """

    def __init__(self, capture_output: bool = False) -> None:
        self._capture_output = capture_output

    async def execute(self, call: Call) -> ExecutionResult:
        """Run the command to completion.

        Raises:
            CommandLaunchError: If the program is missing or not executable.
        """
        pipe = asyncio.subprocess.PIPE if self._capture_output else None
        logger.debug("Running command: %s (cwd=%s)", call.command_line, call.working_directory)

        start_ns = time.monotonic_ns()
        try:
            process = await asyncio.create_subprocess_exec(
                *call.command,
                cwd=call.working_directory,
                stdout=pipe,
                stderr=pipe,
            )
        except FileNotFoundError as e:
            raise CommandLaunchError(
                call.command_line, EXIT_NOT_FOUND, "command not found"
            ) from e
        except PermissionError as e:
            raise CommandLaunchError(
                call.command_line, EXIT_NOT_EXECUTABLE, "permission denied"
            ) from e
        except OSError as e:
            raise CommandLaunchError(
                call.command_line, EXIT_NOT_EXECUTABLE, str(e)
            ) from e

        stdout, stderr = await process.communicate()
        duration_ms = (time.monotonic_ns() - start_ns) // 1_000_000

        returncode = process.returncode if process.returncode is not None else 1
        signal_number = -returncode if returncode < 0 else None
        result = ExecutionResult(
            exit_code=returncode,
            signal=signal_number,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
        )
        logger.debug(
            "Command finished: exit_code=%d signal=%s duration_ms=%d",
            result.exit_code, result.signal, result.duration_ms,
        )
        return result
