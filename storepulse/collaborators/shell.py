"""
Allow-listed shell execution with a timeout.

Only a fixed set of OS utilities may be invoked. When the runner is disabled
(restricted hosting) or the binary is missing, CollaboratorUnavailableError
is raised so callers can fall back to an in-process implementation.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import shutil
from dataclasses import dataclass

from ..exceptions import CollaboratorUnavailableError

logger = logging.getLogger(__name__)

ALLOWED_COMMANDS = frozenset({"du", "find", "php"})

# php8.2, php-8.3 etc. count as the interpreter binary
_VERSIONED_PHP = re.compile(r"php-?[\d.]+")


def command_name(executable: str) -> str:
    name = os.path.basename(executable)
    return "php" if _VERSIONED_PHP.fullmatch(name) else name


@dataclass(frozen=True)
class ShellResult:
    exit_code: int
    stdout: str
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ShellRunner:
    """Runs allow-listed commands via asyncio subprocesses."""

    def __init__(self, enabled: bool = True, timeout: float = 30.0) -> None:
        self.enabled = enabled
        self.timeout = timeout

    async def run(self, argv: list[str], timeout: float | None = None) -> ShellResult:
        if not argv:
            raise ValueError("Empty command")
        command = command_name(argv[0])
        if command not in ALLOWED_COMMANDS:
            raise PermissionError(f"Command not allowed: {command}")
        if not self.enabled:
            raise CollaboratorUnavailableError("Shell execution is disabled")
        if shutil.which(argv[0]) is None:
            raise CollaboratorUnavailableError(f"{command} not found on PATH")

        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=timeout or self.timeout
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning("Command %s timed out after %.0fs", command, timeout or self.timeout)
            raise CollaboratorUnavailableError(f"{command} timed out")

        return ShellResult(
            exit_code=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
