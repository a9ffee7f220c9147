"""Library for issuing commands using asyncio and returning the result."""

import asyncio
from dataclasses import dataclass
import logging
import os
import shlex
import subprocess

from .exceptions import CommandException

_LOGGER = logging.getLogger(__name__)

_CONCURRENCY = 10
_SEM = asyncio.Semaphore(_CONCURRENCY)
_TIMEOUT = 60.0


# No public API
__all__: list[str] = []


@dataclass
class Command:
    """An instance of a command to run."""

    cmd: list[str]
    """Array of command line arguments."""

    exc: type[CommandException] = CommandException
    """Exception to throw in case of an error."""

    env: dict[str, str] | None = None
    """Extra environment variables for the subprocess."""

    timeout: float = _TIMEOUT
    """Seconds to wait for the command before it is killed."""

    def __str__(self) -> str:
        """Render the command as a single shell quoted string."""
        return shlex.join(self.cmd)

    def _failure(self, returncode: int, out: bytes, err: bytes) -> CommandException:
        lines = [f"Command '{self}' failed with return code {returncode}"]
        lines.extend(
            stream.decode("utf-8", errors="replace") for stream in (out, err) if stream
        )
        message = "\n".join(lines)
        _LOGGER.debug(message)
        return self.exc(message)

    async def run(self, stdin: bytes | None = None) -> bytes:
        """Run the command, returning stdout."""
        _LOGGER.debug("Running command: %s", self)
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env={**os.environ, **(self.env or {})},
            )
        except OSError as err:
            raise self.exc(f"Command '{self}' failed to start: {err}") from err
        try:
            out, err = await asyncio.wait_for(proc.communicate(stdin), self.timeout)
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise self.exc(f"Command '{self}' timed out") from exc
        if proc.returncode:
            raise self._failure(proc.returncode, out, err)
        return out


async def run(cmd: Command, stdin: bytes | None = None) -> str:
    """Run the specified command and return stdout."""
    async with _SEM:
        out = await cmd.run(stdin)
    try:
        return out.decode("utf-8") if out else ""
    except UnicodeDecodeError as err:
        raise cmd.exc(f"Command '{cmd}' returned invalid output: {err}") from err
