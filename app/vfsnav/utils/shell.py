"""Shell execution utilities.

Provides asynchronous subprocess execution, including two-stage
pipelines, with proper error handling. Commands are always passed as
argument lists; no shell is involved.
"""

import asyncio
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


async def _communicate(
    process: asyncio.subprocess.Process,
    timeout: float | None,
) -> tuple[bytes, bytes]:
    """Collect process output, killing the process on timeout."""
    try:
        return await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        raise


async def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
    cwd: str | None = None,
) -> CommandResult:
    """Execute a command and return the result.

    Args:
        args: Command and arguments to execute.
        check: If True, raise CalledProcessError on non-zero exit.
        timeout: Maximum time in seconds to wait for command.
        cwd: Working directory for the command. If None, uses current directory.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and command fails.
        TimeoutError: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    logger.debug("Running %s", args)
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )
    stdout, stderr = await _communicate(process, timeout)
    result = CommandResult(
        stdout=_decode(stdout),
        stderr=_decode(stderr),
        returncode=process.returncode if process.returncode is not None else -1,
    )
    if check and not result.success:
        raise subprocess.CalledProcessError(
            result.returncode, args, output=result.stdout, stderr=result.stderr
        )
    return result


async def run_pipeline(
    producer: list[str],
    consumer: list[str],
    *,
    timeout: float | None = 60.0,
) -> CommandResult:
    """Execute ``producer | consumer`` and return the consumer's result.

    The producer's stdout is connected to the consumer's stdin through
    an OS pipe. A failing producer turns the result into a failure even
    when the consumer exits cleanly, with the producer's stderr appended.

    Args:
        producer: Command writing to the pipe.
        consumer: Command reading from the pipe.
        timeout: Maximum time in seconds for the whole pipeline.

    Returns:
        CommandResult carrying the consumer's output.

    Raises:
        TimeoutError: If the pipeline exceeds timeout.
        FileNotFoundError: If either executable is not found.
    """
    logger.debug("Running pipeline %s | %s", producer, consumer)
    read_fd, write_fd = os.pipe()
    try:
        first = await asyncio.create_subprocess_exec(
            *producer,
            stdout=write_fd,
            stderr=asyncio.subprocess.PIPE,
        )
    except BaseException:
        os.close(read_fd)
        os.close(write_fd)
        raise
    os.close(write_fd)

    try:
        second = await asyncio.create_subprocess_exec(
            *consumer,
            stdin=read_fd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except BaseException:
        first.kill()
        await first.wait()
        raise
    finally:
        os.close(read_fd)

    try:
        (stdout, stderr), (_, first_stderr) = await asyncio.wait_for(
            asyncio.gather(second.communicate(), first.communicate()),
            timeout=timeout,
        )
    except TimeoutError:
        for process in (first, second):
            if process.returncode is None:
                process.kill()
                await process.wait()
        raise

    returncode = second.returncode if second.returncode is not None else -1
    err_text = _decode(stderr)
    if first.returncode and returncode == 0:
        returncode = first.returncode
    if first.returncode:
        err_text = (err_text + _decode(first_stderr)).strip()
    return CommandResult(stdout=_decode(stdout), stderr=err_text, returncode=returncode)


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None
