"""One-shot archive extraction through external tools.

Extraction is not part of browsing: it hands the whole archive to
``unzip``, ``tar``, ``gzip`` or ``7z`` and reports the outcome.
"""

import asyncio
import logging
import os
import re
from dataclasses import dataclass
from functools import partial

import aiofiles.os

from vfsnav.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)

_ARCHIVE_SUFFIX = re.compile(r"\.(zip|tar|gz|bz2|xz|7z|rar|tgz)$", re.IGNORECASE)
_TAR_SUFFIX = re.compile(r"\.tar$", re.IGNORECASE)

# Suffix -> tar decompression flag
_TAR_FLAGS: tuple[tuple[tuple[str, ...], str], ...] = (
    ((".tar.gz", ".tgz"), "-xzf"),
    ((".tar.bz2", ".tbz2"), "-xjf"),
    ((".tar.xz", ".txz"), "-xJf"),
    ((".tar",), "-xf"),
)


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Result of extracting one archive.

    Attributes:
        archive_path: The archive that was extracted.
        output_dir: Directory the contents were written to.
        success: Whether extraction completed.
        error: Error message if extraction failed, None otherwise.
    """

    archive_path: str
    output_dir: str
    success: bool
    error: str | None = None


def output_dir_for(archive_path: str, destination_dir: str) -> str:
    """Derive the extraction directory from the archive name.

    ``photos.tar.gz`` extracts into ``<destination_dir>/photos``.
    """
    name = os.path.basename(archive_path)
    stem = _TAR_SUFFIX.sub("", _ARCHIVE_SUFFIX.sub("", name)) or name
    return os.path.join(destination_dir, stem)


def extraction_commands(archive_path: str, output_dir: str, tool: str = "7z") -> list[list[str]]:
    """Build the commands to try, in order, for an archive.

    Single-file ``.gz`` archives are handled separately because their
    output is a stream, not a directory tree.
    """
    lower = archive_path.lower()
    fallback = [tool, "x", archive_path, f"-o{output_dir}", "-y"]

    if lower.endswith(".zip"):
        return [["unzip", "-o", archive_path, "-d", output_dir], fallback]

    for suffixes, flag in _TAR_FLAGS:
        if lower.endswith(suffixes):
            return [["tar", flag, archive_path, "-C", output_dir]]

    return [fallback]


async def _gunzip(archive_path: str, output_dir: str, timeout: float | None) -> CommandResult:
    """Decompress a single-file gzip archive into ``output_dir``.

    Raises:
        TimeoutError: If gzip runs longer than ``timeout``; it is killed.
    """
    target = os.path.join(output_dir, _ARCHIVE_SUFFIX.sub("", os.path.basename(archive_path)))
    loop = asyncio.get_running_loop()
    out = await loop.run_in_executor(None, partial(open, target, "wb"))
    try:
        process = await asyncio.create_subprocess_exec(
            "gzip",
            "-dc",
            archive_path,
            stdout=out,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except TimeoutError:
            process.kill()
            await process.wait()
            raise
    finally:
        await loop.run_in_executor(None, out.close)
    return CommandResult(
        stdout="",
        stderr=(stderr or b"").decode("utf-8", errors="replace"),
        returncode=process.returncode if process.returncode is not None else -1,
    )


async def extract_archive(
    archive_path: str,
    destination_dir: str,
    *,
    tool: str = "7z",
    timeout: float | None = 600.0,
) -> ExtractionResult:
    """Extract an archive into a new directory under ``destination_dir``.

    Failures are reported in the result rather than raised.

    Args:
        archive_path: Archive file to extract.
        destination_dir: Directory in which the output directory is created.
        tool: 7z-compatible executable for formats without a dedicated tool.
        timeout: Seconds allowed per command.

    Returns:
        ExtractionResult describing the outcome.
    """
    output_dir = output_dir_for(archive_path, destination_dir)

    try:
        await aiofiles.os.makedirs(output_dir, exist_ok=True)
        lower = archive_path.lower()
        if lower.endswith(".gz") and not lower.endswith(".tar.gz"):
            result = await _gunzip(archive_path, output_dir, timeout)
        else:
            result = CommandResult(stdout="", stderr="no extraction command", returncode=1)
            for command in extraction_commands(archive_path, output_dir, tool):
                try:
                    result = await run_command(command, timeout=timeout)
                except FileNotFoundError as e:
                    logger.debug("Extraction tool unavailable: %s", e)
                    result = CommandResult(stdout="", stderr=str(e), returncode=127)
                if result.success:
                    break
    except TimeoutError:
        error = f"Extraction timed out after {timeout} seconds"
        logger.warning("Extraction of %s failed: %s", archive_path, error)
        return ExtractionResult(archive_path, output_dir, success=False, error=error)
    except OSError as e:
        return ExtractionResult(archive_path, output_dir, success=False, error=str(e))

    if not result.success:
        error = result.stderr.strip() or "Extraction failed"
        logger.warning("Extraction of %s failed: %s", archive_path, error)
        return ExtractionResult(archive_path, output_dir, success=False, error=error)

    logger.info("Extracted %s into %s", archive_path, output_dir)
    return ExtractionResult(archive_path, output_dir, success=True)
