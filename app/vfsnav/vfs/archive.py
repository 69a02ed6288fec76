"""Archive content listing via the 7z command-line tool.

Runs ``7z l -slt`` against an archive (or, for compressed tarballs,
``7z x -so`` piped into a tar-mode listing), parses the technical
listing blocks into ArchiveRecord objects, and flattens those records
into the immediate children of a directory inside the archive.
"""

import logging
import re
from datetime import UTC, datetime

from vfsnav.core.config import DEFAULT_ARCHIVE_LIST_MAX_BYTES
from vfsnav.utils.shell import CommandResult, command_exists, run_command, run_pipeline
from vfsnav.vfs.errors import ToolUnavailableError
from vfsnav.vfs.models import (
    ArchiveLocation,
    ArchiveRecord,
    DirectoryEntry,
    EntryKind,
    extension_of,
)

logger = logging.getLogger(__name__)

# gzip/xz/bzip2-wrapped tarballs cannot be listed by 7z in one pass
COMPRESSED_TAR_PATTERN = re.compile(r"\.(tar\.(gz|xz|bz2)|tgz|txz|tbz2)$", re.IGNORECASE)

_BLOCK_SEPARATOR = re.compile(r"\r?\n\r?\n")
_FIELD_PATTERN = re.compile(r"^(\w+)\s=\s(.*)$")
_MODIFIED_FORMAT = "%Y-%m-%d %H:%M:%S"

# -slt: technical info, -ba: suppress headers, -sccUTF-8: utf8 console output
_LIST_FLAGS = ("l", "-slt", "-ba", "-sccUTF-8")


def is_compressed_tar(path: str) -> bool:
    """Check if a file name denotes a compressed tarball."""
    return COMPRESSED_TAR_PATTERN.search(path) is not None


def _parse_modified(value: str) -> datetime | None:
    """Parse the tool's local ``YYYY-MM-DD HH:MM:SS[.fraction]`` timestamp."""
    try:
        naive = datetime.strptime(value.strip()[:19], _MODIFIED_FORMAT)
    except ValueError:
        return None
    return naive.astimezone(UTC)


def _parse_size(value: str) -> int:
    try:
        return max(0, int(value.strip()))
    except ValueError:
        return 0


def parse_technical_listing(output: str) -> list[ArchiveRecord]:
    """Parse ``7z l -slt -ba`` output into records.

    Each entry is a block of ``Key = Value`` lines; blocks are separated
    by a blank line. Blocks without a ``Path`` field are ignored.

    Args:
        output: Raw stdout of the listing command.

    Returns:
        Records in the tool's output order.
    """
    records: list[ArchiveRecord] = []
    for block in _BLOCK_SEPARATOR.split(output):
        fields: dict[str, str] = {}
        for line in block.splitlines():
            match = _FIELD_PATTERN.match(line)
            if match:
                fields[match.group(1)] = match.group(2)

        path = fields.get("Path", "")
        if not path:
            continue

        records.append(
            ArchiveRecord(
                path=path.replace("\\", "/"),
                size=_parse_size(fields.get("Size", "0")),
                attributes=fields.get("Attributes", ""),
                modified_at=_parse_modified(fields["Modified"]) if fields.get("Modified") else None,
                is_folder=fields.get("Folder", "").strip() == "+",
            )
        )
    return records


def child_entries(
    records: list[ArchiveRecord],
    internal_path: str,
    virtual_path: str,
) -> list[DirectoryEntry]:
    """Flatten archive records into the children of ``internal_path``.

    Only strict descendants of ``internal_path`` are considered. The first
    segment of each descendant's relative path becomes a child name; the
    first record producing a name wins. A child is a directory when its
    relative path has further segments or the record marks it as one.

    Args:
        records: Parsed archive records, in tool output order.
        internal_path: Directory inside the archive; empty for the root.
        virtual_path: Virtual path of that directory, used to build entry paths.

    Returns:
        Unsorted child entries, unique by name.
    """
    prefix = internal_path.replace("\\", "/").strip("/")
    base = virtual_path.rstrip("/")
    children: dict[str, DirectoryEntry] = {}

    for record in records:
        if prefix:
            if not record.path.startswith(prefix + "/"):
                continue
            relative = record.path[len(prefix) + 1 :]
        else:
            relative = record.path.lstrip("/")

        parts = relative.split("/")
        name = parts[0]
        if not name or name in children:
            continue

        is_dir = len(parts) > 1 or record.marks_directory
        children[name] = DirectoryEntry(
            name=name,
            path=f"{base}/{name}",
            kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
            size=0 if is_dir else record.size,
            modified_at=record.modified_at,
            extension="" if is_dir else extension_of(name),
        )

    return list(children.values())


class ArchiveReader:
    """Lists archive contents through an external tool.

    Args:
        tool: Archive tool executable (7z compatible).
        max_output_bytes: Largest accepted listing output.
        timeout: Seconds allowed for one listing.
    """

    def __init__(
        self,
        tool: str = "7z",
        *,
        max_output_bytes: int = DEFAULT_ARCHIVE_LIST_MAX_BYTES,
        timeout: float | None = 120.0,
    ) -> None:
        self._tool = tool
        self._max_output_bytes = max_output_bytes
        self._timeout = timeout

    def is_available(self) -> bool:
        """Check if the archive tool is installed."""
        return command_exists(self._tool)

    def listing_commands(self, location: ArchiveLocation) -> list[list[str]]:
        """Build the command (or producer/consumer pair) listing an archive."""
        archive = location.archive_file_path
        if location.is_compressed_tar_pipeline:
            return [
                [self._tool, "x", "-so", archive],
                [self._tool, *_LIST_FLAGS, "-si", "-ttar"],
            ]
        return [[self._tool, *_LIST_FLAGS, archive]]

    async def read_records(self, location: ArchiveLocation) -> list[ArchiveRecord]:
        """Run the listing tool and parse its output.

        Raises:
            ToolUnavailableError: If the tool is missing, fails, times out,
                or produces more output than allowed.
        """
        if not self.is_available():
            raise ToolUnavailableError(self._tool, f"{self._tool} not found in PATH")

        commands = self.listing_commands(location)
        try:
            result: CommandResult
            if len(commands) == 2:
                result = await run_pipeline(commands[0], commands[1], timeout=self._timeout)
            else:
                result = await run_command(commands[0], timeout=self._timeout)
        except (TimeoutError, OSError) as e:
            raise ToolUnavailableError(self._tool, str(e) or type(e).__name__) from e

        if not result.success:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise ToolUnavailableError(self._tool, detail)

        if len(result.stdout.encode("utf-8")) > self._max_output_bytes:
            raise ToolUnavailableError(
                self._tool,
                f"listing output exceeds {self._max_output_bytes} bytes",
            )

        records = parse_technical_listing(result.stdout)
        logger.debug("Read %d records from %s", len(records), location.archive_file_path)
        return records

    async def list_children(
        self,
        location: ArchiveLocation,
        virtual_path: str,
    ) -> list[DirectoryEntry]:
        """List the immediate children of a directory inside an archive."""
        records = await self.read_records(location)
        return child_entries(records, location.internal_path, virtual_path)
