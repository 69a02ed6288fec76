"""Unit tests for the virtual directory lister."""

import os
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from vfsnav.core.config import EngineConfig
from vfsnav.utils.shell import CommandResult
from vfsnav.vfs.errors import (
    PathNotFoundError,
    PermissionDeniedError,
    ResolutionExhaustedError,
    ToolUnavailableError,
)
from vfsnav.vfs.lister import DirectoryLister
from vfsnav.vfs.models import EntryKind
from vfsnav.vfs.resolver import PathResolver


def _listing_result(stdout: str) -> CommandResult:
    return CommandResult(stdout=stdout, stderr="", returncode=0)


class TestListRealDirectory:
    """Tests for listing real directories."""

    @pytest.mark.asyncio
    async def test_names_match_children_sorted(self, sample_tree: Path) -> None:
        """Entries are exactly the children, directories first, case-insensitive."""
        listing = await DirectoryLister().list(str(sample_tree))

        assert sorted(listing.names) == sorted(os.listdir(sample_tree))
        assert listing.names == ["Docs", "zeta", "Alpha.md", "beta.txt"]
        assert listing.is_archive is False

    @pytest.mark.asyncio
    async def test_entry_metadata(self, sample_tree: Path) -> None:
        """Files carry size and extension; directories have size 0."""
        listing = await DirectoryLister().list(str(sample_tree))
        by_name = {e.name: e for e in listing.entries}

        beta = by_name["beta.txt"]
        assert beta.kind == EntryKind.FILE
        assert beta.size == 5
        assert beta.extension == "txt"
        assert beta.path == str(sample_tree / "beta.txt")
        assert beta.modified_at is not None
        assert beta.modified_at.tzinfo is not None

        zeta = by_name["zeta"]
        assert zeta.kind == EntryKind.DIRECTORY
        assert zeta.size == 0
        assert zeta.extension == ""

    @pytest.mark.asyncio
    async def test_idempotent(self, sample_tree: Path) -> None:
        """Listing an unchanged directory twice yields identical entries."""
        lister = DirectoryLister()

        first = await lister.list(str(sample_tree))
        second = await lister.list(str(sample_tree))

        assert first.entries == second.entries

    @pytest.mark.asyncio
    async def test_symlinks(self, sample_tree: Path) -> None:
        """Symlinks are listed with their targets, broken ones included."""
        os.symlink("beta.txt", sample_tree / "good-link")
        os.symlink("nowhere", sample_tree / "broken-link")

        listing = await DirectoryLister().list(str(sample_tree))
        by_name = {e.name: e for e in listing.entries}

        assert by_name["good-link"].kind == EntryKind.SYMLINK
        assert by_name["good-link"].symlink_target == "beta.txt"
        assert by_name["broken-link"].kind == EntryKind.SYMLINK
        assert by_name["broken-link"].symlink_target == "nowhere"
        assert by_name["broken-link"].size == 0
        assert by_name["broken-link"].modified_at is None

    @pytest.mark.asyncio
    async def test_symlink_to_directory_is_listed(self, sample_tree: Path) -> None:
        """A symlink to a directory lists the directory's children."""
        link = sample_tree / "zeta-link"
        os.symlink(sample_tree / "zeta", link)

        listing = await DirectoryLister().list(str(link))

        assert listing.names == ["inner.bin"]

    @pytest.mark.asyncio
    async def test_empty_directory(self, sample_tree: Path) -> None:
        """An empty directory lists no entries."""
        listing = await DirectoryLister().list(str(sample_tree / "Docs"))

        assert listing.entries == []

    @pytest.mark.asyncio
    async def test_permission_denied(self, sample_tree: Path) -> None:
        """An unreadable directory fails the whole listing."""
        with (
            patch("vfsnav.vfs.lister._scan_names", side_effect=PermissionError("denied")),
            pytest.raises(PermissionDeniedError),
        ):
            await DirectoryLister().list(str(sample_tree))


class TestListNotFound:
    """Tests for paths that resolve to nothing."""

    @pytest.mark.asyncio
    async def test_missing_path(self, tmp_path: Path) -> None:
        """A missing path raises PathNotFoundError."""
        with pytest.raises(PathNotFoundError) as exc_info:
            await DirectoryLister().list(str(tmp_path / "missing" / "child"))

        assert exc_info.value.path == str(tmp_path / "missing" / "child")

    @pytest.mark.asyncio
    async def test_exhausted(self, tmp_path: Path) -> None:
        """An exhausted search raises ResolutionExhaustedError."""
        lister = DirectoryLister(resolver=PathResolver(max_depth=1))

        with pytest.raises(ResolutionExhaustedError):
            await lister.list(str(tmp_path / "a" / "b" / "c"))

    @pytest.mark.asyncio
    async def test_symlink_loop(self, tmp_path: Path) -> None:
        """A path behind a symlink loop raises PathNotFoundError, not OSError."""
        loop = tmp_path / "loop"
        os.symlink(loop, loop)

        with pytest.raises(PathNotFoundError):
            await DirectoryLister().list(str(loop / "x"))

    @pytest.mark.asyncio
    async def test_list_real_missing(self, tmp_path: Path) -> None:
        """list_real never consults archives."""
        with pytest.raises(PathNotFoundError):
            await DirectoryLister().list_real(str(tmp_path / "missing"))


class TestListArchive:
    """Tests for listing archive interiors."""

    @pytest.mark.asyncio
    async def test_archive_subdirectory(self, archive_file: Path, mock_7z_listing: str) -> None:
        """Only immediate children of the internal path are returned."""
        with (
            patch("vfsnav.vfs.archive.command_exists", return_value=True),
            patch(
                "vfsnav.vfs.archive.run_command",
                new_callable=AsyncMock,
                return_value=_listing_result(mock_7z_listing),
            ),
        ):
            listing = await DirectoryLister().list(f"{archive_file}/subdir")

        assert listing.is_archive is True
        assert listing.names == ["nested", "a.txt"]
        assert [e.kind for e in listing.entries] == [EntryKind.DIRECTORY, EntryKind.FILE]
        assert listing.entries[0].path == f"{archive_file}/subdir/nested"

    @pytest.mark.asyncio
    async def test_archive_file_lists_root(self, archive_file: Path, mock_7z_listing: str) -> None:
        """Listing the archive file itself lists its top level."""
        with (
            patch("vfsnav.vfs.archive.command_exists", return_value=True),
            patch(
                "vfsnav.vfs.archive.run_command",
                new_callable=AsyncMock,
                return_value=_listing_result(mock_7z_listing),
            ) as mock_run,
        ):
            listing = await DirectoryLister().list(str(archive_file))

        assert listing.is_archive is True
        assert listing.names == ["subdir", "README.MD"]
        assert mock_run.call_args.args[0][-1] == str(archive_file)

    @pytest.mark.asyncio
    async def test_missing_tool(self, archive_file: Path) -> None:
        """A missing archive tool fails the listing."""
        with (
            patch("vfsnav.vfs.archive.command_exists", return_value=False),
            pytest.raises(ToolUnavailableError),
        ):
            await DirectoryLister().list(f"{archive_file}/subdir")


class TestStatEntry:
    """Tests for stat_entry method."""

    @pytest.mark.asyncio
    async def test_file(self, sample_tree: Path) -> None:
        """A single file is described like a listed child."""
        entry = await DirectoryLister().stat_entry(str(sample_tree / "Alpha.md"))

        assert entry.name == "Alpha.md"
        assert entry.size == 3
        assert entry.extension == "md"

    @pytest.mark.asyncio
    async def test_missing(self, tmp_path: Path) -> None:
        """A missing path raises OSError."""
        with pytest.raises(OSError):
            await DirectoryLister().stat_entry(str(tmp_path / "missing"))


class TestFromConfig:
    """Tests for DirectoryLister.from_config."""

    def test_uses_depth_bound(self) -> None:
        """The resolver depth comes from the configuration."""
        lister = DirectoryLister.from_config(EngineConfig(max_resolve_depth=7))

        assert lister.resolver.max_depth == 7
