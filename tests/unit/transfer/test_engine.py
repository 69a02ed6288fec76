"""Unit tests for the transfer engine."""

import errno
import os
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from vfsnav.transfer.engine import TransferEngine
from vfsnav.transfer.models import TransferItem, TransferMode, TransferProgress

MB = 1024 * 1024


def _write(path: Path, size: int, seed: int = 0) -> bytes:
    data = bytes((i + seed) % 251 for i in range(size))
    path.write_bytes(data)
    return data


class ProgressRecorder:
    """Collects progress snapshots."""

    def __init__(self) -> None:
        self.events: list[TransferProgress] = []

    def __call__(self, progress: TransferProgress) -> None:
        self.events.append(progress)

    @property
    def percents(self) -> list[float]:
        return [e.percent for e in self.events]


class TestCopy:
    """Tests for copy batches."""

    @pytest.mark.asyncio
    async def test_two_files_reach_full_progress(self, tmp_path: Path) -> None:
        """Copying a 10 MB and a 5 MB file reports non-decreasing progress to 100%."""
        src = tmp_path / "src"
        dst = tmp_path / "dst"
        src.mkdir()
        dst.mkdir()
        big = _write(src / "big.bin", 10 * MB)
        small = _write(src / "small.bin", 5 * MB, seed=7)
        items = [
            TransferItem(str(src / "big.bin"), str(dst / "big.bin")),
            TransferItem(str(src / "small.bin"), str(dst / "small.bin")),
        ]
        recorder = ProgressRecorder()

        result = await TransferEngine().transfer(items, TransferMode.COPY, recorder)

        assert result.success is True
        assert result.failures == []
        assert recorder.percents == sorted(recorder.percents)
        assert recorder.percents[-1] == 100.0
        assert result.progress.total_bytes == 15 * MB
        assert result.progress.processed_bytes == result.progress.total_bytes
        assert result.progress.processed_files == 2
        assert (dst / "big.bin").read_bytes() == big
        assert (dst / "small.bin").read_bytes() == small
        assert (src / "big.bin").exists()
        assert (src / "small.bin").exists()

    @pytest.mark.asyncio
    async def test_directory_tree(self, sample_tree: Path, tmp_path: Path) -> None:
        """Directories are copied recursively, one event per file."""
        dst = tmp_path / "copy"
        recorder = ProgressRecorder()

        result = await TransferEngine().transfer(
            [TransferItem(str(sample_tree), str(dst))], TransferMode.COPY, recorder
        )

        assert result.success is True
        assert (dst / "zeta" / "inner.bin").read_bytes() == b"0123456789"
        assert (dst / "beta.txt").read_bytes() == b"hello"
        assert (dst / "Docs").is_dir()
        assert result.progress.total_files == 3
        assert result.progress.total_bytes == 18
        assert len(recorder.events) == 3

    @pytest.mark.asyncio
    async def test_creates_destination_parents(self, sample_tree: Path, tmp_path: Path) -> None:
        """Missing destination parents are created."""
        dst = tmp_path / "deep" / "er" / "beta.txt"

        result = await TransferEngine().transfer(
            [TransferItem(str(sample_tree / "beta.txt"), str(dst))], TransferMode.COPY
        )

        assert result.success is True
        assert dst.read_bytes() == b"hello"

    @pytest.mark.asyncio
    async def test_symlink_copied_as_link(self, sample_tree: Path, tmp_path: Path) -> None:
        """Symlinks are recreated rather than followed."""
        os.symlink("beta.txt", sample_tree / "link")
        dst = tmp_path / "link-copy"

        result = await TransferEngine().transfer(
            [TransferItem(str(sample_tree / "link"), str(dst))], TransferMode.COPY
        )

        assert result.success is True
        assert dst.is_symlink()
        assert os.readlink(dst) == "beta.txt"

    @pytest.mark.asyncio
    async def test_async_callback(self, sample_tree: Path, tmp_path: Path) -> None:
        """Coroutine progress callbacks are awaited."""
        seen: list[float] = []

        async def on_progress(progress: TransferProgress) -> None:
            seen.append(progress.percent)

        await TransferEngine().transfer(
            [TransferItem(str(sample_tree / "beta.txt"), str(tmp_path / "b.txt"))],
            TransferMode.COPY,
            on_progress,
        )

        assert seen == [100.0]


class TestMove:
    """Tests for move batches."""

    @pytest.mark.asyncio
    async def test_same_filesystem(self, sample_tree: Path, tmp_path: Path) -> None:
        """Moved sources disappear and destinations hold the same content."""
        dst = tmp_path / "moved"
        dst.mkdir()
        items = [
            TransferItem(str(sample_tree / "zeta"), str(dst / "zeta")),
            TransferItem(str(sample_tree / "beta.txt"), str(dst / "beta.txt")),
        ]
        recorder = ProgressRecorder()

        result = await TransferEngine().transfer(items, TransferMode.MOVE, recorder)

        assert result.success is True
        assert not (sample_tree / "zeta").exists()
        assert not (sample_tree / "beta.txt").exists()
        assert (dst / "zeta" / "inner.bin").read_bytes() == b"0123456789"
        assert (dst / "beta.txt").read_bytes() == b"hello"
        # One event per atomic rename, crediting each item's footprint
        assert len(recorder.events) == 2
        assert recorder.events[0].processed_bytes == 10
        assert recorder.events[-1].percent == 100.0

    @pytest.mark.asyncio
    async def test_cross_device_falls_back_to_copy(
        self, sample_tree: Path, tmp_path: Path
    ) -> None:
        """A failed rename copies then deletes the source."""
        dst = tmp_path / "moved"

        with patch(
            "vfsnav.transfer.engine.aiofiles.os.rename",
            new_callable=AsyncMock,
            side_effect=OSError(errno.EXDEV, "Invalid cross-device link"),
        ):
            result = await TransferEngine().transfer(
                [TransferItem(str(sample_tree), str(dst))], TransferMode.MOVE
            )

        assert result.success is True
        assert result.failures == []
        assert not sample_tree.exists()
        assert (dst / "zeta" / "inner.bin").read_bytes() == b"0123456789"
        assert result.progress.processed_bytes == 18


class TestFailures:
    """Tests for per-item and batch-level failures."""

    @pytest.mark.asyncio
    async def test_item_failure_does_not_abort(self, sample_tree: Path, tmp_path: Path) -> None:
        """A failing item is recorded and later items still run."""
        dst = tmp_path / "dst"
        items = [
            TransferItem(str(sample_tree / "missing.txt"), str(dst / "missing.txt")),
            TransferItem(str(sample_tree / "beta.txt"), str(dst / "beta.txt")),
        ]

        result = await TransferEngine().transfer(items, TransferMode.COPY)

        assert result.success is True
        assert result.partial is True
        assert [f.source for f in result.failures] == [str(sample_tree / "missing.txt")]
        assert result.failures[0].error
        assert (dst / "beta.txt").read_bytes() == b"hello"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", [TransferMode.COPY, TransferMode.MOVE])
    async def test_file_onto_existing_directory_fails(
        self, sample_tree: Path, tmp_path: Path, mode: TransferMode
    ) -> None:
        """A file is never nested inside a directory named by its destination."""
        dst = tmp_path / "dst"
        (dst / "beta.txt").mkdir(parents=True)
        items = [TransferItem(str(sample_tree / "beta.txt"), str(dst / "beta.txt"))]

        result = await TransferEngine().transfer(items, mode)

        assert result.success is True
        assert len(result.failures) == 1
        assert "Is a directory" in (result.failures[0].error or "")
        assert list((dst / "beta.txt").iterdir()) == []
        assert (sample_tree / "beta.txt").read_bytes() == b"hello"

    @pytest.mark.asyncio
    async def test_callback_error_aborts_batch(self, sample_tree: Path, tmp_path: Path) -> None:
        """An error outside the per-item boundary fails the batch."""

        def on_progress(progress: TransferProgress) -> None:
            raise RuntimeError("listener exploded")

        result = await TransferEngine().transfer(
            [TransferItem(str(sample_tree / "beta.txt"), str(tmp_path / "b.txt"))],
            TransferMode.COPY,
            on_progress,
        )

        assert result.success is False
        assert result.error == "listener exploded"

    @pytest.mark.asyncio
    async def test_empty_batch(self) -> None:
        """An empty batch succeeds with a byte total of one."""
        result = await TransferEngine().transfer([], TransferMode.COPY)

        assert result.success is True
        assert result.items == ()
        assert result.progress.total_bytes == 1
