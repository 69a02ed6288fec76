"""Unit tests for shell execution utilities."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from vfsnav.utils.shell import CommandResult, command_exists, run_command, run_pipeline


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success(self) -> None:
        """Only a zero exit code is a success."""
        assert CommandResult(stdout="", stderr="", returncode=0).success
        assert not CommandResult(stdout="", stderr="", returncode=1).success


class TestRunCommand:
    """Tests for run_command function."""

    @pytest.mark.asyncio
    async def test_captures_output(self) -> None:
        """stdout and the exit code are captured."""
        result = await run_command(["echo", "hello"])

        assert result.success
        assert result.stdout == "hello\n"

    @pytest.mark.asyncio
    async def test_captures_stderr(self) -> None:
        """stderr is captured separately."""
        result = await run_command(["sh", "-c", "echo oops >&2; exit 3"])

        assert result.returncode == 3
        assert result.stderr == "oops\n"

    @pytest.mark.asyncio
    async def test_check_raises(self) -> None:
        """check=True raises on non-zero exit."""
        with pytest.raises(subprocess.CalledProcessError):
            await run_command(["false"], check=True)

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Slow commands are killed on timeout."""
        with pytest.raises(TimeoutError):
            await run_command(["sleep", "5"], timeout=0.1)

    @pytest.mark.asyncio
    async def test_missing_executable(self) -> None:
        """Unknown executables raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            await run_command(["vfsnav-definitely-not-a-command"])

    @pytest.mark.asyncio
    async def test_cwd(self, tmp_path: Path) -> None:
        """Commands run in the given working directory."""
        result = await run_command(["pwd"], cwd=str(tmp_path))

        assert result.stdout.strip() == str(tmp_path)


class TestRunPipeline:
    """Tests for run_pipeline function."""

    @pytest.mark.asyncio
    async def test_pipes_producer_into_consumer(self) -> None:
        """The consumer reads the producer's output."""
        result = await run_pipeline(["printf", "a\\nb\\nc\\n"], ["wc", "-l"])

        assert result.success
        assert result.stdout.strip() == "3"

    @pytest.mark.asyncio
    async def test_producer_failure(self) -> None:
        """A failing producer fails the pipeline."""
        result = await run_pipeline(["sh", "-c", "echo broken >&2; exit 2"], ["cat"])

        assert result.returncode == 2
        assert "broken" in result.stderr

    @pytest.mark.asyncio
    async def test_consumer_failure(self) -> None:
        """The consumer's exit code is reported."""
        result = await run_pipeline(["echo", "x"], ["sh", "-c", "cat >/dev/null; exit 4"])

        assert result.returncode == 4

    @pytest.mark.asyncio
    async def test_missing_consumer(self) -> None:
        """A missing consumer raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            await run_pipeline(["echo", "x"], ["vfsnav-definitely-not-a-command"])


class TestCommandExists:
    """Tests for command_exists function."""

    def test_existing(self) -> None:
        """Commands found on PATH exist."""
        with patch("vfsnav.utils.shell.shutil.which", return_value="/usr/bin/7z"):
            assert command_exists("7z")

    def test_missing(self) -> None:
        """Commands not on PATH do not exist."""
        with patch("vfsnav.utils.shell.shutil.which", return_value=None):
            assert not command_exists("7z")
