"""Unit tests for the extract command."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

from vfsnav.cli.main import app
from vfsnav.transfer.extract import ExtractionResult
from typer.testing import CliRunner

runner = CliRunner()


class TestExtract:
    """Tests for vfsnav extract command."""

    def test_extracts_next_to_archive(self, archive_file: Path, isolated_xdg: Path) -> None:
        """Without a destination the archive's directory is used."""
        outcome = ExtractionResult(
            archive_path=str(archive_file),
            output_dir=str(archive_file.parent / "archive"),
            success=True,
        )

        with patch(
            "vfsnav.cli.commands.extract.extract_archive",
            new_callable=AsyncMock,
            return_value=outcome,
        ) as mock_extract:
            result = runner.invoke(app, ["extract", str(archive_file)])

        assert result.exit_code == 0
        assert "Extracted to" in result.stdout
        assert mock_extract.call_args.args == (str(archive_file), str(archive_file.parent))
        assert mock_extract.call_args.kwargs == {"tool": "7z"}

    def test_failure(self, archive_file: Path, isolated_xdg: Path) -> None:
        """Extraction failures exit with an error."""
        outcome = ExtractionResult(
            archive_path=str(archive_file),
            output_dir=str(archive_file.parent / "archive"),
            success=False,
            error="End of central directory not found",
        )

        with patch(
            "vfsnav.cli.commands.extract.extract_archive",
            new_callable=AsyncMock,
            return_value=outcome,
        ):
            result = runner.invoke(app, ["extract", str(archive_file)])

        assert result.exit_code == 1
        assert "central directory" in result.output

    def test_missing_archive(self, tmp_path: Path, isolated_xdg: Path) -> None:
        """A missing archive is rejected."""
        result = runner.invoke(app, ["extract", str(tmp_path / "none.zip")])

        assert result.exit_code == 1
        assert "Archive not found" in result.output
