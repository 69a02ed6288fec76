"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Small directory tree with mixed-case names, a subdirectory and files.

    Layout::

        root/
            beta.txt        (5 bytes)
            Alpha.md        (3 bytes)
            zeta/           (directory)
                inner.bin   (10 bytes)
            Docs/           (directory, empty)
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "beta.txt").write_bytes(b"hello")
    (root / "Alpha.md").write_bytes(b"abc")
    (root / "zeta").mkdir()
    (root / "zeta" / "inner.bin").write_bytes(b"0123456789")
    (root / "Docs").mkdir()
    return root


@pytest.fixture
def archive_file(tmp_path: Path) -> Path:
    """A regular file standing in for a zip archive on disk."""
    path = tmp_path / "archive.zip"
    path.write_bytes(b"PK\x03\x04")
    return path


@pytest.fixture
def mock_7z_listing() -> str:
    """Sample ``7z l -slt -ba`` output for an archive with a nested directory.

    Entries: subdir/a.txt, subdir/nested/b.txt, subdir/nested (folder),
    subdir (folder) and a top-level readme.
    """
    return """Path = subdir/a.txt
Folder = -
Size = 12
Packed Size = 12
Modified = 2024-01-15 10:00:00
Created =
Attributes = A
CRC = 3610A686

Path = subdir/nested/b.txt
Folder = -
Size = 7
Packed Size = 7
Modified = 2024-01-15 10:05:00.1234567
Attributes = A

Path = subdir/nested
Folder = +
Size = 0
Modified = 2024-01-15 10:05:00
Attributes = D

Path = subdir
Folder = +
Size = 0
Modified = 2024-01-15 10:00:00
Attributes = D

Path = README.MD
Folder = -
Size = 42
Modified = 2024-01-14 08:30:00
Attributes = A
"""


@pytest.fixture
def mock_empty_output() -> str:
    """Empty output for testing edge cases."""
    return ""


@pytest.fixture
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config and cache homes into a temporary directory."""
    base = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(base / "cache"))
    return base
