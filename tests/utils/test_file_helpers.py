"""Tests for file helpers."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from mstodo_mcp.utils.file_helpers import atomic_write_json, ensure_private_dir


class TestAtomicWriteJson:
    """Tests for atomic_write_json."""

    def test_writes_json(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"

        atomic_write_json(path, {"a": 1})

        assert json.loads(path.read_text(encoding="utf-8")) == {"a": 1}

    def test_unserializable_data_leaves_no_files(self, tmp_path: Path) -> None:
        """Given data json cannot encode, nothing is written."""
        with pytest.raises(TypeError):
            atomic_write_json(tmp_path / "data.json", {"a": object()})

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_non_private_write_keeps_existing_mode(self, tmp_path: Path) -> None:
        """Given private=False, a 0644 file stays 0644 after replacement."""
        # Arrange
        path = tmp_path / "config.json"
        path.write_text("{}", encoding="utf-8")
        path.chmod(0o644)

        # Act
        atomic_write_json(path, {"b": 2}, private=False)

        # Assert
        assert path.stat().st_mode & 0o777 == 0o644


class TestEnsurePrivateDir:
    """Tests for ensure_private_dir."""

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_creates_owner_only_directory(self, tmp_path: Path) -> None:
        path = ensure_private_dir(tmp_path / "a" / "b")

        assert path.is_dir()
        assert path.stat().st_mode & 0o777 == 0o700

    def test_existing_directory_is_untouched(self, tmp_path: Path) -> None:
        existing = tmp_path / "shared"
        existing.mkdir(mode=0o755)
        before = existing.stat().st_mode

        ensure_private_dir(existing)

        assert existing.stat().st_mode == before
