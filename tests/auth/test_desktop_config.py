"""Tests for the desktop host config update."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import make_record
from mstodo_mcp.auth.desktop_config import get_desktop_config_path, update_desktop_config
from mstodo_mcp.exceptions import ConfigWriteError


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestUpdateDesktopConfig:
    """Tests for update_desktop_config."""

    def test_missing_file_is_noop(self, tmp_path: Path) -> None:
        """Given no config file, returns False and creates nothing."""
        path = tmp_path / "claude_desktop_config.json"

        assert update_desktop_config(make_record(), path) is False
        assert not path.exists()

    def test_missing_server_entry_is_noop(self, tmp_path: Path) -> None:
        """Given no microsoft-todo entry, returns False and leaves the file alone."""
        # Arrange
        original = {"mcpServers": {"other": {"command": "x"}}}
        path = _write(tmp_path / "config.json", original)

        # Act
        updated = update_desktop_config(make_record(), path)

        # Assert
        assert updated is False
        assert json.loads(path.read_text(encoding="utf-8")) == original

    def test_updates_token_pair_and_preserves_other_keys(self, tmp_path: Path) -> None:
        """Given a server entry, the token pair is written and other env keys survive."""
        # Arrange
        path = _write(
            tmp_path / "config.json",
            {
                "globalShortcut": "Ctrl+Space",
                "mcpServers": {
                    "microsoft-todo": {
                        "command": "mstodo-mcp",
                        "env": {"CLIENT_ID": "cid", "MS_TODO_ACCESS_TOKEN": "old"},
                    },
                    "other": {"command": "x"},
                },
            },
        )

        # Act
        updated = update_desktop_config(make_record("A2", "R2"), path)

        # Assert
        data = json.loads(path.read_text(encoding="utf-8"))
        assert updated is True
        assert data["globalShortcut"] == "Ctrl+Space"
        assert data["mcpServers"]["other"] == {"command": "x"}
        assert data["mcpServers"]["microsoft-todo"]["env"] == {
            "CLIENT_ID": "cid",
            "MS_TODO_ACCESS_TOKEN": "A2",
            "MS_TODO_REFRESH_TOKEN": "R2",
        }

    def test_creates_env_block_when_absent(self, tmp_path: Path) -> None:
        """Given an entry without env, an env block is added."""
        path = _write(tmp_path / "config.json", {"mcpServers": {"microsoft-todo": {"command": "x"}}})

        update_desktop_config(make_record("A2", "R2"), path)

        env = json.loads(path.read_text(encoding="utf-8"))["mcpServers"]["microsoft-todo"]["env"]
        assert env == {"MS_TODO_ACCESS_TOKEN": "A2", "MS_TODO_REFRESH_TOKEN": "R2"}

    def test_invalid_json_raises_config_write_error(self, tmp_path: Path) -> None:
        """Given an unparseable file, ConfigWriteError is raised."""
        path = tmp_path / "config.json"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(ConfigWriteError):
            update_desktop_config(make_record(), path)


def test_default_path_is_under_host_config_dir() -> None:
    path = get_desktop_config_path()

    assert path.name == "claude_desktop_config.json"
    assert path.parent.name == "Claude"
