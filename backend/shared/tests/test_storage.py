"""Tests for session snapshot storage."""

import os
import stat
from unittest.mock import patch

import pytest

from shared.storage import LocalSessionStorage


class TestLocalSessionStorage:
    def test_creates_directory_on_first_write(self, tmp_path):
        snapshot_dir = tmp_path / "sessions"
        storage = LocalSessionStorage(str(snapshot_dir))

        storage.save_snapshot("s1", '{"session_id": "s1"}')

        assert snapshot_dir.is_dir()
        assert (snapshot_dir / "s1.json").exists()

    def test_load_returns_saved_content(self, tmp_path):
        storage = LocalSessionStorage(tmp_path)

        storage.save_snapshot("s1", '{"round_number": 3}')

        assert storage.load_snapshot("s1") == '{"round_number": 3}'

    def test_load_missing_returns_none(self, tmp_path):
        assert LocalSessionStorage(tmp_path).load_snapshot("nobody") is None

    def test_overwrites_existing_snapshot(self, tmp_path):
        storage = LocalSessionStorage(tmp_path)

        storage.save_snapshot("s1", "original")
        storage.save_snapshot("s1", "updated")

        assert storage.load_snapshot("s1") == "updated"

    def test_delete_snapshot(self, tmp_path):
        storage = LocalSessionStorage(tmp_path)
        storage.save_snapshot("s1", "{}")

        storage.delete_snapshot("s1")
        storage.delete_snapshot("s1")

        assert storage.load_snapshot("s1") is None

    @pytest.mark.parametrize("session_id", ["../escape", "../../etc/passwd"])
    def test_rejects_path_traversal(self, tmp_path, session_id):
        storage = LocalSessionStorage(tmp_path / "sessions")

        with pytest.raises(ValueError, match="Path traversal rejected"):
            storage.save_snapshot(session_id, "{}")
        with pytest.raises(ValueError, match="Path traversal rejected"):
            storage.load_snapshot(session_id)

        assert not (tmp_path / "sessions").exists()

    def test_owner_only_permissions(self, tmp_path):
        snapshot_dir = tmp_path / "sessions"
        storage = LocalSessionStorage(snapshot_dir)

        storage.save_snapshot("s1", "{}")

        assert stat.S_IMODE(os.stat(snapshot_dir).st_mode) == 0o700
        assert stat.S_IMODE(os.stat(snapshot_dir / "s1.json").st_mode) == 0o600

    def test_cleans_up_temp_file_on_failure(self, tmp_path):
        storage = LocalSessionStorage(tmp_path)

        with (
            patch("shared.storage.os.fsync", side_effect=OSError("disk full")),
            pytest.raises(OSError, match="disk full"),
        ):
            storage.save_snapshot("s1", "{}")

        assert list(tmp_path.iterdir()) == []
