"""Tests for LocalAssetStore key handling and path traversal protection."""

import os
import tempfile

import pytest

from label_lifecycle.storage.local_provider import LocalAssetStore


class TestPathTraversal:
    """Verify _get_path rejects path traversal attempts."""

    def setup_method(self):
        self.tmpdir = os.path.realpath(tempfile.mkdtemp())
        self.store = LocalAssetStore(base_path=self.tmpdir)

    def test_traversal_with_dotdot(self):
        with pytest.raises(ValueError, match="Path traversal detected"):
            self.store._get_path("../../../etc/passwd")

    def test_traversal_with_absolute(self):
        with pytest.raises(ValueError, match="Path traversal detected"):
            self.store._get_path("/etc/passwd")

    def test_normal_key_succeeds(self):
        path = self.store._get_path("owner/video/transcription.vtt")
        assert str(path).startswith(self.tmpdir)

    def test_delete_rejects_traversal(self):
        with pytest.raises(ValueError, match="Path traversal detected"):
            self.store.delete_keys(["../outside.txt"])


class TestLocalAssetStore:
    """Read, list and delete against a temporary directory."""

    def setup_method(self):
        self.tmpdir = os.path.realpath(tempfile.mkdtemp())
        self.store = LocalAssetStore(base_path=self.tmpdir)

    def test_missing_key_returns_none(self):
        assert self.store.get_text("owner/video/transcription.vtt") is None

    def test_put_then_get(self):
        self.store.put_text("owner/video/transcription.vtt", "WEBVTT\n")
        assert self.store.get_text("owner/video/transcription.vtt") == "WEBVTT\n"

    def test_list_keys_scoped_to_prefix(self):
        self.store.put_text("owner/video-1/a.webm", "x")
        self.store.put_text("owner/video-1/thumbs/1.png", "x")
        self.store.put_text("owner/video-2/a.webm", "x")

        keys = self.store.list_keys("owner/video-1/")

        assert keys == ["owner/video-1/a.webm", "owner/video-1/thumbs/1.png"]

    def test_list_missing_prefix_is_empty(self):
        assert self.store.list_keys("nobody/nothing/") == []

    def test_list_empty_prefix_lists_everything(self):
        self.store.put_text("a/b/c.txt", "x")
        assert self.store.list_keys("") == ["a/b/c.txt"]

    def test_delete_keys(self):
        self.store.put_text("owner/video/a.webm", "x")
        self.store.put_text("owner/video/b.webm", "x")

        deleted = self.store.delete_keys(["owner/video/a.webm", "owner/video/b.webm", "owner/video/gone.webm"])

        assert deleted == 2
        assert self.store.list_keys("owner/video/") == []

    def test_delete_prefix(self):
        self.store.put_text("owner/video/a.webm", "x")
        self.store.put_text("owner/other/a.webm", "x")

        assert self.store.delete_prefix("owner/video/") == 1
        assert self.store.list_keys("owner/") == ["owner/other/a.webm"]


class TestAssetStoreFactory:
    def test_local_provider_is_cached(self, tmp_path):
        from label_lifecycle.storage import get_asset_store

        first = get_asset_store("local", base_path=str(tmp_path))

        assert isinstance(first, LocalAssetStore)
        assert get_asset_store() is first

    def test_injected_store_wins(self):
        from unittest.mock import MagicMock

        from label_lifecycle.storage import get_asset_store, set_asset_store

        store = MagicMock()
        set_asset_store(store)

        assert get_asset_store("s3") is store

    def test_unknown_provider(self):
        from label_lifecycle.storage import get_asset_store

        with pytest.raises(ValueError):
            get_asset_store("gcs")
