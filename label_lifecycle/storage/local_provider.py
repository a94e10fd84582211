# label_lifecycle/storage/local_provider.py
"""
Local filesystem asset store for development and testing.

Mimics the S3 key layout but stores files locally.
NOT for production use.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from label_lifecycle.config import get_settings
from label_lifecycle.errors import UpstreamError
from label_lifecycle.storage.base import AssetStore

logger = logging.getLogger(__name__)


class LocalAssetStore(AssetStore):
    """
    Local filesystem asset store.

    Keys map to paths relative to the base directory.

    Configuration:
    - LOCAL_STORAGE_PATH: Base directory (default: ./storage)
    """

    def __init__(self, base_path: str | None = None):
        self._base_path = Path(base_path or get_settings().LOCAL_STORAGE_PATH)
        self._base_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"Local asset store initialized: {self._base_path}")

    @property
    def name(self) -> str:
        return "local"

    def _get_path(self, key: str) -> Path:
        """Get filesystem path for key, with path traversal protection."""
        resolved = (self._base_path / key).resolve()
        if not resolved.is_relative_to(self._base_path.resolve()):
            raise ValueError("Path traversal detected")
        return resolved

    def put_text(self, key: str, content: str) -> None:
        """Write a text object (used by tests and local tooling)."""
        path = self._get_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def get_text(self, key: str) -> Optional[str]:
        path = self._get_path(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise UpstreamError(f"Local read failed for {key}: {e}") from e

    def list_keys(self, prefix: str) -> list[str]:
        """List files whose key starts with prefix."""
        base = self._base_path.resolve()
        root = self._get_path(prefix)
        # A prefix ending in "/" names a directory; otherwise scan its parent
        search_dir = root if (not prefix or prefix.endswith("/")) else root.parent
        if not search_dir.is_dir():
            return []

        keys = []
        for path in sorted(search_dir.rglob("*")):
            if not path.is_file():
                continue
            key = path.relative_to(base).as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return keys

    def delete_keys(self, keys: Iterable[str]) -> int:
        deleted = 0
        for key in keys:
            path = self._get_path(key)
            try:
                path.unlink()
                deleted += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                raise UpstreamError(f"Local delete failed for {key}: {e}") from e
        return deleted
