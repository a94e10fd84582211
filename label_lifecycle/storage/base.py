# label_lifecycle/storage/base.py
"""
Asset store interface for video binaries and derived files.

Layout:
- Every file belonging to a video lives under {owner_id}/{video_id}/
  (recording segments, thumbnails, transcription.vtt, ...)
- Postgres stores only metadata; the store is keyed by that prefix
- The engine only reads transcripts and deletes whole video prefixes
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

TRANSCRIPT_FILENAME = "transcription.vtt"


def video_prefix(owner_id, video_id) -> str:
    """Key prefix holding every asset of a video."""
    return f"{owner_id}/{video_id}/"


def transcript_key(owner_id, video_id) -> str:
    return f"{video_prefix(owner_id, video_id)}{TRANSCRIPT_FILENAME}"


class AssetStore(ABC):
    """
    Abstract interface for object storage.

    Implementations must handle:
    - Text reads that return None for missing objects
    - Prefix listing across pagination
    - Bulk deletes (an empty key list is a no-op)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 's3', 'local')."""
        pass

    @abstractmethod
    def get_text(self, key: str) -> Optional[str]:
        """
        Read an object as UTF-8 text.

        Returns:
            Content, or None if the object does not exist

        Raises:
            UpstreamError: storage backend failure
        """
        pass

    @abstractmethod
    def list_keys(self, prefix: str) -> list[str]:
        """
        List every key under a prefix.

        Raises:
            UpstreamError: storage backend failure
        """
        pass

    @abstractmethod
    def delete_keys(self, keys: Iterable[str]) -> int:
        """
        Delete the given keys.

        Returns:
            Number of keys deleted

        Raises:
            UpstreamError: storage backend failure
        """
        pass

    def delete_prefix(self, prefix: str) -> int:
        """Delete every object under a prefix. Returns the count deleted."""
        keys = self.list_keys(prefix)
        if not keys:
            return 0
        return self.delete_keys(keys)
