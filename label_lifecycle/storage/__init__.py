"""
Asset store abstraction for video files.

Recordings, thumbnails and transcripts live in object storage (S3), not
Postgres. This module provides the narrow read/list/delete interface the
lifecycle engine needs.
"""

from label_lifecycle.storage.base import (
    AssetStore,
    transcript_key,
    video_prefix,
)
from label_lifecycle.storage.factory import (
    get_asset_store,
    reset_asset_store,
    set_asset_store,
)
from label_lifecycle.storage.local_provider import LocalAssetStore
from label_lifecycle.storage.s3_provider import S3AssetStore

__all__ = [
    "AssetStore",
    "S3AssetStore",
    "LocalAssetStore",
    "get_asset_store",
    "set_asset_store",
    "reset_asset_store",
    "transcript_key",
    "video_prefix",
]
