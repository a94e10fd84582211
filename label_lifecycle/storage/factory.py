# label_lifecycle/storage/factory.py
"""
Factory function for creating asset stores.
"""

import logging
from typing import Optional

from label_lifecycle.config import get_settings
from label_lifecycle.storage.base import AssetStore

logger = logging.getLogger(__name__)

# Global singleton instance
_asset_store: Optional[AssetStore] = None


def get_asset_store(
    provider_name: Optional[str] = None,
    **kwargs,
) -> AssetStore:
    """
    Get or create the asset store instance.

    Args:
        provider_name: 's3' or 'local' (default from STORAGE_PROVIDER setting)
        **kwargs: Additional arguments for the provider

    Returns:
        AssetStore instance (singleton)

    Raises:
        ConfigurationError: provider is missing required settings
    """
    global _asset_store

    if _asset_store is not None:
        return _asset_store

    name = provider_name or get_settings().STORAGE_PROVIDER
    name = name.lower().strip()

    if name == "s3":
        from label_lifecycle.storage.s3_provider import S3AssetStore
        _asset_store = S3AssetStore(**kwargs)
    elif name == "local":
        from label_lifecycle.storage.local_provider import LocalAssetStore
        _asset_store = LocalAssetStore(**kwargs)
    else:
        raise ValueError(f"Unknown storage provider: {name}. Available: s3, local")

    logger.info(f"Asset store initialized: {_asset_store.name}")
    return _asset_store


def set_asset_store(store: AssetStore) -> None:
    """
    Set a custom asset store (useful for testing).
    """
    global _asset_store
    _asset_store = store


def reset_asset_store() -> None:
    """
    Reset the asset store singleton (for testing).
    """
    global _asset_store
    _asset_store = None
