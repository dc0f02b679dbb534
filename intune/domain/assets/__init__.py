"""Uploaded media storage."""

from .sanitizer import sanitize_filename
from .store import AssetStore, DeleteOutcome, StoredAsset, UPLOAD_URL_PREFIX

__all__ = [
    "AssetStore",
    "DeleteOutcome",
    "StoredAsset",
    "UPLOAD_URL_PREFIX",
    "sanitize_filename",
]
