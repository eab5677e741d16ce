"""
Mangrove Watch - Storage Module
Photo evidence uploads.
"""

from mangrove_watch.storage.blob_store import BlobStore, LocalBlobStore, StoredBlob

__all__ = [
    "BlobStore",
    "LocalBlobStore",
    "StoredBlob",
]
