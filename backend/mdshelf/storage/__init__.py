"""Storage backends — blob store for content, key/value store for metadata."""

from mdshelf.storage.blob_store import BlobStore, blob_key
from mdshelf.storage.kv_store import KvListResult, KvStore

__all__ = ["BlobStore", "KvListResult", "KvStore", "blob_key"]
