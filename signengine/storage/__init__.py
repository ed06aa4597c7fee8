# Byte storage module
from typing import Optional

from signengine.config import Settings, get_settings
from signengine.storage.base import ByteStore, is_valid_document_id, new_document_id
from signengine.storage.local import LocalByteStore


def build_byte_store(settings: Settings, kind: str) -> ByteStore:
    """
    Build the store for uploaded originals (kind="originals") or signed
    results (kind="signed") from settings.
    """
    label = "PDF" if kind == "originals" else "Signed PDF"
    if settings.storage_backend == "gcs":
        from signengine.storage.gcs import GCSByteStore

        prefix = settings.gcs_originals_prefix if kind == "originals" else settings.gcs_signed_prefix
        return GCSByteStore(bucket_name=settings.gcs_bucket, prefix=prefix, label=label)

    root_dir = settings.upload_dir if kind == "originals" else settings.output_dir
    return LocalByteStore(root_dir=root_dir, label=label)


# Singleton instances
_originals_store: Optional[ByteStore] = None
_signed_store: Optional[ByteStore] = None


def get_originals_store() -> ByteStore:
    """Get the store holding uploaded originals."""
    global _originals_store
    if _originals_store is None:
        _originals_store = build_byte_store(get_settings(), "originals")
    return _originals_store


def get_signed_store() -> ByteStore:
    """Get the store holding signed results."""
    global _signed_store
    if _signed_store is None:
        _signed_store = build_byte_store(get_settings(), "signed")
    return _signed_store


__all__ = [
    "ByteStore",
    "LocalByteStore",
    "build_byte_store",
    "get_originals_store",
    "get_signed_store",
    "is_valid_document_id",
    "new_document_id",
]
