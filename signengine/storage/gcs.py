"""
Google Cloud Storage byte store.
Documents live at <prefix>/<id>.pdf in the configured bucket.
"""
import logging
from typing import Optional

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud import storage

from signengine.errors import NotFoundError, StorageError
from signengine.storage.base import is_valid_document_id, new_document_id

logger = logging.getLogger(__name__)


class GCSByteStore:
    """Google Cloud Storage client wrapper implementing the byte store contract."""

    def __init__(
        self,
        bucket_name: str,
        prefix: str,
        label: str = "Document",
        client: Optional[storage.Client] = None,
    ):
        self.bucket_name = bucket_name
        self.prefix = prefix.strip("/")
        self.label = label
        self._client = client
        self._bucket: Optional[storage.Bucket] = None

    @property
    def client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client()
        return self._client

    @property
    def bucket(self) -> storage.Bucket:
        if self._bucket is None:
            self._bucket = self.client.bucket(self.bucket_name)
        return self._bucket

    def object_path(self, document_id: str) -> str:
        if self.prefix:
            return f"{self.prefix}/{document_id}.pdf"
        return f"{document_id}.pdf"

    def initialize(self) -> None:
        if not self.bucket_name:
            logger.error(f"GCS byte store for '{self.prefix}' has no bucket configured")
            return
        logger.info(f"GCS byte store ready at gs://{self.bucket_name}/{self.prefix}")

    def put(self, data: bytes) -> str:
        document_id = new_document_id()
        path = self.object_path(document_id)
        try:
            self.bucket.blob(path).upload_from_string(data, content_type="application/pdf")
        except GoogleAPIError as e:
            raise StorageError(f"Upload to gs://{self.bucket_name}/{path} failed: {e}") from e
        logger.info(f"Uploaded {len(data)} bytes to {path}")
        return document_id

    def get(self, document_id: str) -> bytes:
        if not is_valid_document_id(document_id):
            raise NotFoundError(self.label, document_id)
        path = self.object_path(document_id)
        blob = self.bucket.blob(path)
        try:
            if not blob.exists():
                raise NotFoundError(self.label, document_id)
            return blob.download_as_bytes()
        except NotFound as e:
            raise NotFoundError(self.label, document_id) from e
        except GoogleAPIError as e:
            raise StorageError(f"Download of gs://{self.bucket_name}/{path} failed: {e}") from e

    def exists(self, document_id: str) -> bool:
        if not is_valid_document_id(document_id):
            return False
        path = self.object_path(document_id)
        try:
            return self.bucket.blob(path).exists()
        except GoogleAPIError as e:
            raise StorageError(f"Lookup of gs://{self.bucket_name}/{path} failed: {e}") from e
