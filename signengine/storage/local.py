"""
Filesystem byte store: one file per document id.
"""
import logging
import os
import tempfile

from signengine.errors import NotFoundError
from signengine.storage.base import is_valid_document_id, new_document_id

logger = logging.getLogger(__name__)


class LocalByteStore:
    """Stores documents as <root_dir>/<id><suffix>."""

    def __init__(self, root_dir: str, suffix: str = ".pdf", label: str = "Document"):
        self.root_dir = os.path.abspath(root_dir)
        self.suffix = suffix
        self.label = label

    def initialize(self) -> None:
        os.makedirs(self.root_dir, exist_ok=True)
        logger.info(f"Local byte store ready at {self.root_dir}")

    def path_for(self, document_id: str) -> str:
        return os.path.join(self.root_dir, f"{document_id}{self.suffix}")

    def put(self, data: bytes) -> str:
        document_id = new_document_id()
        final_path = self.path_for(document_id)

        # Write to a temp file first so readers never see a partial document
        fd, temp_path = tempfile.mkstemp(dir=self.root_dir, prefix=".incoming_")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(temp_path, final_path)
        except Exception:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

        logger.info(f"Stored {len(data)} bytes as {document_id[:8]} in {self.root_dir}")
        return document_id

    def get(self, document_id: str) -> bytes:
        if not is_valid_document_id(document_id):
            raise NotFoundError(self.label, document_id)
        try:
            with open(self.path_for(document_id), "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise NotFoundError(self.label, document_id) from e

    def exists(self, document_id: str) -> bool:
        return is_valid_document_id(document_id) and os.path.exists(self.path_for(document_id))
