"""
Byte store contract shared by all storage backends.
"""
import re
import secrets
from typing import Protocol

# Ids are random 128-bit tokens, hex-encoded
DOCUMENT_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_document_id() -> str:
    return secrets.token_hex(16)


def is_valid_document_id(document_id: str) -> bool:
    return bool(document_id) and DOCUMENT_ID_PATTERN.match(document_id) is not None


class ByteStore(Protocol):
    """Write-once storage of document bytes keyed by generated id."""

    def initialize(self) -> None:
        """Prepare the backing location. Called once at startup."""

    def put(self, data: bytes) -> str:
        """Store bytes under a new id and return the id."""

    def get(self, document_id: str) -> bytes:
        """Return stored bytes. Raises NotFoundError for unknown ids."""

    def exists(self, document_id: str) -> bool:
        """Check whether an id is stored."""
