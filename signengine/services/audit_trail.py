"""
Audit trail recording: links an original and a signed result by content hash.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from signengine.audit_store import AuditStore, get_audit_store
from signengine.errors import EngineError, IntegrityError
from signengine.models import AuditRecord
from signengine.pdf.compositor import FieldPlacement
from signengine.services.signing_pipeline import ResultLocator
from signengine.storage import ByteStore, get_originals_store, get_signed_store
from signengine.utils.datetime_utils import utc_now
from signengine.utils.security import compute_bytes_hash, hashes_match, normalize_hash

logger = logging.getLogger(__name__)


@dataclass
class HashVerification:
    matches: bool
    matched_document_id: Optional[str] = None
    expected_hashes: List[str] = field(default_factory=list)


class AuditTrailRecorder:
    """Hashes both versions of a signed document and appends an AuditRecord."""

    def __init__(self, originals: ByteStore, signed: ByteStore, store: AuditStore):
        self.originals = originals
        self.signed = signed
        self.store = store

    def _read_and_hash(self, byte_store: ByteStore, document_id: str, role: str) -> str:
        try:
            data = byte_store.get(document_id)
        except (EngineError, OSError) as e:
            raise IntegrityError(f"Cannot read {role} document {document_id} for hashing: {e}") from e
        return compute_bytes_hash(data)

    def record(
        self,
        original_document_id: str,
        locator: ResultLocator,
        placement: Optional[FieldPlacement] = None,
    ) -> AuditRecord:
        """
        Hash the original and the result and append a timestamped record.

        Raises:
            IntegrityError: If either document cannot be read or the record
                cannot be appended
        """
        original_hash = self._read_and_hash(self.originals, original_document_id, "original")
        result_hash = self._read_and_hash(self.signed, locator.document_id, "signed")

        record = AuditRecord(
            original_document_id=original_document_id,
            result_document_id=locator.document_id,
            original_hash=original_hash,
            result_hash=result_hash,
            timestamp=utc_now(),
            field_type=placement.field_type.value if placement else None,
            placement=placement.to_dict() if placement else None,
        )
        try:
            self.store.append(record)
        except Exception as e:
            raise IntegrityError(f"Cannot append audit record for {locator.document_id}: {e}") from e

        logger.info(
            f"Audit record: {original_document_id[:8]} ({original_hash[:8]}) -> "
            f"{locator.document_id[:8]} ({result_hash[:8]})"
        )
        return record

    def list(self, original_document_id: str) -> List[AuditRecord]:
        """All records for an original, most-recent-first."""
        return self.store.query(original_document_id)

    def current_original_hash(self, original_document_id: str) -> Optional[str]:
        """Hash of the original as stored now, or None if it cannot be read."""
        try:
            return compute_bytes_hash(self.originals.get(original_document_id))
        except EngineError:
            return None

    def verify(self, original_document_id: str, file_hash: str) -> HashVerification:
        """
        Check a client-computed hash against the original and every recorded result.
        """
        candidates = []
        original_hash = self.current_original_hash(original_document_id)
        if original_hash:
            candidates.append((original_document_id, original_hash))
        for record in self.list(original_document_id):
            candidates.append((record.original_document_id, record.original_hash))
            candidates.append((record.result_document_id, record.result_hash))

        expected = []
        for document_id, expected_hash in candidates:
            if expected_hash not in expected:
                expected.append(expected_hash)
            if hashes_match(file_hash, expected_hash):
                return HashVerification(
                    matches=True,
                    matched_document_id=document_id,
                    expected_hashes=expected,
                )

        logger.info(f"Hash {normalize_hash(file_hash)[:8]} matches no version of {original_document_id[:8]}")
        return HashVerification(matches=False, expected_hashes=expected)


# Singleton instance
_recorder: Optional[AuditTrailRecorder] = None


def get_audit_recorder() -> AuditTrailRecorder:
    """Get the audit trail recorder singleton."""
    global _recorder
    if _recorder is None:
        _recorder = AuditTrailRecorder(
            originals=get_originals_store(),
            signed=get_signed_store(),
            store=get_audit_store(),
        )
    return _recorder
