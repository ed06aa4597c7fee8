"""
Append-only audit record storage.

Backends:
- memory: process-local list, for tests and development
- jsonl: one JSON object per line in a local file
- supabase: rows in a Supabase (PostgREST) table
"""
import json
import logging
import os
import threading
from typing import Iterable, List, Optional, Protocol

from supabase import Client, create_client

from signengine.config import Settings, get_settings
from signengine.models import AuditRecord

logger = logging.getLogger(__name__)


def most_recent_first(records: Iterable[AuditRecord]) -> List[AuditRecord]:
    """Sort by timestamp descending; equal timestamps keep later appends first."""
    return sorted(reversed(list(records)), key=lambda r: r.timestamp, reverse=True)


class AuditStore(Protocol):
    def initialize(self) -> None:
        ...

    def append(self, record: AuditRecord) -> None:
        ...

    def query(self, original_document_id: str) -> List[AuditRecord]:
        ...


class InMemoryAuditStore:
    """Audit records held in a list for the lifetime of the process."""

    def __init__(self):
        self._records: List[AuditRecord] = []
        self._lock = threading.Lock()

    def initialize(self) -> None:
        pass

    def append(self, record: AuditRecord) -> None:
        with self._lock:
            self._records.append(record)

    def query(self, original_document_id: str) -> List[AuditRecord]:
        with self._lock:
            matching = [r for r in self._records if r.original_document_id == original_document_id]
        return most_recent_first(matching)


class JsonlAuditStore:
    """Audit records appended as JSON lines to a single file."""

    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        self._lock = threading.Lock()

    def initialize(self) -> None:
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        logger.info(f"Audit log at {self.path}")

    def append(self, record: AuditRecord) -> None:
        line = json.dumps(record.model_dump(mode="json"), sort_keys=True)
        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
                f.flush()
                os.fsync(f.fileno())

    def query(self, original_document_id: str) -> List[AuditRecord]:
        if not os.path.exists(self.path):
            return []

        matching = []
        with self._lock:
            with open(self.path, "r", encoding="utf-8") as f:
                for line_no, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning(f"Skipping corrupt audit line {line_no} in {self.path}")
                        continue
                    if data.get("original_document_id") == original_document_id:
                        matching.append(AuditRecord.model_validate(data))
        return most_recent_first(matching)


class SupabaseAuditStore:
    """Audit records stored as rows in a Supabase table."""

    def __init__(self, settings: Optional[Settings] = None, table_name: Optional[str] = None):
        self.settings = settings or get_settings()
        self.table_name = table_name or self.settings.audit_table
        self._client: Optional[Client] = None

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = create_client(
                self.settings.supabase_url,
                self.settings.supabase_anon_key,
            )
        return self._client

    def table(self):
        return self.client.table(self.table_name)

    def initialize(self) -> None:
        logger.info(f"Audit records stored in Supabase table '{self.table_name}'")

    def append(self, record: AuditRecord) -> None:
        row = record.model_dump(mode="json")
        result = self.table().insert(row).execute()
        if not result.data:
            raise RuntimeError(f"Failed to insert audit record into {self.table_name}: no data returned")
        logger.info(f"Inserted audit record for {record.original_document_id[:8]} into {self.table_name}")

    def query(self, original_document_id: str) -> List[AuditRecord]:
        result = self.table().select("*").eq(
            "original_document_id", original_document_id
        ).order("timestamp", desc=True).execute()

        return most_recent_first(AuditRecord.model_validate(row) for row in (result.data or []))


def build_audit_store(settings: Settings) -> AuditStore:
    if settings.audit_backend == "memory":
        return InMemoryAuditStore()
    if settings.audit_backend == "supabase":
        return SupabaseAuditStore(settings)
    return JsonlAuditStore(settings.audit_log_path)


# Singleton instance
_audit_store: Optional[AuditStore] = None


def get_audit_store() -> AuditStore:
    """Get the audit store singleton."""
    global _audit_store
    if _audit_store is None:
        _audit_store = build_audit_store(get_settings())
    return _audit_store
