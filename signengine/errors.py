"""
Core engine errors.

These are raised by the mapping, compositing, storage and audit layers and
translated to HTTP responses in signengine.exceptions.
"""


class EngineError(Exception):
    """Base error for the signing engine."""

    default_code = "ENGINE_ERROR"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class NotFoundError(EngineError):
    """Unknown document id."""

    default_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} not found: {resource_id}")
        self.resource = resource
        self.resource_id = resource_id


class DecodeError(EngineError):
    """Malformed image/PDF bytes or unsupported payload."""

    default_code = "DECODE_ERROR"


class ConfigurationError(EngineError):
    """Missing or zero viewport dimensions."""

    default_code = "CONFIGURATION_ERROR"


class IntegrityError(EngineError):
    """Audit recording could not hash a document or append the record."""

    default_code = "INTEGRITY_ERROR"


class StorageError(EngineError):
    """A storage backend failed while reading or writing document bytes."""

    default_code = "STORAGE_ERROR"
