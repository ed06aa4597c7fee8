"""
Content hashing utilities: SHA-256 digests of documents for tamper evidence.
"""
import hashlib
import secrets


def compute_bytes_hash(data: bytes) -> str:
    """Compute SHA-256 hash of bytes."""
    return hashlib.sha256(data).hexdigest()


def compute_file_hash(file_path: str) -> str:
    """
    Compute SHA-256 hash of a file.
    Reads file in chunks for memory efficiency.
    """
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def normalize_hash(value: str) -> str:
    return value.lower().strip()


def hashes_match(provided: str, expected: str) -> bool:
    """Compare two hex digests, ignoring case and surrounding whitespace."""
    return secrets.compare_digest(normalize_hash(provided), normalize_hash(expected))
