"""Deterministic ids and content checksums. All are MD5 hex digests of text."""

import hashlib
from typing import Optional


def _digest(text: str) -> str:
    return hashlib.md5(text.encode("utf-8"), usedforsecurity=False).hexdigest()


def project_id(name: str) -> str:
    """Id of the project called name."""
    return _digest(name)


def file_id(pid: str, name: str) -> str:
    """Id of the file called name inside project pid (project id, not name)."""
    return _digest(pid + name)


def compute_checksum(contents: Optional[str]) -> str:
    """Checksum of file contents. Empty string means no contents (cleared file)."""
    if contents is None:
        return ""
    return _digest(contents)
