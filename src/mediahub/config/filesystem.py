"""
Filesystem checks used by configuration validation.

Validation only needs a pass/fail answer for three questions, so the checks
live behind a small protocol that tests (or an embedding host) can replace.
"""

import logging
import os
import uuid
from typing import Protocol

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    """Pass/fail filesystem contract."""

    def directory_exists(self, path: str) -> bool:
        ...

    def file_exists(self, path: str) -> bool:
        ...

    def ensure_write_access(self, path: str) -> None:
        """Raise OSError (usually PermissionError) if ``path`` is not writable."""
        ...


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    def directory_exists(self, path: str) -> bool:
        return os.path.isdir(path)

    def file_exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def ensure_write_access(self, path: str) -> None:
        """Create and remove a uniquely named test file inside ``path``.

        Permission bits alone are not reliable (ACLs, read-only mounts), so the
        check performs a real write.

        Raises:
            OSError: If the test file cannot be created or removed
        """
        test_file = os.path.join(path, f".write-test-{uuid.uuid4().hex}")
        with open(test_file, "wb") as f:
            f.write(b"")
        os.remove(test_file)
        logger.debug(f"Write access confirmed for {path}")
