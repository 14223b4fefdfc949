"""Key-value store capability — the only way the core touches storage.

A store is opened per operation and closed when the operation ends. It
moves opaque bytes; interpreting them is the codec's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator


class KeyValueStore(ABC):
    """Abstract open/get/put/close capability over an embedded store."""

    @classmethod
    @abstractmethod
    def open(cls, path: str | Path) -> KeyValueStore:
        """Open the store at ``path``. Raises InvalidPathError or DatabaseError."""
        ...

    @abstractmethod
    def get(self, key: bytes) -> bytes | None:
        """Return the value under ``key``, or None if the key is absent."""
        ...

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """Store ``value`` under ``key``. Raises DatabaseError on failure."""
        ...

    @abstractmethod
    def items(self) -> Iterator[tuple[bytes, bytes]]:
        """Iterate every key/value pair in key order."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Flush and release the store. Safe to call twice."""
        ...

    def __enter__(self) -> KeyValueStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
