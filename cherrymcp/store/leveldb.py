"""LevelDB store backed by plyvel.

Opens an existing database only (``create_if_missing=False``). LevelDB
holds a LOCK file while open, so a second process (or a running Cherry
Studio) makes ``open`` fail with DatabaseError.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import plyvel

from cherrymcp.exceptions import DatabaseError, InvalidPathError
from cherrymcp.store.base import KeyValueStore

_logger = logging.getLogger(__name__)


class LevelDBStore(KeyValueStore):
    """A LevelDB directory opened for one repository operation."""

    def __init__(self, db: plyvel.DB, path: str) -> None:
        self._db = db
        self.path = path

    @classmethod
    def open(cls, path: str | Path) -> LevelDBStore:
        location = Path(path)
        if not location.exists():
            raise InvalidPathError(str(path), "does not exist")
        if not location.is_dir():
            raise InvalidPathError(str(path), "not a directory")
        if not (location / "CURRENT").exists():
            raise InvalidPathError(str(path), "not a LevelDB directory")
        try:
            db = plyvel.DB(str(location), create_if_missing=False)
        except plyvel.Error as e:
            raise DatabaseError(str(e), path=str(path), operation="open") from e
        _logger.debug("Opened LevelDB at %s", path)
        return cls(db, str(path))

    def get(self, key: bytes) -> bytes | None:
        try:
            return self._db.get(key)
        except (plyvel.Error, RuntimeError) as e:
            raise DatabaseError(str(e), path=self.path, operation="get") from e

    def put(self, key: bytes, value: bytes) -> None:
        try:
            self._db.put(key, value, sync=True)
        except (plyvel.Error, RuntimeError) as e:
            raise DatabaseError(str(e), path=self.path, operation="put") from e
        _logger.debug("Wrote %d bytes to %s", len(value), self.path)

    def items(self) -> Iterator[tuple[bytes, bytes]]:
        try:
            with self._db.iterator() as it:
                yield from it
        except (plyvel.Error, RuntimeError) as e:
            raise DatabaseError(str(e), path=self.path, operation="iterate") from e

    def close(self) -> None:
        if not self._db.closed:
            self._db.close()
