"""Shared test fixtures — MemoryStore stands in for LevelDB."""

from __future__ import annotations

from typing import Iterator

import pytest

from cherrymcp import codec
from cherrymcp.exceptions import DatabaseError, InvalidPathError
from cherrymcp.repository import ConfigRepository
from cherrymcp.store.base import KeyValueStore

ROOT_KEY = b"_file://\x00\x01persist:cherry-studio"
DB_PATH = "/fake/leveldb"


class MemoryStore(KeyValueStore):
    """Dict-backed store. Databases must be created before they can be opened."""

    databases: dict[str, dict[bytes, bytes]] = {}

    def __init__(self, data: dict[bytes, bytes], path: str) -> None:
        self._data = data
        self.path = path
        self.closed = False
        self.fail_puts = False

    @classmethod
    def create(cls, path: str = DB_PATH) -> dict[bytes, bytes]:
        return cls.databases.setdefault(path, {})

    @classmethod
    def open(cls, path) -> MemoryStore:
        if str(path) not in cls.databases:
            raise InvalidPathError(str(path), "does not exist")
        return cls(cls.databases[str(path)], str(path))

    def get(self, key: bytes) -> bytes | None:
        return self._data.get(key)

    def put(self, key: bytes, value: bytes) -> None:
        if self.fail_puts:
            raise DatabaseError("disk full", path=self.path, operation="put")
        self._data[key] = value

    def items(self) -> Iterator[tuple[bytes, bytes]]:
        yield from sorted(self._data.items())

    def close(self) -> None:
        self.closed = True


class RecordingFactory:
    """Store factory that remembers every store it opened."""

    def __init__(self) -> None:
        self.opened: list[MemoryStore] = []
        self.fail_puts = False

    def __call__(self, path: str) -> MemoryStore:
        store = MemoryStore.open(path)
        store.fail_puts = self.fail_puts
        self.opened.append(store)
        return store


def encode_root(root: dict) -> bytes:
    return codec.encode(codec.stringify_json(root))


def mcp_root(servers: list[dict], **other) -> dict:
    return {**other, "mcp": codec.stringify_json({"servers": servers})}


def server(server_id: str, **fields) -> dict:
    entry = {
        "id": server_id,
        "name": fields.pop("name", f"Server {server_id}"),
        "command": "npx",
        "args": ["-y", f"@mcp/{server_id}"],
        "type": "stdio",
        "isActive": True,
    }
    entry.update(fields)
    return entry


@pytest.fixture(autouse=True)
def _clean_databases():
    MemoryStore.databases.clear()
    yield
    MemoryStore.databases.clear()


@pytest.fixture
def db():
    """An empty in-memory database at DB_PATH."""
    return MemoryStore.create(DB_PATH)


@pytest.fixture
def factory():
    return RecordingFactory()


@pytest.fixture
def repo(factory):
    return ConfigRepository(store_factory=factory, root_key=ROOT_KEY)
