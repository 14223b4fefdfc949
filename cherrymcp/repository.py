"""Config repository — read-modify-write of the MCP server list.

Every public method is one linear pipeline:

    open -> get root key -> decode -> parse -> (mutate) -> encode -> put -> close

No handle or config is kept between calls; the store is the source of
truth and is re-read each time.

Concurrency: a read-modify-write here is not atomic across calls. LevelDB's
LOCK file keeps two processes from having the store open at once, but two
``add_server`` calls that run back to back from different processes can
still interleave between their opens, and the last writer wins. Callers
that need multi-writer safety must serialize access themselves.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from cherrymcp import codec
from cherrymcp.config import settings
from cherrymcp.exceptions import (
    ConfigNotFoundError,
    EncodingError,
    InvalidFormatError,
)
from cherrymcp.models import (
    MCP_FIELD,
    McpConfig,
    RootConfig,
    ServerEntry,
    ServerId,
    ServerList,
    extract_mcp,
    inject_mcp,
    parse_root,
)
from cherrymcp.store.base import KeyValueStore

_logger = logging.getLogger(__name__)

StoreFactory = Callable[[str], KeyValueStore]


def _default_store_factory(path: str) -> KeyValueStore:
    from cherrymcp.store.leveldb import LevelDBStore
    return LevelDBStore.open(path)


def _servers_of(root: RootConfig) -> McpConfig:
    config = extract_mcp(root)
    return config if config is not None else McpConfig()


class ConfigRepository:
    """Reads and rewrites the MCP server list inside the host's store."""

    def __init__(
        self,
        store_factory: StoreFactory | None = None,
        root_key: bytes | None = None,
        *,
        discover: bool = False,
    ) -> None:
        self._open = store_factory or _default_store_factory
        # None: locate the entry carrying an "mcp" field by scanning.
        self._root_key: bytes | None
        if discover:
            self._root_key = None
        else:
            self._root_key = root_key if root_key is not None else settings.root_key_bytes

    # ── Internal pipeline steps ─────────────────────────────────

    def _resolve_key(self, store: KeyValueStore) -> bytes | None:
        if self._root_key is not None:
            return self._root_key
        for key, value in store.items():
            try:
                root = parse_root(codec.decode(value))
            except (EncodingError, InvalidFormatError):
                continue
            if MCP_FIELD in root:
                _logger.debug("Found MCP config under key %r", key)
                return key
        return None

    def _load_root(self, store: KeyValueStore, path: str) -> tuple[bytes, RootConfig]:
        """Fetch and parse the root object. ConfigNotFoundError if absent or empty."""
        key = self._resolve_key(store)
        if key is None:
            raise ConfigNotFoundError(path)
        raw = store.get(key)
        if raw is None:
            raise ConfigNotFoundError(path)
        text = codec.decode(raw)
        if not text:
            raise ConfigNotFoundError(path)
        return key, parse_root(text)

    def _load_root_or_empty(self, store: KeyValueStore, path: str) -> tuple[bytes, RootConfig]:
        try:
            return self._load_root(store, path)
        except ConfigNotFoundError:
            if self._root_key is None:
                # Nowhere to write a brand new config without a known key.
                raise
            return self._root_key, {}

    def _save(self, store: KeyValueStore, key: bytes, root: RootConfig, config: McpConfig) -> None:
        updated = inject_mcp(root, config)
        store.put(key, codec.encode(codec.stringify_json(updated)))

    # ── Public operations ───────────────────────────────────────

    def read_root(self, path: str | Path) -> RootConfig:
        """The whole decoded root object, ``mcp`` still as its JSON string."""
        path = str(path)
        with self._open(path) as store:
            _, root = self._load_root(store, path)
        return root

    def read_mcp_config(self, path: str | Path) -> McpConfig:
        """Read the server list. Raises ConfigNotFoundError if the root key is absent."""
        return _servers_of(self.read_root(path))

    def read_mcp_config_or_empty(self, path: str | Path) -> McpConfig:
        """Like read_mcp_config, but an absent root key reads as no servers."""
        try:
            return self.read_mcp_config(path)
        except ConfigNotFoundError:
            return McpConfig()

    def write_mcp_config(self, path: str | Path, config: McpConfig) -> None:
        """Replace the server list, keeping every other root field as stored."""
        path = str(path)
        with self._open(path) as store:
            key, root = self._load_root_or_empty(store, path)
            self._save(store, key, root, config)
        _logger.info("Wrote %d MCP servers to %s", len(config), path)

    def list_servers(self, path: str | Path, *, missing_ok: bool = False) -> ServerList:
        config = self.read_mcp_config_or_empty(path) if missing_ok else self.read_mcp_config(path)
        return ServerList(servers=list(config.servers), total_count=len(config))

    def get_server(self, path: str | Path, server_id: ServerId) -> ServerEntry:
        return self.read_mcp_config(path).get(server_id)

    def add_server(self, path: str | Path, entry: ServerEntry) -> None:
        """Append a server. Raises DuplicateServerError if its id is taken.

        The add is committed by a single ``put``; if that fails the error
        propagates and the stored value is unchanged.
        """
        path = str(path)
        with self._open(path) as store:
            key, root = self._load_root_or_empty(store, path)
            config = _servers_of(root)
            config.add(entry)
            self._save(store, key, root, config)
        _logger.info("Added MCP server %s to %s", entry.id, path)

    def remove_server(self, path: str | Path, server_id: ServerId) -> None:
        """Remove a server. Raises ServerNotFoundError (nothing written) if absent."""
        path = str(path)
        with self._open(path) as store:
            key, root = self._load_root(store, path)
            config = _servers_of(root)
            config.remove(server_id)
            self._save(store, key, root, config)
        _logger.info("Removed MCP server %s from %s", server_id, path)

    def set_server_active(self, path: str | Path, server_id: ServerId, active: bool) -> ServerEntry:
        path = str(path)
        with self._open(path) as store:
            key, root = self._load_root(store, path)
            config = _servers_of(root)
            updated = config.get(server_id).with_active(active)
            config.replace(updated)
            self._save(store, key, root, config)
        _logger.info("Set MCP server %s active=%s in %s", server_id, active, path)
        return updated

    def server_exists(self, path: str | Path, server_id: ServerId) -> bool:
        """True if configured. A missing config is simply False."""
        return server_id in self.read_mcp_config_or_empty(path)
