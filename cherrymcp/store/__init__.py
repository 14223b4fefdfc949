"""Store adapters — the capability boundary around the embedded key-value store."""

from cherrymcp.store.base import KeyValueStore

__all__ = ["KeyValueStore"]
