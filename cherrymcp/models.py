"""Config model — typed view over Cherry Studio's persisted MCP settings.

The root object is redux-persist state: every top-level value is itself a
JSON string. Only ``mcp`` is interpreted here. Its decoded document is
either ``{"servers": [...], ...}`` (what Cherry Studio writes) or a bare
``[...]`` of server objects; whichever layout is read is written back.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, TypeAlias

from pydantic import (
    BaseModel,
    Field,
    PrivateAttr,
    ValidationError,
    field_validator,
    model_validator,
)

from cherrymcp import codec
from cherrymcp.exceptions import (
    DuplicateServerError,
    InvalidFormatError,
    ServerNotFoundError,
)

_logger = logging.getLogger(__name__)

RootConfig: TypeAlias = dict[str, Any]
ServerId: TypeAlias = str

MCP_FIELD = "mcp"
SERVERS_FIELD = "servers"

KNOWN_SERVER_TYPES = frozenset({"stdio", "sse", "streamableHttp", "inMemory"})


# ── Server entries ───────────────────────────────────────────────────────────


class ServerEntry(BaseModel):
    """One MCP server definition as Cherry Studio stores it.

    Field names are snake_case in Python and camelCase on the wire.
    Keys this model does not know about are kept and written back in
    their original position.
    """

    id: ServerId = Field(frozen=True)
    name: str
    command: str | None = None
    args: list[str] = Field(default_factory=list)
    server_type: str = Field(default="stdio", alias="type")
    is_active: bool = Field(default=False, alias="isActive")
    description: str | None = None
    base_url: str | None = Field(default=None, alias="baseUrl")
    env: dict[str, str] | None = None
    headers: dict[str, str] | None = None
    long_running: bool | None = Field(default=None, alias="longRunning")

    model_config = {"populate_by_name": True, "extra": "allow", "strict": True}

    _key_order: list[str] = PrivateAttr(default_factory=list)

    @field_validator("id", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @property
    def is_known_type(self) -> bool:
        return self.server_type in KNOWN_SERVER_TYPES

    @classmethod
    def from_wire(cls, data: Any) -> ServerEntry:
        """Build an entry from its stored JSON object, rejecting bad shapes."""
        if not isinstance(data, dict):
            raise InvalidFormatError(
                f"Server entry must be a JSON object, got {type(data).__name__}"
            )
        try:
            entry = cls.model_validate(data)
        except ValidationError as e:
            raise InvalidFormatError(f"Malformed server entry {data.get('id')!r}: {e}") from e
        entry._key_order = list(data)
        if not entry.is_known_type:
            _logger.warning(
                "Server %s has unrecognized type %r; keeping it as-is",
                entry.id, entry.server_type,
            )
        return entry

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the stored JSON object, in the key order it was read.

        Entries read from the store write back exactly the keys they came
        with. Entries built in code write every field that is not ``None``.
        """
        if self._key_order:
            payload = self.model_dump(by_alias=True, exclude_unset=True)
        else:
            payload = self.model_dump(by_alias=True, exclude_none=True)
        ordered = {key: payload[key] for key in self._key_order if key in payload}
        ordered.update((key, value) for key, value in payload.items() if key not in ordered)
        return ordered

    def with_active(self, active: bool) -> ServerEntry:
        return self.model_copy(update={"is_active": active})


# ── MCP config ───────────────────────────────────────────────────────────────


class McpConfig(BaseModel):
    """The decoded ``mcp`` document: an ordered list of unique servers."""

    servers: list[ServerEntry] = Field(default_factory=list)
    layout: Literal["object", "array"] = "object"
    extras: dict[str, Any] = Field(default_factory=dict)  # sibling keys of "servers"

    _servers_index: int = PrivateAttr(default=0)
    _servers_present: bool = PrivateAttr(default=True)

    @model_validator(mode="after")
    def _unique_ids(self) -> McpConfig:
        seen: set[str] = set()
        for entry in self.servers:
            if entry.id in seen:
                raise DuplicateServerError(entry.id)
            seen.add(entry.id)
        return self

    def __contains__(self, server_id: object) -> bool:
        return any(s.id == server_id for s in self.servers)

    def __len__(self) -> int:
        return len(self.servers)

    def ids(self) -> list[ServerId]:
        return [s.id for s in self.servers]

    def get(self, server_id: ServerId) -> ServerEntry:
        for entry in self.servers:
            if entry.id == server_id:
                return entry
        raise ServerNotFoundError(server_id)

    def add(self, entry: ServerEntry) -> None:
        if entry.id in self:
            raise DuplicateServerError(entry.id)
        self.servers.append(entry)

    def remove(self, server_id: ServerId) -> ServerEntry:
        for index, entry in enumerate(self.servers):
            if entry.id == server_id:
                return self.servers.pop(index)
        raise ServerNotFoundError(server_id)

    def replace(self, entry: ServerEntry) -> None:
        """Swap in a new version of an existing entry, keeping its position."""
        for index, current in enumerate(self.servers):
            if current.id == entry.id:
                self.servers[index] = entry
                return
        raise ServerNotFoundError(entry.id)

    @classmethod
    def from_wire(cls, document: Any) -> McpConfig:
        if isinstance(document, list):
            layout, items, extras = "array", document, {}
        elif isinstance(document, dict):
            items = document.get(SERVERS_FIELD, [])
            if not isinstance(items, list):
                raise InvalidFormatError(
                    f"'{SERVERS_FIELD}' must be a JSON array, got {type(items).__name__}"
                )
            layout = "object"
            extras = {k: v for k, v in document.items() if k != SERVERS_FIELD}
        else:
            raise InvalidFormatError(
                f"MCP config must be a JSON object or array, got {type(document).__name__}"
            )
        servers = [ServerEntry.from_wire(item) for item in items]
        try:
            config = cls(servers=servers, layout=layout, extras=extras)
        except DuplicateServerError as e:
            raise InvalidFormatError(f"Duplicate server id in stored config: {e.server_id}") from e
        if layout == "object":
            config._servers_present = SERVERS_FIELD in document
            if config._servers_present:
                # position among its siblings, for rebuilding in order
                config._servers_index = list(document).index(SERVERS_FIELD)
        return config

    def to_wire(self) -> list[Any] | dict[str, Any]:
        servers = [s.to_wire() for s in self.servers]
        if self.layout == "array":
            return servers
        items = list(self.extras.items())
        if not servers and not self._servers_present:
            return dict(items)
        items.insert(min(self._servers_index, len(items)), (SERVERS_FIELD, servers))
        return dict(items)


class ServerList(BaseModel):
    """Result of listing servers."""

    servers: list[ServerEntry] = Field(default_factory=list)
    total_count: int = 0


# ── Root object ──────────────────────────────────────────────────────────────


def parse_root(text: str) -> RootConfig:
    """Parse the decoded store value; it must be a JSON object."""
    value = codec.parse_json(text)
    if not isinstance(value, dict):
        raise InvalidFormatError(f"Root config must be a JSON object, got {type(value).__name__}")
    return value


def extract_mcp(root: RootConfig) -> McpConfig | None:
    """Read the double-encoded ``mcp`` field. ``None`` when absent."""
    if MCP_FIELD not in root:
        return None
    raw = root[MCP_FIELD]
    if not isinstance(raw, str):
        raise InvalidFormatError(
            f"'{MCP_FIELD}' field must be a JSON-encoded string, got {type(raw).__name__}"
        )
    return McpConfig.from_wire(codec.parse_json(raw))


def inject_mcp(root: RootConfig, mcp: McpConfig) -> RootConfig:
    """Return a copy of ``root`` with ``mcp`` re-encoded; other fields untouched."""
    updated = dict(root)
    updated[MCP_FIELD] = codec.stringify_json(mcp.to_wire())
    return updated
