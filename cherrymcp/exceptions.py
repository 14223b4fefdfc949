"""Custom exception hierarchy for cherrymcp."""

from __future__ import annotations


class CherryMcpError(Exception):
    """Base for all cherrymcp errors."""


class InvalidPathError(CherryMcpError):
    """Store path is missing or is not a LevelDB directory."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        message = f"Invalid database path: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ConfigNotFoundError(CherryMcpError):
    """The root configuration key is absent from the store."""

    def __init__(self, path: str = "") -> None:
        self.path = path
        super().__init__(
            f"MCP configuration not found in {path}" if path else "MCP configuration not found"
        )


class EncodingError(CherryMcpError):
    """A raw store value is not valid header + UTF-16LE text."""


class InvalidFormatError(CherryMcpError):
    """Malformed JSON, or JSON that does not have the expected shape."""


class DuplicateServerError(CherryMcpError):
    """A server with the given ID is already configured."""

    def __init__(self, server_id: str) -> None:
        self.server_id = server_id
        super().__init__(f"Server already exists: {server_id}")


class ServerNotFoundError(CherryMcpError):
    """No server with the given ID is configured."""

    def __init__(self, server_id: str) -> None:
        self.server_id = server_id
        super().__init__(f"Server not found: {server_id}")


class DatabaseError(CherryMcpError):
    """The underlying key-value store failed."""

    def __init__(self, message: str, *, path: str = "", operation: str = "") -> None:
        self.path = path
        self.operation = operation
        prefix = f"Database error during {operation}" if operation else "Database error"
        if path:
            prefix += f" on {path}"
        super().__init__(f"{prefix}: {message}")
