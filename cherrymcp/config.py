"""Global configuration — loaded from environment variables."""

from __future__ import annotations

import codecs
import os
import sys
from pathlib import Path

from pydantic_settings import BaseSettings

# Chromium localStorage key for Cherry Studio's redux-persist root:
# "_" + origin + NUL + 0x01 (latin-1 tag) + storage key.
DEFAULT_ROOT_KEY = "_file://\x00\x01persist:cherry-studio"


def default_db_path() -> Path:
    """Where Cherry Studio keeps its Local Storage LevelDB on this platform."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "CherryStudio" / "Local Storage" / "leveldb"


def root_key_to_bytes(value: str) -> bytes | None:
    """Encode a configured root key. Empty means: scan the store for it.

    Env vars and shell arguments cannot carry NUL, so "\\x00"-style escapes
    are expanded first.
    """
    if not value:
        return None
    if "\\" in value:
        value = codecs.decode(value, "unicode_escape")
    return value.encode("latin-1")


class CherryMcpSettings(BaseSettings):
    db_path: Path = default_db_path()
    root_key: str = DEFAULT_ROOT_KEY  # "" = scan the store for the config entry
    log_level: str = "INFO"

    model_config = {"env_prefix": "CHERRYMCP_"}

    @property
    def root_key_bytes(self) -> bytes | None:
        return root_key_to_bytes(self.root_key)


settings = CherryMcpSettings()
