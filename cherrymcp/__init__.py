"""cherrymcp — read and edit the MCP servers Cherry Studio keeps in LevelDB."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("cherrymcp")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
