"""CLI runtime context — holds the repository and target database path."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

from cherrymcp.config import settings
from cherrymcp.repository import ConfigRepository, StoreFactory


class CliContext:
    """Singleton shared by all commands of one invocation."""

    _instance: CliContext | None = None

    def __init__(
        self,
        db_path: Path | None = None,
        root_key: bytes | None = None,
        scan: bool = False,
        store_factory: StoreFactory | None = None,
    ) -> None:
        self.db_path = db_path or settings.db_path
        self.store_factory = store_factory
        self.repository = ConfigRepository(
            store_factory=store_factory, root_key=root_key, discover=scan,
        )

    @classmethod
    def get(cls) -> CliContext:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def configure(cls, **kwargs) -> CliContext:
        # An injected store factory survives re-configuration.
        if cls._instance is not None and "store_factory" not in kwargs:
            kwargs["store_factory"] = cls._instance.store_factory
        cls._instance = cls(**kwargs)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
