"""Global configuration from XDG paths and environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "pluginguard"
    return Path.home() / ".local" / "share" / "pluginguard"


def _default_work_dir() -> Path:
    return _default_data_dir() / "work"


@dataclass
class PluginGuardConfig:
    """Application-wide configuration."""

    data_dir: Path = field(default_factory=_default_data_dir)
    work_dir: Path = field(default_factory=_default_work_dir)
    rule_files: list[Path] = field(default_factory=list)
    store: str = "memory"
    max_file_size: int = 1_048_576
    max_upload_size: int = 50 * 1024 * 1024
    history_limit: int = 20
    web_host: str = "127.0.0.1"  # Loopback only
    web_port: int = 3001
    verbose: bool = False

    @property
    def db_path(self) -> Path:
        return self.data_dir / "pluginguard.db"

    @classmethod
    def load(cls) -> PluginGuardConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_port = os.environ.get("PLUGINGUARD_WEB_PORT")
        if env_port:
            config.web_port = int(env_port)

        env_store = os.environ.get("PLUGINGUARD_STORE")
        if env_store:
            if env_store not in ("memory", "sqlite"):
                raise ValueError(
                    f"PLUGINGUARD_STORE must be 'memory' or 'sqlite', got {env_store!r}"
                )
            config.store = env_store

        env_work = os.environ.get("PLUGINGUARD_WORK_DIR")
        if env_work:
            config.work_dir = Path(env_work)

        env_size = os.environ.get("PLUGINGUARD_MAX_FILE_SIZE")
        if env_size:
            config.max_file_size = int(env_size)

        env_limit = os.environ.get("PLUGINGUARD_HISTORY_LIMIT")
        if env_limit:
            config.history_limit = int(env_limit)

        return config
