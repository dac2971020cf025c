"""Settings management for countscooper.

Handles loading and accessing user configuration.
Configuration is stored in a platform-specific location:
- Linux/macOS: ~/.config/countscooper/countscooper.toml
- Windows: %APPDATA%\\countscooper\\countscooper.toml
"""

import os
import platform
import shutil
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .enqueue import QueueBehavior
from .sorting import SortKey

DEFAULT_TEMPLATE = Path(__file__).parent / "templates" / "default_config.toml"


def get_config_dir() -> Path:
    """Get platform-specific configuration directory."""
    if platform.system() == "Windows":
        appdata = os.getenv("APPDATA")
        if not appdata:
            raise RuntimeError("APPDATA environment variable not set")
        return Path(appdata) / "countscooper"

    xdg = os.getenv("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "countscooper"


def get_config_file() -> Path:
    """Get path to user configuration file."""
    return get_config_dir() / "countscooper.toml"


def ensure_config_exists() -> Path:
    """
    Ensure user configuration file exists.

    If it doesn't exist, copy the default configuration from the package.

    Returns:
        Path to the user configuration file
    """
    config_file = get_config_file()

    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy(DEFAULT_TEMPLATE, config_file)

    return config_file


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from TOML file.

    Args:
        path: Explicit config file (default: user config, created on demand)

    Returns:
        Configuration dictionary

    Raises:
        ValueError: If the file is not valid TOML
    """
    config_file = path if path is not None else ensure_config_exists()

    with open(config_file, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid config file {config_file}: {e}") from e


@dataclass
class Settings:
    """Resolved application settings."""

    store_backend: str = "sqlite"
    store_path: Optional[Path] = None
    queue_behavior: QueueBehavior = QueueBehavior.INSERT_NEXT
    default_sort: SortKey = SortKey.PLAY_COUNT_DESC

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Settings":
        """
        Build settings from a loaded config dict.

        Missing sections and keys keep their defaults.

        Raises:
            ValueError: If the dismissal backend or sort key is unknown
        """
        dismissals = config.get("dismissals", {})
        queue = config.get("queue", {})
        library = config.get("library", {})

        backend = dismissals.get("backend", "sqlite")
        if backend not in ("sqlite", "json"):
            raise ValueError(f"Unknown dismissal backend in config: {backend}")

        raw_path = dismissals.get("path") or ""
        store_path = Path(raw_path).expanduser() if raw_path else None

        sort_value = library.get("default_sort", SortKey.PLAY_COUNT_DESC.value)
        try:
            default_sort = SortKey(sort_value)
        except ValueError as e:
            raise ValueError(f"Unknown sort key in config: {sort_value}") from e

        return cls(
            store_backend=backend,
            store_path=store_path,
            queue_behavior=QueueBehavior.parse(queue.get("behavior")),
            default_sort=default_sort,
        )

    def resolved_store_path(self) -> Path:
        """Dismissal store location, defaulting into the config directory."""
        if self.store_path is not None:
            return self.store_path
        suffix = "db" if self.store_backend == "sqlite" else "json"
        return get_config_dir() / f"dismissals.{suffix}"
