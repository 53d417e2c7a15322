"""
Configuration management for label stores.

The configuration is stored as a TOML file in the store directory.
It specifies the storage backend and how documents are addressed.
"""

import os
import tomllib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# tomli_w for writing TOML (tomllib is read-only)
try:
    import tomli_w
except ImportError:
    tomli_w = None  # type: ignore

from .host import DEFAULT_ID_PATTERN, DEFAULT_URL_TEMPLATE, DocumentUrlScheme
from .types import KEY_PREFIX


CONFIG_FILENAME = "doclabels.toml"
CONFIG_VERSION = 1
STORAGE_BACKENDS = ("sqlite", "memory")


def get_default_store_path() -> Path:
    """Store directory: DOCLABELS_STORE_PATH, else ~/.doclabels."""
    env = os.environ.get("DOCLABELS_STORE_PATH")
    if env:
        return Path(env).expanduser().resolve()
    return Path.home() / ".doclabels"


@dataclass
class StorageConfig:
    """Which substrate holds the records."""
    backend: str = "sqlite"
    quota_bytes: int = 0  # 0 = unlimited


@dataclass
class DocumentsConfig:
    """How records are keyed and documents addressed."""
    key_prefix: str = KEY_PREFIX
    id_pattern: str = DEFAULT_ID_PATTERN
    url_template: str = DEFAULT_URL_TEMPLATE

    def scheme(self) -> DocumentUrlScheme:
        return DocumentUrlScheme(id_pattern=self.id_pattern, url_template=self.url_template)


@dataclass
class StoreConfig:
    """Complete store configuration."""
    path: Path
    version: int = CONFIG_VERSION
    created: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    storage: StorageConfig = field(default_factory=StorageConfig)
    documents: DocumentsConfig = field(default_factory=DocumentsConfig)

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.path / CONFIG_FILENAME

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()


def load_config(store_path: Path) -> StoreConfig:
    """
    Load configuration from a store directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = store_path / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Validate version
    version = data.get("store", {}).get("version", 1)
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    storage = data.get("storage", {})
    backend = storage.get("backend", "sqlite")
    if backend not in STORAGE_BACKENDS:
        raise ValueError(f"Unknown storage backend {backend!r} in {config_path}")
    quota = storage.get("quota_bytes", 0)
    if not isinstance(quota, int) or quota < 0:
        raise ValueError(f"storage.quota_bytes must be a non-negative integer, got {quota!r}")

    documents = data.get("documents", {})
    defaults = DocumentsConfig()

    return StoreConfig(
        path=store_path,
        version=version,
        created=data.get("store", {}).get("created", ""),
        storage=StorageConfig(backend=backend, quota_bytes=quota),
        documents=DocumentsConfig(
            key_prefix=documents.get("key_prefix", defaults.key_prefix),
            id_pattern=documents.get("id_pattern", defaults.id_pattern),
            url_template=documents.get("url_template", defaults.url_template),
        ),
    )


def save_config(config: StoreConfig) -> None:
    """
    Save configuration to the store directory.

    Creates the directory if it doesn't exist.
    """
    if tomli_w is None:
        raise RuntimeError("tomli_w is required to save config. Install with: pip install tomli-w")

    # Ensure directory exists
    config.path.mkdir(parents=True, exist_ok=True)

    data = {
        "store": {
            "version": config.version,
            "created": config.created,
        },
        "storage": {
            "backend": config.storage.backend,
            "quota_bytes": config.storage.quota_bytes,
        },
        "documents": {
            "key_prefix": config.documents.key_prefix,
            "id_pattern": config.documents.id_pattern,
            "url_template": config.documents.url_template,
        },
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def load_or_create_config(store_path: Optional[Path] = None) -> StoreConfig:
    """
    Load existing config or create a new one with defaults.

    This is the main entry point for config management.
    """
    store_path = Path(store_path) if store_path is not None else get_default_store_path()
    config_path = store_path / CONFIG_FILENAME

    if config_path.exists():
        return load_config(store_path)
    else:
        config = StoreConfig(path=store_path)
        save_config(config)
        return config
