"""TOML-based configuration for papershelf.

Loads settings from a TOML file (default ``~/.papershelf/config.toml``) and
provides typed dataclass access to all configuration sections.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from papershelf.fetchers.arxiv import DEFAULT_BASE_URL as ARXIV_URL
from papershelf.fetchers.crossref import DEFAULT_BASE_URL as CROSSREF_URL
from papershelf.fetchers.iacr import DEFAULT_BASE_URL as IACR_URL

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path("~/.papershelf").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"


@dataclass
class DatabaseConfig:
    path: str = "~/.papershelf/papershelf.db"
    pdf_dir: str = "~/.papershelf/papers"

    @property
    def url(self) -> str:
        if self.path == ":memory:":
            return "sqlite:///:memory:"
        return f"sqlite:///{Path(self.path).expanduser()}"


@dataclass
class ClientsConfig:
    timeout: float = 30.0
    contact_email: str = ""
    arxiv_url: str = ARXIV_URL
    crossref_url: str = CROSSREF_URL
    iacr_url: str = IACR_URL


@dataclass
class AppConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    clients: ClientsConfig = field(default_factory=ClientsConfig)
    log_level: str = "INFO"


def _apply_section(dc: Any, data: dict) -> None:
    """Apply dict values onto a dataclass, ignoring unknown keys."""
    for key, value in data.items():
        if hasattr(dc, key):
            setattr(dc, key, value)
        else:
            logger.warning("Ignoring unknown config key %r", key)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if the file doesn't exist.
    """
    config = AppConfig()

    if path is None:
        path = DEFAULT_CONFIG_PATH
    path = Path(path).expanduser()

    if not path.exists():
        logger.info("Config file not found at %s, using defaults", path)
        return config

    logger.info("Loading config from %s", path)
    with open(path, "rb") as f:
        raw = tomllib.load(f)

    if "log_level" in raw.get("general", {}):
        config.log_level = raw["general"]["log_level"]

    section_map = {
        "database": config.database,
        "clients": config.clients,
    }
    for section_name, dc in section_map.items():
        if section_name in raw:
            _apply_section(dc, raw[section_name])

    return config


def write_default_config(path: str | Path | None = None) -> Path:
    """Write a default config file if one doesn't exist. Returns the path."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    path = Path(path).expanduser()

    if path.exists():
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
    logger.info("Created default config: %s", path)
    return path


DEFAULT_CONFIG_TOML = f"""\
[general]
log_level = "INFO"

[database]
path = "~/.papershelf/papershelf.db"
pdf_dir = "~/.papershelf/papers"

[clients]
timeout = 30.0
# Crossref asks clients to identify themselves; the address is sent in the
# User-Agent header as mailto:<contact_email>.
contact_email = ""
# arxiv_url = "{ARXIV_URL}"
# crossref_url = "{CROSSREF_URL}"
# iacr_url = "{IACR_URL}"
"""
