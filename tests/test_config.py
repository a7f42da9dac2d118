"""Tests for papershelf.config."""

from __future__ import annotations

from papershelf.config import AppConfig, load_config, write_default_config
from papershelf.fetchers.crossref import DEFAULT_BASE_URL as CROSSREF_URL


class TestDefaults:
    def test_default_config_values(self):
        config = AppConfig()
        assert config.database.path == "~/.papershelf/papershelf.db"
        assert config.clients.timeout == 30.0
        assert config.clients.crossref_url == CROSSREF_URL
        assert config.clients.contact_email == ""
        assert config.log_level == "INFO"

    def test_memory_url(self):
        config = AppConfig()
        config.database.path = ":memory:"
        assert config.database.url == "sqlite:///:memory:"


class TestLoadConfig:
    def test_load_missing_file(self, tmp_path):
        config = load_config(tmp_path / "nonexistent.toml")
        assert config.clients.timeout == 30.0

    def test_load_valid_config(self, tmp_path):
        cfg = tmp_path / "config.toml"
        cfg.write_text(f"""\
[general]
log_level = "DEBUG"

[database]
path = "{tmp_path / 'lib.db'}"
pdf_dir = "{tmp_path / 'pdfs'}"

[clients]
timeout = 5.0
contact_email = "me@example.org"
unknown_key = 1
""")
        config = load_config(cfg)
        assert config.log_level == "DEBUG"
        assert config.database.path == str(tmp_path / "lib.db")
        assert config.database.url == f"sqlite:///{tmp_path / 'lib.db'}"
        assert config.database.pdf_dir == str(tmp_path / "pdfs")
        assert config.clients.timeout == 5.0
        assert config.clients.contact_email == "me@example.org"
        assert not hasattr(config.clients, "unknown_key")


class TestWriteDefault:
    def test_creates_config_file(self, tmp_path):
        path = write_default_config(tmp_path / "sub" / "config.toml")
        assert path.exists()
        text = path.read_text()
        assert "[database]" in text
        assert "[clients]" in text

    def test_default_file_loads(self, tmp_path):
        path = write_default_config(tmp_path / "config.toml")
        config = load_config(path)
        assert config.log_level == "INFO"
        assert config.database.pdf_dir == "~/.papershelf/papers"

    def test_does_not_overwrite(self, tmp_path):
        cfg = tmp_path / "config.toml"
        cfg.write_text("custom")
        write_default_config(cfg)
        assert cfg.read_text() == "custom"
