"""Unit tests for config commands."""

import tomllib
from pathlib import Path
from unittest.mock import patch

from pkgscope.cli.main import app
from pkgscope.core.config import ConfigError
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigPath:
    """Tests for pkgscope config path."""

    def test_shows_locations(self, isolated_xdg: Path) -> None:
        result = runner.invoke(app, ["config", "path"])

        output = " ".join(result.stdout.split())
        assert result.exit_code == 0
        assert "Config:" in output
        assert "Theme:" in output
        assert "Log:" in output
        assert "not created" in output

    def test_reports_existing_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[general]\npage_size = 20\n")

        result = runner.invoke(app, ["--config", str(config_file), "config", "path"])

        assert result.exit_code == 0
        assert "exists" in result.stdout


class TestConfigShow:
    """Tests for pkgscope config show."""

    def test_shows_defaults(self) -> None:
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "[general]" in result.stdout
        assert "tick_ms = 100" in result.stdout
        assert "max_workers = 4" in result.stdout

    def test_shows_user_overrides(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[general]\npage_size = 25\n")

        result = runner.invoke(app, ["--config", str(config_file), "config", "show"])

        assert result.exit_code == 0
        assert "page_size = 25" in result.stdout


class TestConfigInit:
    """Tests for pkgscope config init."""

    def test_writes_default_config(self, isolated_xdg: Path) -> None:
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert "Config written to" in result.stdout
        written = isolated_xdg / "config" / "pkgscope" / "config.toml"
        with open(written, "rb") as f:
            data = tomllib.load(f)
        assert data["general"]["page_size"] == 10
        assert "colors" not in data

    def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.toml"
        config_file.write_text("[general]\npage_size = 20\n")

        result = runner.invoke(app, ["--config", str(config_file), "config", "init"])

        assert result.exit_code == 1
        assert "Config already exists" in result.output
        assert "page_size = 20" in config_file.read_text()

    def test_force_overwrites(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.toml"
        config_file.write_text("[general]\npage_size = 20\n")

        result = runner.invoke(app, ["--config", str(config_file), "config", "init", "--force"])

        assert result.exit_code == 0
        assert "page_size = 10" in config_file.read_text()

    def test_creates_missing_config_path(self, tmp_path: Path) -> None:
        """--config may name a file that does not exist yet for config init."""
        config_file = tmp_path / "new" / "config.toml"

        result = runner.invoke(app, ["--config", str(config_file), "config", "init"])

        assert result.exit_code == 0
        assert config_file.is_file()

    def test_write_failure(self, tmp_path: Path) -> None:
        with patch(
            "pkgscope.cli.commands.config.save_config",
            side_effect=ConfigError("Failed to write config: denied"),
        ):
            result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert "Failed to write config" in result.output
