"""
Tests for softcascade CLI module.
"""

import json

import pytest
from click.testing import CliRunner

from softcascade import __version__
from softcascade.cli import cli
from softcascade.config import set_config
from softcascade.soft_delete import UnknownRelationshipError


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self, runner):
        """Test CLI help command."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "cascading soft delete" in result.output.lower()
        assert "relations" in result.output

    def test_cli_version(self, runner):
        """Test CLI version command."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_cli_no_command(self, runner):
        """Test CLI with no command shows info."""
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "softcascade" in result.output
        assert "--help" in result.output


class TestConfigCommands:
    """Test configuration-related commands."""

    def test_config_show(self, runner):
        """Test config show command."""
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "default_scope" in result.output
        assert "cascade_enabled" in result.output

    def test_config_show_json(self, runner):
        """Test config show with JSON format."""
        result = runner.invoke(cli, ["config", "show", "--format", "json"])
        assert result.exit_code == 0

        data = json.loads(result.output)
        assert data["default_scope"] == "active"
        assert data["scope_option_name"] == "soft_delete_scope"

    def test_config_show_yaml(self, runner):
        """Test config show with YAML format."""
        result = runner.invoke(cli, ["config", "show", "--format", "yaml"])
        assert result.exit_code == 0
        assert "cascade_info_key: soft_delete_cascade" in result.output

    def test_config_show_env(self, runner, monkeypatch):
        """Environment settings are reflected."""
        monkeypatch.setenv("SOFTCASCADE_CASCADE_ENABLED", "false")
        set_config(None)

        result = runner.invoke(cli, ["config", "show", "--format", "json"])

        assert json.loads(result.output)["cascade_enabled"] is False


class TestRelationsCommand:
    """Test the relationship table listing."""

    def test_relations_table(self, runner):
        result = runner.invoke(cli, ["relations", "sample_models"])
        assert result.exit_code == 0
        assert "Shelf" in result.output
        assert "books" in result.output
        assert "labels" in result.output

    def test_relations_json(self, runner):
        result = runner.invoke(cli, ["relations", "sample_models", "--format", "json"])
        assert result.exit_code == 0

        data = json.loads(result.output)
        assert set(data) == {"Book", "Shelf"}
        assert data["Book"] == []

        shelf = {row["name"]: row for row in data["Shelf"]}
        assert shelf["books"]["cardinality"] == "many"
        assert shelf["books"]["owned_cascade"] is True
        assert shelf["books"]["target_soft_deletable"] is True
        assert shelf["labels"]["target"] == "Label"
        assert shelf["labels"]["target_soft_deletable"] is False

    def test_relations_no_models(self, runner):
        result = runner.invoke(cli, ["relations", "json"])
        assert result.exit_code == 0
        assert "No soft-deletable models found" in result.output

    def test_relations_import_error(self, runner):
        result = runner.invoke(cli, ["relations", "no_such_module_here"])
        assert result.exit_code == 1
        assert "Cannot import" in result.output

    def test_relations_missing_module(self, runner):
        result = runner.invoke(cli, ["relations"])
        assert result.exit_code != 0
        assert "Usage" in result.output


class TestDoctorCommand:
    """Test doctor diagnostic command."""

    def test_doctor_without_database(self, runner, monkeypatch):
        monkeypatch.delenv("SOFTCASCADE_DATABASE_URL", raising=False)

        result = runner.invoke(cli, ["doctor"])
        assert result.exit_code == 0
        assert "Running softcascade diagnostics" in result.output
        assert "Configuration loaded" in result.output
        assert "SOFTCASCADE_DATABASE_URL not set" in result.output

    def test_doctor_with_database(self, runner, monkeypatch):
        monkeypatch.setenv("SOFTCASCADE_DATABASE_URL", "sqlite://")

        result = runner.invoke(cli, ["doctor"])
        assert result.exit_code == 0
        assert "Database connection successful" in result.output
        assert "All systems operational" in result.output

    def test_doctor_checks_models(self, runner, monkeypatch):
        """Model modules are imported and their mappers configured."""
        monkeypatch.delenv("SOFTCASCADE_DATABASE_URL", raising=False)

        result = runner.invoke(cli, ["doctor", "--module", "sample_models"])
        assert result.exit_code == 0
        assert "Imported sample_models" in result.output
        assert "Mappers configured" in result.output

    def test_doctor_missing_module(self, runner, monkeypatch):
        monkeypatch.delenv("SOFTCASCADE_DATABASE_URL", raising=False)

        result = runner.invoke(cli, ["doctor", "-m", "no_such_module_here"])
        assert result.exit_code == 1
        assert "Import of no_such_module_here failed" in result.output

    def test_doctor_mapper_failure(self, runner, monkeypatch):
        """An unknown cascade name surfaces as a failed mapper check."""
        monkeypatch.delenv("SOFTCASCADE_DATABASE_URL", raising=False)

        def broken():
            raise UnknownRelationshipError("Shelf", "ghosts")

        monkeypatch.setattr("softcascade.cli.configure_mappers", broken)

        result = runner.invoke(cli, ["doctor"])
        assert result.exit_code == 1
        assert "Mapper configuration failed" in result.output
        assert "ghosts" in result.output

    def test_doctor_bad_database(self, runner, monkeypatch):
        monkeypatch.setenv("SOFTCASCADE_DATABASE_URL", "nosuchdialect://x")

        result = runner.invoke(cli, ["doctor"])
        assert result.exit_code == 1
        assert "Database connection failed" in result.output


class TestCLIErrorHandling:
    """Test CLI error handling."""

    def test_invalid_command(self, runner):
        """Test invalid command."""
        result = runner.invoke(cli, ["invalid-command"])
        assert result.exit_code != 0
        assert "Error" in result.output or "Usage" in result.output
