"""Tests for the config command group."""

from click.testing import CliRunner

from riftkit.cli import main
from riftkit.config_manager import ConfigManager


class TestConfigCommands:
    def test_show_defaults(self, mock_config_path):
        result = CliRunner().invoke(main, ["config", "show"])

        assert result.exit_code == 0
        assert 'default_profile = "agent"' in result.output
        assert "[monitor]" in result.output

    def test_set_then_show(self, mock_config_path):
        runner = CliRunner()
        result = runner.invoke(main, ["config", "set", "monitor.cpu_threshold", "90"])
        assert result.exit_code == 0
        assert "Set monitor.cpu_threshold = 90" in result.output

        assert ConfigManager.load_config().monitor.cpu_threshold == 90.0

    def test_set_invalid_value(self, mock_config_path):
        result = CliRunner().invoke(main, ["config", "set", "monitor.cpu_threshold", "150"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert not mock_config_path.exists()

    def test_set_unknown_key(self, mock_config_path):
        result = CliRunner().invoke(main, ["config", "set", "colour", "blue"])
        assert result.exit_code == 2

    def test_path(self, mock_config_path):
        result = CliRunner().invoke(main, ["config", "path"])

        assert result.exit_code == 0
        assert result.output.strip() == str(mock_config_path)

    def test_group_without_subcommand_shows_help(self, mock_config_path):
        result = CliRunner().invoke(main, ["config"])
        assert "show" in result.output
        assert "path" in result.output
