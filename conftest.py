"""Pytest configuration shared by every riftkit test.

The user's real ~/.riftkit/config.toml is snapshotted for the session and put
back afterwards, whatever the tests did to it.
"""

import shutil
from pathlib import Path

import pytest

REAL_CONFIG = Path.home() / ".riftkit" / "config.toml"


@pytest.fixture(scope="session", autouse=True)
def protect_production_config(tmp_path_factory):
    """Restore ~/.riftkit/config.toml (or its absence) after the session."""
    snapshot = tmp_path_factory.mktemp("riftkit-config") / "config.toml"
    had_config = REAL_CONFIG.exists()
    if had_config:
        shutil.copy2(REAL_CONFIG, snapshot)

    yield

    if had_config:
        shutil.copy2(snapshot, REAL_CONFIG)
    elif REAL_CONFIG.exists():
        print(f"\n[PYTEST] Removing {REAL_CONFIG} created during the test run")
        REAL_CONFIG.unlink()


@pytest.fixture
def isolated_config(tmp_path):
    """Empty config directory under tmp_path."""
    config_dir = tmp_path / ".riftkit"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_config_path(isolated_config, monkeypatch):
    """Make ConfigManager default to isolated_config; returns the config file path.

    Example:
        def test_threshold(mock_config_path):
            mock_config_path.write_text("[monitor]\\ncpu_threshold = 95\\n")
    """
    from riftkit.config_manager import ConfigManager

    config_file = isolated_config / "config.toml"
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", isolated_config)
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", config_file)
    return config_file
