"""Tests for the setup runner."""

import logging
import stat
from unittest.mock import Mock, patch

import pytest

from riftkit.installer.base import ModuleResult, StepResult, StepStatus
from riftkit.installer.runner import (
    InstallLog,
    SetupRunner,
    SetupSummary,
    cleanup_temp,
    primary_ip,
)
from riftkit.modules.interaction_handler import MockInteractionHandler
from riftkit.modules.prerequisites import PrerequisiteError


def fake_module(name: str, status: StepStatus = StepStatus.INSTALLED):
    module = Mock()
    module.name = name
    module.run.return_value = ModuleResult(module=name, steps=[StepResult(name, status, "")])
    return module


@pytest.fixture
def environment():
    """Root, no agents on PATH, no real temp cleanup or hostname lookup."""
    with (
        patch("riftkit.installer.runner.PrerequisiteChecker.is_root", return_value=True),
        patch("riftkit.installer.runner.PrerequisiteChecker.check_tool", return_value=False),
        patch("riftkit.installer.runner.cleanup_temp") as cleanup,
        patch("riftkit.installer.runner.primary_ip", return_value="10.0.0.4"),
    ):
        yield cleanup


class TestSetupRunner:
    def test_successful_run(self, environment, install_ctx, tmp_path):
        log_path = tmp_path / "install.log"
        modules = [fake_module("core"), fake_module("agents")]

        with patch("riftkit.installer.runner.build_modules", return_value=modules):
            summary = SetupRunner("agent", install_ctx, log_path, non_interactive=True).run()

        assert summary.exit_code == 0
        assert [r.module for r in summary.results] == ["core", "agents"]
        environment.assert_called_once()

        quick_setup = install_ctx.user.home / ".riftkit" / "quick-setup.sh"
        assert quick_setup.exists()
        assert stat.S_IMODE(quick_setup.stat().st_mode) == 0o755

        log = log_path.read_text()
        assert log.startswith("=== riftkit installation log - ")
        assert "Agent profile installation complete" in log

    def test_failed_module_continues_and_exits_one(self, environment, install_ctx, tmp_path):
        modules = [fake_module("core", StepStatus.FAILED), fake_module("agents")]

        with patch("riftkit.installer.runner.build_modules", return_value=modules):
            summary = SetupRunner(
                "agent", install_ctx, tmp_path / "install.log", non_interactive=True
            ).run()

        modules[1].run.assert_called_once()
        assert summary.failed_modules == ["core"]
        assert summary.exit_code == 1

    def test_crashing_module_is_recorded(self, environment, install_ctx, tmp_path):
        crashing = Mock()
        crashing.name = "modern_cli"
        crashing.run.side_effect = RuntimeError("disk full")
        crashing._failed.return_value = StepResult("modern_cli", StepStatus.FAILED, "disk full")

        with patch("riftkit.installer.runner.build_modules", return_value=[crashing]):
            summary = SetupRunner(
                "full", install_ctx, tmp_path / "install.log", non_interactive=True
            ).run()

        assert summary.failed_modules == ["modern_cli"]

    def test_declined_confirmation_cancels(self, environment, install_ctx, tmp_path):
        install_ctx.interaction = MockInteractionHandler(confirm_responses=[False])

        with patch("riftkit.installer.runner.build_modules") as build:
            summary = SetupRunner("agent", install_ctx, tmp_path / "install.log").run()

        assert summary.cancelled
        assert summary.exit_code == 0
        build.assert_not_called()

    def test_requires_root(self, install_ctx, tmp_path):
        with patch("riftkit.installer.runner.PrerequisiteChecker.is_root", return_value=False):
            with pytest.raises(PrerequisiteError, match="root"):
                SetupRunner("agent", install_ctx, tmp_path / "install.log").run()

    def test_default_log_name_survives_cleanup(self, install_ctx, tmp_path):
        log_path = tmp_path / "riftkit-install.log"
        (tmp_path / "riftkit-dl-x1").mkdir()

        with (
            patch("riftkit.installer.runner.PrerequisiteChecker.is_root", return_value=True),
            patch("riftkit.installer.runner.PrerequisiteChecker.check_tool", return_value=False),
            patch("riftkit.installer.runner.primary_ip", return_value="10.0.0.4"),
            patch("riftkit.installer.runner.build_modules", return_value=[fake_module("core")]),
        ):
            SetupRunner(
                "agent", install_ctx, log_path, non_interactive=True, temp_dir=tmp_path
            ).run()

        assert log_path.exists()
        assert "Agent profile installation complete" in log_path.read_text()
        assert not (tmp_path / "riftkit-dl-x1").exists()


class TestInstallLog:
    def test_restores_logger(self, tmp_path):
        package_logger = logging.getLogger("riftkit")
        before = (package_logger.level, package_logger.propagate, list(package_logger.handlers))

        with InstallLog(tmp_path / "logs" / "install.log"):
            logging.getLogger("riftkit.installer.core").debug("apt-get install -y curl")

        after = (package_logger.level, package_logger.propagate, list(package_logger.handlers))
        assert after == before
        assert "apt-get install -y curl" in (tmp_path / "logs" / "install.log").read_text()


def test_summary_exit_code():
    summary = SetupSummary(profile="agent")
    assert summary.exit_code == 0
    summary.results.append(
        ModuleResult("core", steps=[StepResult("git", StepStatus.FAILED, "boom")])
    )
    assert summary.exit_code == 1


def test_cleanup_temp(tmp_path):
    (tmp_path / "riftkit-dl-abc").mkdir()
    (tmp_path / "riftkit-dl-abc" / "eza.tar.gz").write_bytes(b"x")
    (tmp_path / "riftkit-dl-script.sh").write_text("echo")
    (tmp_path / "riftkit-install.log").write_text("log")
    (tmp_path / "unrelated").mkdir()

    assert cleanup_temp(tmp_path) == 2
    assert sorted(p.name for p in tmp_path.iterdir()) == ["riftkit-install.log", "unrelated"]


def test_cleanup_temp_keeps_given_path(tmp_path):
    kept = tmp_path / "riftkit-dl-notes.log"
    kept.write_text("keep me")

    assert cleanup_temp(tmp_path, keep=kept) == 0
    assert kept.exists()


@patch("riftkit.installer.runner.safe_run")
def test_primary_ip(mock_run, run_result):
    mock_run.return_value = run_result(0, "10.0.0.4 172.17.0.1 \n")
    assert primary_ip() == "10.0.0.4"
    mock_run.return_value = run_result(1)
    assert primary_ip() == "localhost"
