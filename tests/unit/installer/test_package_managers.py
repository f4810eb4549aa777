"""Tests for installer package manager backends."""

import io
import os
import tarfile
from unittest.mock import MagicMock, Mock, patch

import pytest
import requests

from riftkit.installer.base import InstallerError
from riftkit.installer.package_managers import (
    NPM_PATH_LINE,
    AptBackend,
    GitHubReleaseBackend,
    NpmBackend,
    ScriptBackend,
)


def make_tarball(binary: str, content: bytes) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        info = tarfile.TarInfo(f"tool-1.0/{binary}")
        info.size = len(content)
        info.mode = 0o644
        tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def fake_github(assets: list[str], payload: bytes):
    """requests.get replacement serving one release and its download."""

    def fake_get(url, **kwargs):
        if "api.github.com" in url:
            response = Mock()
            response.json.return_value = {
                "assets": [{"browser_download_url": a} for a in assets]
            }
            return response
        response = MagicMock()
        response.__enter__.return_value = response
        response.__exit__.return_value = False
        response.iter_content.return_value = [payload]
        return response

    return fake_get


class TestAptBackend:
    @patch("riftkit.installer.package_managers.safe_run")
    def test_missing_preserves_order(self, mock_run, run_result):
        mock_run.side_effect = lambda cmd, **kw: run_result(0 if cmd[-1] == "git" else 1)

        assert AptBackend().missing(["curl", "git", "jq"]) == ["curl", "jq"]

    @patch("riftkit.installer.package_managers.safe_run")
    def test_install_runs_update_first(self, mock_run, run_result):
        mock_run.return_value = run_result(0)

        AptBackend().install(["curl", "jq"])

        commands = [c.args[0] for c in mock_run.call_args_list]
        assert commands == [["apt-get", "update"], ["apt-get", "install", "-y", "curl", "jq"]]
        assert mock_run.call_args.kwargs["env"]["DEBIAN_FRONTEND"] == "noninteractive"

    @patch("riftkit.installer.package_managers.safe_run")
    def test_failed_update_skips_install(self, mock_run, run_result):
        mock_run.return_value = run_result(100, stderr="E: Could not get lock")

        result = AptBackend().install(["curl"])

        assert not result.success
        assert mock_run.call_count == 1


class TestNpmBackend:
    def test_setup_global_prefix(self, user_ctx, run_result, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        (user_ctx.home / ".bashrc").write_text("# rc\n")
        with patch.object(user_ctx, "run_as_user", return_value=run_result(0)) as mock_run:
            updated = NpmBackend(user_ctx).setup_global_prefix()

        assert updated == [".bashrc"]
        assert "npm config set prefix" in mock_run.call_args.args[0]
        assert NPM_PATH_LINE in (user_ctx.home / ".bashrc").read_text()
        assert os.environ["PATH"].startswith(str(user_ctx.home / ".npm-global" / "bin"))

    def test_setup_global_prefix_without_configure(self, user_ctx, run_result, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")
        with patch.object(user_ctx, "run_as_user") as mock_run:
            NpmBackend(user_ctx).setup_global_prefix(configure=False)
        mock_run.assert_not_called()

    def test_setup_global_prefix_failure(self, user_ctx, run_result):
        failed = run_result(1, stderr="EACCES")
        with patch.object(user_ctx, "run_as_user", return_value=failed):
            with pytest.raises(InstallerError, match="EACCES"):
                NpmBackend(user_ctx).setup_global_prefix()

    def test_prefix_configured(self, user_ctx, run_result):
        prefix = str(user_ctx.home / ".npm-global")
        with patch.object(user_ctx, "run_as_user", return_value=run_result(0, prefix + "\n")):
            assert NpmBackend(user_ctx).prefix_configured()
        with patch.object(user_ctx, "run_as_user", return_value=run_result(0, "/usr\n")):
            assert not NpmBackend(user_ctx).prefix_configured()

    def test_install_global_quotes_package(self, user_ctx, run_result):
        with patch.object(user_ctx, "run_as_user", return_value=run_result(0)) as mock_run:
            NpmBackend(user_ctx).install_global("@anthropic-ai/claude-code")
        assert mock_run.call_args.args[0] == "npm install -g @anthropic-ai/claude-code"


class TestScriptBackend:
    @patch("riftkit.installer.package_managers.safe_run")
    @patch("riftkit.installer.package_managers.requests.get")
    def test_pipes_script_to_bash(self, mock_get, mock_run, user_ctx, run_result):
        mock_get.return_value = Mock(text="echo installing\n")
        mock_run.return_value = run_result(0)

        ScriptBackend(user_ctx).run_remote_script("https://example.com/install.sh")

        assert mock_run.call_args.args[0] == ["bash", "-s", "--"]
        assert mock_run.call_args.kwargs["input_text"] == "echo installing\n"

    @patch("riftkit.installer.package_managers.safe_run")
    @patch("riftkit.installer.package_managers.requests.get")
    def test_as_user(self, mock_get, mock_run, user_ctx, run_result):
        mock_get.return_value = Mock(text="true\n")
        mock_run.return_value = run_result(0)

        ScriptBackend(user_ctx).run_remote_script("https://example.com/i.sh", as_user=True)

        assert mock_run.call_args.args[0] == ["bash", "-lc", "bash -s --"]

    @patch("riftkit.installer.package_managers.requests.get")
    def test_download_failure(self, mock_get, user_ctx):
        mock_get.side_effect = requests.ConnectionError("no route to host")
        with pytest.raises(InstallerError, match="Failed to download"):
            ScriptBackend(user_ctx).fetch("https://example.com/install.sh")


class TestGitHubReleaseBackend:
    def test_installs_binary_from_tarball(self, tmp_path):
        assets = [
            "https://github.com/x/eza/releases/download/v1/eza_aarch64-unknown-linux-gnu.tar.gz",
            "https://github.com/x/eza/releases/download/v1/eza_x86_64-unknown-linux-gnu.tar.gz",
        ]
        payload = make_tarball("eza", b"#!/bin/sh\necho eza\n")
        backend = GitHubReleaseBackend(install_dir=tmp_path / "bin")

        with patch(
            "riftkit.installer.package_managers.requests.get",
            side_effect=fake_github(assets, payload),
        ):
            path = backend.install("eza-community/eza", "eza")

        assert path == tmp_path / "bin" / "eza"
        assert path.read_bytes() == b"#!/bin/sh\necho eza\n"
        assert os.access(path, os.X_OK)

    def test_custom_pattern(self):
        assets = [
            "https://github.com/j/lazygit/releases/download/v0.40/lazygit_0.40_Darwin_x86_64.tar.gz",
            "https://github.com/j/lazygit/releases/download/v0.40/lazygit_0.40_Linux_x86_64.tar.gz",
        ]
        with patch(
            "riftkit.installer.package_managers.requests.get",
            side_effect=fake_github(assets, b""),
        ):
            url = GitHubReleaseBackend().find_asset_url(
                "jesseduffield/lazygit", r"Linux_x86_64\.tar\.gz$"
            )
        assert url == assets[1]

    def test_no_matching_asset(self, tmp_path):
        assets = ["https://github.com/x/tool/releases/download/v1/tool-macos.zip"]
        with patch(
            "riftkit.installer.package_managers.requests.get",
            side_effect=fake_github(assets, b""),
        ):
            with pytest.raises(InstallerError, match="Could not find download URL for tool"):
                GitHubReleaseBackend(install_dir=tmp_path).install("x/tool", "tool")

    def test_binary_missing_from_archive(self, tmp_path):
        assets = ["https://github.com/x/duf/releases/download/v1/duf_linux_x86_64.tar.gz"]
        payload = make_tarball("README.md", b"docs")
        with patch(
            "riftkit.installer.package_managers.requests.get",
            side_effect=fake_github(assets, payload),
        ):
            with pytest.raises(InstallerError, match="Could not find duf binary"):
                GitHubReleaseBackend(install_dir=tmp_path).install("muesli/duf", "duf")

    def test_unwritable_install_dir(self, tmp_path):
        assets = [
            "https://github.com/x/eza/releases/download/v1/eza_x86_64-unknown-linux-gnu.tar.gz"
        ]
        blocker = tmp_path / "bin"
        blocker.write_text("not a directory")
        with patch(
            "riftkit.installer.package_managers.requests.get",
            side_effect=fake_github(assets, make_tarball("eza", b"eza")),
        ):
            with pytest.raises(InstallerError, match="Failed to install eza"):
                GitHubReleaseBackend(install_dir=blocker).install("eza-community/eza", "eza")

    def test_api_failure(self):
        with patch(
            "riftkit.installer.package_managers.requests.get",
            side_effect=requests.Timeout("timed out"),
        ):
            with pytest.raises(InstallerError, match="Failed to query releases"):
                GitHubReleaseBackend().find_asset_url("x/tool")
