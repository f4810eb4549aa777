"""Package manager backends used by the installer modules.

Each backend wraps one install channel: apt, npm, pip, cargo, a remote install
script, or a GitHub release binary. Backends only run commands and report
results; deciding what to install and how to report it belongs to the modules.

Security:
- No shell=True; shell snippets only run through ``bash -lc`` / ``su -c``
  with shlex-quoted arguments
- Downloads go to private temporary directories
- Archive extraction uses tarfile's "data" filter (no absolute paths, no links out)
"""

import logging
import os
import re
import shlex
import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path

import requests

from riftkit.installer.base import InstallerError, failure_detail
from riftkit.installer.dotfiles import append_once
from riftkit.modules.prerequisites import PrerequisiteChecker
from riftkit.modules.subprocess_helper import SubprocessResult, safe_run
from riftkit.modules.user_context import UserContext

logger = logging.getLogger(__name__)

NPM_PATH_LINE = 'export PATH="$HOME/.npm-global/bin:$PATH"'
DOWNLOAD_PREFIX = "riftkit-dl-"


def _log_output(result: SubprocessResult) -> None:
    if result.stdout:
        logger.debug(result.stdout.rstrip())
    if result.stderr:
        logger.debug(result.stderr.rstrip())


class AptBackend:
    """apt-get wrapper."""

    DEFAULT_TIMEOUT = 1800

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self.env = {**os.environ, "DEBIAN_FRONTEND": "noninteractive"}

    def update(self) -> SubprocessResult:
        result = safe_run(["apt-get", "update"], timeout=self.timeout, env=self.env)
        _log_output(result)
        return result

    def is_installed(self, package: str) -> bool:
        return safe_run(["dpkg", "-s", package], timeout=30).success

    def missing(self, packages: list[str]) -> list[str]:
        """Subset of ``packages`` not yet installed, order preserved."""
        return [p for p in packages if not self.is_installed(p)]

    def install(self, packages: list[str]) -> SubprocessResult:
        """Refresh package lists, then install ``packages``."""
        update = self.update()
        if not update.success:
            return update
        result = safe_run(
            ["apt-get", "install", "-y", *packages], timeout=self.timeout, env=self.env
        )
        _log_output(result)
        return result


class NpmBackend:
    """npm global installs, done as the target user under ~/.npm-global."""

    def __init__(self, user: UserContext, timeout: int = 600):
        self.user = user
        self.timeout = timeout

    @property
    def prefix(self) -> Path:
        return self.user.home / ".npm-global"

    def prefix_configured(self) -> bool:
        result = self.user.run_as_user("npm config get prefix", timeout=self.timeout)
        return result.success and result.stdout.strip() == str(self.prefix)

    def setup_global_prefix(self, configure: bool = True) -> list[str]:
        """Point npm's global prefix at ~/.npm-global and put its bin dir on PATH.

        Args:
            configure: Run ``npm config set prefix``; False only wires up PATH

        Returns:
            Names of shell profiles that were updated

        Raises:
            InstallerError: If npm refuses the prefix
        """
        if configure:
            prefix = shlex.quote(str(self.prefix))
            result = self.user.run_as_user(
                f"mkdir -p {prefix} && npm config set prefix {prefix}", timeout=self.timeout
            )
            if not result.success:
                raise InstallerError(f"Failed to configure npm prefix: {failure_detail(result)}")

        updated = []
        for profile in (".bashrc", ".zshrc", ".profile"):
            if append_once(self.user.home / profile, ".npm-global/bin", NPM_PATH_LINE):
                updated.append(profile)

        bin_dir = str(self.prefix / "bin")
        if bin_dir not in os.environ.get("PATH", "").split(os.pathsep):
            os.environ["PATH"] = bin_dir + os.pathsep + os.environ.get("PATH", "")
        return updated

    def is_installed(self, package: str) -> bool:
        return self.user.run_as_user(
            f"npm list -g {shlex.quote(package)}", timeout=self.timeout
        ).success

    def install_global(self, package: str) -> SubprocessResult:
        return self.user.run_as_user(
            f"npm install -g {shlex.quote(package)}", timeout=self.timeout
        )


class PipBackend:
    """User-level pip installs for the target user."""

    def __init__(self, user: UserContext, timeout: int = 600):
        self.user = user
        self.timeout = timeout

    def is_installed(self, package: str) -> bool:
        return self.user.run_as_user(
            f"python3 -m pip show {shlex.quote(package)}", timeout=self.timeout
        ).success

    def install_user(self, package: str) -> SubprocessResult:
        return self.user.run_as_user(
            f"python3 -m pip install --user {shlex.quote(package)}", timeout=self.timeout
        )


class CargoBackend:
    """``cargo install`` as the target user."""

    def __init__(self, user: UserContext, timeout: int = 1800):
        self.user = user
        self.timeout = timeout

    def available(self) -> bool:
        return PrerequisiteChecker.check_tool("cargo")

    def install(self, crate: str, *flags: str) -> SubprocessResult:
        args = " ".join(shlex.quote(a) for a in (crate, *flags))
        return self.user.run_as_user(f"cargo install {args}", timeout=self.timeout)


class ScriptBackend:
    """Download an install script and pipe it to bash (``curl -fsSL url | bash``)."""

    def __init__(self, user: UserContext, timeout: int = 900):
        self.user = user
        self.timeout = timeout

    def fetch(self, url: str) -> str:
        """
        Raises:
            InstallerError: If the script cannot be downloaded
        """
        try:
            response = requests.get(url, timeout=60)
            response.raise_for_status()
        except requests.RequestException as e:
            raise InstallerError(f"Failed to download {url}: {e}") from e
        return response.text

    def run_remote_script(
        self, url: str, as_user: bool = False, args: tuple[str, ...] = ()
    ) -> SubprocessResult:
        script = self.fetch(url)
        bash = " ".join(["bash", "-s", "--", *(shlex.quote(a) for a in args)])
        cmd = self.user.user_command(bash) if as_user else ["bash", "-s", "--", *args]
        result = safe_run(cmd, timeout=self.timeout, input_text=script)
        _log_output(result)
        return result


class GitHubReleaseBackend:
    """Install a single binary from a repository's latest GitHub release."""

    API_URL = "https://api.github.com/repos/{repo}/releases/latest"
    DEFAULT_PATTERN = r"(?i)(linux.*x86_64|x86_64.*linux).*\.(tar\.gz|tgz|zip)$"

    def __init__(self, install_dir: Path = Path("/usr/local/bin"), timeout: int = 60):
        self.install_dir = install_dir
        self.timeout = timeout

    def find_asset_url(self, repo: str, pattern: str = DEFAULT_PATTERN) -> str | None:
        """First release asset URL matching ``pattern``, or None.

        Raises:
            InstallerError: If the GitHub API cannot be reached
        """
        url = self.API_URL.format(repo=repo)
        try:
            response = requests.get(
                url, headers={"Accept": "application/vnd.github+json"}, timeout=self.timeout
            )
            response.raise_for_status()
            release = response.json()
        except (requests.RequestException, ValueError) as e:
            raise InstallerError(f"Failed to query releases for {repo}: {e}") from e

        regex = re.compile(pattern)
        for asset in release.get("assets", []):
            download_url = asset.get("browser_download_url", "")
            if regex.search(download_url):
                return download_url
        return None

    def install(self, repo: str, binary: str, pattern: str = DEFAULT_PATTERN) -> Path:
        """Download, unpack and install ``binary`` into ``install_dir``.

        Returns:
            Installed binary path

        Raises:
            InstallerError: If no asset matches, the binary is missing from it,
                or it cannot be placed in install_dir
        """
        download_url = self.find_asset_url(repo, pattern)
        if not download_url:
            raise InstallerError(f"Could not find download URL for {binary}")

        with tempfile.TemporaryDirectory(prefix=DOWNLOAD_PREFIX) as tmp:
            tmp_dir = Path(tmp)
            archive = tmp_dir / download_url.rsplit("/", 1)[-1]
            self._download(download_url, archive)

            extract_dir = tmp_dir / "extract"
            extract_dir.mkdir()
            found = self._unpack(archive, extract_dir, binary)
            if found is None:
                raise InstallerError(f"Could not find {binary} binary in {archive.name}")

            destination = self.install_dir / binary
            try:
                found.chmod(0o755)
                self.install_dir.mkdir(parents=True, exist_ok=True)
                shutil.move(str(found), destination)
            except OSError as e:
                raise InstallerError(f"Failed to install {binary} to {destination}: {e}") from e

        logger.info(f"{binary} installed to {destination}")
        return destination

    def _download(self, url: str, target: Path) -> None:
        try:
            with requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(target, "wb") as f:
                    for chunk in response.iter_content(chunk_size=65536):
                        f.write(chunk)
        except requests.RequestException as e:
            raise InstallerError(f"Failed to download {url}: {e}") from e

    @staticmethod
    def _unpack(archive: Path, extract_dir: Path, binary: str) -> Path | None:
        name = archive.name.lower()
        try:
            if name.endswith((".tar.gz", ".tgz")):
                with tarfile.open(archive, "r:gz") as tar:
                    tar.extractall(extract_dir, filter="data")
            elif name.endswith(".zip"):
                with zipfile.ZipFile(archive) as zf:
                    zf.extractall(extract_dir)
            else:
                # Bare binary download
                return archive
        except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
            raise InstallerError(f"Failed to extract {archive.name}: {e}") from e

        for candidate in sorted(extract_dir.rglob(binary)):
            if candidate.is_file():
                return candidate
        return None


__all__ = [
    "AptBackend",
    "CargoBackend",
    "DOWNLOAD_PREFIX",
    "GitHubReleaseBackend",
    "NPM_PATH_LINE",
    "NpmBackend",
    "PipBackend",
    "ScriptBackend",
]
