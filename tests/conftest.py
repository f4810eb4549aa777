"""
Shared test fixtures and configuration for riftkit tests.

This module provides common fixtures used across all test types:
- Temporary home directory
- Progress display writing to a buffer
- Install contexts that never switch users
"""

import io

import pytest

from riftkit.installer.base import InstallContext
from riftkit.modules.interaction_handler import NonInteractiveHandler
from riftkit.modules.progress import ProgressDisplay
from riftkit.modules.subprocess_helper import SubprocessResult
from riftkit.modules.user_context import UserContext

# ============================================================================
# DIRECTORY FIXTURES
# ============================================================================


@pytest.fixture
def temp_home_dir(tmp_path, monkeypatch):
    """Temporary home directory for testing.

    Sets HOME environment variable to temporary directory
    for testing home directory operations without affecting
    real user home directory.
    """
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


# ============================================================================
# INSTALLER FIXTURES
# ============================================================================


@pytest.fixture
def progress():
    """ProgressDisplay writing to an in-memory buffer.

    Read the output with ``progress.output_file.getvalue()``.
    """
    return ProgressDisplay(output_file=io.StringIO())


@pytest.fixture
def user_ctx(temp_home_dir, monkeypatch):
    """Target user rooted in the temporary home, never switched with su."""
    monkeypatch.setattr(UserContext, "needs_switch", lambda self: False)
    return UserContext(name="dev", home=temp_home_dir)


@pytest.fixture
def install_ctx(user_ctx, progress):
    """InstallContext answering every question with its default."""
    return InstallContext(
        user=user_ctx,
        progress=progress,
        interaction=NonInteractiveHandler(),
        skip_existing=False,
    )


# ============================================================================
# SUBPROCESS FIXTURES
# ============================================================================


def _make_result(returncode=0, stdout="", stderr="", timed_out=False) -> SubprocessResult:
    return SubprocessResult(
        returncode=returncode, stdout=stdout, stderr=stderr, timed_out=timed_out
    )


@pytest.fixture
def run_result():
    """Factory for SubprocessResult objects returned by mocked commands.

    Example:
        def test_something(run_result):
            result = run_result(0, stdout="v20.11.0")
    """
    return _make_result
