# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shared pytest fixtures."""

import subprocess
from pathlib import Path

import pytest

from ebpush.dotenv_loader import reset_dotenv_state
from ebpush.logging import SecretFilter


def _git(repo_path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a git repository with a single commit.

    Returns:
        Path to the repository root.
    """
    repo_path = tmp_path / "app_repo"
    repo_path.mkdir()

    _git(repo_path, "init")
    _git(repo_path, "config", "user.name", "Test User")
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "commit.gpgsign", "false")

    (repo_path / "application.py").write_text("print('hello')\n")
    (repo_path / "README.md").write_text("# Test App\n")

    _git(repo_path, "add", ".")
    _git(repo_path, "commit", "-m", "Initial commit")

    return repo_path


@pytest.fixture
def head_sha(git_repo: Path) -> str:
    """Full SHA of the repository's HEAD commit."""
    return _git(git_repo, "rev-parse", "HEAD")


@pytest.fixture
def tree_sha(git_repo: Path) -> str:
    """SHA of the HEAD commit's tree object."""
    return _git(git_repo, "rev-parse", "HEAD^{tree}")


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Clear registered secrets and dotenv state around every test."""
    SecretFilter.clear_secrets()
    reset_dotenv_state()
    yield
    SecretFilter.clear_secrets()
    reset_dotenv_state()
