"""Shared fixtures: throwaway git repositories standing in for GitHub."""

import shutil
import subprocess
from pathlib import Path

import pytest

GITHUB = "https://github.com/"

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(cwd, *args):
    """Run a git command in *cwd* and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd, capture_output=True, text=True, check=True,
    )
    return result.stdout.strip()


def _init_git_repo(path):
    """Create a minimal git repo with one commit at the given path."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init")
    git(path, "config", "user.email", "test@test.com")
    git(path, "config", "user.name", "Test")
    (path / "README.md").write_text("# test\n")
    git(path, "add", ".")
    git(path, "commit", "-m", "Initial commit")


class FakeGitHub:
    """Bare repositories under *root*, reachable as https://github.com/<owner>/<repo>.git.

    Repositories that point at it get a ``url.<root>/.insteadOf`` rewrite,
    so fetches and pushes to github.com URLs stay on local disk.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def create_repo(self, owner, name):
        path = self.root / owner / f"{name}.git"
        path.mkdir(parents=True)
        git(path, "init", "--bare")
        return path

    def url(self, owner, name):
        return f"{GITHUB}{owner}/{name}.git"

    def route(self, repo_dir):
        base = f"url.{self.root}/.insteadOf"
        git(repo_dir, "config", "--add", base, GITHUB)
        git(repo_dir, "config", "--add", base, "git@github.com:")


@pytest.fixture
def github(tmp_path):
    return FakeGitHub(tmp_path / "github")


@pytest.fixture
def local_repo(tmp_path, github):
    """A clone-like checkout of owner/repo with branch feature-x on origin."""
    github.create_repo("owner", "repo")
    repo = tmp_path / "work" / "repo"
    _init_git_repo(repo)
    github.route(repo)
    git(repo, "remote", "add", "origin", github.url("owner", "repo"))
    git(repo, "push", "origin", "HEAD:refs/heads/feature-x")
    return repo


def push_fork_branch(repo, github, owner, branch, name="repo"):
    """Create fork *owner*/*name* on the fake GitHub holding *branch*."""
    github.create_repo(owner, name)
    git(repo, "push", github.url(owner, name), f"HEAD:refs/heads/{branch}")


def remotes(repo):
    return git(repo, "remote").split()


def current_branch(path):
    return git(path, "rev-parse", "--abbrev-ref", "HEAD")
