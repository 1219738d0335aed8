"""Low-level git helpers. Every function takes an explicit *cwd* so callers
never have to ``os.chdir``."""

from __future__ import annotations

import logging
import subprocess

from prworktree.errors import MissingDependency

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """A git command exited non-zero."""

    def __init__(self, args: tuple[str, ...], stderr: str) -> None:
        super().__init__(f"git {' '.join(args)}: {stderr}")
        self.command = args
        self.stderr = stderr


# ---------------------------------------------------------------------------
# runner
# ---------------------------------------------------------------------------

def run_git(
    *args: str,
    cwd: str | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the completed process.

    With ``check=True`` a non-zero exit raises :class:`GitCommandError`
    carrying git's stderr.
    """
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            check=False,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        raise MissingDependency(["git"]) from e
    if check and result.returncode != 0:
        stderr = result.stderr.strip()
        logger.debug("git %s failed: %s", " ".join(args), stderr)
        raise GitCommandError(args, stderr)
    return result


def check_git_installed() -> bool:
    """Check if git is installed."""
    try:
        result = subprocess.run(
            ["git", "--version"],
            capture_output=True,
            check=False,
        )
        return result.returncode == 0
    except FileNotFoundError:
        return False


# ---------------------------------------------------------------------------
# repo discovery
# ---------------------------------------------------------------------------

def is_inside_work_tree(cwd: str) -> bool:
    result = run_git("rev-parse", "--is-inside-work-tree", cwd=cwd, check=False)
    return result.returncode == 0 and result.stdout.strip() == "true"


def get_repo_root(cwd: str) -> str:
    """Return the top level of the working tree containing *cwd*."""
    return run_git("rev-parse", "--show-toplevel", cwd=cwd).stdout.strip()


# ---------------------------------------------------------------------------
# remotes
# ---------------------------------------------------------------------------

def get_origin_url(cwd: str) -> str | None:
    """Return the configured ``origin`` URL, or None if there is none.

    Reads the raw config value so ``url.<base>.insteadOf`` rewrites do not
    leak into comparisons.
    """
    result = run_git("config", "--get", "remote.origin.url", cwd=cwd, check=False)
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def list_remotes(cwd: str) -> list[str]:
    result = run_git("remote", cwd=cwd)
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def get_remote_url(name: str, cwd: str) -> str | None:
    result = run_git("config", "--get", f"remote.{name}.url", cwd=cwd, check=False)
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def add_remote(name: str, url: str, cwd: str) -> None:
    run_git("remote", "add", name, url, cwd=cwd)


def remove_remote(name: str, cwd: str) -> None:
    run_git("remote", "remove", name, cwd=cwd)


# ---------------------------------------------------------------------------
# fetch / branch helpers
# ---------------------------------------------------------------------------

def fetch_branch(remote: str, branch: str, cwd: str) -> None:
    """Fetch *branch* from *remote* into ``refs/remotes/<remote>/<branch>``."""
    refspec = f"+refs/heads/{branch}:refs/remotes/{remote}/{branch}"
    run_git("fetch", remote, refspec, cwd=cwd)


def rev_parse(ref: str, cwd: str) -> str:
    """Return the commit id *ref* points at."""
    return run_git("rev-parse", "--verify", f"{ref}^{{commit}}", cwd=cwd).stdout.strip()


def branch_exists(branch: str, cwd: str) -> bool:
    result = run_git(
        "show-ref", "--verify", "--quiet", f"refs/heads/{branch}",
        cwd=cwd, check=False,
    )
    return result.returncode == 0


# ---------------------------------------------------------------------------
# worktree operations
# ---------------------------------------------------------------------------

def worktree_add_existing(path: str, branch: str, cwd: str) -> None:
    """Check out an existing local *branch* in a new worktree at *path*."""
    run_git("worktree", "add", path, branch, cwd=cwd)


def worktree_add_tracking(path: str, branch: str, start: str, cwd: str) -> None:
    """Create local *branch* tracking *start* and check it out at *path*."""
    run_git("worktree", "add", "--track", "-b", branch, path, start, cwd=cwd)
