"""Resolve a pull request to its source remote and check it out as a worktree.

The flow is strictly ordered: validate inputs, check preconditions, fetch PR
metadata, resolve (and possibly add) the source remote, fetch the branch,
create the worktree. A remote added by this run is removed again if any later
step fails.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlsplit

from prworktree.errors import (
    FetchFailed,
    InvalidArgument,
    MissingDependency,
    NoOriginRemote,
    NotARepository,
    RemoteAddFailed,
    TargetExists,
    WorktreeCreateFailed,
)
from prworktree.gh_ops import check_gh_installed, get_pr_metadata
from prworktree.git import (
    GitCommandError,
    add_remote,
    branch_exists,
    check_git_installed,
    fetch_branch,
    get_origin_url,
    get_remote_url,
    get_repo_root,
    is_inside_work_tree,
    list_remotes,
    remove_remote,
    rev_parse,
    worktree_add_existing,
    worktree_add_tracking,
)
from prworktree.model import PRMetadata, WorktreeInfo

logger = logging.getLogger(__name__)

DEFAULT_HOST = "github.com"
ORIGIN = "origin"

_PR_NUMBER_RE = re.compile(r"[0-9]+")
# git@github.com:owner/repo.git
_SCP_RE = re.compile(r"^(?:[^@/\s]+@)?([^@/:\s]+):(?!//)(.+)$")
# ssh://git@github.com:22/owner/repo.git
_SSH_RE = re.compile(r"^ssh://(?:[^@/]+@)?([^/:]+)(?::\d+)?/(.+)$")
# https://token@github.com/owner/repo
_USERINFO_RE = re.compile(r"^(https?://)[^@/]+@")

Progress = Callable[[str], None]


def _quiet(message: str) -> None:
    pass


# ---------------------------------------------------------------------------
# input validation
# ---------------------------------------------------------------------------

def validate_pr_number(pr_number: str) -> str:
    if not _PR_NUMBER_RE.fullmatch(pr_number):
        raise InvalidArgument(pr_number)
    return pr_number


def default_target_dir(pr_number: str) -> str:
    return f"../pr-{pr_number}"


def check_dependencies() -> None:
    """Raise MissingDependency naming every required tool that is absent."""
    missing = []
    if not check_gh_installed():
        missing.append("gh")
    if not check_git_installed():
        missing.append("git")
    if missing:
        raise MissingDependency(missing)


# ---------------------------------------------------------------------------
# URL normalization
# ---------------------------------------------------------------------------

def normalize_remote_url(url: str) -> str:
    """Return a canonical form of a remote URL for equality checks.

    SSH forms are rewritten to HTTPS, credentials are dropped from HTTP(S)
    URLs and trailing ``/`` and ``.git`` are dropped, so
    ``git@github.com:owner/repo.git`` and ``https://github.com/owner/repo``
    compare equal. Case is preserved. Idempotent.
    """
    url = url.strip()

    match = _SSH_RE.match(url)
    if match:
        url = f"https://{match.group(1)}/{match.group(2)}"
    else:
        match = _SCP_RE.match(url)
        if match:
            url = f"https://{match.group(1)}/{match.group(2)}"
    url = _USERINFO_RE.sub(r"\1", url)

    while True:
        stripped = url.rstrip("/").removesuffix(".git")
        if stripped == url:
            return url
        url = stripped


def host_from_url(url: str) -> str:
    """Host of an http(s) URL, or github.com for anything else.

    Pass the raw remote URL when the host is used to build a fetch URL: SSH
    hosts may be ``~/.ssh/config`` aliases that do not resolve over HTTPS.
    """
    parts = urlsplit(url.strip())
    if parts.scheme in ("http", "https") and parts.netloc:
        return parts.netloc.rsplit("@", 1)[-1]
    return DEFAULT_HOST


def pr_source_url(meta: PRMetadata, host: str = DEFAULT_HOST) -> str:
    return f"https://{host}/{meta.head_owner}/{meta.head_repo}.git"


def is_same_repository(source_url: str, origin_url: str) -> bool:
    return normalize_remote_url(source_url) == normalize_remote_url(origin_url)


# ---------------------------------------------------------------------------
# remote resolution and cleanup
# ---------------------------------------------------------------------------

class AddedRemoteGuard:
    """Remove a remote on exit unless :meth:`disarm` was called first.

    Only arm it for a remote this run created; removal errors are logged and
    swallowed so the original failure is the one that surfaces.
    """

    def __init__(self, name: str, cwd: str, armed: bool = True) -> None:
        self.name = name
        self.cwd = cwd
        self.armed = armed

    def disarm(self) -> None:
        self.armed = False

    def __enter__(self) -> AddedRemoteGuard:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.armed:
            logger.debug("removing remote '%s' added by this run", self.name)
            try:
                remove_remote(self.name, self.cwd)
            except (GitCommandError, MissingDependency) as e:
                logger.warning("could not remove remote '%s': %s", self.name, e)
        return False


def resolve_remote(
    meta: PRMetadata,
    origin_url: str,
    cwd: str,
    warn_remote_mismatch: bool = False,
) -> tuple[str, bool]:
    """Pick the remote to fetch the PR branch from, adding one for forks.

    Returns:
        (remote_name, remote_was_added)
    """
    # Classification compares against origin's own host, SSH aliases included.
    same_host_url = pr_source_url(meta, host_from_url(normalize_remote_url(origin_url)))
    if is_same_repository(same_host_url, origin_url):
        logger.debug("PR source %s matches origin", same_host_url)
        return ORIGIN, False

    source_url = pr_source_url(meta, host_from_url(origin_url))

    name = meta.head_owner
    if name in list_remotes(cwd):
        # Reused as-is; the caller owns it.
        if warn_remote_mismatch:
            existing = get_remote_url(name, cwd) or ""
            expected = {normalize_remote_url(source_url), normalize_remote_url(same_host_url)}
            if normalize_remote_url(existing) not in expected:
                logger.warning(
                    "remote '%s' points at %s, expected %s; fetching from it anyway",
                    name, existing, source_url,
                )
        return name, False

    try:
        add_remote(name, source_url, cwd)
    except GitCommandError as e:
        raise RemoteAddFailed(name, source_url, e.stderr) from e
    return name, True


# ---------------------------------------------------------------------------
# entry point
# ---------------------------------------------------------------------------

def create_worktree(
    pr_number: str,
    target_dir: Optional[str] = None,
    cwd: Optional[str] = None,
    warn_remote_mismatch: bool = False,
    progress: Progress = _quiet,
) -> WorktreeInfo:
    """Check out the head branch of PR *pr_number* as a worktree at *target_dir*.

    *target_dir* defaults to ``../pr-<pr_number>`` and, like any relative
    path, is resolved against *cwd* (the current directory by default).
    *progress* receives one human-readable line per step.
    """
    validate_pr_number(pr_number)

    invocation_dir = os.path.abspath(cwd or os.getcwd())
    target = Path(invocation_dir, os.path.expanduser(target_dir or default_target_dir(pr_number)))
    target = Path(os.path.normpath(target))
    if target.exists():
        raise TargetExists(str(target))

    check_dependencies()
    if not is_inside_work_tree(invocation_dir):
        raise NotARepository(invocation_dir)
    root = get_repo_root(invocation_dir)

    progress(f"Fetching metadata for PR #{pr_number}...")
    meta = get_pr_metadata(pr_number, cwd=root)
    branch = meta.head_ref_name

    origin_url = get_origin_url(root)
    if origin_url is None:
        raise NoOriginRemote()

    remote, remote_was_added = resolve_remote(
        meta, origin_url, root, warn_remote_mismatch=warn_remote_mismatch,
    )
    if remote_was_added:
        progress(f"Added remote '{remote}' for fork {meta.head_owner}/{meta.head_repo}")

    with AddedRemoteGuard(remote, root, armed=remote_was_added) as guard:
        progress(f"Fetching {remote}/{branch}...")
        try:
            fetch_branch(remote, branch, root)
        except GitCommandError as e:
            raise FetchFailed(remote, branch, e.stderr) from e

        progress(f"Creating worktree at {target}...")
        start = f"{remote}/{branch}"
        try:
            if branch_exists(branch, root):
                # A same-named local branch is only usable if it is the PR head.
                if rev_parse(branch, root) != rev_parse(start, root):
                    raise WorktreeCreateFailed(
                        str(target), branch,
                        f"local branch '{branch}' does not point at {start}; "
                        "rename, delete or update it and retry.",
                    )
                worktree_add_existing(str(target), branch, root)
            else:
                worktree_add_tracking(str(target), branch, start, root)
        except GitCommandError as e:
            raise WorktreeCreateFailed(str(target), branch, e.stderr) from e

        guard.disarm()

    return WorktreeInfo(
        pr_number=pr_number,
        dir=str(target),
        branch=branch,
        remote=remote,
        remote_was_added=remote_was_added,
        base_branch=meta.base_ref_name,
    )
