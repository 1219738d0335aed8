"""GitHub CLI (gh) operations."""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any

from prworktree.errors import MetadataParseFailed, MissingDependency, PRFetchFailed
from prworktree.model import PRMetadata

logger = logging.getLogger(__name__)

PR_FIELDS = "headRefName,headRepository,headRepositoryOwner,baseRefName"


class GhCommandError(Exception):
    """A gh command exited non-zero."""

    def __init__(self, args: tuple[str, ...], stderr: str) -> None:
        super().__init__(f"gh {' '.join(args)}: {stderr}")
        self.command = args
        self.stderr = stderr


def run_gh(
    *args: str,
    cwd: str | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run a gh CLI command and return the completed process."""
    logger.debug("gh %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(
            ["gh", *args],
            capture_output=True,
            text=True,
            check=False,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        raise MissingDependency(["gh"]) from e
    if check and result.returncode != 0:
        raise GhCommandError(args, result.stderr.strip())
    return result


def check_gh_installed() -> bool:
    """Check if gh CLI is installed."""
    try:
        result = subprocess.run(
            ["gh", "--version"],
            capture_output=True,
            check=False,
        )
        return result.returncode == 0
    except FileNotFoundError:
        return False


def get_pr_metadata(pr_number: str, cwd: str | None = None) -> PRMetadata:
    """Fetch head branch and head repository of PR *pr_number*.

    Raises:
        PRFetchFailed: gh failed (not found, no access, network) or returned
            something that is not a JSON object.
        MetadataParseFailed: a required field is absent, null or empty.
    """
    try:
        result = run_gh("pr", "view", pr_number, "--json", PR_FIELDS, cwd=cwd)
    except GhCommandError as e:
        raise PRFetchFailed(pr_number, e.stderr) from e

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise PRFetchFailed(pr_number, f"invalid JSON from gh: {e}") from e
    if not isinstance(data, dict):
        raise PRFetchFailed(pr_number, "unexpected response from gh")

    return parse_pr_metadata(data)


def parse_pr_metadata(data: dict[str, Any]) -> PRMetadata:
    """Build :class:`PRMetadata` from ``gh pr view --json`` output."""
    return PRMetadata(
        head_ref_name=_require(data, "headRefName"),
        head_owner=_require(data, "headRepositoryOwner.login"),
        head_repo=_require(data, "headRepository.name"),
        base_ref_name=_lookup(data, "baseRefName"),
    )


def _lookup(data: dict[str, Any], path: str) -> str | None:
    """Follow a dotted *path*; absent, null and blank values all yield None."""
    value: Any = data
    for key in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _require(data: dict[str, Any], path: str) -> str:
    value = _lookup(data, path)
    if value is None:
        raise MetadataParseFailed(path)
    return value
