"""Error types. Every failure the CLI reports is a ``PRWorktreeError``."""

from __future__ import annotations


class PRWorktreeError(Exception):
    """Base class for all terminal pr-worktree failures."""


class InvalidArgument(PRWorktreeError):
    def __init__(self, pr_number: str) -> None:
        super().__init__(
            f"invalid PR number '{pr_number}' (expected a positive integer)."
        )
        self.pr_number = pr_number


class MissingDependency(PRWorktreeError):
    def __init__(self, tools: list[str]) -> None:
        super().__init__(
            "required tool(s) not installed or not on PATH: " + ", ".join(tools)
        )
        self.tools = tools


class NotARepository(PRWorktreeError):
    def __init__(self, cwd: str) -> None:
        super().__init__(f"not inside a git repository: {cwd}")
        self.cwd = cwd


class TargetExists(PRWorktreeError):
    def __init__(self, target_dir: str) -> None:
        super().__init__(f"target directory already exists: {target_dir}")
        self.target_dir = target_dir


class PRFetchFailed(PRWorktreeError):
    def __init__(self, pr_number: str, detail: str = "") -> None:
        message = f"could not fetch metadata for PR #{pr_number}."
        if detail:
            message += f"\n{detail}"
        super().__init__(message)
        self.pr_number = pr_number
        self.detail = detail


class MetadataParseFailed(PRWorktreeError):
    def __init__(self, field: str) -> None:
        super().__init__(f"PR metadata is missing required field '{field}'.")
        self.field = field


class NoOriginRemote(PRWorktreeError):
    def __init__(self) -> None:
        super().__init__("repository has no readable 'origin' remote.")


class RemoteAddFailed(PRWorktreeError):
    def __init__(self, remote: str, url: str, detail: str = "") -> None:
        message = f"could not add remote '{remote}' ({url})."
        if detail:
            message += f"\n{detail}"
        super().__init__(message)
        self.remote = remote
        self.url = url


class FetchFailed(PRWorktreeError):
    def __init__(self, remote: str, branch: str, detail: str = "") -> None:
        message = f"could not fetch branch '{branch}' from remote '{remote}'."
        if detail:
            message += f"\n{detail}"
        super().__init__(message)
        self.remote = remote
        self.branch = branch


class WorktreeCreateFailed(PRWorktreeError):
    def __init__(self, target_dir: str, branch: str, detail: str = "") -> None:
        message = f"could not create worktree at {target_dir} for branch '{branch}'."
        if detail:
            message += f"\n{detail}"
        super().__init__(message)
        self.target_dir = target_dir
        self.branch = branch
