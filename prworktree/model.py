from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class PRMetadata:
    """Head branch and head repository of a pull request."""

    head_ref_name: str
    head_owner: str
    head_repo: str
    base_ref_name: str | None = None


@dataclass
class WorktreeInfo:
    """Result of a successful ``create_worktree`` run."""

    pr_number: str
    dir: str
    branch: str
    remote: str
    remote_was_added: bool
    base_branch: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)
