"""pr-worktree: check out a GitHub pull request into its own git worktree."""

__version__ = "0.1.0"
