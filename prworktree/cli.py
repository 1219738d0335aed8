"""pr-worktree CLI — check out a GitHub pull request into its own worktree."""

from __future__ import annotations

import json
import sys
from typing import Optional

import typer

from prworktree import __version__
from prworktree.errors import PRWorktreeError
from prworktree.logging import setup_logging
from prworktree.model import WorktreeInfo
from prworktree.resolver import create_worktree

app = typer.Typer(
    name="pr-worktree",
    help="Check out a GitHub pull request into a separate git worktree.",
    add_completion=False,
)


# ---- version callback -----------------------------------------------------
def _version_callback(value: bool) -> None:
    if value:
        print(f"pr-worktree {__version__}")
        raise typer.Exit()


def _progress(message: str) -> None:
    print(message, file=sys.stderr)


def _print_summary(info: WorktreeInfo) -> None:
    print(f"\nCreated worktree for PR #{info.pr_number}")
    print(f"  Path:    {info.dir}")
    print(f"  Branch:  {info.branch}")
    if info.base_branch:
        print(f"  Base:    {info.base_branch}")
    print(f"  Remote:  {info.remote}{' (added)' if info.remote_was_added else ''}")
    print("\nWhen you are done reviewing:")
    print(f"  git worktree remove {info.dir}")
    if info.remote_was_added:
        print(f"  git remote remove {info.remote}")


# ---- main command ---------------------------------------------------------

@app.command(context_settings={"ignore_unknown_options": True})
def main(
    ctx: typer.Context,
    pr_number: Optional[str] = typer.Argument(
        None, metavar="PR_NUMBER", help="Pull request number.", show_default=False,
    ),
    target_dir: Optional[str] = typer.Argument(
        None, metavar="[TARGET_DIR]",
        help="Where to create the worktree (default: ../pr-<PR_NUMBER>).",
        show_default=False,
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output the result as structured JSON.",
    ),
    warn_remote_mismatch: bool = typer.Option(
        False, "--warn-remote-mismatch",
        help="Warn when a reused fork remote points at an unexpected URL.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every git/gh command that is run.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Create a worktree for pull request PR_NUMBER.

    Same-repository PRs are fetched from origin. PRs from a fork are fetched
    from a remote named after the fork owner, which is added if needed and
    removed again if a later step fails.
    """
    if pr_number is None:
        print(ctx.get_help())
        raise typer.Exit()

    # Unknown options are let through so "-5" reaches PR number validation;
    # anything option-like in the directory slot is a typo, not a path.
    if target_dir is not None and target_dir.startswith("-"):
        print(f"Error: no such option: {target_dir}", file=sys.stderr)
        raise SystemExit(1)

    setup_logging(verbose)

    try:
        info = create_worktree(
            pr_number,
            target_dir,
            warn_remote_mismatch=warn_remote_mismatch,
            progress=_progress,
        )
    except PRWorktreeError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    if json_output:
        print(json.dumps(info.to_dict(), indent=2))
    else:
        _print_summary(info)
