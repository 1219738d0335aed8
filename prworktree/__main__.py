from prworktree.cli import app

app(prog_name="pr-worktree")
