"""Data models for git-worktree-keeper."""
