"""Source-control collaborator (git CLI over asyncio subprocesses)."""

from daily_commit.scm.git import GitWorkspace, classify_git_failure

__all__ = ["GitWorkspace", "classify_git_failure"]
