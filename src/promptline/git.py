from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import re
from .context import Context
from .runner import cat

#: Default maximum display length of the repository HEAD
MAX_HEAD_LEN = 15


@dataclass
class GitHead:
    #: A description of the repository's ``HEAD``: either the name of the
    #: current branch (if any), or the name of the currently checked-out tag
    #: (if any), or the short form of the current commit hash
    head: str

    #: `True` iff the repository is in a detached ``HEAD`` state
    detached: bool


def git_head(ctx: Context) -> GitHead | None:
    """
    If the context's directory is in a Git repository, return a `GitHead`
    describing what is checked out.  If it is not in a repository, if Git is
    not installed, or if Git does not answer within the redraw's budget,
    return `None`.
    """
    git_dir_str = git(ctx, "rev-parse", "--git-dir")
    if not git_dir_str:
        return None
    git_dir = Path(git_dir_str)
    if not git_dir.is_absolute():
        git_dir = ctx.cwd / git_dir
    head = cat(git_dir / "HEAD")
    if head is None:
        return None
    if head.startswith("ref: "):
        return GitHead(head=re.sub(r"^(ref: )?(refs/heads/)?", "", head), detached=False)
    head2 = git(ctx, "describe", "--tags", "--exact-match", "HEAD") or git(
        ctx, "rev-parse", "--short", "HEAD"
    )
    if not head2:
        return None
    return GitHead(head=head2, detached=True)


def git(ctx: Context, *args: str) -> str | None:
    return ctx.run("git", "-C", str(ctx.cwd), *args)


def shorthead(head: str, max_len: int = MAX_HEAD_LEN) -> str:
    if len(head) > max_len:
        return head[: max_len - 1] + "…"
    else:
        return head
