from __future__ import annotations
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
import getpass
import logging
import os
from pathlib import Path, PurePath
import socket
import time
from types import MappingProxyType
from .runner import CommandRunner, MemoRunner, SubprocessRunner
from .tracker import CommandOutcome

log = logging.getLogger(__name__)

#: Default maximum display length of the path to the current working directory
MAX_CWD_LEN = 30

#: Default wall-clock budget, in seconds, for all external calls in one redraw
DEFAULT_BUDGET = 0.15

#: Default timeout for a single external call
DEFAULT_TOOL_TIMEOUT = 0.1


class Deadline:
    def __init__(
        self, budget: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.clock = clock
        self.expires = clock() + budget

    def remaining(self) -> float:
        return max(0.0, self.expires - self.clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0


@dataclass
class Context:
    """A snapshot of everything the segments may look at during one redraw"""

    env: Mapping[str, str]
    cwd: Path
    user: str
    hostname: str

    #: Number of entries on the shell's directory stack besides the current
    #: directory
    dirstack: int

    #: The system load averages over 1, 5, and 15 minutes, if available
    loadavg: tuple[float, float, float] | None

    now: datetime

    #: The outcome of the command that finished just before this redraw
    last_run: CommandOutcome | None = None

    runner: CommandRunner = field(default_factory=SubprocessRunner)
    deadline: Deadline = field(default_factory=lambda: Deadline(DEFAULT_BUDGET))
    tool_timeout: float = DEFAULT_TOOL_TIMEOUT

    #: Filesystem root against which marker files such as ``/.dockerenv`` are
    #: looked up
    root: Path = Path("/")

    @classmethod
    def get(
        cls,
        last_run: CommandOutcome | None = None,
        runner: CommandRunner | None = None,
        budget: float = DEFAULT_BUDGET,
        tool_timeout: float = DEFAULT_TOOL_TIMEOUT,
        dirstack: int | None = None,
    ) -> Context:
        env = MappingProxyType(dict(os.environ))
        # Prefer $PWD to os.getcwd() as the former does not resolve symlinks
        cwd = Path(env.get("PWD") or os.getcwd())
        try:
            user = getpass.getuser()
        except (KeyError, OSError):
            user = env.get("USER", "?")
        try:
            loadavg: tuple[float, float, float] | None = os.getloadavg()
        except (AttributeError, OSError):
            loadavg = None
        if dirstack is None:
            dirstack = parse_depth(env.get("PROMPTLINE_DIRSTACK"))
        return cls(
            env=env,
            cwd=cwd,
            user=user,
            hostname=socket.gethostname().split(".")[0],
            dirstack=dirstack,
            loadavg=loadavg,
            now=datetime.now(),
            last_run=last_run,
            runner=MemoRunner(runner or SubprocessRunner()),
            deadline=Deadline(budget),
            tool_timeout=tool_timeout,
        )

    def run(self, *argv: str) -> str | None:
        """
        Run an external command, capped by both the per-tool timeout and what
        is left of the redraw's budget.  Once the budget is spent, nothing is
        run and `None` is returned.
        """
        remaining = self.deadline.remaining()
        if remaining <= 0:
            log.debug("Redraw budget exhausted; skipping %s", " ".join(argv))
            return None
        return self.runner(*argv, timeout=min(self.tool_timeout, remaining))

    def cwdstr(self) -> str:
        home = self.env.get("HOME")
        return cwdstr(self.cwd, Path(home) if home else None)


def parse_depth(s: str | None) -> int:
    try:
        return max(0, int(s)) if s else 0
    except ValueError:
        log.debug("Ignoring unparseable directory stack depth %r", s)
        return 0


def cwdstr(cwd: PurePath, home: PurePath | None = None) -> str:
    """
    Show the path to the current working directory.  If the directory is at or
    under ``home``, the path will start with ``~/``.  The path will also be
    truncated to be no more than `MAX_CWD_LEN` characters long.
    """
    if home is not None:
        try:
            cwd = "~" / cwd.relative_to(home)
        except ValueError:
            pass
    return shortpath(cwd)


def shortpath(p: PurePath, max_len: int = MAX_CWD_LEN) -> str:
    """
    If the filepath ``p`` is too long (longer than ``max_len``), cut off
    leading components to make it fit; if that's not enough, also truncate the
    final component.  Deleted bits are replaced with ellipses.
    """
    assert len(p.parts) > 0
    if len(str(p)) > max_len:
        p = PurePath("…", *p.parts[1 + (p.parts[0] == "/") :])
        while len(str(p)) > max_len:
            if len(p.parts) > 2:
                p = PurePath("…", *p.parts[2:])
            else:
                p = PurePath("…", p.parts[1][: max_len - 3] + "…")
    return str(p)
