"""
Segment providers.  Each provider inspects a `Context` and either returns a
short piece of text for the prompt or `None` when it has nothing to say
(not in a repository, no virtualenv, tool missing or too slow, etc.).
Providers never raise for such conditions.
"""

from __future__ import annotations
from ast import literal_eval
from collections.abc import Iterable
import logging
from pathlib import Path
import re
from typing import ClassVar, Protocol
from .context import Context
from .errors import ConfigError
from .git import GitHead, git_head, shorthead
from .runner import cat
from .styles import StyleClass as SC
from .toggles import ToggleRegistry

log = logging.getLogger(__name__)

#: Default `strftime` format for the clock segment
CLOCK_FORMAT = "%H:%M:%S"

CONTAINER_ID_RGX = re.compile(
    r"(?:docker|containerd|libpod|crio)(?:/containers)?[-/:]([0-9a-f]{64})"
)


class SegmentProvider(Protocol):
    name: ClassVar[str]

    def style(self, ctx: Context) -> SC: ...

    def produce(self, ctx: Context) -> str | None: ...


class GitBranch:
    """Shows the checked-out branch, tag, or abbreviated commit in parentheses"""

    name: ClassVar[str] = "git"

    def __init__(self) -> None:
        # The last redraw's context and its HEAD, so that `style()` agrees
        # with `produce()` even if the budget runs out in between
        self._ctx: Context | None = None
        self._head: GitHead | None = None

    def head(self, ctx: Context) -> GitHead | None:
        if self._ctx is not ctx:
            self._ctx = ctx
            self._head = git_head(ctx)
        return self._head

    def style(self, ctx: Context) -> SC:
        gh = self.head(ctx)
        return SC.GIT_DETACHED if gh is not None and gh.detached else SC.GIT

    def produce(self, ctx: Context) -> str | None:
        if (gh := self.head(ctx)) is None:
            return None
        return f"({shorthead(gh.head)})"


class ContainerId:
    """Shows the short ID of the container the shell is running in, if any"""

    name: ClassVar[str] = "docker"

    def style(self, ctx: Context) -> SC:
        return SC.CONTAINER

    def produce(self, ctx: Context) -> str | None:
        if not in_container(ctx):
            return None
        for procfile in ("proc/self/cgroup", "proc/self/mountinfo"):
            if (text := cat(ctx.root / procfile)) is not None:
                if m := CONTAINER_ID_RGX.search(text):
                    return f"[docker:{m[1][:12]}]"
        if ctx.hostname:
            # Docker names the container's host after its short ID by default
            return f"[docker:{ctx.hostname}]"
        return None


def in_container(ctx: Context) -> bool:
    return (
        (ctx.root / ".dockerenv").exists()
        or (ctx.root / "run" / ".containerenv").exists()
        or bool(ctx.env.get("container"))
    )


class VenvName:
    """
    Shows the active Python virtualenv's prompt (or, failing that, the
    basename of its directory).  If no virtualenv is active but a Conda
    environment is, shows the Conda environment's name.
    """

    name: ClassVar[str] = "venv"

    def style(self, ctx: Context) -> SC:
        return SC.VENV

    def produce(self, ctx: Context) -> str | None:
        if venv_str := ctx.env.get("VIRTUAL_ENV"):
            return f"[venv:{venv_prompt(Path(venv_str))}]"
        if conda := ctx.env.get("CONDA_DEFAULT_ENV"):
            return f"[conda:{conda}]"
        return None


def venv_prompt(venv: Path) -> str:
    prompt = venv.name
    try:
        with (venv / "pyvenv.cfg").open(encoding="utf-8") as fp:
            for line in fp:
                line = line.strip()
                if m := re.match(r"^prompt\s*=\s*", line):
                    prompt = line[m.end() :]
                    if re.fullmatch(r'([\x27"]).*\1', prompt):
                        # repr-ized prompt produced by venv
                        try:
                            prompt = literal_eval(prompt)
                        except (SyntaxError, ValueError):
                            pass
                    break
    except OSError:
        pass
    return prompt


class LoadAverage:
    name: ClassVar[str] = "load"

    def style(self, ctx: Context) -> SC:
        return SC.LOAD

    def produce(self, ctx: Context) -> str | None:
        if ctx.loadavg is None:
            return None
        return f"load:{ctx.loadavg[0]:.2f}"


class DirStackDepth:
    name: ClassVar[str] = "dirstack"

    def style(self, ctx: Context) -> SC:
        return SC.DIRSTACK

    def produce(self, ctx: Context) -> str | None:
        return f"+{ctx.dirstack}" if ctx.dirstack > 0 else None


class Clock:
    name: ClassVar[str] = "clock"

    def __init__(self, fmt: str = CLOCK_FORMAT) -> None:
        self.fmt = fmt

    def style(self, ctx: Context) -> SC:
        return SC.CLOCK

    def produce(self, ctx: Context) -> str | None:
        return ctx.now.strftime(self.fmt) or None


class Duration:
    """Number of seconds the previous command ran, if it took at least one"""

    name: ClassVar[str] = "duration"

    def style(self, ctx: Context) -> SC:
        return SC.DURATION

    def produce(self, ctx: Context) -> str | None:
        if ctx.last_run is None:
            return None
        return ctx.last_run.duration_segment()


class ExitStatus:
    """Exit status of the previous command, if it failed"""

    name: ClassVar[str] = "status"

    def style(self, ctx: Context) -> SC:
        return SC.STATUS

    def produce(self, ctx: Context) -> str | None:
        if ctx.last_run is None:
            return None
        return ctx.last_run.status_segment()


PROVIDERS: dict[str, type[SegmentProvider]] = {
    cls.name: cls
    for cls in [
        GitBranch,
        ContainerId,
        VenvName,
        LoadAverage,
        DirStackDepth,
        Clock,
        Duration,
        ExitStatus,
    ]
}

DEFAULT_LEFT = ["git", "docker", "venv", "load", "dirstack"]
DEFAULT_RIGHT = ["duration", "status", "clock"]


def build_providers(
    names: Iterable[str], toggles: ToggleRegistry, clock_format: str = CLOCK_FORMAT
) -> list[SegmentProvider]:
    """
    Instantiate, in the given order, the providers for those ``names`` whose
    toggle is on
    """
    names = list(names)
    if unknown := [n for n in names if n not in PROVIDERS]:
        raise ConfigError(
            f"Unknown segment(s): {', '.join(unknown)}"
            f"  (choose from: {', '.join(PROVIDERS)})"
        )
    providers: list[SegmentProvider] = []
    for n in toggles.enabled(names):
        if n == Clock.name:
            providers.append(Clock(clock_format))
        else:
            providers.append(PROVIDERS[n]())
    log.debug("Enabled segments: %s", [p.name for p in providers])
    return providers
