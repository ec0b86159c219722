from __future__ import annotations
from collections.abc import Callable
from dataclasses import dataclass, field
import logging
import time
from typing import IO
from .compose import PromptComposer, PromptState
from .context import DEFAULT_BUDGET, DEFAULT_TOOL_TIMEOUT, Context
from .runner import CommandRunner
from .segments import CLOCK_FORMAT, DEFAULT_LEFT, DEFAULT_RIGHT, build_providers
from .styles import DARK_THEME, Painter, Styler, Theme, ZshStyler
from .toggles import ToggleRegistry
from .tracker import CommandLifecycleTracker

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    toggles: ToggleRegistry = field(default_factory=ToggleRegistry)
    left: tuple[str, ...] = tuple(DEFAULT_LEFT)
    right: tuple[str, ...] = tuple(DEFAULT_RIGHT)
    styler: Styler = field(default_factory=ZshStyler)
    theme: Theme = field(default_factory=lambda: DARK_THEME)
    budget: float = DEFAULT_BUDGET
    tool_timeout: float = DEFAULT_TOOL_TIMEOUT
    clock_format: str = CLOCK_FORMAT
    hostname: bool = True

    def composer(self) -> PromptComposer:
        return PromptComposer(
            left=build_providers(self.left, self.toggles, self.clock_format),
            right=build_providers(self.right, self.toggles, self.clock_format),
            paint=Painter(styler=self.styler, theme=self.theme),
            hostname=self.hostname,
        )


class Session:
    """
    A long-lived prompt renderer: the host shell reports when each command
    starts and finishes, and asks for a fresh prompt before every redraw
    """

    def __init__(
        self,
        config: Config,
        runner: CommandRunner | None = None,
        clock: Callable[[], float] = time.monotonic,
        context_factory: Callable[..., Context] = Context.get,
    ) -> None:
        self.config = config
        self.runner = runner
        self.composer = config.composer()
        self.tracker = CommandLifecycleTracker(clock=clock)
        self.context_factory = context_factory

    def render_prompt(self, dirstack: int | None = None) -> PromptState:
        ctx = self.context_factory(
            last_run=self.tracker.take(),
            runner=self.runner,
            budget=self.config.budget,
            tool_timeout=self.config.tool_timeout,
            dirstack=dirstack,
        )
        return self.composer.compose(ctx)

    def on_command_start(self) -> None:
        self.tracker.begin()

    def on_command_complete(self, exit_code: int) -> None:
        outcome = self.tracker.end(exit_code)
        log.debug("Command finished: %r", outcome)


def serve(session: Session, stdin: IO[str], stdout: IO[str]) -> None:
    """
    Answer requests from the host shell, one per line:

    ``start``
        a command is about to run

    ``complete N``
        the command finished with exit status ``N``

    ``render [DEPTH]``
        write the left prompt and the right prompt, one per line;
        ``DEPTH`` is the directory stack depth

    ``quit``
        stop serving

    Requests that cannot be understood are logged and ignored.
    """
    for line in stdin:
        words = line.split()
        if not words:
            continue
        cmd, args = words[0], words[1:]
        if cmd == "start":
            session.on_command_start()
        elif cmd == "complete":
            try:
                session.on_command_complete(int(args[0]))
            except (IndexError, ValueError):
                log.warning("Malformed request: %r", line.rstrip("\n"))
        elif cmd == "render":
            try:
                depth = int(args[0]) if args else None
            except ValueError:
                depth = None
            state = session.render_prompt(dirstack=depth)
            # Newlines would desynchronize the reader
            print(state.left.replace("\n", " "), file=stdout)
            print(state.right.replace("\n", " "), file=stdout)
            stdout.flush()
        elif cmd == "quit":
            break
        else:
            log.warning("Unknown request: %r", cmd)
