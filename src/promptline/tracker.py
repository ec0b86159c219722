from __future__ import annotations
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
import logging
import time

log = logging.getLogger(__name__)


class TrackerState(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class CommandRun:
    """Bookkeeping for the one command currently (or most recently) executing"""

    #: `None` if the clock could not be read
    start: float | None
    end: float | None = None
    exit_code: int | None = None


@dataclass(frozen=True)
class CommandOutcome:
    #: Whole seconds the command ran for; never negative
    duration: int

    exit_code: int

    def duration_segment(self) -> str | None:
        return str(self.duration) if self.duration > 0 else None

    def status_segment(self) -> str | None:
        return str(self.exit_code) if self.exit_code != 0 else None


class CommandLifecycleTracker:
    """
    Records when the interactive command starts and finishes.  Only one
    command is tracked at a time: calling `begin()` while a command is
    already running simply restarts the timer.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self.state = TrackerState.IDLE
        self.run: CommandRun | None = None
        self.outcome: CommandOutcome | None = None

    def begin(self, t: float | None = None) -> None:
        if t is None:
            t = self._now()
        if self.state is TrackerState.RUNNING:
            log.debug("Command started while another was running; restarting timer")
        self.run = CommandRun(start=t)
        self.state = TrackerState.RUNNING

    def end(self, exit_code: int, t: float | None = None) -> CommandOutcome:
        if t is None:
            t = self._now()
        duration = 0
        if self.run is not None:
            self.run.end = t
            self.run.exit_code = exit_code
            if t is not None and self.run.start is not None:
                duration = max(0, int(t - self.run.start))
        self.run = None
        self.state = TrackerState.IDLE
        self.outcome = CommandOutcome(duration=duration, exit_code=exit_code)
        return self.outcome

    def take(self) -> CommandOutcome | None:
        """
        Return the outcome of the last finished command and forget it, so that
        it is shown by exactly one prompt
        """
        outcome, self.outcome = self.outcome, None
        return outcome

    def _now(self) -> float | None:
        try:
            return self.clock()
        except (OSError, ValueError) as e:
            log.debug("Could not read clock: %s", e)
            return None
