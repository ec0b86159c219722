from __future__ import annotations
import logging
from pathlib import Path
import subprocess
from typing import Protocol

log = logging.getLogger(__name__)


class CommandRunner(Protocol):
    def __call__(self, *argv: str, timeout: float) -> str | None: ...


class SubprocessRunner:
    """
    Run an external program (suppressing stderr) and return its stdout with
    leading & trailing whitespace stripped.  If the program is not installed,
    exits nonzero, or runs longer than ``timeout`` seconds, return `None`.
    """

    def __call__(self, *argv: str, timeout: float) -> str | None:
        try:
            r = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
                check=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            log.debug("%s: not installed", argv[0])
            return None
        except subprocess.TimeoutExpired:
            log.debug("%s: timed out after %.3fs", " ".join(argv), timeout)
            return None
        except subprocess.CalledProcessError as e:
            log.debug("%s: exited %d", " ".join(argv), e.returncode)
            return None
        except OSError as e:
            log.debug("%s: %s", argv[0], e)
            return None
        return r.stdout.strip()


class MemoRunner:
    """
    Wrap a runner so that repeated invocations of the same command within one
    redraw only run once
    """

    def __init__(self, inner: CommandRunner) -> None:
        self.inner = inner
        self.cache: dict[tuple[str, ...], str | None] = {}

    def __call__(self, *argv: str, timeout: float) -> str | None:
        if argv not in self.cache:
            self.cache[argv] = self.inner(*argv, timeout=timeout)
        return self.cache[argv]


def cat(path: Path) -> str | None:
    """
    Return the contents of the given file with leading & trailing whitespace
    stripped.  If the file does not exist or cannot be read, return `None`.
    """
    try:
        return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None
