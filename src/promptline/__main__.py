from __future__ import annotations
import argparse
import logging
import os
import sys
import time
from . import __version__
from .context import DEFAULT_BUDGET, DEFAULT_TOOL_TIMEOUT
from .errors import ConfigError
from .segments import CLOCK_FORMAT, DEFAULT_LEFT, DEFAULT_RIGHT
from .session import Config, Session, serve
from .shells import INIT_SNIPPETS
from .styles import THEMES, ANSIStyler, BashStyler, ZshStyler
from .toggles import ToggleRegistry, default_config_path, parse_pairs

log = logging.getLogger("promptline")


def namelist(s: str) -> tuple[str, ...]:
    return tuple(n.strip().lower() for n in s.split(",") if n.strip())


def timestamp(s: str) -> float:
    # $EPOCHREALTIME uses the locale's decimal separator
    try:
        return float(s.replace(",", "."))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timestamp: {s!r}") from None


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="promptline",
        description="Segmented bash/zsh prompt with command timing",
    )
    parser.add_argument(
        "--ansi",
        action="store_const",
        dest="stylecls",
        const=ANSIStyler,
        help="Format prompt for direct display",
    )
    parser.add_argument(
        "--bash",
        action="store_const",
        dest="stylecls",
        const=BashStyler,
        help="Format prompt for Bash's PS1 (default)",
    )
    parser.add_argument(
        "--zsh",
        action="store_const",
        dest="stylecls",
        const=ZshStyler,
        help="Format prompt for zsh's PROMPT and RPROMPT",
    )
    parser.add_argument(
        "--both",
        action="store_const",
        dest="output",
        const="both",
        help="Output the left prompt and the right prompt on separate lines",
    )
    parser.add_argument(
        "--right-only",
        action="store_const",
        dest="output",
        const="right",
        help="Only output the right prompt",
    )
    parser.add_argument(
        "--budget",
        type=float,
        metavar="SECONDS",
        default=DEFAULT_BUDGET,
        help=(
            "Total time allowed for external commands per prompt"
            f"  [default: {DEFAULT_BUDGET}]"
        ),
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Read toggles from FILE  [default: ~/.config/promptline/toggles.ini]",
    )
    parser.add_argument(
        "--clock-format",
        metavar="FORMAT",
        default=CLOCK_FORMAT,
        help=(
            "strftime format for the clock segment"
            f"  [default: {CLOCK_FORMAT.replace('%', '%%')}]"
        ),
    )
    parser.add_argument(
        "--dirstack",
        type=int,
        metavar="N",
        help="Number of entries on the directory stack",
    )
    parser.add_argument(
        "--git-timeout",
        type=float,
        metavar="SECONDS",
        default=DEFAULT_TOOL_TIMEOUT,
        help=(
            "Give up on any single external command after SECONDS"
            f"  [default: {DEFAULT_TOOL_TIMEOUT}]"
        ),
    )
    parser.add_argument(
        "--init",
        choices=sorted(INIT_SNIPPETS),
        help="Print the hook code to add to the given shell's rc file",
    )
    parser.add_argument(
        "--left",
        type=namelist,
        metavar="NAMES",
        default=tuple(DEFAULT_LEFT),
        help=f"Comma-separated left segments  [default: {','.join(DEFAULT_LEFT)}]",
    )
    parser.add_argument(
        "-l",
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.environ.get("PROMPTLINE_LOG_LEVEL", "WARNING").upper(),
        help="Set logging level  [default: WARNING]",
    )
    parser.add_argument(
        "--no-hostname",
        action="store_true",
        help="Do not show the user and local hostname",
    )
    parser.add_argument(
        "--right",
        type=namelist,
        metavar="NAMES",
        default=tuple(DEFAULT_RIGHT),
        help=f"Comma-separated right segments  [default: {','.join(DEFAULT_RIGHT)}]",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Answer start/complete/render requests on stdin until EOF",
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="NAME=BOOL",
        dest="overrides",
        help="Switch a segment on or off, overriding the config file",
    )
    parser.add_argument(
        "--since",
        type=timestamp,
        metavar="EPOCH",
        help="Time at which the previous command started",
    )
    parser.add_argument(
        "--status",
        type=int,
        metavar="N",
        help="Exit status of the previous command (used together with --since)",
    )
    parser.add_argument(
        "-T",
        "--theme",
        choices=list(THEMES.keys()),
        default="dark",
        help="Select the color theme to use  [default: dark]",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(
        format="promptline: %(levelname)s: %(message)s",
        level=getattr(logging, args.log_level, logging.WARNING),
        stream=sys.stderr,
    )

    if args.init is not None:
        print(INIT_SNIPPETS[args.init].strip())
        return 0

    try:
        toggles = ToggleRegistry.load(
            args.config if args.config is not None else default_config_path()
        ).with_overrides(parse_pairs(args.overrides))
        config = Config(
            toggles=toggles,
            left=args.left,
            right=args.right,
            styler=(args.stylecls or BashStyler)(),
            theme=THEMES[args.theme],
            budget=args.budget,
            tool_timeout=args.git_timeout,
            clock_format=args.clock_format,
            hostname=not args.no_hostname,
        )
        # Timestamps from the shell are wall-clock epoch seconds
        session = Session(config, clock=time.time)
    except ConfigError as e:
        log.error("%s", e)
        return 1

    if args.serve:
        serve(session, sys.stdin, sys.stdout)
        return 0

    if args.since is not None:
        session.tracker.begin(args.since)
        session.on_command_complete(args.status if args.status is not None else 0)
    elif args.status is not None:
        # No command started since the last prompt (e.g., an empty line), so
        # the status is left over from an earlier one
        log.debug("Ignoring --status %d without --since", args.status)
    state = session.render_prompt(dirstack=args.dirstack)
    if args.output == "both":
        print(state.left)
        print(state.right)
    elif args.output == "right":
        print(state.right)
    else:
        print(state.left)
    return 0


if __name__ == "__main__":
    sys.exit(main())
