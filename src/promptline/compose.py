from __future__ import annotations
from collections.abc import Sequence
from dataclasses import dataclass
import logging
from .context import Context
from .segments import SegmentProvider
from .styles import Painter
from .styles import StyleClass as SC

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptState:
    left: str
    right: str


@dataclass
class PromptComposer:
    """
    Builds the left and right prompts from ordered lists of segment providers.
    The left prompt always starts with ``user@host:cwd`` and ends with the
    styler's prompt glyph followed by a space, no matter which segments
    produce output.
    """

    left: Sequence[SegmentProvider]
    right: Sequence[SegmentProvider]
    paint: Painter
    hostname: bool = True

    def compose(self, ctx: Context) -> PromptState:
        left = self.base(ctx)
        for seg in self.segments(self.left, ctx):
            left += " " + seg
        left += " " + self.paint.styler.prompt_suffix + " "
        return PromptState(left=left, right=" ".join(self.segments(self.right, ctx)))

    def base(self, ctx: Context) -> str:
        s = ""
        if self.hostname:
            s += self.paint(ctx.user, SC.USER)
            s += "@"
            s += self.paint(ctx.hostname, SC.HOST)
            s += ":"
        s += self.paint(ctx.cwdstr(), SC.CWD)
        return s

    def segments(self, providers: Sequence[SegmentProvider], ctx: Context) -> list[str]:
        """
        Return the painted output of each provider that has something to show,
        in the providers' order
        """
        out = []
        for p in providers:
            try:
                text = p.produce(ctx)
                if not text or not text.strip():
                    continue
                out.append(self.paint(text.strip(), p.style(ctx)))
            except Exception as e:
                log.warning(
                    "Segment %r failed; omitting it: %s",
                    p.name,
                    e,
                    exc_info=log.isEnabledFor(logging.DEBUG),
                )
        return out
