from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Protocol


class Color(Enum):
    """
    An enumeration of the supported foreground colors.  Each color's value
    equals its xterm number.
    """

    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    LIGHT_RED = 9
    LIGHT_GREEN = 10
    LIGHT_YELLOW = 11
    LIGHT_BLUE = 12
    LIGHT_MAGENTA = 13
    LIGHT_CYAN = 14

    def asfg(self) -> int:
        """
        Return the ANSI SGR parameter for setting the color as the foreground
        color
        """
        c = self.value
        return c + 30 if c < 8 else c + 82


@dataclass(frozen=True)
class Style:
    color: Color | None = None
    bold: bool = False

    def as_params(self) -> list[str]:
        params = []
        if self.color is not None:
            params.append(str(self.color.asfg()))
        if self.bold:
            params.append("1")
        return params


class Styler(Protocol):
    prompt_suffix: ClassVar[str]

    def __call__(self, s: str, style: Style) -> str: ...


class BashStyler:
    """Class for escaping & styling strings for use in Bash's PS1 variable"""

    #: The prompt glyph placed at the end of the left prompt, just before a
    #: final space character
    prompt_suffix: ClassVar[str] = r"\$"

    def __call__(self, s: str, style: Style) -> str:
        r"""
        Return the string ``s`` escaped for use in a PS1 variable and wrapped
        in the SGR sequences for ``style``.  All escape sequences are wrapped
        in ``\[ ... \]`` so that Bash does not count them toward the prompt's
        width.

        :param str s: the string to stylize
        :param Style style: the color & weight to stylize the string with
        """
        s = self.escape(s)
        if params := style.as_params():
            s = rf"\[\e[{';'.join(params)}m\]{s}\[\e[m\]"
        return s

    def escape(self, s: str) -> str:
        r"""
        Escape characters in the string ``s`` that have special meaning in a
        PS1 variable.  Bash first decodes the prompt's backslash escapes and
        then (with ``promptvars`` on) expands the result like a double-quoted
        string.  ``$`` is therefore written as ``\\$``, which the first pass
        turns into ``\$`` and the second into a literal ``$``; likewise for
        backticks and backslashes.
        """
        return s.replace("\\", r"\\\\").replace("$", r"\\$").replace("`", r"\\`")


class ANSIStyler:
    """Class for styling strings for display immediately in the terminal"""

    prompt_suffix: ClassVar[str] = "$"

    def __call__(self, s: str, style: Style) -> str:
        if params := style.as_params():
            s = f"\x1B[{';'.join(params)}m{s}\x1B[m"
        return s


class ZshStyler:
    """Class for escaping & styling strings for use in zsh's PROMPT/RPROMPT"""

    prompt_suffix: ClassVar[str] = "%#"

    def __call__(self, s: str, style: Style) -> str:
        """
        Return the string ``s`` escaped for use in a zsh prompt variable.  Bold
        is applied with ``%B``/``%b`` and color with ``%F{n}``/``%f``.

        :param str s: the string to stylize
        :param Style style: the color & weight to stylize the string with
        """
        s = self.escape(s)
        if style.bold:
            s = f"%B{s}%b"
        if style.color is not None:
            s = f"%F{{{style.color.value}}}{s}%f"
        return s

    def escape(self, s: str) -> str:
        return s.replace("%", "%%")


StyleClass = Enum(
    "StyleClass",
    [
        "USER",
        "HOST",
        "CWD",
        "GIT",
        "GIT_DETACHED",
        "CONTAINER",
        "VENV",
        "LOAD",
        "DIRSTACK",
        "CLOCK",
        "DURATION",
        "STATUS",
    ],
)

Theme = dict[StyleClass, Style]

DARK_THEME = {
    StyleClass.USER: Style(Color.LIGHT_GREEN),
    StyleClass.HOST: Style(Color.LIGHT_RED),
    StyleClass.CWD: Style(Color.LIGHT_CYAN),
    StyleClass.GIT: Style(Color.LIGHT_GREEN),
    StyleClass.GIT_DETACHED: Style(Color.LIGHT_BLUE),
    StyleClass.CONTAINER: Style(Color.BLUE, bold=True),
    StyleClass.VENV: Style(),
    StyleClass.LOAD: Style(Color.YELLOW),
    StyleClass.DIRSTACK: Style(Color.MAGENTA),
    StyleClass.CLOCK: Style(Color.CYAN),
    StyleClass.DURATION: Style(Color.LIGHT_YELLOW),
    StyleClass.STATUS: Style(Color.RED, bold=True),
}

LIGHT_THEME = DARK_THEME | {
    StyleClass.USER: Style(Color.GREEN),
    StyleClass.CWD: Style(Color.BLUE),
    StyleClass.GIT: Style(Color.GREEN),
    StyleClass.GIT_DETACHED: Style(Color.BLUE),
    StyleClass.DURATION: Style(Color.YELLOW),
}

#: No colors at all; useful for dumb terminals and for comparing output
PLAIN_THEME = {klass: Style() for klass in StyleClass}

THEMES = {
    "dark": DARK_THEME,
    "light": LIGHT_THEME,
    "plain": PLAIN_THEME,
}


@dataclass
class Painter:
    styler: Styler
    theme: Theme

    def __call__(self, s: str, klass: StyleClass) -> str:
        return self.styler(s, self.theme.get(klass, Style()))
