from __future__ import annotations
from collections.abc import Iterable, Mapping
import configparser
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from types import MappingProxyType
from .errors import ConfigError

log = logging.getLogger(__name__)

#: Name of the toggle file section holding the feature flags
SECTION = "toggles"


@dataclass(frozen=True)
class ToggleRegistry:
    """
    A read-only map from feature name to on/off.  Names that were never set
    resolve to ``default``.
    """

    toggles: Mapping[str, bool] = field(default_factory=dict)
    default: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "toggles", MappingProxyType(dict(self.toggles)))

    def get(self, name: str) -> bool:
        return self.toggles.get(name, self.default)

    def enabled(self, names: Iterable[str]) -> list[str]:
        """Return the members of ``names`` that are switched on, in order"""
        return [n for n in names if self.get(n)]

    def with_overrides(self, overrides: Mapping[str, bool]) -> ToggleRegistry:
        return ToggleRegistry({**self.toggles, **overrides}, default=self.default)

    @classmethod
    def load(cls, path: str | os.PathLike[str], default: bool = True) -> ToggleRegistry:
        """
        Read the ``[toggles]`` section of the INI file at ``path``.  A missing
        file produces an empty registry; a malformed one raises `ConfigError`.
        """
        parser = configparser.ConfigParser()
        try:
            with open(path, encoding="utf-8") as fp:
                parser.read_file(fp)
        except FileNotFoundError:
            log.debug("No toggle file at %s; using defaults", path)
            return cls(default=default)
        except (OSError, configparser.Error) as e:
            raise ConfigError(f"{path}: cannot read toggle file: {e}") from e
        toggles: dict[str, bool] = {}
        if parser.has_section(SECTION):
            for name in parser.options(SECTION):
                try:
                    toggles[name] = parser.getboolean(SECTION, name)
                except ValueError as e:
                    raise ConfigError(
                        f"{path}: toggle {name!r} is not a boolean:"
                        f" {parser.get(SECTION, name)!r}"
                    ) from e
        else:
            log.warning("%s has no [%s] section", path, SECTION)
        log.debug("Loaded toggles from %s: %r", path, toggles)
        return cls(toggles, default=default)

    @classmethod
    def from_pairs(cls, pairs: Iterable[str], default: bool = True) -> ToggleRegistry:
        return cls(parse_pairs(pairs), default=default)


def parse_bool(value: str) -> bool:
    try:
        return configparser.ConfigParser.BOOLEAN_STATES[value.strip().lower()]
    except KeyError:
        raise ConfigError(f"Not a boolean: {value!r}") from None


def parse_pairs(pairs: Iterable[str]) -> dict[str, bool]:
    """Parse ``NAME=BOOL`` strings as given to ``--set``"""
    toggles: dict[str, bool] = {}
    for p in pairs:
        name, sep, value = p.partition("=")
        if not sep or not name.strip():
            raise ConfigError(f"Expected NAME=BOOL, got {p!r}")
        toggles[name.strip().lower()] = parse_bool(value)
    return toggles


def default_config_path() -> Path:
    if p := os.environ.get("PROMPTLINE_CONFIG"):
        return Path(p)
    if xdg := os.environ.get("XDG_CONFIG_HOME"):
        base = Path(xdg)
    else:
        base = Path.home() / ".config"
    return base / "promptline" / "toggles.ini"
