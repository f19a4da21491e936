"""Pluggable regular expression engines.

An engine turns a pattern source plus a flag string into a compiled pattern
and finds the next match starting from a given index. The resolver only talks
to this interface, so ``re`` and the third-party ``regex`` module are
interchangeable.
"""

import re
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Tuple

import regex

from ..utils.logger import get_logger
from .errors import CatastrophicTimeout, InvalidSyntax

logger = get_logger(__name__)


class FlagOption(NamedTuple):
    flag: str
    label: str
    description: str


FLAG_OPTIONS = (
    FlagOption("g", "Global", "Find all matches"),
    FlagOption("i", "Ignore Case", "Case-insensitive"),
    FlagOption("m", "Multiline", "^ and $ match start/end of line"),
    FlagOption("s", "Dot All", ". matches newlines"),
    FlagOption("u", "Unicode", "Unicode support"),
    FlagOption("y", "Sticky", "Match from lastIndex"),
)

FIND_ALL_FLAG = "g"
STICKY_FLAG = "y"

# Accepted for compatibility with browser regex flag strings; no engine counterpart.
IGNORED_FLAGS = frozenset("dv")

NATIVE_SYNTAX = "native"
ECMASCRIPT_SYNTAX = "ecmascript"

# \k<name> backreference; a doubled backslash is consumed first so \\k<x> stays literal
_NAMED_BACKREFERENCE = re.compile(r"\\(?:k(<\w+>)|.)", re.DOTALL)


def rewrite_named_backreferences(source: str) -> str:
    """Rewrite browser-style ``\\k<name>`` into the ``regex`` module's ``\\g<name>``.

    Both spellings have the same length, so error positions are unaffected.
    """
    return _NAMED_BACKREFERENCE.sub(
        lambda m: "\\g" + m.group(1) if m.group(1) else m.group(0), source
    )


@dataclass(frozen=True)
class CompiledPattern:
    """A pattern compiled by a :class:`PatternEngine`."""
    source: str
    flags: str
    native: Any
    find_all: bool
    sticky: bool
    group_names: Tuple[Optional[str], ...]


@dataclass(frozen=True)
class RawMatch:
    """Engine-neutral view of one match.

    ``captures[i]`` is the text of group ``i + 1`` or None when the group did
    not take part in the match.
    """
    start: int
    end: int
    text: str
    captures: Tuple[Optional[str], ...]
    group_names: Tuple[Optional[str], ...]


class PatternEngine:
    """Base engine backed by a module exposing the ``re`` API."""

    name = "base"
    module: Any = re

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds allowed per search call, when the engine supports it
        """
        self.timeout = timeout

    def _flag_table(self) -> dict:
        return {
            "i": self.module.IGNORECASE,
            "m": self.module.MULTILINE,
            "s": self.module.DOTALL,
            "u": self.module.UNICODE,
        }

    def translate_flags(self, flags: str) -> Tuple[int, str]:
        """Split a flag string into native flag bits and leftover inline flags.

        Letters this engine has no constant for are not rejected here: they are
        returned so that :meth:`compile` can hand them to the engine as an
        inline ``(?...)`` group and let it decide.

        Raises:
            InvalidSyntax: ``flags`` holds something other than letters
        """
        table = self._flag_table()
        native = 0
        inline = ""
        for char in flags:
            if not char.isascii() or not char.isalpha():
                raise InvalidSyntax(f"Invalid flag '{char}'")
            if char in (FIND_ALL_FLAG, STICKY_FLAG) or char in IGNORED_FLAGS:
                continue
            if char in table:
                native |= table[char]
            elif char not in inline:
                inline += char
        return native, inline

    def prepare_source(self, source: str) -> str:
        return source

    def _compile_native(self, source: str, native_flags: int):
        return self.module.compile(source, native_flags)

    @staticmethod
    def _describe(error: Exception, prefix_length: int) -> str:
        """The engine's message, with positions counted from the user's pattern."""
        position = getattr(error, "pos", None)
        if not prefix_length or position is None:
            return str(error)
        message = getattr(error, "msg", str(error))
        if position < prefix_length:
            return f"Unsupported flag: {message}"
        return f"{message} at position {position - prefix_length}"

    def compile(self, source: str, flags: str = "") -> CompiledPattern:
        """Compile ``source``.

        Raises:
            InvalidSyntax: The engine rejected the pattern or a flag
        """
        native_flags, inline = self.translate_flags(flags)
        prefix = f"(?{inline})" if inline else ""

        try:
            native = self._compile_native(prefix + self.prepare_source(source), native_flags)
        except self.module.error as e:
            logger.debug("%s engine rejected %r: %s", self.name, source, e)
            raise InvalidSyntax(self._describe(e, len(prefix))) from e
        except (OverflowError, ValueError, RecursionError) as e:
            raise InvalidSyntax(str(e)) from e

        names: list = [None] * native.groups
        for group_name, group_index in native.groupindex.items():
            names[group_index - 1] = group_name

        return CompiledPattern(
            source=source,
            flags=flags,
            native=native,
            find_all=FIND_ALL_FLAG in flags,
            sticky=STICKY_FLAG in flags,
            group_names=tuple(names),
        )

    def _search(self, compiled: CompiledPattern, subject: str, from_index: int):
        if compiled.sticky:
            return compiled.native.match(subject, from_index)
        return compiled.native.search(subject, from_index)

    def execute(self, compiled: CompiledPattern, subject: str, from_index: int = 0) -> Optional[RawMatch]:
        """Find the next match at or after ``from_index``.

        With the sticky flag the match has to start exactly at ``from_index``.

        Returns:
            The match, or None when there is no further match.
        """
        if from_index > len(subject):
            return None

        match = self._search(compiled, subject, from_index)
        if match is None:
            return None

        start, end = match.span()
        return RawMatch(
            start=start,
            end=end,
            text=match.group(0),
            captures=tuple(match.groups()),
            group_names=compiled.group_names,
        )


class StdlibEngine(PatternEngine):
    """Python's built-in ``re`` engine.

    A single search cannot be interrupted and holds the GIL while it runs, so
    ``timeout`` is only enforced by the resolver between matches.
    """

    name = "re"
    module = re


class RegexModuleEngine(PatternEngine):
    """The ``regex`` module.

    Accepts ``(?<name>...)`` groups and interrupts runaway searches after
    ``timeout`` seconds. Searches release the GIL, so a slow search in a
    worker thread does not stall the caller's event loop.
    """

    name = "regex"
    module = regex

    def __init__(self, timeout: Optional[float] = None, version: int = 0, syntax: str = NATIVE_SYNTAX):
        super().__init__(timeout)
        self.version = version
        self.syntax = syntax

    def prepare_source(self, source: str) -> str:
        if self.syntax == ECMASCRIPT_SYNTAX:
            return rewrite_named_backreferences(source)
        return source

    def _compile_native(self, source: str, native_flags: int):
        version_flag = regex.VERSION1 if self.version == 1 else regex.VERSION0
        return regex.compile(source, native_flags | version_flag)

    def _search(self, compiled: CompiledPattern, subject: str, from_index: int):
        method = compiled.native.match if compiled.sticky else compiled.native.search
        try:
            return method(subject, from_index, concurrent=True, timeout=self.timeout)
        except TimeoutError as e:
            logger.debug("Search for %r timed out after %ss", compiled.source, self.timeout)
            raise CatastrophicTimeout(self.timeout or 0) from e


def create_engine(
    name: str = "regex",
    timeout: Optional[float] = None,
    version: int = 0,
    syntax: str = NATIVE_SYNTAX,
) -> PatternEngine:
    """Build an engine by name ("regex" or "re")."""
    if name == RegexModuleEngine.name:
        return RegexModuleEngine(timeout=timeout, version=version, syntax=syntax)
    if name == StdlibEngine.name:
        return StdlibEngine(timeout=timeout)
    raise ValueError(f"Unknown regex engine: {name}")
