"""Lexical scanner used to syntax-color a regex pattern.

The tokenizer only classifies characters for display. It never validates the
pattern: anything it cannot classify ends up in a literal run, so it accepts
every string, including half-typed ones.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Tuple


class TokenKind(Enum):
    """Classification of a pattern token."""
    ESCAPE = "escape"
    CHAR_CLASS = "char_class"
    GROUP = "group"
    QUANTIFIER = "quantifier"
    OPERATOR = "operator"
    LITERAL = "literal"


@dataclass(frozen=True)
class Token:
    """A slice of the pattern source. ``end`` is exclusive."""
    kind: TokenKind
    text: str
    start: int
    end: int


_COUNTED_QUANTIFIER = re.compile(r"\{\d+(?:,\d*)?\}")


def _scan_escape(pattern: str, pos: int) -> Optional[int]:
    if pattern[pos] == "\\" and pos + 1 < len(pattern):
        return pos + 2
    return None


def _scan_char_class(pattern: str, pos: int) -> Optional[int]:
    if pattern[pos] != "[":
        return None
    i = pos + 1
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == "]":
            return i + 1
        i += 1
    return None


def _scan_group(pattern: str, pos: int) -> Optional[int]:
    if pattern[pos] != "(":
        return None
    depth = 0
    i = pos
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == "[":
            # A bracket inside a class does not count towards nesting
            class_end = _scan_char_class(pattern, i)
            i = class_end if class_end is not None else i + 1
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return None


def _scan_quantifier(pattern: str, pos: int) -> Optional[int]:
    char = pattern[pos]
    if char in "*+?":
        end = pos + 1
    elif char == "{":
        counted = _COUNTED_QUANTIFIER.match(pattern, pos)
        if not counted:
            return None
        end = counted.end()
    else:
        return None

    # Lazy modifier
    if end < len(pattern) and pattern[end] == "?":
        end += 1
    return end


def _scan_operator(pattern: str, pos: int) -> Optional[int]:
    if pattern[pos] in "^$|":
        return pos + 1
    return None


# Priority order: the first scanner that recognises a token wins.
_SCANNERS: Tuple[Tuple[TokenKind, Callable[[str, int], Optional[int]]], ...] = (
    (TokenKind.ESCAPE, _scan_escape),
    (TokenKind.CHAR_CLASS, _scan_char_class),
    (TokenKind.GROUP, _scan_group),
    (TokenKind.QUANTIFIER, _scan_quantifier),
    (TokenKind.OPERATOR, _scan_operator),
)


def tokenize(pattern: str) -> Iterator[Token]:
    """Lazily split ``pattern`` into classified tokens.

    The tokens cover the pattern without gaps or overlaps, so joining their
    ``text`` fields gives back the input.
    """
    literal_start: Optional[int] = None
    pos = 0
    while pos < len(pattern):
        for kind, scanner in _SCANNERS:
            end = scanner(pattern, pos)
            if end is not None:
                break
        else:
            if literal_start is None:
                literal_start = pos
            pos += 1
            continue

        if literal_start is not None:
            yield Token(TokenKind.LITERAL, pattern[literal_start:pos], literal_start, pos)
            literal_start = None
        yield Token(kind, pattern[pos:end], pos, end)
        pos = end

    if literal_start is not None:
        yield Token(TokenKind.LITERAL, pattern[literal_start:], literal_start, len(pattern))


def tokenize_list(pattern: str) -> Tuple[Token, ...]:
    """Eager variant of :func:`tokenize`."""
    return tuple(tokenize(pattern))
