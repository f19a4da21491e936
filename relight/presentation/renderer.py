"""Turns match records into MarkedText: a gap-free partition of a text into spans."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from ..data_providers.pattern_tokenizer import TokenKind, tokenize
from ..data_providers.regex_provider import GroupRecord, MatchRecord
from .palette import DEFAULT_PALETTE, ColorPalette


@dataclass(frozen=True)
class PlainSpan:
    text: str


@dataclass(frozen=True)
class HighlightSpan:
    """Part of a match. ``group_number`` is None outside every group."""
    text: str
    match_index: int
    group_number: Optional[int]
    color_slot: int
    tooltip: str


@dataclass(frozen=True)
class SyntaxSpan:
    """A classified piece of the pattern itself."""
    text: str
    kind: TokenKind


Span = Union[PlainSpan, HighlightSpan, SyntaxSpan]
MarkedText = Tuple[Span, ...]


def build_tooltip(match: MatchRecord) -> str:
    """Summarise a match: ordinal, start offset and every group's value."""
    lines = [f"Match {match.index + 1} @ {match.start}"]
    for group in match.groups:
        if group.name:
            lines.append(f'{group.name} ({group.group_number}): "{group.text}"')
        else:
            lines.append(f'{group.group_number}: "{group.text}"')
    return "\n".join(lines)


def _innermost(groups: Sequence[GroupRecord], start: int, end: int) -> Optional[GroupRecord]:
    covering = [group for group in groups if group.start <= start and group.end >= end]
    if not covering:
        return None
    return min(covering, key=lambda group: (group.end - group.start, -group.group_number))


def _partition_match(
    subject: str,
    match: MatchRecord,
    start: int,
    end: int,
    palette: ColorPalette,
) -> List[HighlightSpan]:
    tooltip = build_tooltip(match)
    groups = [
        group for group in match.groups
        if group.end > group.start and group.start < end and group.end > start
    ]

    bounds = {start, end}
    for group in groups:
        bounds.add(min(max(group.start, start), end))
        bounds.add(min(max(group.end, start), end))
    ordered = sorted(bounds)

    # (start, end, group_number) runs; neighbours with the same owner merge
    runs: List[List] = []
    for segment_start, segment_end in zip(ordered, ordered[1:]):
        owner = _innermost(groups, segment_start, segment_end)
        number = owner.group_number if owner else None
        if runs and runs[-1][2] == number:
            runs[-1][1] = segment_end
        else:
            runs.append([segment_start, segment_end, number])

    return [
        HighlightSpan(
            text=subject[run_start:run_end],
            match_index=match.index,
            group_number=number,
            color_slot=palette.slot_for(number),
            tooltip=tooltip,
        )
        for run_start, run_end, number in runs
    ]


def render(
    subject: str,
    matches: Sequence[MatchRecord],
    palette: ColorPalette = DEFAULT_PALETTE,
) -> MarkedText:
    """Partition ``subject`` into plain spans and per-group highlight spans.

    Zero-width matches produce no span, and overlapping or out-of-range match
    records are clipped rather than rejected, so this never raises.
    """
    if not subject:
        return ()

    spans: List[Span] = []
    cursor = 0
    for match in matches:
        start = max(match.start, cursor)
        end = min(match.end, len(subject))
        if end <= start:
            continue

        if start > cursor:
            spans.append(PlainSpan(subject[cursor:start]))
        spans.extend(_partition_match(subject, match, start, end, palette))
        cursor = end

    if cursor < len(subject):
        spans.append(PlainSpan(subject[cursor:]))
    return tuple(spans)


def render_pattern(pattern: str) -> MarkedText:
    """Syntax-color the pattern source: literal runs stay plain."""
    return tuple(
        PlainSpan(token.text) if token.kind is TokenKind.LITERAL else SyntaxSpan(token.text, token.kind)
        for token in tokenize(pattern)
    )


def marked_text_plain(marked: MarkedText) -> str:
    return "".join(span.text for span in marked)


def span_at(marked: MarkedText, offset: int) -> Optional[Span]:
    """The span covering character ``offset``, or None past the end."""
    position = 0
    for span in marked:
        position += len(span.text)
        if offset < position:
            return span if offset >= 0 else None
    return None
