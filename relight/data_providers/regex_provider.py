import time
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from ..utils.logger import get_logger
from .errors import CatastrophicTimeout, PatternError
from .pattern_engine import CompiledPattern, PatternEngine, RawMatch, RegexModuleEngine

logger = get_logger(__name__)

DEFAULT_FLAGS = "gm"


@dataclass(frozen=True)
class GroupRecord:
    """A capturing group resolved to a range of the subject text."""
    group_number: int
    name: Optional[str]
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class MatchRecord:
    """One match of the pattern, in subject coordinates."""
    index: int
    start: int
    end: int
    full_text: str
    groups: Tuple[GroupRecord, ...] = ()

    @property
    def span(self) -> Tuple[int, int]:
        return self.start, self.end

    @property
    def named_groups(self) -> Tuple[GroupRecord, ...]:
        return tuple(group for group in self.groups if group.name)

    @property
    def unnamed_groups(self) -> Tuple[GroupRecord, ...]:
        return tuple(group for group in self.groups if not group.name)


@dataclass(frozen=True)
class Resolution:
    """Outcome of one evaluation: the matches, or the error that prevented them."""
    matches: Tuple[MatchRecord, ...] = ()
    error: Optional[PatternError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def resolve_groups(subject: str, raw: RawMatch) -> Tuple[GroupRecord, ...]:
    """Place each captured value inside the match.

    Each value is looked up left to right starting at the end of the previous
    group, so repeated text is assigned in order instead of all landing on its
    first occurrence. A group nested in the previous one is looked up from the
    match start. Groups that cannot be placed inside the match (captures made
    by a lookaround outside of it) are left out.
    """
    records = []
    cursor = raw.start
    for number, value in enumerate(raw.captures, start=1):
        if value is None:
            continue

        position = subject.find(value, cursor, raw.end)
        if position != -1:
            cursor = position + len(value)
        else:
            position = subject.find(value, raw.start, raw.end)
            if position == -1:
                logger.debug("Group %d (%r) lies outside match %d-%d", number, value, raw.start, raw.end)
                continue

        records.append(GroupRecord(
            group_number=number,
            name=raw.group_names[number - 1] if number <= len(raw.group_names) else None,
            start=position,
            end=position + len(value),
            text=value,
        ))
    return tuple(records)


def _iter_matches(
    engine: PatternEngine,
    compiled: CompiledPattern,
    subject: str,
    budget: Optional[float],
) -> Iterator[MatchRecord]:
    deadline = time.monotonic() + budget if budget else None
    cursor = 0
    ordinal = 0
    while cursor <= len(subject):
        raw = engine.execute(compiled, subject, cursor)
        if raw is None:
            return

        yield MatchRecord(
            index=ordinal,
            start=raw.start,
            end=raw.end,
            full_text=raw.text,
            groups=resolve_groups(subject, raw),
        )
        ordinal += 1

        if not compiled.find_all:
            return

        # Always move forward, even after an empty match
        cursor = max(raw.end, raw.start + 1)

        if deadline is not None and time.monotonic() > deadline:
            raise CatastrophicTimeout(budget)


def resolve(
    pattern_source: str,
    flags: str,
    subject: str,
    engine: Optional[PatternEngine] = None,
    budget: Optional[float] = None,
) -> Resolution:
    """Run ``pattern_source`` over ``subject``.

    Args:
        pattern_source: The pattern, without delimiters
        flags: Flag characters such as "gi"
        subject: Text to search
        engine: Engine to use; defaults to the ``regex`` module
        budget: Seconds allowed for the whole scan

    Returns:
        A Resolution. Compile errors and timeouts are returned in ``error``
        rather than raised.
    """
    if not pattern_source:
        return Resolution()

    engine = engine or RegexModuleEngine()
    try:
        compiled = engine.compile(pattern_source, flags)
        matches = tuple(_iter_matches(engine, compiled, subject, budget))
    except PatternError as e:
        return Resolution(error=e)

    logger.debug("%r /%s: %d match(es)", pattern_source, flags, len(matches))
    return Resolution(matches=matches)

