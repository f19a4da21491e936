"""State of one regex tester: pattern, flags and subject, re-evaluated on every change."""

from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional, Tuple

from ..presentation.formatter import RegexFormatter
from ..presentation.palette import DEFAULT_PALETTE, ColorPalette
from ..presentation.renderer import MarkedText, render, render_pattern
from .errors import PatternError
from .pattern_engine import PatternEngine, RegexModuleEngine
from .profile_manager import RegexProfile
from .regex_provider import DEFAULT_FLAGS, MatchRecord, Resolution, resolve


@dataclass(frozen=True)
class Evaluation:
    """Everything derived from one (pattern, flags, subject) triple."""
    pattern: str
    flags: str
    subject: str
    resolution: Resolution
    highlighted_pattern: MarkedText
    highlighted_subject: MarkedText


def evaluate(
    pattern: str,
    flags: str,
    subject: str,
    engine: Optional[PatternEngine] = None,
    palette: ColorPalette = DEFAULT_PALETTE,
    budget: Optional[float] = None,
) -> Evaluation:
    resolution = resolve(pattern, flags, subject, engine, budget)
    return Evaluation(
        pattern=pattern,
        flags=flags,
        subject=subject,
        resolution=resolution,
        highlighted_pattern=render_pattern(pattern),
        highlighted_subject=render(subject, resolution.matches, palette),
    )


class RegexTesterSession:
    """Host-facing API of the tester.

    Setters re-evaluate immediately; getters return the results of the last
    evaluation. A failing pattern only affects the evaluation it was part of.
    """

    def __init__(
        self,
        pattern: str = "",
        flags: str = DEFAULT_FLAGS,
        subject: str = "",
        profile: Optional[RegexProfile] = None,
        palette: Optional[ColorPalette] = None,
    ):
        self.palette = palette or DEFAULT_PALETTE
        self.profile: Optional[RegexProfile] = None
        self.engine: PatternEngine = RegexModuleEngine()
        self._pattern = pattern
        self._flags = flags
        self._subject = subject
        if profile:
            self.use_profile(profile)
        self._evaluation = self._evaluate()

    def prepare(
        self,
        pattern: Optional[str] = None,
        flags: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> Callable[[], Evaluation]:
        """Change inputs without evaluating them.

        Returns a job that evaluates the new inputs. It holds no mutable state of
        the session, so it can run in a worker thread; hand its result to
        :meth:`adopt`. Until then the getters keep returning the previous
        evaluation.
        """
        if pattern is not None:
            self._pattern = pattern
        if flags is not None:
            self._flags = flags
        if subject is not None:
            self._subject = subject
        budget = self.profile.timeout if self.profile else None
        return partial(
            evaluate, self._pattern, self._flags, self._subject, self.engine, self.palette, budget
        )

    def adopt(self, evaluation: Evaluation) -> None:
        self._evaluation = evaluation

    def _evaluate(self) -> Evaluation:
        self._evaluation = self.prepare()()
        return self._evaluation

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def flags(self) -> str:
        return self._flags

    @property
    def subject(self) -> str:
        return self._subject

    @property
    def evaluation(self) -> Evaluation:
        return self._evaluation

    @property
    def error(self) -> Optional[PatternError]:
        return self._evaluation.resolution.error

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error else None

    def set_pattern(self, source: str) -> Evaluation:
        self._pattern = source
        return self._evaluate()

    def set_flags(self, flag_string: str) -> Evaluation:
        self._flags = flag_string
        return self._evaluate()

    def set_subject(self, text: str) -> Evaluation:
        self._subject = text
        return self._evaluate()

    def toggle_flag(self, flag: str) -> Evaluation:
        """Add ``flag`` if absent, otherwise remove every occurrence of it."""
        if flag in self._flags:
            return self.set_flags(self._flags.replace(flag, ""))
        return self.set_flags(self._flags + flag)

    def use_profile(self, profile: RegexProfile) -> None:
        """Switch engines; the next evaluation uses it."""
        self.profile = profile
        self.engine = profile.build_engine()

    def set_profile(self, profile: RegexProfile) -> Evaluation:
        self.use_profile(profile)
        return self._evaluate()

    def get_highlighted_pattern(self) -> MarkedText:
        return self._evaluation.highlighted_pattern

    def get_highlighted_subject(self) -> MarkedText:
        return self._evaluation.highlighted_subject

    def get_match_summary(self) -> Tuple[MatchRecord, ...]:
        return self._evaluation.resolution.matches

    def get_summary_text(self) -> str:
        """Details text: empty without a pattern, otherwise a match listing."""
        if not self._evaluation.pattern or self.error:
            return ""
        return RegexFormatter.create_summary_text(self.get_match_summary())
