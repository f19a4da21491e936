import itertools
import unittest
from unittest.mock import Mock, patch

import regex

from relight.data_providers.errors import CatastrophicTimeout, InvalidSyntax
from relight.data_providers.pattern_engine import (
    ECMASCRIPT_SYNTAX,
    CompiledPattern,
    RawMatch,
    RegexModuleEngine,
    StdlibEngine,
    create_engine,
    rewrite_named_backreferences,
)
from relight.data_providers.regex_provider import (
    GroupRecord,
    MatchRecord,
    resolve,
)


def spans(resolution):
    return [(match.start, match.end) for match in resolution.matches]


class TestRecords(unittest.TestCase):

    def test_group_record_equals(self):
        test_cases = [
            (GroupRecord(1, None, 0, 2, "ab"), GroupRecord(1, None, 0, 2, "ab"), True),
            (GroupRecord(1, None, 0, 2, "ab"), GroupRecord(2, None, 0, 2, "ab"), False),  # Different numbers
            (GroupRecord(1, None, 0, 2, "ab"), GroupRecord(1, None, 1, 3, "ab"), False),  # Different spans
            (GroupRecord(1, "x", 0, 2, "ab"), GroupRecord(1, None, 0, 2, "ab"), False),  # Different names
            (GroupRecord(1, None, 0, 2, "ab"), object(), False),  # Different object types
        ]

        for group_one, group_two, expected_equals in test_cases:
            with self.subTest(group_one=group_one, group_two=group_two):
                self.assertEqual((group_one == group_two), expected_equals)

    def test_match_record_group_views(self):
        match = MatchRecord(0, 0, 7, "2024-01", (
            GroupRecord(1, "year", 0, 4, "2024"),
            GroupRecord(2, None, 5, 7, "01"),
        ))
        self.assertEqual(match.span, (0, 7))
        self.assertEqual([g.name for g in match.named_groups], ["year"])
        self.assertEqual([g.group_number for g in match.unnamed_groups], [2])


class TestResolver(unittest.TestCase):

    def test_numbered_groups_in_every_match(self):
        resolution = resolve(r"(\d+)-(\d+)", "g", "12-34 56-78")

        self.assertIsNone(resolution.error)
        self.assertEqual(len(resolution.matches), 2)
        first, second = resolution.matches
        self.assertEqual(first.index, 0)
        self.assertEqual(first.full_text, "12-34")
        self.assertEqual(first.groups, (
            GroupRecord(1, None, 0, 2, "12"),
            GroupRecord(2, None, 3, 5, "34"),
        ))
        self.assertEqual(second.index, 1)
        self.assertEqual(second.groups, (
            GroupRecord(1, None, 6, 8, "56"),
            GroupRecord(2, None, 9, 11, "78"),
        ))

    def test_zero_width_matches_advance(self):
        resolution = resolve("a*", "g", "baab")
        self.assertEqual(spans(resolution), [(0, 0), (1, 3), (3, 3), (4, 4)])
        self.assertEqual([m.full_text for m in resolution.matches], ["", "aa", "", ""])

    def test_empty_matching_pattern_terminates(self):
        for subject in ["", "x", "hello", "line\nline"]:
            with self.subTest(subject=subject):
                resolution = resolve("q*", "g", subject)
                self.assertLessEqual(len(resolution.matches), len(subject) + 1)
                self.assertEqual(len(resolution.matches), len(subject) + 1)

    def test_invalid_pattern(self):
        resolution = resolve("a(b", "g", "abc")

        self.assertEqual(resolution.matches, ())
        self.assertIsInstance(resolution.error, InvalidSyntax)
        self.assertFalse(resolution.ok)
        with self.assertRaises(regex.error) as ctx:
            regex.compile("a(b")
        self.assertEqual(resolution.error.message, str(ctx.exception))

    def test_named_groups(self):
        resolution = resolve(r"(?<year>\d{4})-(?<month>\d{2})", "", "2024-01")

        self.assertEqual(len(resolution.matches), 1)
        self.assertEqual(resolution.matches[0].groups, (
            GroupRecord(1, "year", 0, 4, "2024"),
            GroupRecord(2, "month", 5, 7, "01"),
        ))

    def test_without_global_flag_only_first_match(self):
        resolution = resolve(r"\d", "", "1 2 3")
        self.assertEqual(spans(resolution), [(0, 1)])

    def test_empty_pattern_yields_nothing(self):
        resolution = resolve("", "g", "abc")
        self.assertEqual(resolution.matches, ())
        self.assertIsNone(resolution.error)

    def test_matches_do_not_overlap(self):
        cases = [
            ("aa", "g", "aaaaa"),
            (r"\w*", "g", "ab cd  ef"),
            ("(?=a)", "g", "aaa"),
            ("a|ab", "gi", "ABab"),
            ("^", "gm", "a\nb\nc"),
        ]
        for pattern, flags, subject in cases:
            with self.subTest(pattern=pattern):
                matches = resolve(pattern, flags, subject).matches
                for current, following in zip(matches, matches[1:]):
                    self.assertLessEqual(current.end, following.start)
                for match in matches:
                    self.assertLessEqual(match.start, match.end)
                    self.assertLessEqual(match.end, len(subject))

    def test_groups_stay_inside_match(self):
        cases = [
            ("((a)b)", "g", "abab"),
            (r"(\w)(\w)?", "g", "abc"),
            ("a(?=(b))", "g", "ab"),
            ("(a)|(b)", "g", "ab"),
            ("(x*)", "g", "axb"),
        ]
        for pattern, flags, subject in cases:
            with self.subTest(pattern=pattern):
                for match in resolve(pattern, flags, subject).matches:
                    for group in match.groups:
                        self.assertLessEqual(match.start, group.start)
                        self.assertLessEqual(group.end, match.end)

    def test_nested_group_found_from_match_start(self):
        match = resolve("((a)b)", "", "ab").matches[0]
        self.assertEqual(match.groups, (
            GroupRecord(1, None, 0, 2, "ab"),
            GroupRecord(2, None, 0, 1, "a"),
        ))

    def test_repeated_text_assigned_in_order(self):
        match = resolve("(ab)x(ab)", "", "zabxab").matches[0]
        self.assertEqual([(g.start, g.end) for g in match.groups], [(1, 3), (4, 6)])

    def test_lookahead_capture_outside_match_is_left_out(self):
        match = resolve("a(?=(b))", "", "ab").matches[0]
        self.assertEqual(match.groups, ())

    def test_non_participating_group_is_omitted(self):
        match = resolve("(a)?b", "", "b").matches[0]
        self.assertEqual(match.groups, ())

    def test_flags(self):
        self.assertEqual(len(resolve("abc", "gi", "ABC abc").matches), 2)
        self.assertEqual(len(resolve(r"^\w+", "gm", "one\ntwo").matches), 2)
        self.assertEqual(len(resolve(r"^\w+", "g", "one\ntwo").matches), 1)
        self.assertEqual(len(resolve("a.b", "gs", "a\nb").matches), 1)
        self.assertEqual(len(resolve("a.b", "g", "a\nb").matches), 0)
        self.assertEqual(len(resolve("a", "gu", "aa").matches), 2)

    def test_sticky_flag(self):
        self.assertEqual(spans(resolve("a", "gy", "aab")), [(0, 1), (1, 2)])
        self.assertEqual(spans(resolve("a", "gy", "baa")), [])
        self.assertEqual(spans(resolve("a", "y", "ba")), [])

    def test_extra_flags_are_passed_to_engine(self):
        # Verbose mode is not a recognised flag but the engine understands it
        self.assertEqual(len(resolve("a b", "gx", "ab").matches), 1)
        # Index/set flags have no engine counterpart and are ignored
        self.assertEqual(len(resolve("a", "gd", "aa").matches), 2)
        self.assertEqual(len(resolve("a", "ggm", "aa").matches), 2)
        self.assertIsInstance(resolve("a", "gq", "a").error, InvalidSyntax)

    def test_punctuation_flags_are_rejected(self):
        for flags in ["g:", "g=", "g#", "g-", "g "]:
            with self.subTest(flags=flags):
                resolution = resolve("a", flags, "xa")
                self.assertIsInstance(resolution.error, InvalidSyntax)
                self.assertEqual(resolution.matches, ())

    def test_error_position_ignores_inline_flags(self):
        for engine in [RegexModuleEngine(), StdlibEngine()]:
            with self.subTest(engine=engine.name):
                plain = resolve("ab(c", "g", "abc", engine).error
                verbose = resolve("ab(c", "gx", "abc", engine).error
                self.assertIn("at position", str(plain))
                self.assertEqual(str(verbose), str(plain))

    def test_unknown_flag_letter_is_reported(self):
        error = resolve("ab(c", "gq", "abc").error
        self.assertIsInstance(error, InvalidSyntax)
        self.assertIn("flag", str(error).lower())

    def test_stdlib_engine(self):
        engine = StdlibEngine()
        resolution = resolve(r"(?P<word>\w+)", "g", "hi there", engine)
        self.assertEqual([m.groups[0].name for m in resolution.matches], ["word", "word"])
        self.assertIsInstance(resolve("a(b", "g", "ab", engine).error, InvalidSyntax)

    def test_create_engine(self):
        self.assertIsInstance(create_engine("re"), StdlibEngine)
        engine = create_engine("regex", timeout=0.5, version=1)
        self.assertIsInstance(engine, RegexModuleEngine)
        self.assertEqual(engine.timeout, 0.5)
        with self.assertRaises(ValueError):
            create_engine("pcre2")

    def test_named_backreferences_in_browser_syntax(self):
        engine = create_engine("regex", syntax=ECMASCRIPT_SYNTAX)
        resolution = resolve(r"(?<x>a)\k<x>", "g", "aa ab aa", engine)
        self.assertIsNone(resolution.error)
        self.assertEqual(spans(resolution), [(0, 2), (6, 8)])

        # An escaped backslash keeps the following k literal
        literal = resolve(r"\\k<x>", "g", r"\k<x>", engine)
        self.assertEqual(spans(literal), [(0, 5)])

        self.assertIsInstance(resolve(r"(?<x>a)\k<x>", "g", "aa").error, InvalidSyntax)

    def test_rewrite_named_backreferences(self):
        self.assertEqual(rewrite_named_backreferences(r"(?<n>.)\k<n>"), r"(?<n>.)\g<n>")
        self.assertEqual(rewrite_named_backreferences(r"\\k<n>"), r"\\k<n>")
        self.assertEqual(rewrite_named_backreferences(r"\k"), r"\k")


class TestTimeouts(unittest.TestCase):

    def test_engine_timeout_becomes_pattern_error(self):
        engine = RegexModuleEngine(timeout=0.01)
        native = Mock()
        native.search.side_effect = TimeoutError("regex timed out")
        compiled = CompiledPattern("x", "g", native, True, False, ())

        with self.assertRaises(CatastrophicTimeout):
            engine.execute(compiled, "xxxx", 0)
        native.search.assert_called_with("xxxx", 0, concurrent=True, timeout=0.01)

    def test_timeout_is_reported_not_raised(self):
        engine = Mock()
        engine.compile.return_value = CompiledPattern("x", "g", None, True, False, ())
        engine.execute.side_effect = CatastrophicTimeout(1.0)

        resolution = resolve("x", "g", "xx", engine)
        self.assertIsInstance(resolution.error, CatastrophicTimeout)
        self.assertIn("too expensive", resolution.error.message)
        self.assertEqual(resolution.matches, ())

    @patch("relight.data_providers.regex_provider.time")
    def test_budget_stops_long_scans(self, mock_time):
        mock_time.monotonic.side_effect = itertools.chain([0.0], itertools.repeat(5.0))
        engine = Mock()
        engine.compile.return_value = CompiledPattern("x", "g", None, True, False, ())
        engine.execute.side_effect = lambda compiled, subject, index: RawMatch(index, index + 1, "x", (), ())

        resolution = resolve("x", "g", "xxxx", engine, budget=1.0)
        self.assertIsInstance(resolution.error, CatastrophicTimeout)



if __name__ == "__main__":
    unittest.main()
