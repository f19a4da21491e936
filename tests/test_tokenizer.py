import types
import unittest

from relight.data_providers.pattern_tokenizer import Token, TokenKind, tokenize, tokenize_list


def kinds_and_texts(pattern):
    return [(token.kind, token.text) for token in tokenize(pattern)]


class TestTokenizer(unittest.TestCase):

    PATTERNS = [
        "",
        "abc",
        r"(\d+)-(\d+)",
        r"(?<year>\d{4})-(?<month>\d{2})",
        "a(b",
        "[abc",
        "\\",
        "ab\\",
        r"[\]]+",
        r"(a\)b)c",
        "a{2,",
        "x{3}?y",
        "^foo|bar$",
        "((a)b)",
        "([)])",
        "(((",
        ")))",
        "a**??++",
    ]

    def test_round_trip(self):
        for pattern in self.PATTERNS:
            with self.subTest(pattern=pattern):
                self.assertEqual("".join(token.text for token in tokenize(pattern)), pattern)

    def test_tokens_are_contiguous(self):
        for pattern in self.PATTERNS:
            with self.subTest(pattern=pattern):
                position = 0
                for token in tokenize(pattern):
                    self.assertEqual(token.start, position)
                    self.assertEqual(token.end, token.start + len(token.text))
                    self.assertEqual(pattern[token.start:token.end], token.text)
                    position = token.end
                self.assertEqual(position, len(pattern))

    def test_is_lazy(self):
        self.assertIsInstance(tokenize("abc"), types.GeneratorType)

    def test_classification(self):
        self.assertEqual(
            kinds_and_texts(r"\d+[a-z]*(x|y)?^$|lit"),
            [
                (TokenKind.ESCAPE, r"\d"),
                (TokenKind.QUANTIFIER, "+"),
                (TokenKind.CHAR_CLASS, "[a-z]"),
                (TokenKind.QUANTIFIER, "*"),
                (TokenKind.GROUP, "(x|y)"),
                (TokenKind.QUANTIFIER, "?"),
                (TokenKind.OPERATOR, "^"),
                (TokenKind.OPERATOR, "$"),
                (TokenKind.OPERATOR, "|"),
                (TokenKind.LITERAL, "lit"),
            ],
        )

    def test_escaped_bracket_does_not_close_class(self):
        self.assertEqual(
            kinds_and_texts(r"[\]a]b"),
            [(TokenKind.CHAR_CLASS, r"[\]a]"), (TokenKind.LITERAL, "b")],
        )

    def test_escaped_paren_does_not_close_group(self):
        self.assertEqual(
            kinds_and_texts(r"(a\)b)c"),
            [(TokenKind.GROUP, r"(a\)b)"), (TokenKind.LITERAL, "c")],
        )

    def test_nested_group_is_one_token(self):
        self.assertEqual(kinds_and_texts("((a)b)"), [(TokenKind.GROUP, "((a)b)")])
        self.assertEqual(kinds_and_texts("([)])"), [(TokenKind.GROUP, "([)])")])

    def test_unterminated_constructs_are_literal(self):
        self.assertEqual(kinds_and_texts("(ab"), [(TokenKind.LITERAL, "(ab")])
        self.assertEqual(kinds_and_texts("[ab"), [(TokenKind.LITERAL, "[ab")])
        self.assertEqual(kinds_and_texts("ab\\"), [(TokenKind.LITERAL, "ab\\")])

    def test_counted_quantifiers(self):
        self.assertEqual(
            kinds_and_texts("a{2,3}?"),
            [(TokenKind.LITERAL, "a"), (TokenKind.QUANTIFIER, "{2,3}?")],
        )
        self.assertEqual(
            kinds_and_texts("a{2}b{1,}"),
            [
                (TokenKind.LITERAL, "a"),
                (TokenKind.QUANTIFIER, "{2}"),
                (TokenKind.LITERAL, "b"),
                (TokenKind.QUANTIFIER, "{1,}"),
            ],
        )
        self.assertEqual(kinds_and_texts("a{x}"), [(TokenKind.LITERAL, "a{x}")])

    def test_lazy_quantifier(self):
        self.assertEqual(
            kinds_and_texts(".*?"),
            [(TokenKind.LITERAL, "."), (TokenKind.QUANTIFIER, "*?")],
        )

    def test_tokenize_list(self):
        tokens = tokenize_list("a|b")
        self.assertIsInstance(tokens, tuple)
        self.assertEqual(tokens[1], Token(TokenKind.OPERATOR, "|", 1, 2))


if __name__ == "__main__":
    unittest.main()
