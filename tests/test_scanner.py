"""Test structural token scanning: keywords, brackets, operators, terminators."""

from __future__ import annotations

from jlindent.scanner import Scanner, tokens
from jlindent.tokens import Token, TokenCategory, is_continuation

from .conftest import assert_categories, assert_texts, categories_of

KO = TokenCategory.KEYWORD_OPEN
KM = TokenCategory.KEYWORD_MID
KC = TokenCategory.KEYWORD_CLOSE
BO = TokenCategory.BRACKET_OPEN
BC = TokenCategory.BRACKET_CLOSE
OP = TokenCategory.OPERATOR
TERM = TokenCategory.TERMINATOR
OTHER = TokenCategory.OTHER


class TestKeywords:
    def test_block(self, scan) -> None:
        toks = scan("if x\n    y\nend")
        assert_categories(toks, [KO, OTHER, OTHER, KC])
        assert_texts(toks, ["if", "x", "y", "end"])

    def test_mid_keywords(self, scan) -> None:
        toks = scan("try\na\ncatch e\nb\nfinally\nc\nend")
        assert [t.text for t in categories_of(toks, KM)] == ["catch", "finally"]

    def test_whole_word_only(self, scan) -> None:
        toks = scan("endswith(x); ifelse; format")
        assert categories_of(toks, KO) == []
        assert categories_of(toks, KC) == []

    def test_quoted_symbol_end(self, scan) -> None:
        toks = scan(":end")
        assert_categories(toks, [OP, OTHER])

    def test_field_access_end(self, scan) -> None:
        toks = scan("x.end")
        assert_categories(toks, [OTHER, OP, OTHER])

    def test_range_end_inside_index(self, scan) -> None:
        toks = scan("a[end-4:end]")
        assert_texts(toks, ["a", "[", "end", "-", "4", ":", "end", "]"])
        assert_categories(toks, [OTHER, BO, KC, OP, OTHER, OP, OTHER, BC])

    def test_abstract_type(self, scan) -> None:
        toks = scan("abstract type Shape end")
        assert_categories(toks, [OTHER, KO, OTHER, KC])

    def test_plain_type_is_identifier(self, scan) -> None:
        toks = scan("type = 1")
        assert toks[0].category == OTHER

    def test_keywords_in_literals_are_invisible(self, scan) -> None:
        toks = scan('s = "if end" # for\n')
        assert_texts(toks, ["s", "="])


class TestBrackets:
    def test_all_brackets(self, scan) -> None:
        toks = scan("([{}])")
        assert_categories(toks, [BO, BO, BO, BC, BC, BC])

    def test_bracket_in_command_is_invisible(self, scan) -> None:
        toks = scan("run(`ls (`)")
        assert_texts(toks, ["run", "(", ")"])


class TestOperators:
    def test_pipe(self, scan) -> None:
        assert_texts(scan("a |> b"), ["a", "|>", "b"])

    def test_longest_match(self, scan) -> None:
        assert_texts(scan("a === b"), ["a", "===", "b"])
        assert_texts(scan("a >>>= b"), ["a", ">>>=", "b"])

    def test_broadcast(self, scan) -> None:
        assert_texts(scan("x .+= 1"), ["x", ".+=", "1"])

    def test_bang_identifier(self, scan) -> None:
        assert_texts(scan("push!(v, 1)"), ["push!", "(", "v", ",", "1", ")"])

    def test_bang_equals(self, scan) -> None:
        assert_texts(scan("x!=y"), ["x", "!=", "y"])

    def test_splat_and_range(self, scan) -> None:
        assert_texts(scan("f(xs...)"), ["f", "(", "xs", "...", ")"])
        assert_texts(scan("1:n"), ["1", ":", "n"])

    def test_transpose(self, scan) -> None:
        toks = scan("x'")
        assert_texts(toks, ["x", "'"])
        assert toks[1].category == OTHER


class TestOther:
    def test_macro(self, scan) -> None:
        toks = scan("@inline f(x)")
        assert toks[0].text == "@inline"
        assert toks[0].category == OTHER

    def test_numbers(self, scan) -> None:
        assert_texts(scan("1.5e3 + 0x1f"), ["1.5e3", "+", "0x1f"])

    def test_unicode_identifier(self, scan) -> None:
        assert_texts(scan("α′ = x₁"), ["α′", "=", "x₁"])


class TestTerminators:
    def test_newline_and_semicolon(self) -> None:
        toks = list(tokens("a; b\nc"))
        assert_categories(toks, [OTHER, TERM, OTHER, TERM, OTHER])

    def test_newline_in_comment_still_terminates(self) -> None:
        toks = list(tokens("a # c\nb"))
        assert_texts(toks, ["a", "\n", "b"])


class TestAfterValue:
    def test_index_follows_value(self, scan) -> None:
        assert scan("a[1]")[1].after_value

    def test_literal_bracket_does_not(self, scan) -> None:
        assert not scan("[1]")[0].after_value

    def test_index_after_string(self, scan) -> None:
        toks = scan('"s"[1]')
        assert toks[0].text == "["
        assert toks[0].after_value

    def test_operator_resets(self, scan) -> None:
        toks = scan("x = [1]")
        assert not toks[2].after_value

    def test_generator_clause(self, scan) -> None:
        toks = scan("[x for x in xs]")
        assert toks[2].text == "for"
        assert toks[2].after_value


class TestPositions:
    def test_offsets(self, scan) -> None:
        toks = scan("  foo(bar)")
        assert (toks[0].start, toks[0].end) == (2, 5)
        assert (toks[2].start, toks[2].end) == (6, 9)

    def test_restartable(self) -> None:
        scanner = Scanner("if x\n    f(y)\nend")
        assert list(scanner.scan()) == list(scanner.scan())

    def test_lazy(self) -> None:
        it = tokens("a b c")
        assert next(it).text == "a"


class TestContinuation:
    def _op(self, text: str) -> Token:
        return Token(0, len(text), text, TokenCategory.OPERATOR)

    def test_binary_operators_continue(self) -> None:
        for op in ("=", "|>", "+", "&&", "==", "->", "\\", ".+", ".==", "?", ":"):
            assert is_continuation(self._op(op)), op

    def test_non_continuing_operators(self) -> None:
        for op in ("::", "...", "..", ".", "!", "'"):
            assert not is_continuation(self._op(op)), op

    def test_identifier_does_not_continue(self) -> None:
        assert not is_continuation(Token(0, 1, "x", TokenCategory.OTHER))
