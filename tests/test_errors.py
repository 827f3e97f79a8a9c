"""Test structural problem detection, positions, and formatted context snippets."""

from jlindent.errors import StrayCloser, UnclosedFrame, UnterminatedLiteral, check


class TestCheck:
    def test_clean_source(self):
        assert check("if x\n    y\nend\n") == []

    def test_unterminated_string(self):
        (err,) = check('x = "abc')
        assert isinstance(err, UnterminatedLiteral)
        assert err.message == "unterminated string"
        assert err.severity == "error"
        assert (err.position.line, err.position.column) == (1, 5)

    def test_unterminated_triple_string(self):
        (err,) = check('x = """abc')
        assert err.message == "unterminated triple-quoted string"
        assert err.length == 3

    def test_unterminated_block_comment(self):
        (err,) = check("#= open")
        assert err.message == "unterminated block comment"

    def test_stray_end(self):
        (err,) = check("end")
        assert isinstance(err, StrayCloser)
        assert err.message == "'end' has nothing to close"

    def test_stray_bracket(self):
        (err,) = check("x)")
        assert isinstance(err, StrayCloser)
        assert err.position.column == 2

    def test_unclosed_block(self):
        (err,) = check("if x\n    y")
        assert isinstance(err, UnclosedFrame)
        assert err.severity == "warning"
        assert err.message == "block 'if' is never closed"
        assert err.length == 2

    def test_unclosed_bracket(self):
        (err,) = check("f(x")
        assert err.message == "bracket '(' is never closed"

    def test_block_discarded_by_bracket(self):
        (err,) = check("(if x)")
        assert isinstance(err, UnclosedFrame)
        assert err.position.column == 2

    def test_ordered_by_offset(self):
        problems = check('end\nx = "a')
        assert [type(p) for p in problems] == [StrayCloser, UnterminatedLiteral]

    def test_second_line(self):
        (err,) = check('x = 1\ny = "a')
        assert err.position.line == 2
        assert err.position.column == 5

    def test_keywords_in_strings_ignored(self):
        assert check('s = "end )"') == []


class TestErrorFormatting:
    def test_format_contains_line(self):
        (err,) = check('x = "abc')
        assert 'x = "abc' in err.format()

    def test_format_contains_carets(self):
        (err,) = check("end")
        assert "^^^" in err.format()

    def test_format_contains_error_prefix(self):
        (err,) = check("end")
        assert err.format().startswith("error:")

    def test_format_warning_prefix(self):
        (err,) = check("begin")
        assert err.format().startswith("warning:")

    def test_format_contains_position(self):
        (err,) = check('x = "abc')
        assert "input.jl:1:5" in err.format()

    def test_format_with_custom_filename(self):
        (err,) = check("end")
        assert "src/mod.jl:1:1" in err.format("src/mod.jl")

    def test_str_is_formatted(self):
        (err,) = check("end")
        assert str(err) == err.format()
