"""Tests for the token buffer and line filler."""

from estree_analyzer.emitter import Emitter, FormatOptions, Token, TokenKind, next_line

L = TokenKind.LEADING
N = TokenKind.NORMAL
T = TokenKind.TRAILING
S = TokenKind.SPACE


def _tokens(*pairs):
    return [Token(text, kind) for text, kind in pairs]


def _collect(**options):
    lines = []
    emitter = Emitter(FormatOptions(write=lines.append, **options))
    return emitter, lines


def test_next_line_takes_everything_that_fits():
    tokens = _tokens(("a", N), (" ", S), ("=", T), (" ", S), ("b", N), (";", T))
    assert next_line(tokens, 0, 80) == ("a = b;", 6, True)


def test_next_line_breaks_before_normal_token_past_margin():
    tokens = _tokens(("aaaa", N), (",", T), (" ", S), ("bbbb", N), (",", T), (" ", S), ("cccc", N))
    text, consumed, done = next_line(tokens, 0, 10)
    assert (text, consumed, done) == ("aaaa, bbbb,", 5, False)


def test_next_line_first_normal_token_always_fits():
    tokens = _tokens(("(", L), ("averyveryverylongname", N), (")", T), (" ", S), ("x", N))
    assert next_line(tokens, 0, 5) == ("(averyveryverylongname)", 3, False)


def test_next_line_leading_tokens_bind_forward():
    tokens = _tokens(("aaaa", N), (" ", S), ("(", L), ("bbbb", N))
    text, consumed, done = next_line(tokens, 0, 8)
    assert (text, consumed, done) == ("aaaa", 1, False)


def test_next_line_respects_start_column():
    tokens = _tokens(("aa", N), (" ", S), ("bb", N))
    assert next_line(tokens, 0, 5) == ("aa bb", 3, True)
    assert next_line(tokens, 4, 5) == ("aa", 1, False)


def test_newline_writes_indented_lines():
    emitter, lines = _collect()
    emitter.inc_indent()
    emitter.emit("x")
    emitter.emit_semi()
    emitter.newline()
    emitter.dec_indent()
    emitter.emit("y")
    emitter.newline()
    assert lines == ["  x;\n", "y\n"]


def test_newline_on_empty_buffer_writes_bare_newline():
    emitter, lines = _collect()
    emitter.inc_indent()
    emitter.emit_space()
    emitter.newline()
    assert lines == ["\n"]


def test_newline_wraps_at_margin():
    emitter, lines = _collect(margin=12)
    emitter.emit("foo")
    emitter.emit_trailing("(")
    for i, name in enumerate(["alpha", "beta", "gamma"]):
        if i:
            emitter.emit_trailing(",")
            emitter.emit_space()
        emitter.emit(name)
    emitter.emit_trailing(")")
    emitter.emit_semi()
    emitter.newline()
    assert lines == ["foo(alpha,\n", "beta, gamma);\n"]


def test_binary_op_spacing():
    emitter, lines = _collect()
    emitter.emit("a")
    emitter.emit_binary_op("+")
    emitter.emit("b")
    emitter.flush()
    assert lines == ["a + b\n"]


def test_tab_indent():
    options = FormatOptions(indent_char="\t", indent_multiple=1)
    assert options.indent_width() == 8
    lines = []
    emitter = Emitter(FormatOptions(write=lines.append, indent_char="\t", indent_multiple=1, margin=12))
    emitter.inc_indent()
    emitter.emit("aaa")
    emitter.emit_space()
    emitter.emit("bbb")
    emitter.newline()
    assert lines == ["\taaa\n", "\tbbb\n"]


def test_flush_only_writes_pending_tokens():
    emitter, lines = _collect()
    emitter.flush()
    assert lines == []
    emitter.emit("x")
    emitter.flush()
    assert lines == ["x\n"]
