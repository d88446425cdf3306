"""Token buffer that fills output lines up to a right margin."""

from __future__ import annotations

import sys
from collections import deque
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Iterable


class TokenKind(IntEnum):
    # binds to the token after it (opening brackets, keywords)
    LEADING = 0
    # a possible line break point
    NORMAL = 1
    # binds to the token before it (closing brackets, separators)
    TRAILING = 2
    SPACE = 3


@dataclass(frozen=True)
class Token:
    text: str
    kind: TokenKind


@dataclass(frozen=True)
class FormatOptions:
    """Output settings for the formatter."""

    write: Callable[[str], object] = field(default_factory=lambda: sys.stdout.write)
    indent_char: str = " "
    indent_multiple: int = 2
    margin: int = 80

    def indent_width(self) -> int:
        """Columns taken by one indent character."""
        if self.indent_char == "\t":
            return 8
        return len(self.indent_char)


def next_line(tokens: Iterable[Token], start_col: int, margin: int) -> tuple[str, int, bool]:
    """Choose the tokens for the next physical line.

    tokens must not start with a space. The first normal token and the
    trailing tokens right after it are always taken, even past the margin.
    After that the line grows to the last normal token (plus the trailing
    tokens following it) that still ends within the margin. Returns the line
    text without indent, the number of tokens consumed, and whether the
    buffer was exhausted.
    """
    toks = list(tokens)
    length = len(toks)
    col = start_col
    pos = 0
    got_normal = False
    last_nonspace = -1
    while pos < length:
        kind = toks[pos].kind
        if got_normal and kind != TokenKind.TRAILING:
            break
        if kind == TokenKind.NORMAL:
            got_normal = True
        if kind != TokenKind.SPACE:
            last_nonspace = pos
        col += len(toks[pos].text)
        pos += 1

    last_write = last_nonspace
    after_normal = False
    while pos < length:
        kind = toks[pos].kind
        col += len(toks[pos].text)
        if kind == TokenKind.NORMAL:
            if col > margin:
                break
            after_normal = True
            last_write = last_nonspace = pos
        elif kind == TokenKind.TRAILING and after_normal:
            last_write = last_nonspace = pos
        else:
            after_normal = False
            if kind != TokenKind.SPACE:
                last_nonspace = pos
        pos += 1

    done = pos == length
    if done:
        last_write = last_nonspace
    consumed = last_write + 1
    return "".join(t.text for t in toks[:consumed]), consumed, done


class Emitter:
    """Queue of tagged tokens drained into lines on each newline request."""

    def __init__(self, options: FormatOptions | None = None):
        self.options = options if options is not None else FormatOptions()
        self.indent = 0
        self.tokens: deque[Token] = deque()

    def emit_leading(self, text: str) -> None:
        self.tokens.append(Token(text, TokenKind.LEADING))

    def emit(self, text: str) -> None:
        self.tokens.append(Token(text, TokenKind.NORMAL))

    def emit_trailing(self, text: str) -> None:
        self.tokens.append(Token(text, TokenKind.TRAILING))

    def emit_space(self, text: str = " ") -> None:
        self.tokens.append(Token(text, TokenKind.SPACE))

    def emit_semi(self) -> None:
        self.emit_trailing(";")

    def emit_binary_op(self, text: str) -> None:
        self.emit_space()
        self.emit_trailing(text)
        self.emit_space()

    def inc_indent(self) -> None:
        self.indent += 1

    def dec_indent(self) -> None:
        self.indent -= 1

    def newline(self) -> None:
        """Write the buffered tokens as one or more indented lines."""
        opts = self.options
        indent_count = self.indent * opts.indent_multiple
        prefix = opts.indent_char * indent_count
        start_col = indent_count * opts.indent_width()
        done = False
        while not done:
            while self.tokens and self.tokens[0].kind == TokenKind.SPACE:
                self.tokens.popleft()
            # empty lines are not indented
            if not self.tokens:
                opts.write("\n")
                return
            text, consumed, done = next_line(self.tokens, start_col, opts.margin)
            for _ in range(consumed):
                self.tokens.popleft()
            opts.write(prefix + text + "\n")

    def flush(self) -> None:
        if self.tokens:
            self.newline()
