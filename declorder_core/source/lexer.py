"""Lexical scanner for Java source text.

Just enough of Java's lexical grammar to count braces reliably and to spot
member declarations: comments and literals are consumed whole so that braces
or quotes inside them never leak into the token stream. Numbers are collapsed
into a single OTHER token and whitespace is dropped.

The lexer never raises. If the input ends inside a comment or literal, the
partial token is emitted last and :attr:`JavaLexer.truncated` is set; the
declaration scanner notices the resulting imbalance on its own.
"""

from __future__ import annotations

from typing import Iterator

from .tokens import JAVA_KEYWORDS, Token, TokenKind

__all__ = ["JavaLexer", "tokenize"]

_PUNCTUATION = frozenset("()[];,.@=<>!~?:+-*/&|^%")


def tokenize(source: str) -> Iterator[Token]:
    """Return a fresh lazy token stream over ``source``.

    Every call starts from the beginning; a stream cannot be resumed once
    abandoned.
    """
    return iter(JavaLexer(source))


class JavaLexer:
    """Single-pass scanner. Iterate it once to get the tokens."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self.truncated = False

    def __iter__(self) -> Iterator[Token]:
        source = self._source
        length = len(source)
        while self._pos < length:
            ch = source[self._pos]
            if ch.isspace():
                self._consume(1)
                continue
            if ch == "/" and self._peek(1) == "/":
                yield self._line_comment()
            elif ch == "/" and self._peek(1) == "*":
                yield self._block_comment()
            elif source.startswith('"""', self._pos):
                yield self._text_block()
            elif ch == '"' or ch == "'":
                yield self._quoted(ch)
            elif ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
                yield self._number()
            elif _is_identifier_start(ch):
                yield self._word()
            elif ch == "{":
                yield self._emit(TokenKind.OPEN_BRACE, 1)
            elif ch == "}":
                yield self._emit(TokenKind.CLOSE_BRACE, 1)
            elif ch in _PUNCTUATION:
                yield self._emit(TokenKind.PUNCTUATION, 1)
            else:
                yield self._emit(TokenKind.OTHER, 1)

    # ------------------------------------------------------------------
    # Character helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int) -> str:
        index = self._pos + offset
        if index < len(self._source):
            return self._source[index]
        return ""

    def _consume(self, count: int) -> str:
        text = self._source[self._pos : self._pos + count]
        self._pos += len(text)
        self._line += text.count("\n")
        return text

    def _emit(self, kind: TokenKind, count: int) -> Token:
        line = self._line
        return Token(kind, self._consume(count), line)

    # ------------------------------------------------------------------
    # Token scanners
    # ------------------------------------------------------------------

    def _line_comment(self) -> Token:
        end = self._source.find("\n", self._pos)
        if end < 0:
            end = len(self._source)
        return self._emit(TokenKind.COMMENT, end - self._pos)

    def _block_comment(self) -> Token:
        # Search from after "/*" so that "/*/" is not taken as a whole comment.
        end = self._source.find("*/", self._pos + 2)
        if end < 0:
            self.truncated = True
            return self._emit(TokenKind.COMMENT, len(self._source) - self._pos)
        return self._emit(TokenKind.COMMENT, end + 2 - self._pos)

    def _text_block(self) -> Token:
        index = self._pos + 3
        source = self._source
        while index < len(source):
            if source[index] == "\\":
                index += 2
                continue
            if source.startswith('"""', index):
                return self._emit(TokenKind.STRING_LITERAL, index + 3 - self._pos)
            index += 1
        self.truncated = True
        return self._emit(TokenKind.STRING_LITERAL, len(source) - self._pos)

    def _quoted(self, quote: str) -> Token:
        kind = TokenKind.STRING_LITERAL if quote == '"' else TokenKind.CHAR_LITERAL
        source = self._source
        index = self._pos + 1
        while index < len(source):
            ch = source[index]
            if ch == "\\":
                index += 2
                continue
            if ch == quote:
                return self._emit(kind, index + 1 - self._pos)
            index += 1
        self.truncated = True
        return self._emit(kind, len(source) - self._pos)

    def _number(self) -> Token:
        # Loose on purpose: hex, binary, underscores, suffixes and exponents all
        # end up in one token.
        source = self._source
        index = self._pos
        last_was_exponent = False
        while index < len(source):
            ch = source[index]
            if ch == "." or ch == "_" or ch.isalnum():
                last_was_exponent = ch in "eEpP"
            elif last_was_exponent and ch in "+-":
                last_was_exponent = False
            else:
                break
            index += 1
        return self._emit(TokenKind.OTHER, index - self._pos)

    def _word(self) -> Token:
        source = self._source
        index = self._pos + 1
        while index < len(source) and _is_identifier_part(source[index]):
            index += 1
        text = source[self._pos : index]
        kind = TokenKind.KEYWORD if text in JAVA_KEYWORDS else TokenKind.IDENTIFIER
        return self._emit(kind, index - self._pos)


def _is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_" or ch == "$"


def _is_identifier_part(ch: str) -> bool:
    return ch.isalnum() or ch == "_" or ch == "$"
