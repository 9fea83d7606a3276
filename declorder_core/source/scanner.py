"""Declaration scanner: abstract method order per type, straight from source.

The scan is deliberately superficial. The file is treated as the body of a
pseudo-type named after the package, sitting at brace depth 1. A type
declaration (``class``/``interface``/``enum``/``record``/``@interface``
followed by a name) seen at the top level of the current type pushes a new
scope. Until its opening brace arrives the scope stack is one deeper than the
brace depth, so headers such as ``extends Foo<Bar>`` or a record component
list are never mistaken for members. When a closing brace brings the depth
back below the stack size, the scope is popped. Local and anonymous classes
live at deeper brace depths and are never tracked.

At the top level of a scope, an identifier followed by ``(``, a balanced
parameter list, ``)``, an optional ``throws`` clause and a bare ``;`` is an
abstract method. Identifiers preceded by something that cannot end a type
(``=``, ``.``, ``,``, ``new`` ...) are calls or enum constants and are
ignored, as are ``native`` methods and constructors.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, Iterator

from .tokens import PRIMITIVE_TYPES, TYPE_KEYWORDS, Token, TokenKind

__all__ = [
    "TypeScope",
    "DeclarationScanner",
    "extract_declaration_order",
    "declared_package",
]


@dataclass(frozen=True)
class TypeScope:
    """A type body being scanned."""

    qualified_name: str
    simple_name: str

    def child(self, simple_name: str) -> "TypeScope":
        if not self.qualified_name:
            return TypeScope(simple_name, simple_name)
        return TypeScope(f"{self.qualified_name}.{simple_name}", simple_name)


class _TokenCursor:
    """Significant tokens with arbitrary lookahead and single push-back."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: Iterator[Token] = (token for token in tokens if token.significant)
        self._buffer: Deque[Token] = deque()

    def next(self) -> Token | None:
        if self._buffer:
            return self._buffer.popleft()
        return next(self._tokens, None)

    def peek(self, offset: int = 0) -> Token | None:
        while len(self._buffer) <= offset:
            token = next(self._tokens, None)
            if token is None:
                return None
            self._buffer.append(token)
        return self._buffer[offset]

    def push_back(self, token: Token) -> None:
        self._buffer.appendleft(token)


class DeclarationScanner:
    """Collect abstract method names per fully-qualified type, in source order.

    ``scan`` can be called once per instance. ``complete`` tells whether the
    token stream ended with every brace and type scope closed.
    """

    def __init__(self, root_package: str = "") -> None:
        self._scopes: list[TypeScope] = [TypeScope(root_package, "")]
        self._depth = 1
        self._broken = False
        self._orders: dict[str, list[str]] = {}
        self._reset_member()

    @property
    def complete(self) -> bool:
        return not self._broken and self._depth == 1 and len(self._scopes) == 1

    @property
    def orders(self) -> dict[str, list[str]]:
        return self._orders

    def scan(self, tokens: Iterable[Token]) -> dict[str, list[str]]:
        cursor = _TokenCursor(tokens)
        while (token := cursor.next()) is not None:
            if not self._step(token, cursor):
                break
        return self._orders

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    @property
    def _top_level(self) -> bool:
        return self._depth == len(self._scopes)

    def _reset_member(self) -> None:
        self._prev: Token | None = None
        self._saw_assign = False
        self._saw_native = False

    def _enter_type(self, simple_name: str) -> None:
        scope = self._scopes[-1].child(simple_name)
        self._scopes.append(scope)
        self._orders.setdefault(scope.qualified_name, [])
        self._reset_member()

    # ------------------------------------------------------------------
    # Token dispatch
    # ------------------------------------------------------------------

    def _step(self, token: Token, cursor: _TokenCursor) -> bool:
        if token.kind is TokenKind.OPEN_BRACE:
            self._depth += 1
            self._reset_member()
            return True
        if token.kind is TokenKind.CLOSE_BRACE:
            return self._close_brace()
        if not self._top_level:
            return True

        if token.is_punct(";"):
            self._reset_member()
        elif token.is_punct("@") and _is_kind(cursor.peek(), TokenKind.IDENTIFIER):
            _skip_annotation(cursor)
        elif self._starts_type(token, cursor):
            name = cursor.next()
            assert name is not None
            self._enter_type(name.text)
        elif (
            token.kind is TokenKind.IDENTIFIER
            and _is_punct(cursor.peek(), "(")
            and self._may_precede_name(self._prev)
        ):
            self._method_candidate(token, cursor)
        else:
            if token.is_punct("="):
                self._saw_assign = True
            elif token.is_keyword("native"):
                self._saw_native = True
            self._prev = token
        return True

    def _close_brace(self) -> bool:
        if self._top_level:
            if len(self._scopes) == 1:
                # More closing braces than opening ones: started mid-file.
                self._broken = True
                return False
            self._scopes.pop()
        self._depth -= 1
        self._reset_member()
        return True

    def _starts_type(self, token: Token, cursor: _TokenCursor) -> bool:
        if _is_punct(self._prev, "."):
            return False
        if token.kind is TokenKind.KEYWORD and token.text in TYPE_KEYWORDS:
            return _is_kind(cursor.peek(), TokenKind.IDENTIFIER)
        if token.kind is TokenKind.IDENTIFIER and token.text == "record":
            after = cursor.peek(1)
            return _is_kind(cursor.peek(), TokenKind.IDENTIFIER) and (
                _is_punct(after, "(") or _is_punct(after, "<")
            )
        return False

    def _may_precede_name(self, prev: Token | None) -> bool:
        if prev is None or self._saw_assign:
            return False
        if prev.kind is TokenKind.IDENTIFIER:
            return True
        if prev.kind is TokenKind.KEYWORD:
            return prev.text in PRIMITIVE_TYPES
        return prev.is_punct(">") or prev.is_punct("]")

    def _method_candidate(self, name: Token, cursor: _TokenCursor) -> None:
        closing = _skip_parameters(cursor)
        if closing is None:
            return
        following = cursor.next()
        if following is not None and following.is_keyword("throws"):
            following = _skip_throws(cursor)
        if following is None:
            return
        if following.is_punct(";"):
            scope = self._scopes[-1]
            if len(self._scopes) > 1 and not self._saw_native and name.text != scope.simple_name:
                self._orders.setdefault(scope.qualified_name, []).append(name.text)
            self._reset_member()
            return
        # A body, an annotation default or something else: not abstract.
        cursor.push_back(following)
        self._prev = closing


def extract_declaration_order(
    tokens: Iterable[Token], root_package_name: str = ""
) -> dict[str, list[str]]:
    """Map each fully-qualified type in ``tokens`` to its abstract methods.

    The mapping may be partial if the stream is truncated or starts mid-file;
    use :class:`DeclarationScanner` directly to find out.
    """
    return DeclarationScanner(root_package_name).scan(tokens)


def declared_package(tokens: Iterable[Token]) -> str:
    """Return the name in the ``package`` declaration, or ``""`` if there is none."""
    cursor = _TokenCursor(tokens)
    while (token := cursor.next()) is not None:
        if token.is_punct("@") and _is_kind(cursor.peek(), TokenKind.IDENTIFIER):
            _skip_annotation(cursor)
            continue
        if not token.is_keyword("package"):
            return ""
        parts: list[str] = []
        while (part := cursor.next()) is not None and not part.is_punct(";"):
            parts.append(part.text)
        return "".join(parts)
    return ""


# ----------------------------------------------------------------------
# Token-level helpers
# ----------------------------------------------------------------------


def _is_kind(token: Token | None, kind: TokenKind) -> bool:
    return token is not None and token.kind is kind


def _is_punct(token: Token | None, text: str) -> bool:
    return token is not None and token.is_punct(text)


def _skip_annotation(cursor: _TokenCursor) -> None:
    """Consume ``Name(.Name)*`` and an optional argument list after an ``@``."""
    cursor.next()
    while _is_punct(cursor.peek(), ".") and _is_kind(cursor.peek(1), TokenKind.IDENTIFIER):
        cursor.next()
        cursor.next()
    if _is_punct(cursor.peek(), "("):
        cursor.next()
        _skip_balanced(cursor)


def _skip_balanced(cursor: _TokenCursor) -> Token | None:
    """Consume through the ``)`` matching an already consumed ``(``.

    Braces inside (annotation array values) are allowed as long as they stay
    balanced; a stray ``}`` is pushed back and ends the skip.
    """
    parens = 1
    braces = 0
    while (token := cursor.next()) is not None:
        if token.is_punct("("):
            parens += 1
        elif token.is_punct(")"):
            parens -= 1
            if parens == 0:
                return token
        elif token.kind is TokenKind.OPEN_BRACE:
            braces += 1
        elif token.kind is TokenKind.CLOSE_BRACE:
            braces -= 1
            if braces < 0:
                cursor.push_back(token)
                return None
    return None


def _skip_parameters(cursor: _TokenCursor) -> Token | None:
    cursor.next()
    return _skip_balanced(cursor)


def _skip_throws(cursor: _TokenCursor) -> Token | None:
    """Consume a throws clause; return the token that ends it."""
    while (token := cursor.next()) is not None:
        if token.is_punct(";") or token.kind in (TokenKind.OPEN_BRACE, TokenKind.CLOSE_BRACE):
            return token
    return None
