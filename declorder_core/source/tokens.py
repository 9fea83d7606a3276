"""Token model produced by the Java source lexer."""

from __future__ import annotations

import enum
from dataclasses import dataclass

__all__ = [
    "TokenKind",
    "Token",
    "JAVA_KEYWORDS",
    "TYPE_KEYWORDS",
    "PRIMITIVE_TYPES",
    "SIGNIFICANT_KINDS",
]


class TokenKind(enum.Enum):
    """Coarse token classes; enough for brace counting and declaration matching."""

    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    PUNCTUATION = "punctuation"
    OPEN_BRACE = "open_brace"
    CLOSE_BRACE = "close_brace"
    STRING_LITERAL = "string_literal"
    CHAR_LITERAL = "char_literal"
    COMMENT = "comment"
    OTHER = "other"


@dataclass(frozen=True)
class Token:
    """A lexical token with the 1-based line it starts on."""

    kind: TokenKind
    text: str
    line: int = 0

    @property
    def significant(self) -> bool:
        return self.kind in SIGNIFICANT_KINDS

    def is_punct(self, text: str) -> bool:
        return self.kind is TokenKind.PUNCTUATION and self.text == text

    def is_keyword(self, text: str) -> bool:
        return self.kind is TokenKind.KEYWORD and self.text == text


# Reserved words only. Contextual words (record, sealed, permits, var, yield)
# stay identifiers so they remain usable as method names.
JAVA_KEYWORDS: frozenset[str] = frozenset(
    {
        "abstract", "assert", "boolean", "break", "byte", "case", "catch",
        "char", "class", "const", "continue", "default", "do", "double",
        "else", "enum", "extends", "final", "finally", "float", "for", "goto",
        "if", "implements", "import", "instanceof", "int", "interface", "long",
        "native", "new", "package", "private", "protected", "public", "return",
        "short", "static", "strictfp", "super", "switch", "synchronized",
        "this", "throw", "throws", "transient", "try", "void", "volatile",
        "while", "true", "false", "null",
    }
)

TYPE_KEYWORDS: frozenset[str] = frozenset({"class", "interface", "enum"})

PRIMITIVE_TYPES: frozenset[str] = frozenset(
    {"boolean", "byte", "char", "short", "int", "long", "float", "double", "void"}
)

SIGNIFICANT_KINDS: frozenset[TokenKind] = frozenset(TokenKind) - {TokenKind.COMMENT}
