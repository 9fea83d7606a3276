"""Java source lexing and declaration scanning."""

from .lexer import JavaLexer, tokenize
from .scanner import DeclarationScanner, TypeScope, declared_package, extract_declaration_order
from .tokens import Token, TokenKind

__all__ = [
    "JavaLexer",
    "tokenize",
    "DeclarationScanner",
    "TypeScope",
    "declared_package",
    "extract_declaration_order",
    "Token",
    "TokenKind",
]
