"""
Token definitions for the Cadence lexer.

This module contains the TokenType enum, Token dataclass, and
constant mappings for keywords and punctuation. Only the tokens needed
to read declarations are distinguished; everything else inside bodies
is lexed as generic punctuation and skipped by the parser.
"""

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Enumeration of all token types recognized by the Cadence lexer."""

    # Declaration keywords
    TRANSACTION = auto()
    FUN = auto()
    STRUCT = auto()
    RESOURCE = auto()
    CONTRACT = auto()
    INTERFACE = auto()
    ENUM = auto()
    EVENT = auto()
    ATTACHMENT = auto()
    ENTITLEMENT = auto()
    CASE = auto()
    LET = auto()
    VAR = auto()
    IMPORT = auto()
    INIT = auto()
    DESTROY = auto()
    PREPARE = auto()
    EXECUTE = auto()
    PRE = auto()
    POST = auto()

    # Access modifiers and function modifiers
    ACCESS = auto()
    PUB = auto()
    PRIV = auto()
    VIEW = auto()
    STATIC = auto()
    NATIVE = auto()
    AUTH = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LT = auto()
    GT = auto()
    COLON = auto()
    SEMICOLON = auto()
    COMMA = auto()
    DOT = auto()
    QUESTION = auto()
    AT = auto()
    AMPERSAND = auto()
    HASH = auto()
    OTHER = auto()

    # Literals
    NUMBER = auto()
    STRING_LITERAL = auto()
    IDENTIFIER = auto()

    # Special
    EOF = auto()


@dataclass
class Token:
    """Represents a single token from the lexer."""
    type: TokenType
    value: str
    line: int
    column: int


# Keyword to TokenType mapping
KEYWORDS = {
    'transaction': TokenType.TRANSACTION,
    'fun': TokenType.FUN,
    'struct': TokenType.STRUCT,
    'resource': TokenType.RESOURCE,
    'contract': TokenType.CONTRACT,
    'interface': TokenType.INTERFACE,
    'enum': TokenType.ENUM,
    'event': TokenType.EVENT,
    'attachment': TokenType.ATTACHMENT,
    'entitlement': TokenType.ENTITLEMENT,
    'case': TokenType.CASE,
    'let': TokenType.LET,
    'var': TokenType.VAR,
    'import': TokenType.IMPORT,
    'init': TokenType.INIT,
    'destroy': TokenType.DESTROY,
    'prepare': TokenType.PREPARE,
    'execute': TokenType.EXECUTE,
    'pre': TokenType.PRE,
    'post': TokenType.POST,
    'access': TokenType.ACCESS,
    'pub': TokenType.PUB,
    'priv': TokenType.PRIV,
    'view': TokenType.VIEW,
    'static': TokenType.STATIC,
    'native': TokenType.NATIVE,
    'auth': TokenType.AUTH,
}

# Composite kinds as written in source
COMPOSITE_KEYWORDS = {
    TokenType.STRUCT: 'struct',
    TokenType.RESOURCE: 'resource',
    TokenType.CONTRACT: 'contract',
    TokenType.ENUM: 'enum',
    TokenType.ATTACHMENT: 'attachment',
}

# Single-character punctuation
SINGLE_CHAR_OPS = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    '<': TokenType.LT,
    '>': TokenType.GT,
    ':': TokenType.COLON,
    ';': TokenType.SEMICOLON,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '?': TokenType.QUESTION,
    '@': TokenType.AT,
    '&': TokenType.AMPERSAND,
    '#': TokenType.HASH,
}
