"""
Lexer module for the Cadence code generator.

This module provides tokenization of Cadence source code.
"""

from .tokens import TokenType, Token, KEYWORDS, COMPOSITE_KEYWORDS, SINGLE_CHAR_OPS
from .lexer import Lexer

__all__ = [
    'TokenType',
    'Token',
    'KEYWORDS',
    'COMPOSITE_KEYWORDS',
    'SINGLE_CHAR_OPS',
    'Lexer',
]
