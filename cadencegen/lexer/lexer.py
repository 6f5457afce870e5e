"""
Lexer implementation for Cadence source code.

The Lexer tokenizes Cadence source code into a stream of tokens
that can be consumed by the declaration parser.
"""

from typing import List

from .tokens import Token, TokenType, KEYWORDS, SINGLE_CHAR_OPS


class Lexer:
    """
    Lexer for Cadence source code.

    Converts source text into a list of tokens for parsing. Comments
    (including nested block comments) are dropped; characters that have
    no meaning for declarations are emitted as OTHER tokens.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def peek(self, offset: int = 0) -> str:
        """Look ahead in the source without consuming."""
        pos = self.pos + offset
        if pos >= len(self.source):
            return ''
        return self.source[pos]

    def advance(self) -> str:
        """Consume and return the current character."""
        ch = self.peek()
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def skip_whitespace(self) -> None:
        """Skip over whitespace characters."""
        ch = self.peek()
        while ch and ch in ' \t\r\n':
            self.advance()
            ch = self.peek()

    def skip_comment(self) -> None:
        """Skip over single-line and (nested) multi-line comments."""
        if self.peek() == '/' and self.peek(1) == '/':
            while self.peek() and self.peek() != '\n':
                self.advance()
        elif self.peek() == '/' and self.peek(1) == '*':
            self.advance()
            self.advance()
            depth = 1
            while self.peek() and depth > 0:
                if self.peek() == '/' and self.peek(1) == '*':
                    self.advance()
                    self.advance()
                    depth += 1
                elif self.peek() == '*' and self.peek(1) == '/':
                    self.advance()
                    self.advance()
                    depth -= 1
                else:
                    self.advance()

    def read_string(self) -> str:
        """Read a string literal including its quotes."""
        quote = self.advance()
        result = quote
        while self.peek() and self.peek() != quote and self.peek() != '\n':
            if self.peek() == '\\':
                result += self.advance()
            result += self.advance()
        if self.peek() == quote:
            result += self.advance()
        return result

    def read_number(self) -> str:
        """Read a numeric literal (decimal, fixed-point, or prefixed)."""
        result = ''
        if self.peek() == '0' and self.peek(1) in ('x', 'X', 'b', 'B', 'o', 'O'):
            result += self.advance()
            result += self.advance()
        while self.peek() and (self.peek().isalnum() or self.peek() == '_'):
            result += self.advance()
        # Fixed-point literals such as 1.5
        if self.peek() == '.' and self.peek(1).isdigit():
            result += self.advance()
            while self.peek() and (self.peek().isdigit() or self.peek() == '_'):
                result += self.advance()
        return result

    def read_identifier(self) -> str:
        """Read an identifier or keyword."""
        result = ''
        while self.peek() and (self.peek().isalnum() or self.peek() == '_'):
            result += self.advance()
        return result

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source and return a list of tokens.

        Returns:
            List of Token objects, ending with an EOF token.
        """
        while self.pos < len(self.source):
            self.skip_whitespace()

            if self.pos >= len(self.source):
                break

            if self.peek() == '/' and self.peek(1) in ('/', '*'):
                self.skip_comment()
                continue

            start_line = self.line
            start_col = self.column
            ch = self.peek()

            if ch == '"':
                value = self.read_string()
                self.tokens.append(Token(TokenType.STRING_LITERAL, value, start_line, start_col))
                continue

            if ch.isdigit():
                value = self.read_number()
                self.tokens.append(Token(TokenType.NUMBER, value, start_line, start_col))
                continue

            if ch.isalpha() or ch == '_':
                value = self.read_identifier()
                token_type = KEYWORDS.get(value, TokenType.IDENTIFIER)
                self.tokens.append(Token(token_type, value, start_line, start_col))
                continue

            self.advance()
            token_type = SINGLE_CHAR_OPS.get(ch, TokenType.OTHER)
            self.tokens.append(Token(token_type, ch, start_line, start_col))

        self.tokens.append(Token(TokenType.EOF, '', self.line, self.column))
        return self.tokens
