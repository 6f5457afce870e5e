"""
Cadence declaration parser implementation.

The Parser converts a stream of tokens from the Lexer into a declaration
tree. It reads top-level declarations, composite members, parameter lists,
access modifiers and type annotations; function and transaction bodies are
skipped by bracket matching.
"""

import logging
from typing import List, Optional

from ..lexer import Token, TokenType, COMPOSITE_KEYWORDS
from .ast_nodes import (
    # Types
    TypeNode,
    NominalType,
    OptionalType,
    VariableSizedType,
    ConstantSizedType,
    DictionaryType,
    ReferenceType,
    IntersectionType,
    InstantiationType,
    FunctionType,
    TypeAnnotation,
    # Declarations
    Declaration,
    Parameter,
    FieldDeclaration,
    FunctionDeclaration,
    SpecialFunctionDeclaration,
    EventDeclaration,
    EnumCaseDeclaration,
    EntitlementDeclaration,
    CompositeDeclaration,
    TransactionDeclaration,
    Program,
)

logger = logging.getLogger(__name__)

SPECIAL_FUNCTIONS = {
    TokenType.INIT: 'init',
    TokenType.DESTROY: 'destroy',
    TokenType.PREPARE: 'prepare',
    TokenType.EXECUTE: 'execute',
    TokenType.PRE: 'pre',
    TokenType.POST: 'post',
}

OPENERS = (TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE)
CLOSERS = (TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE)
MATCHING = {
    TokenType.LPAREN: TokenType.RPAREN,
    TokenType.LBRACKET: TokenType.RBRACKET,
    TokenType.LBRACE: TokenType.RBRACE,
}
CLOSING_TEXT = {
    TokenType.LPAREN: ')',
    TokenType.LBRACKET: ']',
    TokenType.LBRACE: '}',
}


class NullMemoryGauge:
    """Memory gauge that accepts every allocation."""

    def meter_memory(self, kind: str, amount: int) -> None:
        return None


class Parser:
    """
    Recursive descent parser for Cadence declarations.

    Parses a stream of tokens into a Program of top-level declarations.
    """

    def __init__(self, tokens: List[Token], memory_gauge=None):
        self.tokens = tokens
        self.pos = 0
        self.memory_gauge = memory_gauge or NullMemoryGauge()

    def peek(self, offset: int = 0) -> Token:
        """Look ahead in the token stream without consuming."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[pos]

    def current(self) -> Token:
        """Return the current token."""
        return self.peek()

    def advance(self) -> Token:
        """Consume and return the current token."""
        token = self.current()
        self.pos += 1
        return token

    def match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current().type in types

    def expect(self, token_type: TokenType, message: str = '') -> Token:
        """Consume the current token if it matches, otherwise raise an error."""
        if self.current().type != token_type:
            raise SyntaxError(
                f"Expected {token_type.name} but got {self.current().type.name} "
                f"at line {self.current().line}, column {self.current().column}: {message}"
            )
        return self.advance()

    def expect_identifier(self, message: str = '') -> str:
        """Consume an identifier; soft keywords are accepted as names."""
        token = self.current()
        if token.type == TokenType.IDENTIFIER:
            return self.advance().value
        if token.value and (token.value[0].isalpha() or token.value[0] == '_') \
                and token.type not in (TokenType.STRING_LITERAL, TokenType.NUMBER):
            return self.advance().value
        raise SyntaxError(
            f"Expected identifier but got {token.type.name} "
            f"at line {token.line}, column {token.column}: {message}"
        )

    # =========================================================================
    # TOP-LEVEL PARSING
    # =========================================================================

    def parse(self) -> Program:
        """Parse the entire source into a Program."""
        program = Program()

        while not self.match(TokenType.EOF):
            if self.match(TokenType.RBRACE):
                token = self.current()
                raise SyntaxError(
                    f"Unexpected '}}' at line {token.line}, column {token.column}"
                )
            declaration = self.parse_declaration()
            if declaration is not None:
                self.memory_gauge.meter_memory(type(declaration).__name__, 1)
                program.declarations.append(declaration)

        return program

    def parse_declaration(self) -> Optional[Declaration]:
        """Parse one declaration; pragmas and leftover imports are skipped."""
        if self.match(TokenType.SEMICOLON):
            self.advance()
            return None
        if self.match(TokenType.HASH, TokenType.IMPORT):
            # Pragmas and leftover import lines
            self.skip_statement()
            return None

        access = self.parse_access()

        purity = ''
        is_static = False
        while self.match(TokenType.VIEW, TokenType.STATIC, TokenType.NATIVE):
            token = self.advance()
            if token.type == TokenType.VIEW:
                purity = 'view'
            elif token.type == TokenType.STATIC:
                is_static = True

        if self.match(TokenType.TRANSACTION):
            return self.parse_transaction()
        if self.match(TokenType.FUN):
            return self.parse_function(access, purity, is_static)
        if self.current().type in COMPOSITE_KEYWORDS:
            return self.parse_composite(access)
        if self.match(TokenType.EVENT):
            return self.parse_event(access)
        if self.match(TokenType.ENTITLEMENT):
            return self.parse_entitlement(access)
        if self.match(TokenType.LET, TokenType.VAR):
            return self.parse_field(access)
        if self.match(TokenType.CASE):
            self.advance()
            return EnumCaseDeclaration(name=self.expect_identifier('enum case'), access=access)
        if self.current().type in SPECIAL_FUNCTIONS:
            return self.parse_special_function()
        if self.match(TokenType.RBRACE, TokenType.EOF):
            if access:
                token = self.current()
                raise SyntaxError(
                    f"Expected declaration after '{access}' at line {token.line}, "
                    f"column {token.column}"
                )
            return None

        token = self.current()
        raise SyntaxError(
            f"Unexpected {token.type.name} '{token.value}' at line {token.line}, "
            f"column {token.column}: expected a declaration"
        )

    def parse_access(self) -> str:
        """Parse an access modifier and return it as written, or ''."""
        if self.match(TokenType.ACCESS):
            self.advance()
            return f'access({self.collect_parenthesized()})'
        if self.match(TokenType.PUB):
            self.advance()
            if self.match(TokenType.LPAREN) and self.peek(1).value == 'set':
                return f'pub({self.collect_parenthesized()})'
            return 'pub'
        if self.match(TokenType.PRIV):
            self.advance()
            return 'priv'
        return ''

    def collect_parenthesized(self) -> str:
        """Consume '( ... )' and return the inner text, normalized."""
        self.expect(TokenType.LPAREN)
        values = []
        depth = 1
        while True:
            if self.match(TokenType.EOF):
                raise SyntaxError("Unexpected end of input inside parentheses")
            if self.match(TokenType.LPAREN):
                depth += 1
            elif self.match(TokenType.RPAREN):
                depth -= 1
                if depth == 0:
                    self.advance()
                    break
            values.append(self.advance().value)
        text = ' '.join(values)
        for before, after in ((' ,', ','), (' .', '.'), ('. ', '.'), ('( ', '('), (' )', ')')):
            text = text.replace(before, after)
        return text

    # =========================================================================
    # SKIPPING
    # =========================================================================

    def skip_block(self) -> None:
        """Skip a '{ ... }' block, checking that nested brackets match."""
        stack = [self.expect(TokenType.LBRACE)]
        while stack:
            self.track_bracket(stack)

    def skip_statement(self) -> None:
        """Skip tokens until the end of the current line, honouring brackets."""
        stack: List[Token] = []
        start_line = self.current().line
        while True:
            token = self.current()
            if not stack and (token.line != start_line or
                              token.type in (TokenType.EOF, TokenType.RBRACE)):
                return
            self.track_bracket(stack)

    def skip_balanced(self, opener: TokenType, closer: TokenType) -> None:
        """Skip a bracketed group such as '< ... >'."""
        self.expect(opener)
        depth = 1
        while depth > 0:
            if self.match(TokenType.EOF):
                raise SyntaxError(f"Unexpected end of input: unclosed {opener.name}")
            if self.match(opener):
                depth += 1
            elif self.match(closer):
                depth -= 1
            self.advance()

    def track_bracket(self, stack: List[Token]) -> None:
        """
        Consume one token, keeping '(', '[' and '{' on a stack.

        Raises:
            SyntaxError: On a closer that does not match the innermost open
                bracket, or end of input while a bracket is still open.
        """
        token = self.current()
        if token.type == TokenType.EOF:
            opening = stack[-1]
            raise SyntaxError(
                f"Unexpected end of input: '{opening.value}' opened at line "
                f"{opening.line}, column {opening.column} is never closed"
            )
        if token.type in OPENERS:
            stack.append(token)
        elif token.type in CLOSERS:
            if not stack:
                raise SyntaxError(
                    f"Unexpected '{token.value}' at line {token.line}, column {token.column}"
                )
            opening = stack.pop()
            if MATCHING[opening.type] != token.type:
                raise SyntaxError(
                    f"Mismatched '{token.value}' at line {token.line}, column {token.column} "
                    f"(expected '{CLOSING_TEXT[opening.type]}' for '{opening.value}' "
                    f"opened at line {opening.line})"
                )
        self.advance()

    # =========================================================================
    # DECLARATIONS
    # =========================================================================

    def parse_transaction(self) -> TransactionDeclaration:
        """Parse a transaction declaration."""
        line = self.expect(TokenType.TRANSACTION).line
        parameters = []
        if self.match(TokenType.LPAREN):
            parameters = self.parse_parameters()

        self.expect(TokenType.LBRACE, 'transaction body')
        transaction = TransactionDeclaration(parameters=parameters, line=line)

        while not self.match(TokenType.RBRACE, TokenType.EOF):
            member = self.parse_declaration()
            if isinstance(member, FieldDeclaration):
                transaction.fields.append(member)
            elif isinstance(member, SpecialFunctionDeclaration):
                transaction.phases.append(member)

        self.expect(TokenType.RBRACE, 'end of transaction')
        return transaction

    def parse_function(self, access: str, purity: str = '', is_static: bool = False) -> FunctionDeclaration:
        """Parse a function declaration, skipping its body."""
        line = self.expect(TokenType.FUN).line
        name = self.expect_identifier('function name')

        if self.match(TokenType.LT):
            # Type parameters
            self.skip_balanced(TokenType.LT, TokenType.GT)

        parameters = self.parse_parameters()

        return_type = None
        if self.match(TokenType.COLON):
            self.advance()
            return_type = self.parse_type_annotation()

        has_body = False
        if self.match(TokenType.LBRACE):
            self.skip_block()
            has_body = True

        return FunctionDeclaration(
            name=name,
            access=access,
            parameters=parameters,
            return_type=return_type,
            purity=purity,
            is_static=is_static,
            has_body=has_body,
            line=line,
        )

    def parse_special_function(self) -> SpecialFunctionDeclaration:
        """Parse init/destroy/prepare/execute/pre/post, skipping the body."""
        token = self.advance()
        parameters = []
        if self.match(TokenType.LPAREN):
            parameters = self.parse_parameters()
        if self.match(TokenType.LBRACE):
            self.skip_block()
        return SpecialFunctionDeclaration(
            kind=SPECIAL_FUNCTIONS[token.type],
            parameters=parameters,
            line=token.line,
        )

    def parse_composite(self, access: str) -> CompositeDeclaration:
        """Parse a struct, resource, contract, enum or attachment (or interface)."""
        kind_token = self.advance()
        kind = COMPOSITE_KEYWORDS[kind_token.type]

        is_interface = False
        if self.match(TokenType.INTERFACE):
            self.advance()
            is_interface = True

        name = self.expect_identifier(f'{kind} name')

        if kind == 'attachment' and self.current().value == 'for':
            self.advance()
            self.parse_type()

        conformances = []
        if self.match(TokenType.COLON):
            self.advance()
            while True:
                conformances.append(str(self.parse_nominal_type()))
                if self.match(TokenType.COMMA):
                    self.advance()
                else:
                    break

        self.expect(TokenType.LBRACE, f'{kind} {name} body')
        composite = CompositeDeclaration(
            name=name,
            kind=kind,
            access=access,
            is_interface=is_interface,
            conformances=conformances,
            line=kind_token.line,
        )

        while not self.match(TokenType.RBRACE, TokenType.EOF):
            member = self.parse_declaration()
            if isinstance(member, FieldDeclaration):
                composite.fields.append(member)
            elif isinstance(member, FunctionDeclaration):
                composite.functions.append(member)
            elif isinstance(member, SpecialFunctionDeclaration):
                composite.special_functions.append(member)
            elif isinstance(member, CompositeDeclaration):
                composite.composites.append(member)
            elif isinstance(member, EventDeclaration):
                composite.events.append(member)
            elif isinstance(member, EnumCaseDeclaration):
                composite.enum_cases.append(member)
            elif isinstance(member, EntitlementDeclaration):
                composite.entitlements.append(member)

        self.expect(TokenType.RBRACE, f'end of {kind} {name}')
        return composite

    def parse_event(self, access: str) -> EventDeclaration:
        """Parse an event declaration."""
        line = self.expect(TokenType.EVENT).line
        name = self.expect_identifier('event name')
        parameters = self.parse_parameters()
        return EventDeclaration(name=name, access=access, parameters=parameters, line=line)

    def parse_entitlement(self, access: str) -> EntitlementDeclaration:
        """Parse an entitlement or entitlement mapping declaration."""
        self.expect(TokenType.ENTITLEMENT)
        is_mapping = False
        if self.current().value == 'mapping':
            self.advance()
            is_mapping = True
        name = self.expect_identifier('entitlement name')
        if is_mapping and self.match(TokenType.LBRACE):
            self.skip_block()
        return EntitlementDeclaration(name=name, access=access, is_mapping=is_mapping)

    def parse_field(self, access: str) -> Optional[FieldDeclaration]:
        """Parse a let/var declaration; untyped variables are skipped."""
        keyword = self.advance()
        name = self.expect_identifier('variable name')

        if not self.match(TokenType.COLON):
            # Untyped variable with an initializer
            self.skip_statement()
            return None

        self.advance()
        type_annotation = self.parse_type_annotation()

        if self.current().value in ('=', '<') and self.current().line == keyword.line:
            self.skip_statement()

        return FieldDeclaration(
            name=name,
            type_annotation=type_annotation,
            access=access,
            variable_kind=keyword.value,
            line=keyword.line,
        )

    # =========================================================================
    # PARAMETER PARSING
    # =========================================================================

    def parse_parameters(self) -> List[Parameter]:
        """Parse a parenthesized parameter list."""
        self.expect(TokenType.LPAREN)
        parameters = []

        while not self.match(TokenType.RPAREN, TokenType.EOF):
            label = ''
            name = self.expect_identifier('parameter name')
            if not self.match(TokenType.COLON):
                label = name
                name = self.expect_identifier('parameter name')
            self.expect(TokenType.COLON, f'parameter {name}')
            type_annotation = self.parse_type_annotation()

            if self.current().value == '=':
                # Default argument (event parameters)
                self.skip_default_argument()

            parameters.append(Parameter(name=name, type_annotation=type_annotation, label=label))
            if self.match(TokenType.COMMA):
                self.advance()
            else:
                break

        self.expect(TokenType.RPAREN, 'end of parameter list')
        return parameters

    def skip_default_argument(self) -> None:
        """Skip '= expression' up to the next top-level ',' or ')'."""
        self.advance()
        stack: List[Token] = []
        while stack or not self.match(TokenType.COMMA, TokenType.RPAREN, TokenType.EOF):
            self.track_bracket(stack)

    # =========================================================================
    # TYPE PARSING
    # =========================================================================

    def parse_type_annotation(self) -> TypeAnnotation:
        """Parse a type annotation, including the resource marker."""
        is_resource = False
        if self.match(TokenType.AT):
            self.advance()
            is_resource = True
        return TypeAnnotation(type=self.parse_type(), is_resource=is_resource)

    def parse_type(self) -> TypeNode:
        """Parse a type, including optional suffixes."""
        result = self.parse_primary_type()
        while self.match(TokenType.QUESTION):
            self.advance()
            result = OptionalType(type=result)
        return result

    def parse_primary_type(self) -> TypeNode:
        """Parse a type without optional suffixes."""
        token = self.current()

        if token.type == TokenType.LBRACKET:
            self.advance()
            element = self.parse_type()
            if self.match(TokenType.SEMICOLON):
                self.advance()
                size = self.expect(TokenType.NUMBER, 'array size').value
                self.expect(TokenType.RBRACKET)
                return ConstantSizedType(type=element, size=size)
            self.expect(TokenType.RBRACKET)
            return VariableSizedType(type=element)

        if token.type == TokenType.LBRACE:
            return self.parse_braced_type()

        if token.type == TokenType.AMPERSAND:
            self.advance()
            return ReferenceType(type=self.parse_primary_type())

        if token.type == TokenType.AUTH:
            self.advance()
            authorization = ''
            if self.match(TokenType.LPAREN):
                authorization = self.collect_parenthesized()
            self.expect(TokenType.AMPERSAND, 'authorized reference')
            return ReferenceType(type=self.parse_primary_type(), authorization=authorization)

        if token.type == TokenType.FUN:
            self.advance()
            return self.parse_function_type()

        if token.type == TokenType.LPAREN:
            self.advance()
            if self.match(TokenType.LPAREN):
                # Legacy function type: ((A): R)
                function_type = self.parse_function_type()
                self.expect(TokenType.RPAREN)
                return function_type
            inner = self.parse_type()
            self.expect(TokenType.RPAREN)
            return inner

        if token.type == TokenType.IDENTIFIER:
            base: TypeNode = self.parse_nominal_type()
            if self.match(TokenType.LT):
                self.advance()
                arguments = []
                while not self.match(TokenType.GT, TokenType.EOF):
                    arguments.append(self.parse_type_annotation())
                    if self.match(TokenType.COMMA):
                        self.advance()
                    else:
                        break
                self.expect(TokenType.GT, 'end of type arguments')
                base = InstantiationType(type=base, arguments=arguments)
            if self.looks_like_restriction():
                # Legacy restricted type: T{I}
                restriction = self.parse_braced_type()
                if isinstance(restriction, IntersectionType):
                    restriction.base = base
                    return restriction
            return base

        raise SyntaxError(
            f"Expected type but got {token.type.name} '{token.value}' "
            f"at line {token.line}, column {token.column}"
        )

    def looks_like_restriction(self) -> bool:
        """Check for a legacy restriction '{I, J.K}' rather than a body."""
        if not self.match(TokenType.LBRACE):
            return False
        offset = 1
        while True:
            token = self.peek(offset)
            if token.type != TokenType.IDENTIFIER or not token.value[0].isupper():
                return False
            offset += 1
            while self.peek(offset).type == TokenType.DOT and \
                    self.peek(offset + 1).type == TokenType.IDENTIFIER:
                offset += 2
            if self.peek(offset).type == TokenType.RBRACE:
                return True
            if self.peek(offset).type != TokenType.COMMA:
                return False
            offset += 1

    def parse_nominal_type(self) -> NominalType:
        """Parse a possibly qualified type name."""
        identifier = self.expect(TokenType.IDENTIFIER, 'type name').value
        nested = []
        while self.match(TokenType.DOT):
            self.advance()
            nested.append(self.expect_identifier('qualified type name'))
        return NominalType(identifier=identifier, nested=nested)

    def parse_braced_type(self) -> TypeNode:
        """Parse a dictionary ({K: V}) or intersection ({A, B}) type."""
        self.expect(TokenType.LBRACE)
        if self.match(TokenType.RBRACE):
            self.advance()
            return IntersectionType()

        first = self.parse_type()
        if self.match(TokenType.COLON):
            self.advance()
            value_type = self.parse_type()
            self.expect(TokenType.RBRACE, 'end of dictionary type')
            return DictionaryType(key_type=first, value_type=value_type)

        types = [first]
        while self.match(TokenType.COMMA):
            self.advance()
            types.append(self.parse_type())
        self.expect(TokenType.RBRACE, 'end of intersection type')
        return IntersectionType(types=types)

    def parse_function_type(self) -> FunctionType:
        """Parse '(A, B): R' after the 'fun' keyword or opening parenthesis."""
        self.expect(TokenType.LPAREN)
        parameter_types = []
        while not self.match(TokenType.RPAREN, TokenType.EOF):
            parameter_types.append(self.parse_type_annotation())
            if self.match(TokenType.COMMA):
                self.advance()
            else:
                break
        self.expect(TokenType.RPAREN, 'end of function type parameters')
        return_type = None
        if self.match(TokenType.COLON):
            self.advance()
            return_type = self.parse_type_annotation()
        return FunctionType(parameter_types=parameter_types, return_type=return_type)
