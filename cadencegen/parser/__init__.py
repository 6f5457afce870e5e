"""
Parser module for the Cadence code generator.

This module provides declaration node definitions, the parser implementation
and the parse_program() entry point.
"""

from typing import Union

from ..lexer import Lexer
from .ast_nodes import (
    # Base
    ASTNode,
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
from .parser import Parser, NullMemoryGauge


def parse_program(source: Union[str, bytes], memory_gauge=None) -> Program:
    """
    Parse Cadence source into a Program.

    Args:
        source: Cadence source text (import lines already removed)
        memory_gauge: Optional object with meter_memory(kind, amount), told
            about every token batch and top-level declaration

    Raises:
        SyntaxError: If the source cannot be parsed
    """
    if isinstance(source, bytes):
        source = source.decode('utf-8')
    gauge = memory_gauge or NullMemoryGauge()
    tokens = Lexer(source).tokenize()
    gauge.meter_memory('tokens', len(tokens))
    return Parser(tokens, memory_gauge=gauge).parse()


__all__ = [
    # Base
    'ASTNode',
    # Types
    'TypeNode',
    'NominalType',
    'OptionalType',
    'VariableSizedType',
    'ConstantSizedType',
    'DictionaryType',
    'ReferenceType',
    'IntersectionType',
    'InstantiationType',
    'FunctionType',
    'TypeAnnotation',
    # Declarations
    'Declaration',
    'Parameter',
    'FieldDeclaration',
    'FunctionDeclaration',
    'SpecialFunctionDeclaration',
    'EventDeclaration',
    'EnumCaseDeclaration',
    'EntitlementDeclaration',
    'CompositeDeclaration',
    'TransactionDeclaration',
    'Program',
    # Parser
    'Parser',
    'NullMemoryGauge',
    'parse_program',
]
