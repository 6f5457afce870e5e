"""
Cadence Code Generator

This package analyzes Cadence transactions and scripts into a typed report
and renders client bindings (TypeScript for FCL, Swift for the Flow Swift
SDK) from it.

Module Structure:
- lexer/: Tokenization (TokenType, Token, Lexer)
- parser/: Declaration nodes and parsing (Parser, parse_program)
- analyzer/: Report model and per-file analysis (Analyzer, AddressBook)
- resolver/: Nested struct resolution from deployed contracts
- type_system/: Type-name flattening and target type mappings
- codegen/: TypeScript and Swift generators
- cadence_codegen.py: Orchestrator and command-line interface

Usage:
    from cadencegen import Analyzer, TypeScriptGenerator

    analyzer = Analyzer(include_base64=True)
    analyzer.analyze_directory('cadence/')
    ts_code = TypeScriptGenerator(analyzer.get_report()).generate()
"""

# Re-export main classes for convenience
from .analyzer import Analyzer, AddressBook, Report
from .parser import parse_program
from .diagnostics import CodegenDiagnostics
from .codegen import TypeScriptGenerator, SwiftGenerator
from .cadence_codegen import CadenceCodegen

__all__ = [
    'Analyzer',
    'AddressBook',
    'Report',
    'parse_program',
    'CodegenDiagnostics',
    'TypeScriptGenerator',
    'SwiftGenerator',
    'CadenceCodegen',
]
