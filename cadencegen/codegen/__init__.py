"""
Code generation module for the Cadence code generator.

This module renders a flattened report into TypeScript and Swift client
bindings.
"""

from .base import BaseGenerator, EntryPoint, format_function_name
from .typescript import TypeScriptGenerator
from .swift import SwiftGenerator

__all__ = [
    'BaseGenerator',
    'EntryPoint',
    'format_function_name',
    'TypeScriptGenerator',
    'SwiftGenerator',
]
