"""
Analyzer module for the Cadence code generator.

This module provides the report data model, the per-file analysis steps
and the Analyzer that assembles them into a catalog.
"""

from .models import (
    Parameter,
    Import,
    AnalysisResult,
    Field,
    Struct,
    Report,
    TRANSACTION,
    SCRIPT,
)
from .imports import split_imports
from .classifier import Classification, classify
from .tags import derive_tag
from .structs import extract_structs
from .addresses import AddressBook, find_address_book, normalize_address, ADDRESS_BOOK_FILE
from .analyzer import Analyzer

__all__ = [
    # Models
    'Parameter',
    'Import',
    'AnalysisResult',
    'Field',
    'Struct',
    'Report',
    'TRANSACTION',
    'SCRIPT',
    # Analysis steps
    'split_imports',
    'Classification',
    'classify',
    'derive_tag',
    'extract_structs',
    # Address book
    'AddressBook',
    'find_address_book',
    'normalize_address',
    'ADDRESS_BOOK_FILE',
    # Analyzer
    'Analyzer',
]
