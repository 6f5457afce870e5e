"""
Nested type resolution for the Cadence code generator.

Collects contract-qualified struct references, fetches the owning
contracts from the Flow REST API and extracts the referenced structs.
"""

from .collector import collect_nested_types
from .fetcher import RemoteContractFetcher, NETWORK_ENDPOINTS
from .scanner import StructExtractor, SelectiveStructScanner, parse_field_line
from .resolver import NestedTypeResolver

__all__ = [
    'collect_nested_types',
    'RemoteContractFetcher',
    'NETWORK_ENDPOINTS',
    'StructExtractor',
    'SelectiveStructScanner',
    'parse_field_line',
    'NestedTypeResolver',
]
