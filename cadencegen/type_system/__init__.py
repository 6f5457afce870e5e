"""
Types module for the Cadence code generator.

This module provides type-name flattening and type conversion utilities.
"""

from .names import (
    flatten_struct_name,
    flatten_type,
    referenced_names,
    split_qualified_name,
    split_top_level,
)
from .mappings import (
    cadence_type_to_ts,
    cadence_type_to_swift,
    fcl_argument_type,
    CADENCE_TO_TS_MAP,
    CADENCE_TO_SWIFT_MAP,
    FCL_TYPE_MAP,
)

__all__ = [
    'flatten_struct_name',
    'flatten_type',
    'referenced_names',
    'split_qualified_name',
    'split_top_level',
    'cadence_type_to_ts',
    'cadence_type_to_swift',
    'fcl_argument_type',
    'CADENCE_TO_TS_MAP',
    'CADENCE_TO_SWIFT_MAP',
    'FCL_TYPE_MAP',
]
