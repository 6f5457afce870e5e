"""
Type mappings and conversion utilities for Cadence client bindings.

This module contains the mappings and functions for converting Cadence
type strings to their TypeScript and Swift equivalents, and to the FCL
argument types used when encoding call arguments.
"""

from .names import flatten_type, split_top_level


# =============================================================================
# TYPE MAPPING CONSTANTS
# =============================================================================

# Base Cadence to TypeScript type mapping
CADENCE_TO_TS_MAP = {
    'String': 'string',
    # Small integers fit in a JS number
    'Int': 'number',
    'UInt': 'number',
    'UInt8': 'number',
    'UInt16': 'number',
    'UInt32': 'number',
    'UInt64': 'number',
    'Int8': 'number',
    'Int16': 'number',
    'Int32': 'number',
    'Int64': 'number',
    # Wide integers and fixed-point values travel as decimal strings
    'UInt128': 'string',
    'UInt256': 'string',
    'Int128': 'string',
    'Int256': 'string',
    'UFix64': 'string',
    'Fix64': 'string',
    'Bool': 'boolean',
    'Address': 'string',
    'AnyStruct': 'any',
}

# FCL argument types whose name differs from the Cadence type name
FCL_TYPE_MAP = {
    'UInt128': 'UInt128',
    'UInt256': 'UInt256',
    'Int128': 'Int128',
    'Int256': 'Int256',
    'AnyStruct': 'Any',
}

# Base Cadence to Swift type mapping
CADENCE_TO_SWIFT_MAP = {
    'String': 'String',
    'Int': 'Int',
    'UInt': 'UInt',
    'UInt8': 'UInt8',
    'UInt16': 'UInt16',
    'UInt32': 'UInt32',
    'UInt64': 'UInt64',
    'Int8': 'Int8',
    'Int16': 'Int16',
    'Int32': 'Int32',
    'Int64': 'Int64',
    'Bool': 'Bool',
    'Address': 'Flow.Address',
    'UFix64': 'UFix64',
    'Fix64': 'Fix64',
}


def _split_dictionary(type_str: str):
    """Return (key, value) for '{K: V}', or None."""
    if type_str.startswith('{') and type_str.endswith('}'):
        entries = split_top_level(type_str[1:-1], ':')
        if len(entries) == 2:
            return entries[0].strip(), entries[1].strip()
    return None


def _array_element(type_str: str):
    """Return the element type for '[T]' or '[T; N]', or None."""
    if type_str.startswith('[') and type_str.endswith(']'):
        return split_top_level(type_str[1:-1], ';')[0].strip()
    return None


def cadence_type_to_ts(type_str: str) -> str:
    """
    Convert a Cadence type string to a TypeScript type.

    Args:
        type_str: Cadence type, e.g. '[FlowIDTableStaking.DelegatorInfo]?'

    Returns:
        TypeScript type, e.g. 'FlowIDTableStakingDelegatorInfo[] | undefined'
    """
    type_str = type_str.strip()

    if type_str.endswith('?'):
        return f'{cadence_type_to_ts(type_str[:-1])} | undefined'

    element = _array_element(type_str)
    if element is not None:
        inner = cadence_type_to_ts(element)
        if ' | ' in inner:
            inner = f'({inner})'
        return f'{inner}[]'

    entry = _split_dictionary(type_str)
    if entry is not None:
        key, value = entry
        return f'Record<{cadence_type_to_ts(key)}, {cadence_type_to_ts(value)}>'

    if type_str in CADENCE_TO_TS_MAP:
        return CADENCE_TO_TS_MAP[type_str]
    return flatten_type(type_str)


def fcl_argument_type(type_str: str) -> str:
    """Get the FCL argument type expression (t.X) for a Cadence type."""
    type_str = type_str.strip()

    if type_str.endswith('?'):
        return fcl_argument_type(type_str[:-1])

    element = _array_element(type_str)
    if element is not None:
        return f't.Array({fcl_argument_type(element)})'

    entry = _split_dictionary(type_str)
    if entry is not None:
        key, value = entry
        return f't.Dictionary({{ key: {fcl_argument_type(key)}, value: {fcl_argument_type(value)} }})'

    return f't.{FCL_TYPE_MAP.get(type_str, type_str)}'


def cadence_type_to_swift(type_str: str) -> str:
    """Convert a Cadence type string to a Swift type."""
    type_str = type_str.strip()

    if type_str.endswith('?'):
        return f'{cadence_type_to_swift(type_str[:-1])}?'

    element = _array_element(type_str)
    if element is not None:
        return f'[{cadence_type_to_swift(element)}]'

    entry = _split_dictionary(type_str)
    if entry is not None:
        key, value = entry
        return f'[{cadence_type_to_swift(key)}: {cadence_type_to_swift(value)}]'

    if type_str in CADENCE_TO_SWIFT_MAP:
        return CADENCE_TO_SWIFT_MAP[type_str]
    return flatten_type(type_str)
