"""
Type-name utilities for Cadence type strings.

Type strings in the report are the canonical source form of a declared
type (e.g. ``[FlowIDTableStaking.DelegatorInfo]?``). This module flattens
contract-qualified names into identifiers and unwraps container syntax to
find the nominal names a type refers to.
"""

import re
from typing import List

IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
AUTH_PREFIX_RE = re.compile(r'^auth\s*(\([^)]*\))?\s*&')

OPENING = '([{<'
CLOSING = ')]}>'


def flatten_struct_name(name: str) -> str:
    """Flatten a qualified struct name: 'A.B' -> 'AB'."""
    return name.replace('.', '')


def flatten_type(type_str: str) -> str:
    """Flatten every qualified name inside a type expression."""
    return type_str.replace('.', '')


def split_top_level(text: str, separator: str) -> List[str]:
    """Split on a separator that is not nested inside brackets."""
    parts = []
    depth = 0
    current = ''
    for ch in text:
        if ch in OPENING:
            depth += 1
        elif ch in CLOSING:
            depth -= 1
        if ch == separator and depth == 0:
            parts.append(current)
            current = ''
        else:
            current += ch
    parts.append(current)
    return parts


def referenced_names(type_str: str) -> List[str]:
    """
    Return the nominal type names a type expression refers to.

    Unwraps resource markers, optionals, references (including authorized
    references), arrays and dictionaries. Other forms (intersections,
    instantiations, function types) are returned whole and will not look
    like a plain qualified name.
    """
    t = type_str.strip()
    if not t:
        return []

    if t.startswith('@'):
        return referenced_names(t[1:])
    if t.endswith('?'):
        return referenced_names(t[:-1])

    auth = AUTH_PREFIX_RE.match(t)
    if auth:
        return referenced_names(t[auth.end():])
    if t.startswith('&'):
        return referenced_names(t[1:])

    if t.startswith('[') and t.endswith(']'):
        element = split_top_level(t[1:-1], ';')[0]
        return referenced_names(element)

    if t.startswith('{') and t.endswith('}'):
        entries = split_top_level(t[1:-1], ':')
        if len(entries) == 2:
            return referenced_names(entries[0]) + referenced_names(entries[1])
        return []

    return [t]


def split_qualified_name(name: str) -> List[str]:
    """Split 'Contract.Struct' into its identifier parts, or [] if malformed."""
    parts = name.split('.')
    if all(IDENTIFIER_RE.match(p) for p in parts):
        return parts
    return []
