"""
Struct extraction from fetched contract source.

Deployed contracts are not run through the declaration parser: only the
structs a report actually references are wanted, and remote source may use
syntax the parser does not accept. The scanner reads the source line by
line and tracks brace depth instead.

Known limitations: multi-line field declarations are not recognized, and
braces inside comments or strings shift the depth count.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set

from ..analyzer.models import Field, Struct

logger = logging.getLogger(__name__)

STRUCT_PREFIXES = ('access(all) struct ', 'pub struct ')
FIELD_KEYWORDS = ('let', 'var')
FIELD_TERMINATORS = ('=', '<-', '//')


class StructExtractor(ABC):
    """Interface for extracting wanted structs from contract source."""

    @abstractmethod
    def extract(
        self,
        source: str,
        contract_name: str,
        wanted: Set[str],
        structs: Dict[str, Struct],
    ) -> List[str]:
        """
        Add the wanted structs declared in source to structs.

        Structs are keyed 'Contract.Struct'. Existing keys are never
        overwritten and wanted structs that are not declared are ignored.

        Args:
            source: Decoded contract source
            contract_name: Name used to qualify struct keys
            wanted: Bare struct names to extract
            structs: Catalog to add to (mutated in place)

        Returns:
            Keys added to structs
        """
        pass


class SelectiveStructScanner(StructExtractor):
    """Line-oriented, brace-depth-tracking struct extractor."""

    def extract(
        self,
        source: str,
        contract_name: str,
        wanted: Set[str],
        structs: Dict[str, Struct],
    ) -> List[str]:
        added: List[str] = []
        current: Optional[Struct] = None
        opened = False
        depth = 0

        for raw_line in source.split('\n'):
            line = raw_line.strip()

            if line.startswith(STRUCT_PREFIXES):
                parts = line.split()
                name = parts[2].rstrip('{').rstrip(':') if len(parts) >= 3 else ''
                key = f'{contract_name}.{name}'
                if name in wanted and key not in structs:
                    current = Struct(name=key, visibility=parts[0])
                    structs[key] = current
                    added.append(key)
                    opened = False
                    depth = 0

            if current is None:
                continue

            depth += line.count('{') - line.count('}')
            if '{' in line:
                opened = True

            if depth <= 1:
                field = parse_field_line(line)
                if field is not None:
                    current.fields.append(field)

            if opened and depth <= 0:
                logger.debug('Extracted %s with %d field(s)', current.name, len(current.fields))
                current = None

        return added


def parse_field_line(line: str) -> Optional[Field]:
    """
    Read a single-line 'let'/'var' field declaration.

    'access(all) let delegatorID: UInt32' -> Field('delegatorID', 'UInt32').
    Returns None when the line is not a field declaration.
    """
    if ':' not in line:
        return None

    tokens = line.split()
    for index, token in enumerate(tokens):
        if token not in FIELD_KEYWORDS:
            continue
        if index + 1 >= len(tokens):
            return None

        name_token = tokens[index + 1]
        rest = tokens[index + 2:]
        if name_token.endswith(':'):
            name = name_token[:-1]
        elif ':' in name_token:
            name, type_part = name_token.split(':', 1)
            rest = [type_part] + rest
        else:
            name = name_token
            if not rest or rest[0] != ':':
                return None
            rest = rest[1:]

        type_tokens = []
        for part in rest:
            if part.startswith(FIELD_TERMINATORS):
                break
            type_tokens.append(part)
        type_str = ' '.join(type_tokens).rstrip(';').strip()
        if not name or not type_str:
            return None

        return Field(
            name=name,
            type_str=type_str,
            optional='?' in type_str,
            visibility=' '.join(tokens[:index]),
        )

    return None
