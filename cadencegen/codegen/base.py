"""
Base generator class with shared utilities.

This module provides the BaseGenerator class that contains the utilities
shared by the TypeScript and Swift binding generators: entry point naming,
deterministic ordering and tag grouping.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..analyzer.models import AnalysisResult, Report, Struct, TRANSACTION

NAME_SEPARATORS = re.compile(r'[_\-]+')


def format_function_name(file_name: str, capitalize_first: bool = False) -> str:
    """
    Convert a Cadence file name into a function or case name.

    'get_delegator-info.cdc' -> 'getDelegatorInfo', or 'GetDelegatorInfo'
    with capitalize_first.
    """
    if file_name.endswith('.cdc'):
        file_name = file_name[:-len('.cdc')]
    parts = [p.lower() for p in NAME_SEPARATORS.split(file_name) if p]
    for i, part in enumerate(parts):
        if i > 0 or capitalize_first:
            parts[i] = part[:1].upper() + part[1:]
    return ''.join(parts)


@dataclass
class EntryPoint:
    """A transaction or script with its generated name."""
    name: str
    result: AnalysisResult

    @property
    def is_transaction(self) -> bool:
        return self.result.kind == TRANSACTION


class BaseGenerator:
    """
    Base class for the binding generators.

    Generators read the flattened report; dotted struct names never reach
    them.
    """

    indent_unit = '  '
    capitalize_names = False

    def __init__(self, report: Report):
        """
        Initialize the base generator.

        Args:
            report: The flattened report to render
        """
        self.report = report

    def indent(self, level: int = 1) -> str:
        """Return the indentation string for a level."""
        return self.indent_unit * level

    def entry_points(self) -> List[EntryPoint]:
        """All transactions and scripts, sorted by generated name."""
        entries = [
            EntryPoint(format_function_name(file_name, self.capitalize_names), result)
            for file_name, result in list(self.report.transactions.items())
            + list(self.report.scripts.items())
        ]
        return sorted(entries, key=lambda e: (e.name, e.result.file_name))

    def grouped_entry_points(self) -> Tuple[List[EntryPoint], Dict[str, List[EntryPoint]]]:
        """Split entry points into untagged ones and groups by tag (sorted)."""
        untagged: List[EntryPoint] = []
        tagged: Dict[str, List[EntryPoint]] = {}
        for entry in self.entry_points():
            if entry.result.tag:
                tagged.setdefault(entry.result.tag, []).append(entry)
            else:
                untagged.append(entry)
        return untagged, dict(sorted(tagged.items()))

    def sorted_structs(self) -> List[Struct]:
        return [self.report.structs[k] for k in sorted(self.report.structs)]

    def generate(self) -> str:
        raise NotImplementedError
