"""
Diagnostic/warning system for the code generator.

Collects and reports warnings about files that could not be analyzed and
contracts that could not be resolved. A batch run keeps going after each
of these; the summary tells developers which bindings are incomplete.
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set, Tuple

from .errors import CodegenError

logger = logging.getLogger(__name__)

FLATTEN_COLLISION = 'W301'


class DiagnosticSeverity(Enum):
    """Severity levels for code generator diagnostics."""
    WARNING = 'warning'
    INFO = 'info'


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    severity: DiagnosticSeverity
    code: str
    message: str
    file_path: str = ''
    line: Optional[int] = None
    construct: str = ''  # e.g., 'file', 'contract', 'network', 'flatten'

    def __str__(self) -> str:
        location = self.file_path
        if self.line:
            location = f'{location}:{self.line}'
        if location:
            return f'[{self.severity.value}] {location}: {self.message} ({self.code})'
        return f'[{self.severity.value}] {self.message} ({self.code})'


class CodegenDiagnostics:
    """
    Collects code generator warnings/diagnostics during a run.

    Usage:
        diag = CodegenDiagnostics()
        diag.warn_file_failed("scripts/get_balance.cdc", error)
        # ... after analysis ...
        diag.print_summary()
    """

    def __init__(self, verbose: bool = False):
        self._diagnostics: List[Diagnostic] = []
        self._collisions: Set[Tuple[str, str]] = set()
        self._verbose = verbose

    @property
    def diagnostics(self) -> List[Diagnostic]:
        """Get all collected diagnostics."""
        return list(self._diagnostics)

    @property
    def warnings(self) -> List[Diagnostic]:
        """Get only warning-level diagnostics."""
        return [d for d in self._diagnostics if d.severity == DiagnosticSeverity.WARNING]

    @property
    def count(self) -> int:
        """Get total diagnostic count."""
        return len(self._diagnostics)

    def clear(self) -> None:
        """Clear all diagnostics."""
        self._diagnostics.clear()
        self._collisions.clear()

    def _add(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)
        if diagnostic.severity == DiagnosticSeverity.WARNING:
            logger.warning('%s', diagnostic)
        else:
            logger.info('%s', diagnostic)

    # =========================================================================
    # SPECIFIC WARNING METHODS
    # =========================================================================

    def warn_file_failed(self, file_path: str, error: CodegenError) -> None:
        """Warn that a source file was skipped."""
        self._add(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code=error.code,
            message=f'Failed to analyze file: {error.message}',
            file_path=file_path,
            line=getattr(error, 'line', None),
            construct='file',
        ))

    def warn_contract_failed(self, contract: str, error: CodegenError) -> None:
        """Warn that nested types from a contract could not be resolved."""
        self._add(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code=error.code,
            message=f'Failed to resolve nested types from contract "{contract}": {error.message}',
            construct='contract',
        ))

    def warn_resolution_skipped(self, error: CodegenError) -> None:
        """Warn that nested type resolution did not run at all."""
        self._add(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code=error.code,
            message=f'Nested type resolution skipped: {error.message}',
            construct='network' if error.code == 'E202' else 'addresses',
        ))

    def warn_flatten_collision(self, flattened: str, kept: str, dropped: str) -> None:
        """Warn that two struct keys flatten to the same identifier (once per pair)."""
        if (flattened, dropped) in self._collisions:
            return
        self._collisions.add((flattened, dropped))
        self._add(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code=FLATTEN_COLLISION,
            message=f'Struct "{dropped}" flattens to "{flattened}", already used by "{kept}"; '
                    f'"{dropped}" was dropped from the report.',
            construct='flatten',
        ))

    def info_structs_resolved(self, contract: str, keys: List[str]) -> None:
        """Info that structs were added from a deployed contract."""
        self._add(Diagnostic(
            severity=DiagnosticSeverity.INFO,
            code='I001',
            message=f'Resolved {len(keys)} struct(s) from contract "{contract}": {", ".join(keys)}',
            construct='contract',
        ))

    # =========================================================================
    # REPORTING
    # =========================================================================

    def print_summary(self, file=None) -> None:
        """Print a summary of all diagnostics to stderr (or specified file)."""
        if file is None:
            file = sys.stderr

        if not self._diagnostics:
            return

        warnings = self.warnings
        infos = [d for d in self._diagnostics if d.severity == DiagnosticSeverity.INFO]

        if warnings:
            print(f'\nCodegen warnings ({len(warnings)}):', file=file)
            # Group by construct type
            by_construct: dict = {}
            for w in warnings:
                key = w.construct or 'other'
                if key not in by_construct:
                    by_construct[key] = []
                by_construct[key].append(w)

            for construct, diags in sorted(by_construct.items()):
                print(f'  {construct}: {len(diags)} occurrence(s)', file=file)
                if self._verbose:
                    for d in diags:
                        print(f'    {d}', file=file)

        if infos and self._verbose:
            print(f'\nCodegen info ({len(infos)}):', file=file)
            for d in infos:
                print(f'  {d}', file=file)

    def get_summary(self) -> str:
        """Get a summary string of all diagnostics."""
        if not self.warnings:
            return 'No codegen warnings.'

        by_construct: dict = {}
        for w in self.warnings:
            key = w.construct or 'other'
            by_construct[key] = by_construct.get(key, 0) + 1

        parts = [f'{count} {construct}' for construct, count in sorted(by_construct.items())]
        return f'Codegen warnings: {", ".join(parts)}'
