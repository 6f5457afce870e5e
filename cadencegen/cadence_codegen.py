#!/usr/bin/env python3
"""
Cadence Code Generator

Analyzes a tree of Cadence transaction and script files into a JSON report
and renders client bindings from it.

Key features:
- Transaction / script classification with parameter and return types
- Struct extraction, including structs nested in deployed contracts
- TypeScript bindings for @onflow/fcl
- Swift bindings for the Flow Swift SDK

Usage:
    cadence-codegen analyze cadence/ cadence.json
    cadence-codegen typescript cadence/ src/CadenceGen.ts
    cadence-codegen swift cadence.json Sources/CadenceGen.swift
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .analyzer import Analyzer, AddressBook, Report, find_address_book
from .codegen import TypeScriptGenerator, SwiftGenerator
from .diagnostics import CodegenDiagnostics
from .errors import CodegenError, FileUnreadable
from .resolver import NETWORK_ENDPOINTS

logger = logging.getLogger(__name__)

GENERATORS = {
    'typescript': TypeScriptGenerator,
    'swift': SwiftGenerator,
}

DEFAULT_OUTPUTS = {
    'analyze': 'cadence.json',
    'typescript': 'CadenceGen.ts',
    'swift': 'CadenceGen.swift',
}


class CadenceCodegen:
    """Main class that orchestrates analysis, resolution and generation."""

    def __init__(
        self,
        address_book: Optional[AddressBook] = None,
        include_base64: bool = True,
        resolve_nested: bool = True,
        network: str = 'mainnet',
        diagnostics: Optional[CodegenDiagnostics] = None,
        fetcher=None,
    ):
        self.address_book = address_book
        self.include_base64 = include_base64
        self.resolve_nested = resolve_nested
        self.network = network
        self.diagnostics = diagnostics or CodegenDiagnostics()
        self.fetcher = fetcher

    def build_report(self, input_path: str) -> Report:
        """
        Build a flattened report from a directory, a .cdc file, or a saved
        JSON report.

        Raises:
            FileUnreadable: If the input cannot be read
        """
        path = Path(input_path)
        if path.suffix == '.json':
            return self.load_report(path)

        analyzer = Analyzer(
            address_book=self.address_book,
            include_base64=self.include_base64,
            diagnostics=self.diagnostics,
        )
        analyzer.analyze_directory(path)
        if self.resolve_nested:
            analyzer.resolve_nested_types(self.network, fetcher=self.fetcher)
        return analyzer.get_report()

    def load_report(self, path: Path) -> Report:
        """Load a report written by the analyze command."""
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise FileUnreadable(f'Cannot load report {path}: {e}', file_path=str(path))
        if not isinstance(data, dict):
            raise FileUnreadable(f'Report {path} is not a JSON object', file_path=str(path))
        try:
            return Report.from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise FileUnreadable(f'Malformed report {path}: {e}', file_path=str(path))

    def generate(self, command: str, input_path: str) -> str:
        """Produce the output text for a command ('analyze', 'typescript', 'swift')."""
        report = self.build_report(input_path)
        if command == 'analyze':
            return report.to_json() + '\n'
        return GENERATORS[command](report).generate()

    def write_output(self, content: str, output_path: str) -> None:
        path = Path(output_path)
        if path.parent != Path(''):
            path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            f.write(content)
        print(f"Written: {path}")


def load_address_book(
    addresses: Optional[str],
    input_path: Path,
    diagnostics: CodegenDiagnostics,
) -> Optional[AddressBook]:
    """Load the address book from --addresses, or search for addresses.json."""
    if addresses is None:
        search_root = input_path if input_path.is_dir() else input_path.parent
        found = find_address_book(Path.cwd(), root=search_root)
        if found is None:
            logger.info('No addresses.json found')
            return None
        addresses = str(found)

    try:
        return AddressBook.from_file(addresses)
    except CodegenError as e:
        diagnostics.warn_resolution_skipped(e)
        return None


def main(argv=None) -> int:
    import argparse

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--no-base64', action='store_true',
                        help='Do not embed base64-encoded Cadence source in the output')
    common.add_argument('--no-resolve-nested', action='store_true',
                        help='Do not fetch deployed contracts to resolve nested struct types')
    common.add_argument('--network', default='mainnet', choices=sorted(NETWORK_ENDPOINTS),
                        help='Network used to resolve nested struct types')
    common.add_argument('--addresses', metavar='PATH',
                        help='Path to addresses.json (searched for by default)')
    common.add_argument('-v', '--verbose', action='store_true', help='Verbose logging and warnings')
    common.add_argument('--stdout', action='store_true', help='Print to stdout instead of file')

    parser = argparse.ArgumentParser(prog='cadence-codegen', description='Cadence Code Generator')
    subparsers = parser.add_subparsers(dest='command', required=True)
    for command, help_text in (
        ('analyze', 'Analyze Cadence files into a JSON report'),
        ('typescript', 'Generate TypeScript bindings'),
        ('swift', 'Generate Swift bindings'),
    ):
        sub = subparsers.add_parser(command, parents=[common], help=help_text)
        sub.add_argument('input', help='Cadence directory or file, or a JSON report')
        sub.add_argument('output', nargs='?', default=DEFAULT_OUTPUTS[command],
                         help=f'Output file (default: {DEFAULT_OUTPUTS[command]})')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    diagnostics = CodegenDiagnostics(verbose=args.verbose)
    input_path = Path(args.input)

    address_book = None
    if input_path.suffix != '.json':
        address_book = load_address_book(args.addresses, input_path, diagnostics)

    codegen = CadenceCodegen(
        address_book=address_book,
        include_base64=not args.no_base64,
        resolve_nested=not args.no_resolve_nested,
        network=args.network,
        diagnostics=diagnostics,
    )

    try:
        content = codegen.generate(args.command, args.input)
    except CodegenError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        diagnostics.print_summary()
        return 1

    if args.stdout:
        print(content, end='')
    else:
        codegen.write_output(content, args.output)

    diagnostics.print_summary()
    return 0


if __name__ == '__main__':
    sys.exit(main())
