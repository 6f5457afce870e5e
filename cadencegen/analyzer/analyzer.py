"""
Catalog assembly for Cadence transaction and script files.

The Analyzer runs import splitting, parsing, classification, tag
derivation and struct extraction for each file, and keeps the results in
its catalog:

    analyzer = Analyzer(address_book=AddressBook.from_file('addresses.json'))
    analyzer.analyze_directory('cadence/')
    analyzer.resolve_nested_types('mainnet')
    report = analyzer.get_report()
"""

import base64
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..diagnostics import CodegenDiagnostics
from ..errors import CodegenError, FileUnreadable, NoEntryPointFound, ParseFailed
from ..parser import parse_program
from .addresses import AddressBook
from .classifier import classify
from .imports import split_imports
from .models import AnalysisResult, Report, Struct, TRANSACTION
from .structs import extract_structs
from .tags import derive_tag

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Analyzer:
    """Analyzes Cadence files into a catalog of entry points and structs."""

    def __init__(
        self,
        address_book: Optional[AddressBook] = None,
        include_base64: bool = False,
        diagnostics: Optional[CodegenDiagnostics] = None,
        extension: str = '.cdc',
        memory_gauge=None,
    ):
        self.transactions: Dict[str, AnalysisResult] = {}
        self.scripts: Dict[str, AnalysisResult] = {}
        self.structs: Dict[str, Struct] = {}
        self.address_book = address_book
        self.include_base64 = include_base64
        self.diagnostics = diagnostics or CodegenDiagnostics()
        self.extension = extension
        self.memory_gauge = memory_gauge

    # =========================================================================
    # LOCAL ANALYSIS
    # =========================================================================

    def analyze_file(self, path: PathLike, root: Optional[PathLike] = None) -> AnalysisResult:
        """
        Analyze a single file and add it to the catalog.

        Structs declared in the file are merged into the catalog even when
        the file has no entry point.

        Args:
            path: The Cadence file
            root: Scan root the tag is derived against (default: CWD)

        Raises:
            FileUnreadable: The file could not be read or decoded
            ParseFailed: The file is not valid Cadence
            NoEntryPointFound: The file declares no transaction or script
        """
        path = Path(path)
        file_path = str(path)
        try:
            content = path.read_bytes()
            imports, body = split_imports(content)
        except (OSError, UnicodeDecodeError) as e:
            raise FileUnreadable(f'Failed to read file: {e}', file_path=file_path)

        try:
            program = parse_program(body, memory_gauge=self.memory_gauge)
        except SyntaxError as e:
            raise ParseFailed(f'Failed to parse file: {e}', file_path=file_path)

        file_name = path.name
        self.structs.update(extract_structs(program, file_name))

        try:
            classification = classify(program)
        except NoEntryPointFound as e:
            e.file_path = file_path
            raise

        result = AnalysisResult(
            file_name=file_name,
            kind=classification.kind,
            parameters=classification.parameters,
            return_type=classification.return_type,
            imports=imports,
            tag=derive_tag(self._relative_dir(path, root)),
        )
        if self.include_base64:
            result.base64 = base64.b64encode(content).decode('ascii')

        if result.kind == TRANSACTION:
            self.scripts.pop(file_name, None)
            self.transactions[file_name] = result
        else:
            self.transactions.pop(file_name, None)
            self.scripts[file_name] = result

        logger.debug('Analyzed %s as %s', file_path, result.kind)
        return result

    def _relative_dir(self, path: Path, root: Optional[PathLike]) -> str:
        """Directory of path relative to root; '' when outside it."""
        base = Path(root) if root is not None else Path.cwd()
        try:
            return str(path.parent.resolve().relative_to(base.resolve()))
        except ValueError:
            return ''

    def analyze_directory(self, root: PathLike) -> List[AnalysisResult]:
        """
        Analyze every source file under root, depth-first in sorted order.

        A file that fails is recorded as one warning and skipped, as is a
        subdirectory that cannot be listed. A file path as root is analyzed
        on its own.

        Raises:
            FileUnreadable: If root itself cannot be read
        """
        root = Path(root)
        if root.is_file():
            return self._analyze_files([root], root.parent)

        try:
            os.listdir(root)
        except OSError as e:
            raise FileUnreadable(f'Cannot read directory {root}: {e}', file_path=str(root))

        files = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=self._walk_error):
            dirnames.sort()
            for filename in sorted(filenames):
                if filename.endswith(self.extension):
                    files.append(Path(dirpath) / filename)

        return self._analyze_files(files, root)

    def _walk_error(self, error: OSError) -> None:
        """Record a directory os.walk could not list."""
        directory = error.filename or ''
        self.diagnostics.warn_file_failed(
            str(directory),
            FileUnreadable(f'Cannot read directory: {error}', file_path=str(directory)),
        )

    def _analyze_files(self, files: List[Path], root: Path) -> List[AnalysisResult]:
        results = []
        for path in files:
            try:
                results.append(self.analyze_file(path, root=root))
            except CodegenError as e:
                self.diagnostics.warn_file_failed(str(path), e)
        logger.info('Analyzed %d of %d file(s) under %s', len(results), len(files), root)
        return results

    # =========================================================================
    # NESTED TYPES
    # =========================================================================

    def resolve_nested_types(self, network: str = 'mainnet', fetcher=None) -> List[str]:
        """
        Resolve contract-qualified struct references from deployed contracts.

        Args:
            network: Network to fetch from ('mainnet' or 'testnet')
            fetcher: RemoteContractFetcher to use; one over the analyzer's
                address book by default, closed when resolution ends

        Returns:
            Struct keys added to the catalog
        """
        from ..resolver import NestedTypeResolver, RemoteContractFetcher

        if fetcher is not None:
            resolver = NestedTypeResolver(fetcher, diagnostics=self.diagnostics)
            return resolver.resolve(self.scripts, self.structs, network)

        with RemoteContractFetcher(self.address_book) as fetcher:
            resolver = NestedTypeResolver(fetcher, diagnostics=self.diagnostics)
            return resolver.resolve(self.scripts, self.structs, network)

    # =========================================================================
    # REPORT
    # =========================================================================

    def get_catalog(self) -> Report:
        """The stored catalog, with contract-qualified struct keys."""
        return Report(
            transactions=self.transactions,
            scripts=self.scripts,
            structs=self.structs,
            addresses=self.address_book.to_dict() if self.address_book else None,
        )

    def get_report(self) -> Report:
        """The flattened read view of the catalog."""
        return self.get_catalog().flattened(self.diagnostics)
