"""
Nested type resolution.

After local analysis, struct references such as
``FlowIDTableStaking.DelegatorInfo`` point at contracts that were never
parsed. The resolver collects those references, fetches each owning
contract once and extracts only the referenced structs into the catalog.
"""

import logging
from typing import Dict, List, Optional, Set

from ..analyzer.models import AnalysisResult, Struct
from ..diagnostics import CodegenDiagnostics
from ..errors import AddressBookMissing, CodegenError, NetworkUnsupported
from .collector import collect_nested_types
from .fetcher import RemoteContractFetcher
from .scanner import SelectiveStructScanner, StructExtractor

logger = logging.getLogger(__name__)


class NestedTypeResolver:
    """Resolves contract-qualified struct references from deployed contracts."""

    def __init__(
        self,
        fetcher: RemoteContractFetcher,
        extractor: Optional[StructExtractor] = None,
        diagnostics: Optional[CodegenDiagnostics] = None,
    ):
        self.fetcher = fetcher
        self.extractor = extractor or SelectiveStructScanner()
        self.diagnostics = diagnostics or CodegenDiagnostics()

    def resolve(
        self,
        scripts: Dict[str, AnalysisResult],
        structs: Dict[str, Struct],
        network: str,
    ) -> List[str]:
        """
        Resolve nested types into structs (mutated in place).

        Each failing contract is recorded as one warning and skipped. An
        unsupported network or a missing address book is recorded once and
        nothing is fetched. Collection repeats over the structs added in
        this pass until nothing new is added, so chained references resolve
        in one run; each contract is fetched at most once. Existing keys are
        never re-extracted.

        Returns:
            Keys added to structs
        """
        try:
            self.fetcher.endpoint_for(network)
        except NetworkUnsupported as e:
            self.diagnostics.warn_resolution_skipped(e)
            return []

        work_list = collect_nested_types(scripts, structs)
        if not work_list:
            return []

        if self.fetcher.address_book is None:
            self.diagnostics.warn_resolution_skipped(
                AddressBookMissing('No addresses available; nested types were not resolved')
            )
            return []

        logger.info(
            'Found nested types to resolve: %s',
            {contract: sorted(names) for contract, names in sorted(work_list.items())},
        )

        sources: Dict[str, str] = {}
        failed: Set[str] = set()
        added: List[str] = []
        while work_list:
            round_added: List[str] = []
            for contract in sorted(work_list):
                if contract in failed:
                    continue
                if contract not in sources:
                    try:
                        sources[contract] = self.fetcher.fetch(contract, network)
                    except CodegenError as e:
                        self.diagnostics.warn_contract_failed(contract, e)
                        failed.add(contract)
                        continue
                keys = self.extractor.extract(sources[contract], contract, work_list[contract], structs)
                if keys:
                    self.diagnostics.info_structs_resolved(contract, keys)
                round_added.extend(keys)

            # Resolved structs may name further nested types
            if not round_added:
                break
            added.extend(round_added)
            work_list = collect_nested_types(scripts, structs)

        return added
