#!/usr/bin/env python3
"""
Unit tests for nested type resolution.

HTTP is faked by injecting a session object into RemoteContractFetcher.

Run with: python3 -m pytest cadencegen/test_resolver.py
"""

import sys
import os
# Add parent directory to path so the package imports without installation
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import base64
import tempfile
import unittest
from unittest import mock
from pathlib import Path

import requests

from cadencegen.analyzer import Analyzer, AddressBook, AnalysisResult, Field, Report, Struct
from cadencegen.diagnostics import CodegenDiagnostics
from cadencegen.errors import (
    ContractNotFound,
    DecodeFailed,
    FetchFailed,
    NetworkUnsupported,
)
from cadencegen.resolver import (
    NestedTypeResolver,
    RemoteContractFetcher,
    SelectiveStructScanner,
    collect_nested_types,
    parse_field_line,
)

STAKING_URL = 'https://rest-mainnet.onflow.org/v1/accounts/8624b52f9ddcd04a?expand=contracts'
TOKEN_URL = 'https://rest-mainnet.onflow.org/v1/accounts/f233dcee88fe0abe?expand=contracts'

STAKING_SOURCE = '''
access(all) contract FlowIDTableStaking {

    access(all) struct NodeInfo {
        access(all) let id: String
        access(all) let role: UInt8
        access(all) let tokensStaked: UFix64

        init(nodeID: String) {
            let nodeRecord = FlowIDTableStaking.borrowNodeRecord(nodeID)
            self.id = nodeRecord.id
            self.role = nodeRecord.role
            self.tokensStaked = nodeRecord.tokensStaked.balance
        }
    }

    access(all) struct DelegatorInfo {
        access(all) let id: UInt32
        access(all) let nodeID: String
        access(all) let tokensCommitted: UFix64
        access(all) let rewards: {String: UFix64}
        access(all) let node: FlowIDTableStaking.NodeInfo?

        init(nodeID: String, delegatorID: UInt32) {
            let delegator = FlowIDTableStaking.borrowDelegator(nodeID, delegatorID)
            self.id = delegator.id
            self.nodeID = nodeID
            self.tokensCommitted = delegator.tokensCommitted.balance
            self.rewards = {}
            self.node = nil
        }
    }

    access(all) struct UnusedInfo {
        access(all) let unused: Bool
    }
}
'''


def encode(source) -> str:
    if isinstance(source, str):
        source = source.encode('utf-8')
    return base64.b64encode(source).decode('ascii')


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError('Expecting value: line 1 column 1 (char 0)')
        return self._payload


class FakeSession:
    """Stands in for requests.Session, answering from a URL table."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requests = []

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return FakeResponse(status_code=404)
        return response


class ClosableSession(FakeSession):
    """FakeSession that counts close() calls."""

    def __init__(self, responses=None):
        super().__init__(responses)
        self.closed = 0

    def close(self):
        self.closed += 1


def contracts_response(**contracts) -> FakeResponse:
    return FakeResponse(payload={'address': '0x01', 'contracts': contracts})


def make_book() -> AddressBook:
    return AddressBook({
        'mainnet': {
            '0xFlowIDTableStaking': '0x8624b52f9ddcd04a',
            'FungibleToken': '0xf233dcee88fe0abe',
        },
    })


def make_scripts(*return_types) -> dict:
    scripts = {}
    for index, return_type in enumerate(return_types):
        name = f'script_{index}.cdc'
        scripts[name] = AnalysisResult(file_name=name, kind='script', return_type=return_type)
    return scripts


class TestCollectNestedTypes(unittest.TestCase):
    """Test discovery of contract-qualified struct references."""

    def test_unwraps_containers_and_markers(self):
        scripts = make_scripts(
            '[FlowIDTableStaking.DelegatorInfo]?',
            '{String: FlowIDTableStaking.NodeInfo}',
            '&A.B',
            'auth(X) &C.D?',
            '@E.F',
            'String',
            None,
        )
        wanted = collect_nested_types(scripts, {})
        self.assertEqual(wanted, {
            'FlowIDTableStaking': {'DelegatorInfo', 'NodeInfo'},
            'A': {'B'},
            'C': {'D'},
            'E': {'F'},
        })

    def test_struct_fields_are_scanned_and_known_names_skipped(self):
        structs = {
            'Local': Struct(name='Local', fields=[
                Field('key', '[G.H; 2]'),
                Field('known', 'I.J?', True),
                Field('deep', 'A.B.C'),
            ]),
            'I.J': Struct(name='I.J'),
        }
        self.assertEqual(collect_nested_types({}, structs), {'G': {'H'}})

    def test_nothing_to_collect(self):
        self.assertEqual(collect_nested_types(make_scripts('UFix64', '[String]'), {}), {})


class TestParseFieldLine(unittest.TestCase):
    """Test single-line field recognition."""

    def test_simple_field(self):
        field = parse_field_line('access(all) let delegatorID: UInt32')
        self.assertEqual(field, Field('delegatorID', 'UInt32', False, 'access(all)'))

    def test_optional_with_terminator(self):
        field = parse_field_line('access(all) var node: NodeInfo?;')
        self.assertEqual((field.type_str, field.optional), ('NodeInfo?', True))

    def test_dictionary_type_and_trailing_comment(self):
        field = parse_field_line('pub let rewards: {String: UFix64} // per node')
        self.assertEqual(field.type_str, '{String: UFix64}')
        self.assertEqual(field.visibility, 'pub')

    def test_compact_and_initialized_forms(self):
        self.assertEqual(parse_field_line('let id:UInt64'), Field('id', 'UInt64', False, ''))
        self.assertEqual(parse_field_line('access(all) let vault: @Vault <- create Vault()').type_str, '@Vault')
        self.assertEqual(parse_field_line('let count : Int = 0').type_str, 'Int')

    def test_other_lines(self):
        self.assertIsNone(parse_field_line('self.id = id'))
        self.assertIsNone(parse_field_line('access(all) fun getID(): UInt64 {'))
        self.assertIsNone(parse_field_line('let x = y'))
        self.assertIsNone(parse_field_line('let'))


class TestSelectiveStructScanner(unittest.TestCase):
    """Test brace-depth struct extraction."""

    def test_only_wanted_structs_are_extracted(self):
        structs = {}
        added = SelectiveStructScanner().extract(
            STAKING_SOURCE, 'FlowIDTableStaking', {'DelegatorInfo'}, structs
        )
        self.assertEqual(added, ['FlowIDTableStaking.DelegatorInfo'])
        self.assertEqual(list(structs), ['FlowIDTableStaking.DelegatorInfo'])
        info = structs['FlowIDTableStaking.DelegatorInfo']
        self.assertEqual(info.visibility, 'access(all)')
        self.assertEqual(
            [(f.name, f.type_str, f.optional) for f in info.fields],
            [
                ('id', 'UInt32', False),
                ('nodeID', 'String', False),
                ('tokensCommitted', 'UFix64', False),
                ('rewards', '{String: UFix64}', False),
                ('node', 'FlowIDTableStaking.NodeInfo?', True),
            ],
        )

    def test_locals_in_nested_blocks_are_not_fields(self):
        structs = {}
        SelectiveStructScanner().extract(STAKING_SOURCE, 'FlowIDTableStaking', {'NodeInfo'}, structs)
        names = [f.name for f in structs['FlowIDTableStaking.NodeInfo'].fields]
        self.assertEqual(names, ['id', 'role', 'tokensStaked'])

    def test_existing_key_is_not_overwritten(self):
        existing = Struct(name='FlowIDTableStaking.NodeInfo')
        structs = {'FlowIDTableStaking.NodeInfo': existing}
        added = SelectiveStructScanner().extract(STAKING_SOURCE, 'FlowIDTableStaking', {'NodeInfo'}, structs)
        self.assertEqual(added, [])
        self.assertIs(structs['FlowIDTableStaking.NodeInfo'], existing)
        self.assertEqual(existing.fields, [])

    def test_absent_struct_is_ignored(self):
        structs = {}
        added = SelectiveStructScanner().extract(STAKING_SOURCE, 'FlowIDTableStaking', {'Missing'}, structs)
        self.assertEqual((added, structs), ([], {}))

    def test_brace_on_next_line_and_conformance(self):
        source = (
            'pub struct Info\n'
            '{\n'
            '    pub let id: UInt64\n'
            '}\n'
            'pub let outside: String\n'
            'access(all) struct Display: MetadataViews.Resolver {\n'
            '    access(all) let name: String\n'
            '}\n'
        )
        structs = {}
        SelectiveStructScanner().extract(source, 'C', {'Info', 'Display'}, structs)
        self.assertEqual([f.name for f in structs['C.Info'].fields], ['id'])
        self.assertEqual([f.name for f in structs['C.Display'].fields], ['name'])


class TestRemoteContractFetcher(unittest.TestCase):
    """Test fetching and decoding of deployed contracts."""

    def fetcher(self, responses) -> RemoteContractFetcher:
        return RemoteContractFetcher(make_book(), session=FakeSession(responses))

    def test_fetch_decodes_source(self):
        fetcher = self.fetcher({STAKING_URL: contracts_response(FlowIDTableStaking=encode(STAKING_SOURCE))})
        self.assertEqual(fetcher.fetch('FlowIDTableStaking', 'mainnet'), STAKING_SOURCE)
        self.assertEqual(fetcher.session.requests, [(STAKING_URL, {'timeout': None})])

    def test_bare_name_lookup_and_timeout(self):
        session = FakeSession({TOKEN_URL: contracts_response(FungibleToken=encode('access(all) contract FungibleToken {}'))})
        fetcher = RemoteContractFetcher(make_book(), session=session, timeout=5)
        fetcher.fetch('FungibleToken', 'mainnet')
        self.assertEqual(session.requests, [(TOKEN_URL, {'timeout': 5})])

    def test_unsupported_network_makes_no_request(self):
        fetcher = self.fetcher({})
        with self.assertRaises(NetworkUnsupported):
            fetcher.fetch('FlowIDTableStaking', 'emulator')
        self.assertEqual(fetcher.session.requests, [])

    def test_unknown_contract_makes_no_request(self):
        fetcher = self.fetcher({})
        with self.assertRaises(ContractNotFound):
            fetcher.fetch('NonFungibleToken', 'mainnet')
        self.assertEqual(fetcher.session.requests, [])

    def test_transport_and_response_failures(self):
        cases = [
            requests.exceptions.ConnectionError('connection refused'),
            FakeResponse(status_code=500),
            FakeResponse(invalid_json=True),
            FakeResponse(payload={'address': '0x01'}),
            FakeResponse(payload=['not', 'an', 'object']),
        ]
        for response in cases:
            with self.subTest(response=response):
                fetcher = self.fetcher({STAKING_URL: response})
                with self.assertRaises(FetchFailed):
                    fetcher.fetch('FlowIDTableStaking', 'mainnet')

    def test_contract_missing_from_account(self):
        fetcher = self.fetcher({STAKING_URL: contracts_response(Other=encode('x'))})
        with self.assertRaises(ContractNotFound):
            fetcher.fetch('FlowIDTableStaking', 'mainnet')

    def test_decode_failures(self):
        for payload in ('!!! not base64 !!!', encode(b'\xff\xfe\xfd')):
            with self.subTest(payload=payload):
                fetcher = self.fetcher({STAKING_URL: contracts_response(FlowIDTableStaking=payload)})
                with self.assertRaises(DecodeFailed):
                    fetcher.fetch('FlowIDTableStaking', 'mainnet')

    def test_injected_session_is_left_open(self):
        session = ClosableSession()
        with RemoteContractFetcher(make_book(), session=session) as fetcher:
            self.assertIs(fetcher.session, session)
        self.assertEqual(session.closed, 0)

    def test_default_session_is_closed(self):
        fetcher = RemoteContractFetcher(make_book())
        self.assertIsInstance(fetcher.session, requests.Session)
        fetcher.session.close()
        session = ClosableSession()
        fetcher.session = session
        with fetcher:
            pass
        self.assertEqual(session.closed, 1)


class TestNestedTypeResolver(unittest.TestCase):
    """Test the resolution pass over a catalog."""

    def setUp(self):
        self.session = FakeSession({
            STAKING_URL: contracts_response(FlowIDTableStaking=encode(STAKING_SOURCE)),
            TOKEN_URL: FakeResponse(status_code=500),
        })
        self.diagnostics = CodegenDiagnostics()
        self.resolver = NestedTypeResolver(
            RemoteContractFetcher(make_book(), session=self.session),
            diagnostics=self.diagnostics,
        )

    def test_only_referenced_structs_are_resolved(self):
        scripts = make_scripts('[FlowIDTableStaking.DelegatorInfo]?')
        structs = {}
        added = self.resolver.resolve(scripts, structs, 'mainnet')

        # NodeInfo is named by a DelegatorInfo field
        self.assertEqual(added, ['FlowIDTableStaking.DelegatorInfo', 'FlowIDTableStaking.NodeInfo'])
        self.assertEqual(sorted(structs), added)
        self.assertNotIn('FlowIDTableStaking.UnusedInfo', structs)
        self.assertEqual(len(self.session.requests), 1)
        self.assertEqual(self.diagnostics.warnings, [])

    def test_second_run_adds_nothing(self):
        scripts = make_scripts('FlowIDTableStaking.NodeInfo')
        structs = {}
        self.resolver.resolve(scripts, structs, 'mainnet')
        snapshot = {k: Struct.from_dict(v.to_dict()) for k, v in structs.items()}

        added = self.resolver.resolve(scripts, structs, 'mainnet')
        self.assertEqual(added, [])
        self.assertEqual(structs, snapshot)
        self.assertEqual(len(self.session.requests), 1)

    def test_chained_references_resolve_in_one_run(self):
        scripts = make_scripts('[FlowIDTableStaking.DelegatorInfo]?')
        structs = {}
        self.resolver.resolve(scripts, structs, 'mainnet')
        self.assertIn('FlowIDTableStaking.NodeInfo', structs)
        snapshot = {k: Struct.from_dict(v.to_dict()) for k, v in structs.items()}

        self.assertEqual(self.resolver.resolve(scripts, structs, 'mainnet'), [])
        self.assertEqual(structs, snapshot)
        self.assertEqual(len(self.session.requests), 1)

    def test_failing_contract_is_one_warning(self):
        scripts = make_scripts('FlowIDTableStaking.NodeInfo', 'FungibleToken.VaultInfo?')
        structs = {}
        added = self.resolver.resolve(scripts, structs, 'mainnet')

        self.assertEqual(added, ['FlowIDTableStaking.NodeInfo'])
        self.assertEqual(len(self.diagnostics.warnings), 1)
        warning = self.diagnostics.warnings[0]
        self.assertEqual((warning.code, warning.construct), ('E204', 'contract'))
        self.assertIn('FungibleToken', warning.message)

    def test_missing_address_book_is_one_warning(self):
        resolver = NestedTypeResolver(
            RemoteContractFetcher(None, session=self.session),
            diagnostics=self.diagnostics,
        )
        scripts = make_scripts('FlowIDTableStaking.NodeInfo', 'FungibleToken.VaultInfo')
        self.assertEqual(resolver.resolve(scripts, {}, 'mainnet'), [])
        self.assertEqual([w.code for w in self.diagnostics.warnings], ['E201'])
        self.assertEqual(self.session.requests, [])

    def test_missing_address_book_without_work_is_silent(self):
        resolver = NestedTypeResolver(
            RemoteContractFetcher(None, session=self.session),
            diagnostics=self.diagnostics,
        )
        self.assertEqual(resolver.resolve(make_scripts('String'), {}, 'mainnet'), [])
        self.assertEqual(self.diagnostics.count, 0)

    def test_unsupported_network(self):
        scripts = make_scripts('FlowIDTableStaking.NodeInfo')
        self.assertEqual(self.resolver.resolve(scripts, {}, 'emulator'), [])
        self.assertEqual([w.code for w in self.diagnostics.warnings], ['E202'])
        self.assertEqual(self.session.requests, [])

    def test_flattened_report_after_resolution(self):
        scripts = make_scripts('[FlowIDTableStaking.DelegatorInfo]?')
        structs = {}
        self.resolver.resolve(scripts, structs, 'mainnet')

        flat = Report(scripts=scripts, structs=structs).flattened()
        self.assertEqual(flat.scripts['script_0.cdc'].return_type, '[FlowIDTableStakingDelegatorInfo]?')
        info = flat.structs['FlowIDTableStakingDelegatorInfo']
        self.assertEqual(info.name, 'FlowIDTableStakingDelegatorInfo')
        self.assertEqual(info.fields[-1].type_str, 'FlowIDTableStakingNodeInfo?')
        self.assertIn('FlowIDTableStakingNodeInfo', flat.structs)


class TestAnalyzerResolution(unittest.TestCase):
    """Test resolution driven from the Analyzer."""

    def test_analyze_then_resolve(self):
        session = FakeSession({STAKING_URL: contracts_response(FlowIDTableStaking=encode(STAKING_SOURCE))})
        book = make_book()
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / 'get_delegator_info.cdc'
            path.write_text(
                'import FlowIDTableStaking from 0xFlowIDTableStaking\n'
                '\n'
                'access(all) fun main(address: Address): [FlowIDTableStaking.DelegatorInfo]? {\n'
                '    return nil\n'
                '}\n'
            )
            analyzer = Analyzer(address_book=book)
            analyzer.analyze_directory(tmp)
            added = analyzer.resolve_nested_types(
                'mainnet', fetcher=RemoteContractFetcher(book, session=session)
            )

        self.assertIn('FlowIDTableStaking.DelegatorInfo', added)
        report = analyzer.get_report()
        self.assertEqual(report.scripts['get_delegator_info.cdc'].return_type, '[FlowIDTableStakingDelegatorInfo]?')
        self.assertIn('FlowIDTableStakingDelegatorInfo', report.structs)
        self.assertEqual(report.addresses, book.to_dict())
        # The stored catalog keeps the qualified key
        self.assertIn('FlowIDTableStaking.DelegatorInfo', analyzer.get_catalog().structs)

    def test_default_fetcher_session_is_closed(self):
        session = ClosableSession({STAKING_URL: contracts_response(FlowIDTableStaking=encode(STAKING_SOURCE))})
        analyzer = Analyzer(address_book=make_book())
        analyzer.scripts = make_scripts('FlowIDTableStaking.NodeInfo')
        with mock.patch.object(requests, 'Session', return_value=session):
            added = analyzer.resolve_nested_types('mainnet')

        self.assertEqual(added, ['FlowIDTableStaking.NodeInfo'])
        self.assertEqual(len(session.requests), 1)
        self.assertEqual(session.closed, 1)


if __name__ == '__main__':
    unittest.main()
