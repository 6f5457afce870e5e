#!/usr/bin/env python3
"""
Unit tests for the Cadence lexer and declaration parser.

Run with: python3 -m pytest cadencegen/test_parser.py
"""

import sys
import os
# Add parent directory to path so the package imports without installation
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest
from cadencegen.lexer import Lexer, TokenType
from cadencegen.parser import (
    Parser,
    parse_program,
    CompositeDeclaration,
    FunctionDeclaration,
    TransactionDeclaration,
    OptionalType,
    ReferenceType,
    IntersectionType,
)


class TestLexer(unittest.TestCase):
    """Test tokenization of Cadence source."""

    def test_nested_block_comments_are_skipped(self):
        tokens = Lexer('/* outer /* inner */ still outer */ fun main() {}').tokenize()
        types = [t.type for t in tokens]
        self.assertEqual(types, [
            TokenType.FUN, TokenType.IDENTIFIER, TokenType.LPAREN, TokenType.RPAREN,
            TokenType.LBRACE, TokenType.RBRACE, TokenType.EOF,
        ])

    def test_line_comments_and_strings(self):
        tokens = Lexer('let s = "a { brace" // trailing }\n').tokenize()
        values = [t.value for t in tokens if t.type != TokenType.EOF]
        self.assertEqual(values, ['let', 's', '=', '"a { brace"'])

    def test_keywords_and_positions(self):
        tokens = Lexer('access(all)\n  struct S {}').tokenize()
        self.assertEqual(tokens[0].type, TokenType.ACCESS)
        struct_token = tokens[4]
        self.assertEqual(struct_token.type, TokenType.STRUCT)
        self.assertEqual((struct_token.line, struct_token.column), (2, 3))

    def test_fixed_point_and_hex_numbers(self):
        tokens = Lexer('1.5 0x01cf0e2f2f715450').tokenize()
        self.assertEqual([t.value for t in tokens[:2]], ['1.5', '0x01cf0e2f2f715450'])
        self.assertTrue(all(t.type == TokenType.NUMBER for t in tokens[:2]))


class TestTransactionParsing(unittest.TestCase):
    """Test parsing of transaction declarations."""

    def test_transaction_parameters_and_phases(self):
        source = '''
        transaction(amount: UFix64, to: Address) {
            let vault: @{FungibleToken.Vault}

            prepare(signer: auth(BorrowValue) &Account) {
                let ref = signer.storage.borrow<auth(FungibleToken.Withdraw) &FlowToken.Vault>(from: /storage/flowTokenVault)
                self.vault <- ref!.withdraw(amount: amount)
            }

            execute {
                let receiver = getAccount(to).capabilities.borrow<&{FungibleToken.Receiver}>(/public/flowTokenReceiver)!
                receiver.deposit(from: <-self.vault)
            }
        }
        '''
        program = parse_program(source)
        transactions = program.transaction_declarations()
        self.assertEqual(len(transactions), 1)

        transaction = transactions[0]
        self.assertEqual([p.name for p in transaction.parameters], ['amount', 'to'])
        self.assertEqual([str(p.type_annotation) for p in transaction.parameters], ['UFix64', 'Address'])
        self.assertEqual([f.name for f in transaction.fields], ['vault'])
        self.assertEqual(str(transaction.fields[0].type_annotation), '@{FungibleToken.Vault}')
        self.assertEqual([p.kind for p in transaction.phases], ['prepare', 'execute'])
        self.assertEqual(
            str(transaction.phases[0].parameters[0].type_annotation),
            'auth(BorrowValue) &Account',
        )

    def test_transaction_without_parameters(self):
        program = parse_program('transaction {\n  execute {}\n}')
        self.assertEqual(program.transaction_declarations()[0].parameters, [])

    def test_leftover_import_and_pragma_lines_are_skipped(self):
        source = '#allowAccountLinking\nimport "FungibleToken"\ntransaction {}'
        program = parse_program(source)
        self.assertEqual(len(program.declarations), 1)
        self.assertIsInstance(program.declarations[0], TransactionDeclaration)


class TestFunctionParsing(unittest.TestCase):
    """Test parsing of function signatures and type annotations."""

    def parse_function(self, source: str) -> FunctionDeclaration:
        functions = parse_program(source).function_declarations()
        self.assertEqual(len(functions), 1)
        return functions[0]

    def test_optional_array_return_type(self):
        function = self.parse_function(
            'access(all) fun main(address: Address): [FlowIDTableStaking.DelegatorInfo]? {\n'
            '    return nil\n'
            '}'
        )
        self.assertEqual(function.name, 'main')
        self.assertEqual(function.access, 'access(all)')
        self.assertEqual(str(function.return_type), '[FlowIDTableStaking.DelegatorInfo]?')
        self.assertTrue(function.return_type.is_optional)

    def test_dictionary_return_type_before_body(self):
        function = self.parse_function('fun main(): {String: UFix64} { return {} }')
        self.assertEqual(str(function.return_type), '{String: UFix64}')

    def test_reference_return_type_is_not_confused_with_body(self):
        function = self.parse_function(
            'fun main(addr: Address): &Account {\n    return getAccount(addr)\n}'
        )
        self.assertIsInstance(function.return_type.type, ReferenceType)
        self.assertEqual(str(function.return_type), '&Account')

    def test_legacy_restricted_type(self):
        function = self.parse_function(
            'pub fun main(addr: Address): &AnyResource{FungibleToken.Balance}? {\n'
            '    return nil\n'
            '}'
        )
        self.assertEqual(function.access, 'pub')
        self.assertIsInstance(function.return_type.type, OptionalType)
        reference = function.return_type.type.type
        self.assertIsInstance(reference.type, IntersectionType)
        self.assertEqual(str(function.return_type), '&AnyResource{FungibleToken.Balance}?')

    def test_parameter_labels_and_resource_types(self):
        function = self.parse_function('access(all) fun deposit(from vault: @Vault, _ id: UInt64?) {}')
        self.assertEqual([p.label for p in function.parameters], ['from', '_'])
        self.assertEqual([p.name for p in function.parameters], ['vault', 'id'])
        self.assertTrue(function.parameters[0].type_annotation.is_resource)
        self.assertTrue(function.parameters[1].type_annotation.is_optional)

    def test_generic_and_constant_sized_types(self):
        function = self.parse_function(
            'fun main(cap: Capability<&{NonFungibleToken.CollectionPublic}>, key: [UInt8; 32]) {}'
        )
        self.assertEqual(
            [str(p.type_annotation) for p in function.parameters],
            ['Capability<&{NonFungibleToken.CollectionPublic}>', '[UInt8; 32]'],
        )

    def test_view_function_without_access(self):
        function = self.parse_function('view fun helper(): Int { return 1 }')
        self.assertEqual(function.access, '')
        self.assertEqual(function.purity, 'view')


class TestCompositeParsing(unittest.TestCase):
    """Test parsing of composite declarations and their members."""

    def test_struct_members(self):
        source = '''
        access(all) struct DelegatorInfo {
            access(all) let id: UInt32
            access(all) var nodeID: String?
            access(self) let tokens: {String: UFix64}

            access(all) event Created(id: UInt32 = self.id)

            init(id: UInt32) {
                self.id = id
                self.nodeID = nil
                self.tokens = {}
            }

            access(all) view fun describe(): String {
                return "info"
            }
        }
        '''
        composites = parse_program(source).composite_declarations()
        self.assertEqual(len(composites), 1)
        struct = composites[0]
        self.assertEqual((struct.name, struct.kind, struct.access), ('DelegatorInfo', 'struct', 'access(all)'))
        self.assertEqual([f.name for f in struct.fields], ['id', 'nodeID', 'tokens'])
        self.assertEqual([f.access for f in struct.fields], ['access(all)', 'access(all)', 'access(self)'])
        self.assertEqual([f.variable_kind for f in struct.fields], ['let', 'var', 'let'])
        self.assertTrue(struct.fields[1].type_annotation.is_optional)
        self.assertEqual([e.name for e in struct.events], ['Created'])
        self.assertEqual([s.kind for s in struct.special_functions], ['init'])
        self.assertEqual([f.name for f in struct.functions], ['describe'])

    def test_contract_with_nested_declarations(self):
        source = '''
        access(all) contract interface Registry {
            access(all) entitlement Admin
            access(all) resource interface Provider {}
            access(all) enum Status: UInt8 {
                access(all) case active
                access(all) case paused
            }
        }
        '''
        contract = parse_program(source).composite_declarations()[0]
        self.assertIsInstance(contract, CompositeDeclaration)
        self.assertTrue(contract.is_interface)
        self.assertEqual([e.name for e in contract.entitlements], ['Admin'])
        nested = {c.name: c for c in contract.composites}
        self.assertTrue(nested['Provider'].is_interface)
        self.assertEqual(nested['Status'].conformances, ['UInt8'])
        self.assertEqual([c.name for c in nested['Status'].enum_cases], ['active', 'paused'])


class TestParseErrors(unittest.TestCase):
    """Test that malformed source raises SyntaxError."""

    def test_missing_parameter_type(self):
        with self.assertRaises(SyntaxError):
            parse_program('transaction(amount: ) {}')

    def test_unclosed_function_body(self):
        with self.assertRaises(SyntaxError):
            parse_program('access(all) fun main(): String {\n    return "x"\n')

    def test_stray_closing_brace(self):
        with self.assertRaises(SyntaxError):
            parse_program('access(all) fun main() {}\n}')

    def test_stray_text_after_declaration(self):
        with self.assertRaises(SyntaxError) as ctx:
            parse_program('access(all) fun main() {}\nthis is ))) not cadence')
        self.assertIn('line 2', str(ctx.exception))

    def test_mismatched_brackets_in_body(self):
        sources = [
            'transaction(a: UFix64) {\n    prepare(s: &Account) { foo( }\n}',
            'access(all) fun main(): Int { return [1, 2 }',
            'transaction {\n    execute { let x = ) ( }\n}',
        ]
        for source in sources:
            with self.subTest(source=source):
                with self.assertRaises(SyntaxError):
                    parse_program(source)

    def test_mismatch_message_names_open_bracket(self):
        with self.assertRaises(SyntaxError) as ctx:
            parse_program('access(all) fun main(): Int {\n    return foo(1]\n}')
        message = str(ctx.exception)
        self.assertIn("Mismatched ']' at line 2", message)
        self.assertIn("expected ')'", message)

    def test_unclosed_bracket_in_body(self):
        with self.assertRaises(SyntaxError) as ctx:
            parse_program('transaction {\n    execute {\n        log([1, 2]\n')
        self.assertIn('never closed', str(ctx.exception))

    def test_mismatched_initializer_and_default_argument(self):
        sources = [
            'access(all) struct S {\n    access(all) let v: Int = (1]\n}',
            'access(all) struct S {\n    access(all) event E(v: Int = [1)\n}',
        ]
        for source in sources:
            with self.subTest(source=source):
                with self.assertRaises(SyntaxError):
                    parse_program(source)

    def test_statement_outside_body(self):
        with self.assertRaises(SyntaxError) as ctx:
            parse_program('transaction {\n    log("hi")\n}')
        self.assertIn('expected a declaration', str(ctx.exception))

    def test_error_message_has_position(self):
        with self.assertRaises(SyntaxError) as ctx:
            Parser(Lexer('transaction(amount UFix64) {}').tokenize()).parse()
        self.assertIn('line 1', str(ctx.exception))


class TestMemoryGauge(unittest.TestCase):
    """Test that parse_program reports allocations to the memory gauge."""

    def test_gauge_is_metered(self):
        class RecordingGauge:
            def __init__(self):
                self.calls = []

            def meter_memory(self, kind, amount):
                self.calls.append((kind, amount))

        gauge = RecordingGauge()
        parse_program(b'transaction {}', memory_gauge=gauge)
        kinds = [kind for kind, _ in gauge.calls]
        self.assertEqual(kinds, ['tokens', 'TransactionDeclaration'])
        self.assertEqual(gauge.calls[0][1], 4)

    def test_gauge_can_abort_parsing(self):
        class LimitGauge:
            def meter_memory(self, kind, amount):
                raise MemoryError(f'limit exceeded by {kind}')

        with self.assertRaises(MemoryError):
            parse_program('transaction {}', memory_gauge=LimitGauge())


if __name__ == '__main__':
    unittest.main()
