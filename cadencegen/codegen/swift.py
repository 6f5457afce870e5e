"""
Swift (Flow Swift SDK) binding generator.

Emits one Codable struct per catalog struct and a CadenceGen enum with one
case per transaction or script, plus the protocol scaffolding the enum
relies on.
"""

from typing import List

from ..analyzer.models import Struct
from ..type_system import cadence_type_to_swift
from .base import BaseGenerator, EntryPoint

SCAFFOLDING = '''import Flow

/// Internal Type
internal enum CadenceType: String {
    case query
    case transaction
}

internal protocol CadenceTargetType {
    var cadenceBase64: String { get }
    var type: CadenceType { get }
    var returnType: Decodable.Type { get }
    var arguments: [Flow.Argument] { get }
}

protocol MirrorAssociated {
    var associatedValues: [String: FlowEncodable] { get }
}

extension MirrorAssociated {
    var associatedValues: [String: FlowEncodable] {
        var values = [String: FlowEncodable]()
        if let associated = Mirror(reflecting: self).children.first {
            let children = Mirror(reflecting: associated.value).children
            for case let item in children {
                if let label = item.label, let value = item.value as? FlowEncodable {
                    values[label] = value
                }
            }
        }
        return values
    }
}

extension Flow {
    func query<T: Decodable>(_ target: CadenceTargetType, chainID: Flow.ChainID = .mainnet) async throws -> T {
        guard let data = Data(base64Encoded: target.cadenceBase64) else {
            throw NSError(domain: "Invalid Cadence Base64 String", code: 9900001)
        }
        let api = Flow.FlowHTTPAPI(chainID: chainID)
        return try await api.executeScriptAtLatestBlock(script: Flow.Script(data: data), arguments: target.arguments)
            .decode()
    }

    func sendTx(_ target: CadenceTargetType,
                singers: [FlowSigner],
                network: Flow.ChainID = .mainnet,
                @Flow.TransactionBuilder builder: () -> [Flow.TransactionBuild]
    ) async throws -> Flow.ID {
        guard let data = Data(base64Encoded: target.cadenceBase64) else {
            throw NSError(domain: "Invalid Cadence Base64 String", code: 9900001)
        }

        var tx = try await flow.buildTransaction(builder: builder)
        tx.script = .init(data: data)
        tx.arguments = target.arguments
        let signedTx = try await flow.signTransaction(unsignedTransaction: tx, signers: singers)
        return try await flow.sendTransaction(transaction: signedTx)
    }
}
'''


class SwiftGenerator(BaseGenerator):
    """Generates a Swift source file for the Flow Swift SDK."""

    indent_unit = '    '
    capitalize_names = True

    def generate(self) -> str:
        """Generate the complete Swift source."""
        parts = [SCAFFOLDING]
        for struct in self.sorted_structs():
            parts.append(self.generate_struct(struct))
        parts.append(self.generate_enum(self.entry_points()))
        return '\n'.join(parts)

    def generate_struct(self, struct: Struct) -> str:
        """Generate a Codable struct."""
        lines = ['/// Generated Cadence struct']
        lines.append(f'struct {struct.name}: Codable, FlowEncodable {{')
        for field in struct.fields:
            lines.append(f'{self.indent()}let {field.name}: {cadence_type_to_swift(field.type_str)}')
        lines.append('}\n')
        return '\n'.join(lines)

    def generate_enum(self, entries: List[EntryPoint]) -> str:
        """Generate the CadenceGen enum with one case per entry point."""
        i1, i2, i3 = self.indent(1), self.indent(2), self.indent(3)
        lines = ['/// Generated from Cadence files']
        lines.append('enum CadenceGen: CadenceTargetType, MirrorAssociated {')

        for entry in entries:
            params = ', '.join(
                f'{p.name}: {cadence_type_to_swift(p.type_str)}' for p in entry.result.parameters
            )
            lines.append(f'{i1}case {entry.name}({params})' if params else f'{i1}case {entry.name}')

        lines.append('')
        lines.append(f'{i1}var cadenceBase64: String {{')
        lines.append(f'{i2}switch self {{')
        for entry in entries:
            lines.append(f'{i2}case .{entry.name}:')
            lines.append(f'{i3}return "{entry.result.base64 or ""}"')
        lines.append(f'{i2}}}')
        lines.append(f'{i1}}}')

        lines.append('')
        lines.append(f'{i1}var type: CadenceType {{')
        lines.append(f'{i2}switch self {{')
        for entry in entries:
            kind = 'transaction' if entry.is_transaction else 'query'
            lines.append(f'{i2}case .{entry.name}:')
            lines.append(f'{i3}return .{kind}')
        lines.append(f'{i2}}}')
        lines.append(f'{i1}}}')

        lines.append('')
        lines.append(f'{i1}var arguments: [Flow.Argument] {{')
        lines.append(f'{i2}associatedValues.compactMap {{ $0.value.toFlowValue() }}.toArguments()')
        lines.append(f'{i1}}}')

        lines.append('')
        lines.append(f'{i1}var returnType: Decodable.Type {{')
        lines.append(f'{i2}if type == .transaction {{')
        lines.append(f'{i3}return Flow.ID.self')
        lines.append(f'{i2}}}')
        lines.append('')
        lines.append(f'{i2}switch self {{')
        for entry in entries:
            lines.append(f'{i2}case .{entry.name}:')
            return_type = entry.result.return_type
            if return_type and not entry.is_transaction:
                lines.append(f'{i3}return {cadence_type_to_swift(return_type)}.self')
            else:
                lines.append(f'{i3}return Flow.ID.self')
        lines.append(f'{i2}}}')
        lines.append(f'{i1}}}')
        lines.append('}\n')
        return '\n'.join(lines)
