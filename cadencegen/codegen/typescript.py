"""
TypeScript (FCL) binding generator.

Emits one interface per struct and a CadenceService class with one async
method per transaction (fcl.mutate) or script (fcl.query). Each method
carries its Cadence source as base64.
"""

import json
from typing import List

from ..analyzer.models import Struct
from ..type_system import cadence_type_to_ts, fcl_argument_type
from .base import BaseGenerator, EntryPoint

HEADER = '''import * as fcl from "@onflow/fcl";
import { Buffer } from 'buffer';

/** Utility function to decode Base64 Cadence code */
const decodeCadence = (code: string): string => Buffer.from(code, 'base64').toString('utf8');

/** Generated from Cadence files */
/** Flow Signer interface for transaction signing */
export interface FlowSigner {
  address: string;
  keyIndex: number;
  sign(signableData: Uint8Array): Promise<Uint8Array>;
  authzFunc: (account: any) => Promise<any>;
}

export interface CompositeSignature {
  addr: string;
  keyId: number;
  signature: string;
}

export interface AuthorizationAccount extends Record<string, any> {
  tempId: string;
  addr: string;
  keyId: number;
  signingFunction: (signable: { message: string }) => Promise<CompositeSignature>;
}

export type AuthorizationFunction = (account: any) => Promise<AuthorizationAccount>;
'''

SERVICE_HEADER = '''type RequestInterceptor = (config: any) => any | Promise<any>;
type ResponseInterceptor = (config: any, response: any) => any | Promise<any>;

export class CadenceService {
  private requestInterceptors: RequestInterceptor[] = [];
  private responseInterceptors: ResponseInterceptor[] = [];

  constructor() {
  }

  useRequestInterceptor(interceptor: RequestInterceptor) {
    this.requestInterceptors.push(interceptor);
  }

  useResponseInterceptor(interceptor: ResponseInterceptor) {
    this.responseInterceptors.push(interceptor);
  }

  private async runRequestInterceptors(config: any) {
    let c = config;
    for (const interceptor of this.requestInterceptors) {
      c = await interceptor(c);
    }
    return c;
  }

  private async runResponseInterceptors(config: any, response: any) {
    let r = response;
    for (const interceptor of this.responseInterceptors) {
      r = await interceptor(config, r);
    }
    return r;
  }
'''


class TypeScriptGenerator(BaseGenerator):
    """Generates a TypeScript module for @onflow/fcl."""

    def generate(self) -> str:
        """Generate the complete TypeScript module."""
        parts = [HEADER]

        if self.report.addresses is not None:
            addresses = json.dumps(self.report.addresses, sort_keys=True, separators=(',', ':'))
            parts.append('/** Network addresses for contract imports */')
            parts.append(f'export const addresses = {addresses};\n')

        for struct in self.sorted_structs():
            parts.append(self.generate_interface(struct))

        parts.append(SERVICE_HEADER.rstrip('\n'))

        untagged, tagged = self.grouped_entry_points()
        for entry in untagged:
            parts.append(self.generate_method(entry))
        for tag, entries in tagged.items():
            parts.append(f'{self.indent()}// {tag}')
            for entry in entries:
                parts.append(self.generate_method(entry))

        parts.append('}\n')
        return '\n'.join(parts)

    def generate_interface(self, struct: Struct) -> str:
        """Generate an interface for a struct."""
        lines = ['/** Generated Cadence interface */']
        lines.append(f'export interface {struct.name} {{')
        for field in struct.fields:
            marker = '?' if field.optional else ''
            lines.append(f'{self.indent(2)}{field.name}{marker}: {cadence_type_to_ts(field.type_str)};')
        lines.append('}\n')
        return '\n'.join(lines)

    def generate_method(self, entry: EntryPoint) -> str:
        """Generate a CadenceService method for a transaction or script."""
        result = entry.result
        i1, i2, i3, i4 = self.indent(1), self.indent(2), self.indent(3), self.indent(4)

        params = ', '.join(
            f'{p.name}: {cadence_type_to_ts(p.type_str)}' for p in result.parameters
        )
        signature = f'{i1}public async {entry.name}({params})'
        if not entry.is_transaction and result.return_type:
            signature += f': Promise<{cadence_type_to_ts(result.return_type)}>'

        lines: List[str] = ['', f'{signature} {{']
        lines.append(f'{i2}const code = decodeCadence("{result.base64 or ""}");')
        lines.append(f'{i2}let config = {{')
        lines.append(f'{i3}cadence: code,')
        lines.append(f'{i3}name: "{entry.name}",')
        lines.append(f'{i3}type: "{result.kind}",')
        lines.append(f'{i3}args: (arg: any, t: any) => [')
        for p in result.parameters:
            lines.append(f'{i4}arg({p.name}, {fcl_argument_type(p.type_str)}),')
        lines.append(f'{i3}],')
        lines.append(f'{i3}limit: 9999,')
        lines.append(f'{i2}}};')
        lines.append(f'{i2}config = await this.runRequestInterceptors(config);')
        if entry.is_transaction:
            lines.append(f'{i2}let txId = await fcl.mutate(config);')
            lines.append(f'{i2}txId = await this.runResponseInterceptors(config, txId);')
            lines.append(f'{i2}return txId;')
        else:
            lines.append(f'{i2}let response = await fcl.query(config);')
            lines.append(f'{i2}response = await this.runResponseInterceptors(config, response);')
            lines.append(f'{i2}return response;')
        lines.append(f'{i1}}}')
        return '\n'.join(lines)
