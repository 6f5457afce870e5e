"""
Report data model.

Transactions and scripts are keyed by file name; structs by their name,
which is bare for locally declared structs and 'Contract.Struct' for
structs resolved from deployed contracts. Dotted names stay in the stored
catalog; Report.flattened() builds the identifier-safe read view.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from ..type_system import flatten_struct_name, flatten_type

TRANSACTION = 'transaction'
SCRIPT = 'script'


@dataclass
class Parameter:
    """A transaction or script parameter."""
    name: str
    type_str: str
    optional: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "typeStr": self.type_str,
            "optional": self.optional,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Parameter':
        return cls(
            name=data['name'],
            type_str=data['typeStr'],
            optional=data.get('optional', False),
        )


@dataclass
class Import:
    """An 'import Name from Address' header line."""
    contract: str
    address: str

    def to_dict(self) -> dict:
        return {"contract": self.contract, "address": self.address}

    @classmethod
    def from_dict(cls, data: dict) -> 'Import':
        return cls(contract=data['contract'], address=data['address'])


@dataclass
class AnalysisResult:
    """The analysis of a single transaction or script file."""
    file_name: str
    kind: str  # 'transaction' or 'script'
    parameters: List[Parameter] = field(default_factory=list)
    return_type: Optional[str] = None
    imports: List[Import] = field(default_factory=list)
    tag: Optional[str] = None
    base64: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "fileName": self.file_name,
            "type": self.kind,
            "parameters": [p.to_dict() for p in self.parameters],
        }
        if self.return_type:
            result["returnType"] = self.return_type
        result["imports"] = [i.to_dict() for i in self.imports]
        if self.base64:
            result["base64"] = self.base64
        if self.tag:
            result["tag"] = self.tag
        return result

    @classmethod
    def from_dict(cls, data: dict) -> 'AnalysisResult':
        return cls(
            file_name=data['fileName'],
            kind=data['type'],
            parameters=[Parameter.from_dict(p) for p in data.get('parameters') or []],
            return_type=data.get('returnType') or None,
            imports=[Import.from_dict(i) for i in data.get('imports') or []],
            tag=data.get('tag') or None,
            base64=data.get('base64') or None,
        )


@dataclass
class Field:
    """A struct field."""
    name: str
    type_str: str
    optional: bool = False
    visibility: str = ''

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "typeStr": self.type_str,
            "optional": self.optional,
            "access": self.visibility,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Field':
        return cls(
            name=data['name'],
            type_str=data['typeStr'],
            optional=data.get('optional', False),
            visibility=data.get('access', ''),
        )


@dataclass
class Struct:
    """A struct shape, declared locally or resolved from a deployed contract."""
    name: str
    fields: List[Field] = field(default_factory=list)
    visibility: str = ''
    source_file: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
            "access": self.visibility,
        }
        if self.source_file:
            result["fileName"] = self.source_file
        return result

    @classmethod
    def from_dict(cls, data: dict) -> 'Struct':
        return cls(
            name=data['name'],
            fields=[Field.from_dict(f) for f in data.get('fields') or []],
            visibility=data.get('access', ''),
            source_file=data.get('fileName') or None,
        )


@dataclass
class Report:
    """The complete catalog of entry points, structs and addresses."""
    transactions: Dict[str, AnalysisResult] = field(default_factory=dict)
    scripts: Dict[str, AnalysisResult] = field(default_factory=dict)
    structs: Dict[str, Struct] = field(default_factory=dict)
    addresses: Optional[Dict[str, Dict[str, str]]] = None

    def flattened(self, diagnostics=None) -> 'Report':
        """
        Build the read view with every dotted struct name flattened.

        The report itself is not modified. When two keys flatten to the
        same identifier, the first in sorted order is kept and a warning is
        recorded on diagnostics (if given).
        """
        structs: Dict[str, Struct] = {}
        origin: Dict[str, str] = {}
        for key in sorted(self.structs):
            flat_key = flatten_struct_name(key)
            if flat_key in structs:
                if diagnostics is not None:
                    diagnostics.warn_flatten_collision(flat_key, origin[flat_key], key)
                continue
            struct = self.structs[key]
            origin[flat_key] = key
            structs[flat_key] = replace(
                struct,
                name=flatten_struct_name(struct.name),
                fields=[replace(f, type_str=flatten_type(f.type_str)) for f in struct.fields],
            )

        return Report(
            transactions={k: _flatten_result(r) for k, r in self.transactions.items()},
            scripts={k: _flatten_result(r) for k, r in self.scripts.items()},
            structs=structs,
            addresses=self.addresses,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "transactions": {k: self.transactions[k].to_dict() for k in sorted(self.transactions)},
            "scripts": {k: self.scripts[k].to_dict() for k in sorted(self.scripts)},
            "structs": {k: self.structs[k].to_dict() for k in sorted(self.structs)},
        }
        if self.addresses is not None:
            result["addresses"] = self.addresses
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> 'Report':
        """Load a report previously written by to_dict()."""
        return cls(
            transactions={k: AnalysisResult.from_dict(v) for k, v in (data.get('transactions') or {}).items()},
            scripts={k: AnalysisResult.from_dict(v) for k, v in (data.get('scripts') or {}).items()},
            structs={k: Struct.from_dict(v) for k, v in (data.get('structs') or {}).items()},
            addresses=data.get('addresses'),
        )


def _flatten_result(result: AnalysisResult) -> AnalysisResult:
    return replace(
        result,
        parameters=[replace(p, type_str=flatten_type(p.type_str)) for p in result.parameters],
        return_type=flatten_type(result.return_type) if result.return_type else result.return_type,
    )
