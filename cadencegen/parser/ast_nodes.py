"""
AST node definitions for Cadence declaration parsing.

This module contains the dataclasses representing nodes in the declaration
tree produced by the Cadence parser. Bodies are not represented; type nodes
render back to their canonical source form via ``str()``.
"""

from dataclasses import dataclass, field
from typing import Optional, List


# =============================================================================
# BASE NODE
# =============================================================================

@dataclass
class ASTNode:
    """Base class for all AST nodes."""
    pass


# =============================================================================
# TYPE NODES
# =============================================================================

@dataclass
class TypeNode(ASTNode):
    """Base class for all type nodes."""
    pass


@dataclass
class NominalType(TypeNode):
    """A (possibly qualified) type name, e.g. UFix64 or FlowIDTableStaking.DelegatorInfo."""
    identifier: str
    nested: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return '.'.join([self.identifier] + self.nested)


@dataclass
class OptionalType(TypeNode):
    """An optional type (T?)."""
    type: TypeNode

    def __str__(self) -> str:
        return f'{self.type}?'


@dataclass
class VariableSizedType(TypeNode):
    """A variable-sized array type ([T])."""
    type: TypeNode

    def __str__(self) -> str:
        return f'[{self.type}]'


@dataclass
class ConstantSizedType(TypeNode):
    """A constant-sized array type ([T; N])."""
    type: TypeNode
    size: str

    def __str__(self) -> str:
        return f'[{self.type}; {self.size}]'


@dataclass
class DictionaryType(TypeNode):
    """A dictionary type ({K: V})."""
    key_type: TypeNode
    value_type: TypeNode

    def __str__(self) -> str:
        return f'{{{self.key_type}: {self.value_type}}}'


@dataclass
class ReferenceType(TypeNode):
    """A reference type (&T or auth(E) &T)."""
    type: TypeNode
    authorization: Optional[str] = None

    def __str__(self) -> str:
        if self.authorization == '':
            return f'auth &{self.type}'
        if self.authorization is not None:
            return f'auth({self.authorization}) &{self.type}'
        return f'&{self.type}'


@dataclass
class IntersectionType(TypeNode):
    """An intersection type ({A, B}), optionally with a legacy base type (T{A})."""
    types: List[TypeNode] = field(default_factory=list)
    base: Optional[TypeNode] = None

    def __str__(self) -> str:
        inner = ', '.join(str(t) for t in self.types)
        prefix = str(self.base) if self.base is not None else ''
        return f'{prefix}{{{inner}}}'


@dataclass
class InstantiationType(TypeNode):
    """A parameterized type (Capability<&T>)."""
    type: TypeNode
    arguments: List['TypeAnnotation'] = field(default_factory=list)

    def __str__(self) -> str:
        args = ', '.join(str(a) for a in self.arguments)
        return f'{self.type}<{args}>'


@dataclass
class FunctionType(TypeNode):
    """A function type (fun(A, B): R)."""
    parameter_types: List['TypeAnnotation'] = field(default_factory=list)
    return_type: Optional['TypeAnnotation'] = None

    def __str__(self) -> str:
        params = ', '.join(str(p) for p in self.parameter_types)
        result = f'fun({params})'
        if self.return_type is not None:
            result += f': {self.return_type}'
        return result


@dataclass
class TypeAnnotation(ASTNode):
    """A type as written in a declaration, with its resource marker (@)."""
    type: TypeNode
    is_resource: bool = False

    @property
    def is_optional(self) -> bool:
        return isinstance(self.type, OptionalType)

    def __str__(self) -> str:
        return f'@{self.type}' if self.is_resource else str(self.type)


# =============================================================================
# DECLARATION NODES
# =============================================================================

@dataclass
class Declaration(ASTNode):
    """Base class for all declarations."""
    pass


@dataclass
class Parameter(ASTNode):
    """A function or transaction parameter, with an optional argument label."""
    name: str
    type_annotation: TypeAnnotation
    label: str = ''


@dataclass
class FieldDeclaration(Declaration):
    """A composite or transaction field (let/var name: Type)."""
    name: str
    type_annotation: TypeAnnotation
    access: str = ''
    variable_kind: str = 'let'
    line: int = 0


@dataclass
class FunctionDeclaration(Declaration):
    """A function declaration; the body is skipped."""
    name: str
    access: str = ''
    parameters: List[Parameter] = field(default_factory=list)
    return_type: Optional[TypeAnnotation] = None
    purity: str = ''  # '', 'view'
    is_static: bool = False
    has_body: bool = True
    line: int = 0


@dataclass
class SpecialFunctionDeclaration(Declaration):
    """init, destroy, prepare, execute, pre and post blocks."""
    kind: str
    parameters: List[Parameter] = field(default_factory=list)
    line: int = 0


@dataclass
class EventDeclaration(Declaration):
    """An event declaration."""
    name: str
    access: str = ''
    parameters: List[Parameter] = field(default_factory=list)
    line: int = 0


@dataclass
class EnumCaseDeclaration(Declaration):
    """A single enum case."""
    name: str
    access: str = ''


@dataclass
class EntitlementDeclaration(Declaration):
    """An entitlement or entitlement mapping declaration."""
    name: str
    access: str = ''
    is_mapping: bool = False


@dataclass
class CompositeDeclaration(Declaration):
    """A struct, resource, contract, enum or attachment, or an interface of one."""
    name: str
    kind: str  # 'struct', 'resource', 'contract', 'enum', 'attachment'
    access: str = ''
    is_interface: bool = False
    conformances: List[str] = field(default_factory=list)
    fields: List[FieldDeclaration] = field(default_factory=list)
    functions: List[FunctionDeclaration] = field(default_factory=list)
    special_functions: List[SpecialFunctionDeclaration] = field(default_factory=list)
    composites: List['CompositeDeclaration'] = field(default_factory=list)
    events: List[EventDeclaration] = field(default_factory=list)
    enum_cases: List[EnumCaseDeclaration] = field(default_factory=list)
    entitlements: List[EntitlementDeclaration] = field(default_factory=list)
    line: int = 0


@dataclass
class TransactionDeclaration(Declaration):
    """A transaction declaration; phase bodies are skipped."""
    parameters: List[Parameter] = field(default_factory=list)
    fields: List[FieldDeclaration] = field(default_factory=list)
    phases: List[SpecialFunctionDeclaration] = field(default_factory=list)
    line: int = 0


@dataclass
class Program(ASTNode):
    """Root node representing an entire (import-stripped) Cadence file."""
    declarations: List[Declaration] = field(default_factory=list)

    def transaction_declarations(self) -> List[TransactionDeclaration]:
        return [d for d in self.declarations if isinstance(d, TransactionDeclaration)]

    def function_declarations(self) -> List[FunctionDeclaration]:
        return [d for d in self.declarations if isinstance(d, FunctionDeclaration)]

    def composite_declarations(self) -> List[CompositeDeclaration]:
        return [d for d in self.declarations if isinstance(d, CompositeDeclaration)]
