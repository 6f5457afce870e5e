"""
Entry point classification for a parsed Cadence file.

A file is a transaction if it declares one; otherwise a script if it
declares a top-level `main` function; otherwise a script whose entry point
is the first top-level function with an access modifier. The first match
wins at every step.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import NoEntryPointFound
from ..parser import Program, FunctionDeclaration
from ..parser import Parameter as ParameterNode
from .models import Parameter, TRANSACTION, SCRIPT


@dataclass
class Classification:
    """The kind of entry point a file declares, with its signature."""
    kind: str
    parameters: List[Parameter] = field(default_factory=list)
    return_type: Optional[str] = None


def convert_parameters(parameters: List[ParameterNode]) -> List[Parameter]:
    """Convert declared parameters to report parameters."""
    return [
        Parameter(
            name=p.name,
            type_str=str(p.type_annotation),
            optional=p.type_annotation.is_optional,
        )
        for p in parameters
    ]


def _script(function: FunctionDeclaration) -> Classification:
    return_type = None
    if function.return_type is not None:
        return_type = str(function.return_type.type)
    return Classification(
        kind=SCRIPT,
        parameters=convert_parameters(function.parameters),
        return_type=return_type,
    )


def classify(program: Program) -> Classification:
    """
    Classify the entry point declared by a program.

    Raises:
        NoEntryPointFound: If there is no transaction, main function or
            function with an access modifier.
    """
    transactions = program.transaction_declarations()
    if transactions:
        return Classification(
            kind=TRANSACTION,
            parameters=convert_parameters(transactions[0].parameters),
        )

    functions = program.function_declarations()
    for function in functions:
        if function.name == 'main':
            return _script(function)

    for function in functions:
        if function.access:
            return _script(function)

    raise NoEntryPointFound('No transaction or script found in file')
