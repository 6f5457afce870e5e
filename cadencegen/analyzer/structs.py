"""Extraction of locally declared struct shapes."""

from typing import Dict

from ..parser import Program
from .models import Field, Struct


def extract_structs(program: Program, file_name: str) -> Dict[str, Struct]:
    """
    Capture every top-level struct declared in a program.

    Resources, contracts, enums, attachments and interfaces are ignored.
    Structs are keyed by their bare name.
    """
    structs: Dict[str, Struct] = {}
    for composite in program.composite_declarations():
        if composite.kind != 'struct' or composite.is_interface:
            continue
        structs[composite.name] = Struct(
            name=composite.name,
            fields=[
                Field(
                    name=f.name,
                    type_str=str(f.type_annotation),
                    optional=f.type_annotation.is_optional,
                    visibility=f.access,
                )
                for f in composite.fields
            ],
            visibility=composite.access,
            source_file=file_name,
        )
    return structs
